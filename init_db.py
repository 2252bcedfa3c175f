"""Create the Sarthi database tables"""
import asyncio

from sarthi.database import create_tables, database_url


if __name__ == "__main__":
    asyncio.run(create_tables())
    print(f"Database tables created successfully ({database_url}).")
