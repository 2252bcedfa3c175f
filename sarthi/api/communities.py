"""
Community endpoints - discussion groups, membership and messages
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete
from sqlalchemy.orm import selectinload
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from sarthi.database import get_db
from sarthi.models.user import User
from sarthi.models.community import Community, CommunityMember, CommunityMessage
from sarthi.api.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Pydantic Schemas ---

class CommunityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None

    class Config:
        str_strip_whitespace = True


class CommunityResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    owner: str
    members: List[str]
    member_count: int
    created_at: Optional[datetime]


class MessageCreate(BaseModel):
    text: str = Field(min_length=1, max_length=2000)

    class Config:
        str_strip_whitespace = True


class MessageResponse(BaseModel):
    id: int
    community_id: int
    user_email: str
    user_name: str
    text: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


# --- Helper ---

def _build_community_response(c: Community) -> CommunityResponse:
    members = c.member_emails
    return CommunityResponse(
        id=c.id,
        name=c.name,
        description=c.description,
        owner=c.owner,
        members=members,
        member_count=len(members),
        created_at=c.created_at,
    )


async def _get_community(db: AsyncSession, community_id: int) -> Community:
    result = await db.execute(
        select(Community)
        .where(Community.id == community_id)
        .options(selectinload(Community.members))
    )
    community = result.scalar_one_or_none()
    if not community:
        raise HTTPException(status_code=404, detail="Community not found")
    return community


# --- Endpoints ---

@router.get("/", response_model=List[CommunityResponse])
async def list_communities(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Community).order_by(Community.name))
    return [_build_community_response(c) for c in result.scalars().all()]


@router.post("/", response_model=CommunityResponse, status_code=201)
async def create_community(
    data: CommunityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a community; the caller becomes owner and first member"""
    existing = await db.execute(
        select(Community).where(func.lower(Community.name) == data.name.lower())
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="A community with this name already exists.")

    community = Community(
        name=data.name,
        description=data.description or "",
        owner=current_user.email,
        members=[CommunityMember(user_email=current_user.email)],
    )
    db.add(community)
    await db.commit()
    await db.refresh(community)

    logger.info(f"Community '{community.name}' created by {current_user.email}")
    return _build_community_response(community)


@router.post("/{community_id}/join")
async def join_community(
    community_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    community = await _get_community(db, community_id)
    if current_user.email not in community.member_emails:
        community.members.append(CommunityMember(user_email=current_user.email))
        await db.commit()
    return {"success": True}


@router.post("/{community_id}/leave")
async def leave_community(
    community_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    community = await _get_community(db, community_id)
    if community.owner == current_user.email:
        raise HTTPException(status_code=400, detail="The owner cannot leave the community")

    for member in list(community.members):
        if member.user_email == current_user.email:
            community.members.remove(member)
    await db.commit()
    return {"success": True}


@router.get("/{community_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    community_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await _get_community(db, community_id)
    result = await db.execute(
        select(CommunityMessage)
        .where(CommunityMessage.community_id == community_id)
        .order_by(CommunityMessage.id)
    )
    return result.scalars().all()


@router.post("/{community_id}/messages", response_model=MessageResponse, status_code=201)
async def post_message(
    community_id: int,
    data: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Post to a community the caller belongs to"""
    community = await _get_community(db, community_id)
    if current_user.email not in community.member_emails:
        raise HTTPException(status_code=403, detail="Join the community before posting")

    message = CommunityMessage(
        community_id=community.id,
        user_email=current_user.email,
        user_name=current_user.full_name,
        text=data.text,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return message


@router.delete("/{community_id}")
async def delete_community(
    community_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a community with its members and messages (owner only)"""
    community = await _get_community(db, community_id)
    if community.owner != current_user.email:
        raise HTTPException(status_code=403, detail="Not authorized")

    await db.execute(
        delete(CommunityMessage).where(CommunityMessage.community_id == community.id)
    )
    await db.delete(community)
    await db.commit()

    logger.info(f"Community {community_id} deleted by {current_user.email}")
    return {"success": True}
