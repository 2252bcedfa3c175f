"""
Base class for the Claude-backed assistants
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

from sarthi.services.claude_service import ClaudeService, claude_service


class BaseAgent(ABC):
    """
    Shared plumbing for the financial advisor and voice navigator.

    ``claude`` defaults to the process-wide ClaudeService; pass another
    instance to use a different key or a stub.
    """

    def __init__(self, name: str, claude: Optional[ClaudeService] = None):
        self.name = name
        self.claude = claude or claude_service
        self.logger = logging.getLogger(f"sarthi.agents.{name}")

    @abstractmethod
    async def process(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Handle one request and return the response payload
        """

    async def generate_response(
        self,
        prompt: str,
        system_prompt: Optional[str] = None
    ) -> str:
        return await self.claude.generate_response(prompt, system_prompt)

    async def ask_structured(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        """JSON reply from Claude, or None when the reply does not parse"""
        try:
            return await self.claude.generate_structured_response(
                prompt, system_prompt, response_format
            )
        except ValueError as e:
            self.logger.warning(f"Unparsable reply: {e}")
            return None
