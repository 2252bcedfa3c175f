"""
Financial Advisor Agent - personalised advice reports and the "Dhan Sarthi" chatbot
"""
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from sarthi.agents.base_agent import BaseAgent
from sarthi.agents.financial_advisor.prompts import (
    ADVICE_SYSTEM_PROMPT,
    FINANCIAL_ADVICE_PROMPT,
    CHAT_SYSTEM_PROMPT,
    CHAT_PROMPT,
)
from sarthi.exceptions import ValidationError

PROFILE_FIELDS = (
    "name",
    "age",
    "monthly_income",
    "financial_goal",
    "location",
    "preferred_language",
    "business_type",
    "existing_savings",
    "risk_tolerance",
)


class FinancialAdvisorAgent(BaseAgent):
    """
    Thin prompt layer over Claude for advice reports and chat
    """

    def __init__(self, claude=None):
        super().__init__(name="FinancialAdvisorAgent", claude=claude)

    async def process(self, context: Dict[str, Any]) -> Dict[str, Any]:
        if context.get("message") is not None:
            return await self.chat(context["message"], context.get("conversation_history") or [])
        return await self.generate_advice(context)

    async def generate_advice(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        missing = [f for f in PROFILE_FIELDS if profile.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        prompt = FINANCIAL_ADVICE_PROMPT.format(
            name_upper=str(profile["name"]).upper(),
            **{f: profile[f] for f in PROFILE_FIELDS},
        )
        advice = await self.generate_response(prompt, system_prompt=ADVICE_SYSTEM_PROMPT)
        return {"financial_advice": advice.strip()}

    async def chat(
        self,
        message: str,
        conversation_history: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        if not message or not message.strip():
            raise ValidationError("Message is required")

        prompt = CHAT_PROMPT.format(
            history=self._format_history(conversation_history or []),
            message=message.strip(),
        )
        reply = await self.generate_response(prompt, system_prompt=CHAT_SYSTEM_PROMPT)
        return {
            "response": reply.strip(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def _format_history(self, history: List[Dict[str, str]]) -> str:
        if not history:
            return ""
        lines = ["Previous conversation:"]
        for turn in history:
            speaker = "User" if turn.get("role") == "user" else "Dhan Sarthi"
            lines.append(f"{speaker}: {turn.get('content', '')}")
        return "\n".join(lines) + "\n\n"
