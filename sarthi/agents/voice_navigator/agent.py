"""
Voice Navigator Agent - maps spoken commands to site actions.

Common phrasings are answered from the rule table; anything else goes to
Claude and the reply is validated before it reaches the browser.
"""
import json
import logging
import re
from typing import Dict, Any, Optional

from sarthi.agents.base_agent import BaseAgent
from sarthi.agents.voice_navigator.cache import TTLCache
from sarthi.agents.voice_navigator.prompts import (
    COMMAND_PATTERNS,
    NAVIGATION_MAP,
    VALID_ACTION_TYPES,
    SYSTEM_PROMPT,
    NAVIGATION_PROMPT,
    RESPONSE_FORMAT,
)
from sarthi.config import get_settings
from sarthi.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.8
MIN_CONFIDENCE = 0.3


def sanitize_command(command: str) -> str:
    command = re.sub(r"\s+", " ", command.strip())
    command = re.sub(r"[^\w\s\-.,!?]", "", command)
    return command.lower()


def analyze_intent(command: str) -> str:
    for intent, pattern in COMMAND_PATTERNS.items():
        if pattern.search(command):
            return intent
    return "unknown"


def error_response(message: str, action_type: str = "error") -> Dict[str, Any]:
    return {
        "action": {"type": action_type, "confidence": 0.0},
        "response": message,
        "conversationMode": False,
    }


class VoiceNavigatorAgent(BaseAgent):

    def __init__(self, claude=None, cache: Optional[TTLCache] = None):
        super().__init__(name="VoiceNavigatorAgent", claude=claude)
        settings = get_settings()
        self.cache = cache or TTLCache(
            max_entries=settings.VOICE_CACHE_MAX_ENTRIES,
            ttl=settings.VOICE_CACHE_TTL_SECONDS,
        )

    async def process(self, context: Dict[str, Any]) -> Dict[str, Any]:
        command = context.get("command")
        if not command or not isinstance(command, str):
            raise ValidationError("Invalid command format")

        command = sanitize_command(command)
        current_page = context.get("current_page") or "/"
        conversation_mode = bool(context.get("conversation_mode"))

        cache_key = f"{command}:{current_page}:{conversation_mode}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        result = self.quick_command(command)
        if result is None:
            result = await self.ask_llm(
                command,
                current_page,
                context.get("website_structure") or {},
                conversation_mode,
            )

        self.cache.set(cache_key, result)
        logger.info(
            f"Voice command from {context.get('user_id') or 'anonymous'}: "
            f"'{command}' -> {result['action']['type']} ({result['action'].get('confidence')})"
        )
        return result

    def quick_command(self, command: str) -> Optional[Dict[str, Any]]:
        """Rule-based answers for greetings, known pages, scheduling and help"""
        if COMMAND_PATTERNS["greeting"].search(command):
            return {
                "action": {"type": "greeting", "confidence": 0.95},
                "response": (
                    "Hello! Welcome to Financial Advisor. I'm your AI assistant. "
                    "You can ask me to open a page, get financial advice or schedule a session."
                ),
                "conversationMode": True,
            }

        match = COMMAND_PATTERNS["navigation"].search(command)
        if match and match.group(2) in NAVIGATION_MAP:
            target = match.group(2)
            return {
                "action": {"type": "navigate", "path": NAVIGATION_MAP[target], "confidence": 0.9},
                "response": f"Taking you to the {target} page.",
                "conversationMode": True,
            }

        if COMMAND_PATTERNS["action"].search(command):
            return {
                "action": {"type": "schedule_meeting", "confidence": 0.9},
                "response": "I'll help you schedule a session with one of our financial experts.",
                "conversationMode": True,
            }

        if COMMAND_PATTERNS["help"].search(command):
            return {
                "action": {"type": "help", "confidence": 0.9},
                "response": (
                    "I can help you navigate the website, schedule sessions, "
                    "get financial advice, track expenses and more. What would you like to do?"
                ),
                "conversationMode": True,
                "suggestions": ["Go to calculator", "Track expenses", "Get advice", "Schedule meeting"],
            }

        return None

    async def ask_llm(
        self,
        command: str,
        current_page: str,
        website_structure: Dict[str, Any],
        conversation_mode: bool,
    ) -> Dict[str, Any]:
        prompt = NAVIGATION_PROMPT.format(
            current_page=current_page,
            command=command,
            conversation_mode=str(conversation_mode).lower(),
            intent=analyze_intent(command),
            website_structure=json.dumps(website_structure, indent=2, ensure_ascii=False),
            action_types=", ".join(sorted(VALID_ACTION_TYPES)),
        )
        parsed = await self.ask_structured(prompt, SYSTEM_PROMPT, RESPONSE_FORMAT)
        if parsed is None:
            return error_response("I'm sorry, I couldn't understand that command. Could you please try again?")

        return self.validate(parsed)

    def validate(self, parsed: Any) -> Dict[str, Any]:
        """Reject malformed replies and downgrade low-confidence ones"""
        if not isinstance(parsed, dict):
            return error_response("I received an invalid response. Please try again.")
        action = parsed.get("action")
        if not isinstance(action, dict) or not parsed.get("response"):
            return error_response("I received an invalid response. Please try again.")
        if action.get("type") not in VALID_ACTION_TYPES:
            return error_response("I'm sorry, I couldn't understand that command. Could you please try again?")

        try:
            confidence = action.get("confidence")
            confidence = DEFAULT_CONFIDENCE if confidence is None else float(confidence)
        except (TypeError, ValueError):
            confidence = DEFAULT_CONFIDENCE
        action["confidence"] = confidence

        if confidence < MIN_CONFIDENCE:
            action["type"] = "clarification"
            parsed["response"] = "I'm not quite sure what you mean. Could you please rephrase that?"

        parsed["action"] = action
        return parsed
