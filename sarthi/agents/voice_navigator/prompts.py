"""
Prompts and command tables for the Voice Navigator Agent
"""
import re

COMMAND_PATTERNS = {
    "greeting": re.compile(r"^(hello|hi|hey|greetings|good morning|good afternoon|good evening)\s+(financial\s+)?advisor", re.I),
    "navigation": re.compile(r"(go\s+to|navigate\s+to|take\s+me\s+to|show\s+me|open|visit)\s+(\w+)", re.I),
    "action": re.compile(r"(schedule|book|arrange|set\s+up)\s+(a\s+)?(meeting|appointment|consultation)", re.I),
    "help": re.compile(r"(help|assist|support|what\s+can\s+you\s+do)", re.I),
    "calculation": re.compile(r"(calculate|calculator|compute|figure\s+out)", re.I),
    "expense_tracking": re.compile(r"(expense|spending|track|monitor|budget)", re.I),
    "advice": re.compile(r"(advice|guidance|recommendation|suggestion)", re.I),
    "learning": re.compile(r"(learn|study|education|knowledge|tutorial)", re.I),
}

NAVIGATION_MAP = {
    "home": "/",
    "calculator": "/ppf",
    "expenses": "/expenses",
    "community": "/community",
    "news": "/news",
    "learn": "/learn",
    "chatbot": "/chatbot",
    "scams": "/scams",
    "profile": "/profile",
    "login": "/login",
    "signup": "/signup",
    "sessions": "/qna",
    "schemes": "/schemes",
}

VALID_ACTION_TYPES = {
    "navigate", "greeting", "help", "error", "clarification", "open_chat",
    "schedule_meeting", "open_calculator", "open_expenses", "get_advice",
}

SYSTEM_PROMPT = """You are an AI voice assistant for a financial advisor website.
You convert natural language commands into specific site actions with high accuracy.
If you are uncertain, ask for clarification rather than guessing."""

NAVIGATION_PROMPT = """CONTEXT:
- Current page: {current_page}
- User command: "{command}"
- Conversation mode: {conversation_mode}
- Detected intent: {intent}

WEBSITE STRUCTURE:
{website_structure}

INSTRUCTIONS:
1. If it is a greeting mentioning "financial advisor", respond warmly and set conversationMode to true
2. For navigation commands pick the most appropriate page path
3. For action commands use one of: {action_types}
4. Keep the spoken response short and friendly

EXAMPLES:
- "go to calculator" -> navigate to /ppf
- "I want to track expenses" -> navigate to /expenses
- "schedule a meeting" -> schedule_meeting"""

RESPONSE_FORMAT = {
    "action": {
        "type": "navigate|greeting|help|error|clarification|schedule_meeting|...",
        "path": "/path (navigate only)",
        "confidence": "0.0-1.0",
    },
    "response": "spoken response to the user",
    "conversationMode": "true|false (optional)",
    "suggestions": ["optional follow-up suggestions"],
}
