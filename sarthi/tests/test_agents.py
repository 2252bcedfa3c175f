"""
Agent unit tests - test agent methods with mocked Claude responses.
"""
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
from anthropic import APIConnectionError, BadRequestError
from tenacity import wait_none

from sarthi.agents.financial_advisor.agent import FinancialAdvisorAgent
from sarthi.agents.voice_navigator.agent import VoiceNavigatorAgent, sanitize_command, analyze_intent
from sarthi.agents.voice_navigator.cache import TTLCache
from sarthi.exceptions import ValidationError, AIServiceError, AIServiceUnavailable
from sarthi.services.claude_service import ClaudeService

PROFILE = {
    "name": "Lakshmi",
    "age": 34,
    "monthly_income": 18000,
    "financial_goal": "Child education",
    "location": "Madurai",
    "preferred_language": "Tamil",
    "business_type": "Tailoring",
    "existing_savings": 25000,
    "risk_tolerance": "low",
}


def claude_reply(text):
    return SimpleNamespace(content=[SimpleNamespace(text=text)])


def messages_request():
    return httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


# ===================== CLAUDE SERVICE =====================


class TestClaudeService:

    def test_availability_follows_api_key(self):
        assert ClaudeService(api_key="test-key").is_available

    @pytest.mark.asyncio
    async def test_unconfigured_service_refuses(self):
        service = ClaudeService(api_key="")
        service._available = False
        assert not service.is_available
        with pytest.raises(AIServiceUnavailable):
            await service.generate_response("hello")

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        service = ClaudeService(api_key="test-key", max_retries=3)
        service.retry_wait = wait_none()

        with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock:
            mock.side_effect = [
                APIConnectionError(request=messages_request()),
                APIConnectionError(request=messages_request()),
                claude_reply("Namaste!"),
            ]
            result = await service.generate_response("hello")

        assert result == "Namaste!"
        assert mock.await_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        service = ClaudeService(api_key="test-key", max_retries=3)
        service.retry_wait = wait_none()

        with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock:
            mock.side_effect = APIConnectionError(request=messages_request())
            with pytest.raises(AIServiceError):
                await service.generate_response("hello")

        assert mock.await_count == 3

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self):
        service = ClaudeService(api_key="test-key", max_retries=3)
        service.retry_wait = wait_none()
        error = BadRequestError(
            message="bad request",
            response=httpx.Response(400, request=messages_request()),
            body=None,
        )

        with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock:
            mock.side_effect = error
            with pytest.raises(AIServiceError):
                await service.generate_response("hello")

        assert mock.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_reply_is_an_error(self):
        service = ClaudeService(api_key="test-key")
        with patch.object(service.client.messages, "create", new_callable=AsyncMock) as mock:
            mock.return_value = claude_reply("   ")
            with pytest.raises(AIServiceError):
                await service.generate_response("hello")

    @pytest.mark.asyncio
    async def test_structured_response_strips_markdown(self):
        service = ClaudeService(api_key="test-key")
        with patch.object(service, "generate_response", new_callable=AsyncMock) as mock:
            mock.return_value = '```json\n{"action": {"type": "help"}}\n```'
            result = await service.generate_structured_response("p", response_format={})
        assert result == {"action": {"type": "help"}}


# ===================== FINANCIAL ADVISOR =====================


class TestFinancialAdvisorAgent:

    @pytest.mark.asyncio
    async def test_generate_advice(self):
        agent = FinancialAdvisorAgent()

        with patch.object(agent, "generate_response", new_callable=AsyncMock) as mock:
            mock.return_value = "  # LAKSHMI'S FINANCIAL PLAN\nStart a Sukanya Samriddhi account.  "
            result = await agent.generate_advice(PROFILE)

        assert result == {
            "financial_advice": "# LAKSHMI'S FINANCIAL PLAN\nStart a Sukanya Samriddhi account."
        }
        prompt = mock.call_args.args[0]
        assert "LAKSHMI" in prompt
        assert "Madurai" in prompt
        assert "Tailoring" in prompt

    @pytest.mark.asyncio
    async def test_generate_advice_missing_fields(self):
        agent = FinancialAdvisorAgent()
        profile = {**PROFILE, "risk_tolerance": "", "location": None}

        with patch.object(agent, "generate_response", new_callable=AsyncMock) as mock:
            with pytest.raises(ValidationError, match="location, risk_tolerance"):
                await agent.generate_advice(profile)
        mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chat_includes_history(self):
        agent = FinancialAdvisorAgent()
        history = [
            {"role": "user", "content": "What is PPF?"},
            {"role": "assistant", "content": "A 15-year savings scheme."},
        ]

        with patch.object(agent, "generate_response", new_callable=AsyncMock) as mock:
            mock.return_value = "Yes, interest is tax free."
            result = await agent.chat("Is the interest taxed?", history)

        assert result["response"] == "Yes, interest is tax free."
        assert result["timestamp"]
        prompt = mock.call_args.args[0]
        assert "User: What is PPF?" in prompt
        assert "Dhan Sarthi: A 15-year savings scheme." in prompt
        assert prompt.rstrip().endswith("Dhan Sarthi:")

    @pytest.mark.asyncio
    async def test_chat_requires_message(self):
        agent = FinancialAdvisorAgent()
        with pytest.raises(ValidationError):
            await agent.chat("   ")

    @pytest.mark.asyncio
    async def test_process_routes_by_context(self):
        agent = FinancialAdvisorAgent()
        with patch.object(agent, "generate_response", new_callable=AsyncMock) as mock:
            mock.return_value = "ok"
            chat = await agent.process({"message": "hi"})
            advice = await agent.process(PROFILE)
        assert chat["response"] == "ok"
        assert advice == {"financial_advice": "ok"}


# ===================== VOICE NAVIGATOR =====================


class TestVoiceNavigatorAgent:

    def test_sanitize_command(self):
        assert sanitize_command("  Go   to <Calculator>!! ") == "go to calculator!!"

    def test_analyze_intent(self):
        assert analyze_intent("please calculate my ppf") == "calculation"
        assert analyze_intent("track my spending") == "expense_tracking"
        assert analyze_intent("xyz") == "unknown"

    @pytest.mark.asyncio
    async def test_quick_navigation_skips_claude(self):
        agent = VoiceNavigatorAgent()
        with patch.object(agent.claude, "generate_structured_response", new_callable=AsyncMock) as mock:
            result = await agent.process({"command": "Go to calculator"})

        mock.assert_not_awaited()
        assert result["action"] == {"type": "navigate", "path": "/ppf", "confidence": 0.9}

    @pytest.mark.asyncio
    async def test_quick_greeting_and_scheduling(self):
        agent = VoiceNavigatorAgent()
        greeting = await agent.process({"command": "Hello financial advisor"})
        schedule = await agent.process({"command": "book a consultation"})
        assert greeting["action"]["type"] == "greeting"
        assert greeting["conversationMode"] is True
        assert schedule["action"]["type"] == "schedule_meeting"

    @pytest.mark.asyncio
    async def test_llm_reply_is_validated_and_cached(self):
        agent = VoiceNavigatorAgent()
        reply = {"action": {"type": "get_advice"}, "response": "Let me fetch some advice."}

        with patch.object(agent.claude, "generate_structured_response", new_callable=AsyncMock) as mock:
            mock.return_value = reply
            first = await agent.process({"command": "I need money tips", "current_page": "/"})
            second = await agent.process({"command": "i need  money tips", "current_page": "/"})

        assert mock.await_count == 1
        assert first["action"] == {"type": "get_advice", "confidence": 0.8}
        assert second == first
        assert len(agent.cache) == 1

    @pytest.mark.asyncio
    async def test_low_confidence_becomes_clarification(self):
        agent = VoiceNavigatorAgent()
        reply = {"action": {"type": "navigate", "path": "/news", "confidence": 0.1}, "response": "News"}

        with patch.object(agent.claude, "generate_structured_response", new_callable=AsyncMock) as mock:
            mock.return_value = reply
            result = await agent.process({"command": "umm the thing"})

        assert result["action"]["type"] == "clarification"
        assert "rephrase" in result["response"]

    @pytest.mark.asyncio
    async def test_unknown_action_type_is_rejected(self):
        agent = VoiceNavigatorAgent()
        reply = {"action": {"type": "delete_account", "confidence": 0.99}, "response": "Done"}

        with patch.object(agent.claude, "generate_structured_response", new_callable=AsyncMock) as mock:
            mock.return_value = reply
            result = await agent.process({"command": "remove everything"})

        assert result["action"]["type"] == "error"
        assert result["action"]["confidence"] == 0.0

    @pytest.mark.asyncio
    async def test_unparsable_reply(self):
        agent = VoiceNavigatorAgent()
        with patch.object(agent.claude, "generate_structured_response", new_callable=AsyncMock) as mock:
            mock.side_effect = ValueError("Failed to parse Claude response as JSON")
            result = await agent.process({"command": "blah blah"})
        assert result["action"]["type"] == "error"

    @pytest.mark.asyncio
    async def test_invalid_command(self):
        agent = VoiceNavigatorAgent()
        with pytest.raises(ValidationError):
            await agent.process({"command": 42})
        with pytest.raises(ValidationError):
            await agent.process({})


# ===================== RESPONSE CACHE =====================


class TestTTLCache:

    def test_entries_expire(self):
        clock = FakeClock()
        cache = TTLCache(max_entries=10, ttl=300, clock=clock)
        cache.set("a", 1)

        clock.now = 299
        assert cache.get("a") == 1
        clock.now = 300
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_least_recently_used_is_evicted(self):
        cache = TTLCache(max_entries=2, ttl=300, clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.keys() == ["a", "c"]

    def test_clear_reports_size(self):
        cache = TTLCache(max_entries=5, ttl=300, clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert len(cache) == 0
