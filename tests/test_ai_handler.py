"""
Tests for the Gemini handler: rate limiting, model fallback and response generation.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from latesh_bot import config
from latesh_bot.handlers import ai_handler
from latesh_bot.handlers.ai_handler import AIResponseError


class TestRequestPriority:
    """Test priority detection from call-site context."""

    def test_priorities(self):
        assert ai_handler.determine_request_priority("labgame") == "low"
        assert ai_handler.determine_request_priority("question") == "high"
        assert ai_handler.determine_request_priority("mention reply") == "high"
        assert ai_handler.determine_request_priority("") == "medium"

    def test_progressive_penalties(self):
        assert ai_handler.get_progressive_penalty_duration(2) == 0
        assert ai_handler.get_progressive_penalty_duration(3) == 30
        assert ai_handler.get_progressive_penalty_duration(4) == 60
        assert ai_handler.get_progressive_penalty_duration(5) == 120
        assert ai_handler.get_progressive_penalty_duration(9) == 300


class TestRateLimits:
    """Test the usage counters and cooldowns."""

    def test_fresh_stats_allow_requests(self):
        assert ai_handler.check_rate_limits("high") == (True, "OK")

    def test_min_interval_by_priority(self):
        ai_handler.record_ai_request()
        allowed, reason = ai_handler.check_rate_limits("low")
        assert allowed is False
        assert "low priority" in reason

    def test_daily_limit(self):
        ai_handler.ai_usage_stats["daily_requests"] = config.MAX_DAILY_REQUESTS
        allowed, reason = ai_handler.check_rate_limits()
        assert allowed is False
        assert "Daily request limit" in reason

    def test_consecutive_errors_trigger_cooldown(self):
        for _ in range(3):
            ai_handler.record_ai_error()

        allowed, reason = ai_handler.check_rate_limits()
        assert allowed is False
        assert reason.startswith("Rate limited for")

    def test_expired_cooldown_is_cleared(self):
        ai_handler.ai_usage_stats["rate_limited_until"] = datetime.now(ai_handler.pacific_tz) - timedelta(seconds=1)
        assert ai_handler.check_rate_limits()[0] is True
        assert ai_handler.ai_usage_stats["rate_limited_until"] is None

    def test_success_resets_error_streak(self):
        ai_handler.record_ai_error()
        ai_handler.record_ai_request()
        assert ai_handler.ai_usage_stats["consecutive_errors"] == 0
        assert ai_handler.ai_usage_stats["daily_requests"] == 1


class TestModelCascade:
    """Test model testing and backup switching."""

    @pytest.mark.asyncio
    async def test_initialize_models(self, mock_gemini_client, monkeypatch):
        monkeypatch.setattr(ai_handler, "working_gemini_models", [])
        monkeypatch.setattr(ai_handler, "current_gemini_model", None)

        assert await ai_handler.initialize_gemini_models() is True
        assert ai_handler.current_gemini_model == "gemini-2.5-flash"
        assert ai_handler.working_gemini_models == ai_handler.GEMINI_MODEL_CASCADE

    @pytest.mark.asyncio
    async def test_no_working_models(self, mock_gemini_client, monkeypatch):
        monkeypatch.setattr(ai_handler, "working_gemini_models", [])
        mock_gemini_client.models.generate_content.side_effect = RuntimeError("404 not found")

        assert await ai_handler.initialize_gemini_models() is False

    def test_switch_to_backup(self, monkeypatch):
        monkeypatch.setattr(ai_handler, "working_gemini_models", ["gemini-2.5-flash", "gemini-2.0-flash-001"])
        monkeypatch.setattr(ai_handler, "current_gemini_model", "gemini-2.5-flash")

        assert ai_handler.switch_to_backup_gemini_model() is True
        assert ai_handler.current_gemini_model == "gemini-2.0-flash-001"
        assert ai_handler.switch_to_backup_gemini_model() is False

    @pytest.mark.asyncio
    async def test_async_init_without_client(self, monkeypatch):
        monkeypatch.setattr(ai_handler, "gemini_client", None)
        await ai_handler.initialize_ai_async()
        assert ai_handler.get_ai_status()["status_message"] == "No AI available"


class TestCallAI:
    """Test the rate limited AI call."""

    @pytest.mark.asyncio
    async def test_no_client(self, monkeypatch):
        monkeypatch.setattr(ai_handler, "gemini_client", None)
        assert await ai_handler.call_ai_with_rate_limiting("hi") == (None, "no_ai_available")

    @pytest.mark.asyncio
    async def test_success(self, mock_gemini_client):
        text, status = await ai_handler.call_ai_with_rate_limiting("hi", 1, context="question")

        assert (text, status) == ("Test Gemini response", "success")
        kwargs = mock_gemini_client.models.generate_content.call_args.kwargs
        assert kwargs["contents"] == "hi"
        assert kwargs["config"] == ai_handler.GENERATION_CONFIG

    @pytest.mark.asyncio
    async def test_empty_response(self, mock_gemini_client):
        mock_gemini_client.models.generate_content.return_value = MagicMock(text="")
        assert await ai_handler.call_ai_with_rate_limiting("hi") == (None, "empty_response")

    @pytest.mark.asyncio
    async def test_rate_limited(self, mock_gemini_client):
        ai_handler.record_ai_request()
        text, status = await ai_handler.call_ai_with_rate_limiting("hi", context="labgame")

        assert text is None
        assert status.startswith("rate_limit:")
        mock_gemini_client.models.generate_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_counts_failure(self, mock_gemini_client, monkeypatch):
        monkeypatch.setattr(ai_handler, "current_gemini_model", "gemini-2.5-flash")
        mock_gemini_client.models.generate_content.side_effect = RuntimeError("boom")

        text, status = await ai_handler.call_ai_with_rate_limiting("hi")

        assert text is None
        assert status == "error:boom"
        assert ai_handler.model_failure_counts["gemini-2.5-flash"] == 1
        assert ai_handler.ai_usage_stats["consecutive_errors"] == 1


class TestGenerateResponse:
    """Test the user-facing response generator."""

    @pytest.mark.asyncio
    async def test_includes_profile_in_prompt(self, mock_gemini_client, saved_profiles):
        response = await ai_handler.generate_ai_response("What is swerve?", "alexr", "Lab", user_id=111)

        assert response == "Test Gemini response"
        prompt = mock_gemini_client.models.generate_content.call_args.kwargs["contents"]
        assert "Alex Rivera" in prompt
        assert "User Question: What is swerve?" in prompt

    @pytest.mark.asyncio
    async def test_empty_becomes_apology(self, mock_gemini_client, profiles_file):
        with patch.object(ai_handler, "call_ai_with_rate_limiting", AsyncMock(return_value=(None, "empty_response"))):
            response = await ai_handler.generate_ai_response("?", "alexr")
        assert response == config.EMPTY_AI_RESPONSE

    @pytest.mark.asyncio
    async def test_failure_raises(self, mock_gemini_client, profiles_file):
        with patch.object(ai_handler, "call_ai_with_rate_limiting", AsyncMock(return_value=(None, "error:boom"))):
            with pytest.raises(AIResponseError):
                await ai_handler.generate_ai_response("?", "alexr")

    @pytest.mark.asyncio
    async def test_no_client_raises(self, monkeypatch):
        monkeypatch.setattr(ai_handler, "gemini_client", None)
        with pytest.raises(AIResponseError):
            await ai_handler.generate_ai_response("?", "alexr")
