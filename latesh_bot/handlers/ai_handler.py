"""
AI Handler Module

Handles Gemini integration, rate limiting, and response generation for the Discord bot.
Tests a cascade of Gemini models at startup and falls back to a backup model on failure.
"""

import asyncio
import concurrent.futures
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from google import genai

from .. import config
from ..config import (
    AI_REQUEST_TIMEOUT,
    MAX_DAILY_REQUESTS,
    MAX_HOURLY_REQUESTS,
    MIN_REQUEST_INTERVAL,
    PRIORITY_INTERVALS,
    RATE_LIMIT_COOLDOWN,
    RATE_LIMIT_COOLDOWNS,
)
from ..persona.prompts import build_assistant_prompt
from ..utils.profiles import get_user_profile

logger = logging.getLogger(__name__)


class AIResponseError(RuntimeError):
    """Raised when no AI text could be produced for a user-facing request"""


# Configure user-friendly logging for AI libraries
class UserFriendlyAILogFilter(logging.Filter):
    """Custom filter to make google-genai and httpx logs more readable"""

    def filter(self, record):
        if record.levelno != logging.INFO:
            return True

        if record.name == "google_genai.models":
            if "AFC is enabled" in record.getMessage():
                record.msg = "🤖 Gemini: AFC enabled"
                record.args = ()

        elif record.name == "httpx":
            msg = record.getMessage()
            if "HTTP Request: POST" in msg and "generateContent" in msg and "gemini-" in msg:
                model_start = msg.find("gemini-")
                model_end = msg.find(":", model_start)
                model_name = msg[model_start:model_end]

                if '"HTTP/1.1 200 OK"' in msg:
                    record.msg = f"✅ API Success: {model_name} responded (200 OK)"
                else:
                    record.msg = f"⚠️ API Response: {model_name} returned non-200"
                record.args = ()

        return True


for logger_name in ["google_genai.models", "httpx"]:
    logging.getLogger(logger_name).addFilter(UserFriendlyAILogFilter())


# Gemini model cascade configuration (priority order)
GEMINI_MODEL_CASCADE = [
    'gemini-2.5-flash',       # Primary: Latest, fastest
    'gemini-2.0-flash-001',   # Backup: Stable version
]

GENERATION_CONFIG = {"max_output_tokens": 1000, "temperature": 0.7}

gemini_client: Optional[genai.Client] = None
ai_enabled = False
ai_status_message = "Offline"

current_gemini_model: Optional[str] = None
working_gemini_models: List[str] = []
model_failure_counts: Dict[str, int] = {}

try:
    pacific_tz = ZoneInfo("America/Los_Angeles")
except ZoneInfoNotFoundError:
    pacific_tz = timezone.utc
    print("⚠️ Pacific timezone not available, using UTC for AI rate limiting")


def _fresh_usage_stats() -> Dict[str, Any]:
    now = datetime.now(pacific_tz)
    return {
        "daily_requests": 0,
        "hourly_requests": 0,
        "last_request_time": None,
        "last_hour_reset": now.hour,
        "last_day_reset": now.date(),
        "consecutive_errors": 0,
        "last_error_time": None,
        "rate_limited_until": None,
    }


ai_usage_stats = _fresh_usage_stats()


def reset_usage_stats():
    """Clear all counters and cooldowns"""
    global ai_usage_stats
    ai_usage_stats = _fresh_usage_stats()


def reset_daily_usage():
    """Reset the daily counter when the Pacific date rolls over"""
    today = datetime.now(pacific_tz).date()
    if today != ai_usage_stats["last_day_reset"]:
        ai_usage_stats["daily_requests"] = 0
        ai_usage_stats["last_day_reset"] = today
        print(f"🔄 Daily AI usage reset for {today.isoformat()}")


def reset_hourly_usage():
    pt_now = datetime.now(pacific_tz)
    if pt_now.hour != ai_usage_stats["last_hour_reset"]:
        ai_usage_stats["hourly_requests"] = 0
        ai_usage_stats["last_hour_reset"] = pt_now.hour
        print(f"🔄 Hourly AI usage reset at {pt_now.strftime('%H:00 PT')}")


def determine_request_priority(context: str = "") -> str:
    """Map a call-site context string onto a rate limit priority"""
    context_lower = context.lower()
    if any(keyword in context_lower for keyword in ["labgame", "background", "simulation"]):
        return "low"
    if any(keyword in context_lower for keyword in ["ask", "mention", "question"]):
        return "high"
    return "medium"


def get_progressive_penalty_duration(consecutive_errors: int) -> int:
    if consecutive_errors < 3:
        return 0
    elif consecutive_errors == 3:
        return RATE_LIMIT_COOLDOWNS["first"]
    elif consecutive_errors == 4:
        return RATE_LIMIT_COOLDOWNS["second"]
    elif consecutive_errors == 5:
        return RATE_LIMIT_COOLDOWNS["third"]
    return RATE_LIMIT_COOLDOWNS["persistent"]


def check_rate_limits(priority: str = "medium") -> Tuple[bool, str]:
    """Check if we can make an AI request without hitting rate limits"""
    reset_daily_usage()
    reset_hourly_usage()

    pt_now = datetime.now(pacific_tz)

    if ai_usage_stats["rate_limited_until"]:
        if pt_now < ai_usage_stats["rate_limited_until"]:
            remaining = (ai_usage_stats["rate_limited_until"] - pt_now).total_seconds()
            return False, f"Rate limited for {int(remaining)} more seconds"
        ai_usage_stats["rate_limited_until"] = None

    if ai_usage_stats["daily_requests"] >= MAX_DAILY_REQUESTS:
        penalty = get_progressive_penalty_duration(ai_usage_stats["consecutive_errors"])
        ai_usage_stats["rate_limited_until"] = pt_now + timedelta(seconds=penalty)
        return False, f"Daily request limit reached ({MAX_DAILY_REQUESTS})"

    if ai_usage_stats["hourly_requests"] >= MAX_HOURLY_REQUESTS:
        penalty = get_progressive_penalty_duration(ai_usage_stats["consecutive_errors"])
        ai_usage_stats["rate_limited_until"] = pt_now + timedelta(seconds=penalty)
        return False, f"Hourly request limit reached ({MAX_HOURLY_REQUESTS})"

    if ai_usage_stats["last_request_time"]:
        time_since_last = (pt_now - ai_usage_stats["last_request_time"]).total_seconds()
        required_interval = PRIORITY_INTERVALS.get(priority, MIN_REQUEST_INTERVAL)
        if time_since_last < required_interval:
            remaining = required_interval - time_since_last
            return False, f"Too soon since last {priority} priority request, wait {remaining:.1f}s"

    return True, "OK"


def record_ai_request():
    pt_now = datetime.now(pacific_tz)
    ai_usage_stats["daily_requests"] += 1
    ai_usage_stats["hourly_requests"] += 1
    ai_usage_stats["last_request_time"] = pt_now
    ai_usage_stats["consecutive_errors"] = 0


def record_ai_error():
    pt_now = datetime.now(pacific_tz)
    ai_usage_stats["consecutive_errors"] += 1
    ai_usage_stats["last_error_time"] = pt_now

    if ai_usage_stats["consecutive_errors"] >= 3:
        ai_usage_stats["rate_limited_until"] = pt_now + timedelta(seconds=RATE_LIMIT_COOLDOWN)
        print(f"⚠️ Too many consecutive AI errors, applying {RATE_LIMIT_COOLDOWN}s cooldown")


async def _generate(model_name: str, contents: str, generation_config: Dict[str, Any], timeout: float):
    """Run the blocking google-genai call in a worker thread"""
    if gemini_client is None:
        raise ValueError("Gemini client not initialized")

    def sync_call():
        return gemini_client.models.generate_content(
            model=model_name,
            contents=contents,
            config=generation_config,
        )

    loop = asyncio.get_running_loop()
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = loop.run_in_executor(executor, sync_call)
        return await asyncio.wait_for(future, timeout=timeout)


async def test_gemini_model(model_name: str, timeout: float = 10.0) -> bool:
    """Test if a specific Gemini model answers a trivial prompt"""
    if gemini_client is None:
        print(f"❌ Gemini client not initialized, cannot test '{model_name}'")
        return False

    try:
        response = await _generate(model_name, "Test", {"max_output_tokens": 5}, timeout)
    except asyncio.TimeoutError:
        print(f"⚠️ Gemini model '{model_name}' test timed out")
        return False
    except Exception as e:
        error_str = str(e).lower()
        if "not found" in error_str or "404" in error_str:
            print(f"❌ Gemini model '{model_name}' not found (invalid name)")
        elif "quota" in error_str or "429" in error_str:
            print(f"⚠️ Gemini model '{model_name}' quota exhausted")
        else:
            print(f"❌ Gemini model '{model_name}' test failed: {str(e)[:100]}")
        return False

    if response is not None and getattr(response, "text", None):
        print(f"✅ Gemini model '{model_name}' is working")
        return True
    return False


async def initialize_gemini_models() -> bool:
    """Test all Gemini models and build the priority list"""
    global working_gemini_models, current_gemini_model

    working_gemini_models = []
    print("🔍 Testing Gemini model cascade...")
    for model_name in GEMINI_MODEL_CASCADE:
        if await test_gemini_model(model_name):
            working_gemini_models.append(model_name)

    if working_gemini_models:
        current_gemini_model = working_gemini_models[0]
        print(f"✅ Primary Gemini model: {current_gemini_model}")
        if len(working_gemini_models) > 1:
            print(f"🔄 Backup Gemini models: {working_gemini_models[1:]}")
        return True

    print("❌ No working Gemini models found")
    return False


def switch_to_backup_gemini_model() -> bool:
    """Move to the next working model after repeated failures"""
    global current_gemini_model

    if not current_gemini_model or current_gemini_model not in working_gemini_models:
        return False

    index = working_gemini_models.index(current_gemini_model)
    if index + 1 >= len(working_gemini_models):
        return False

    current_gemini_model = working_gemini_models[index + 1]
    model_failure_counts[current_gemini_model] = 0
    print(f"🔄 Switched to backup Gemini model: {current_gemini_model}")
    return True


def _active_model() -> str:
    return current_gemini_model or GEMINI_MODEL_CASCADE[0]


async def call_ai_with_rate_limiting(prompt: str, user_id: Optional[int] = None,
                                     context: str = "") -> Tuple[Optional[str], str]:
    """
    Make an AI call with rate limiting and error handling.

    Args:
        prompt: The full prompt text to send
        user_id: Discord user ID the request is made for (logging only)
        context: Call-site label used for priority and logging

    Returns:
        Tuple of (response_text, status_message)
    """
    if gemini_client is None:
        return None, "no_ai_available"

    priority = determine_request_priority(context)
    can_request, reason = check_rate_limits(priority)
    if not can_request:
        print(f"⚠️ AI request blocked ({priority} priority): {reason}")
        return None, f"rate_limit:{reason}"

    model_name = _active_model()
    try:
        logger.info(f"Gemini request [{context or 'general'}] for user {user_id} "
                    f"(daily: {ai_usage_stats['daily_requests']}/{MAX_DAILY_REQUESTS})")
        response = await _generate(model_name, prompt, GENERATION_CONFIG, AI_REQUEST_TIMEOUT)
    except asyncio.TimeoutError:
        print(f"❌ Gemini AI request timed out after {AI_REQUEST_TIMEOUT}s")
        record_ai_error()
        return None, f"timeout_error:{AI_REQUEST_TIMEOUT}s"
    except Exception as e:
        print(f"❌ Gemini AI error: {e}")
        record_ai_error()
        model_failure_counts[model_name] = model_failure_counts.get(model_name, 0) + 1
        if model_failure_counts[model_name] >= 3:
            switch_to_backup_gemini_model()
        return None, f"error:{e}"

    text = getattr(response, "text", None) if response is not None else None
    record_ai_request()
    if not text:
        return None, "empty_response"
    return text, "success"


async def generate_ai_response(question: str, username: str, guild_name: Optional[str] = None,
                               user_id: Optional[int] = None,
                               mentioned_profiles: Optional[List[Dict[str, Any]]] = None) -> str:
    """
    Generate an in-character answer for a user question.

    Raises:
        AIResponseError: AI is offline, rate limited, or the call failed
    """
    if gemini_client is None:
        raise AIResponseError("Gemini AI model not initialized")

    user_profile = get_user_profile(user_id) if user_id is not None else None
    prompt = build_assistant_prompt(question, username, guild_name, user_profile, mentioned_profiles or [])

    text, status = await call_ai_with_rate_limiting(prompt, user_id, context="question")
    if text:
        return text
    if status == "empty_response":
        return config.EMPTY_AI_RESPONSE
    raise AIResponseError(f"Failed to generate AI response ({status})")


def setup_ai_provider(api_key: Optional[str]) -> bool:
    """Create the Gemini client. Model testing is deferred to initialize_ai_async()."""
    global gemini_client
    if not api_key:
        print("⚠️ GEMINI_API_KEY not found - AI features disabled")
        return False
    try:
        gemini_client = genai.Client(api_key=api_key)
    except Exception as e:
        print(f"❌ Gemini AI configuration failed: {e}")
        return False
    print("✅ Gemini client created (testing deferred to async initialization)")
    return True


def initialize_ai():
    """Synchronous basic setup performed at import time"""
    global ai_enabled, ai_status_message

    if setup_ai_provider(config.GEMINI_API_KEY):
        ai_enabled = True
        ai_status_message = "Configured (Gemini) - testing pending"
    else:
        ai_enabled = False
        ai_status_message = "No AI available"


async def initialize_ai_async():
    """Test the model cascade once the bot is connected"""
    global ai_enabled, ai_status_message

    if gemini_client is None:
        ai_status_message = "No AI available"
        print("⚠️ Gemini AI not available - missing API key")
        return

    print("🤖 Starting async AI initialization with model cascade...")
    if await initialize_gemini_models():
        ai_enabled = True
        ai_status_message = f"Online (Gemini, {len(working_gemini_models)} models)"
    else:
        ai_status_message = f"Degraded (untested, using {GEMINI_MODEL_CASCADE[0]})"
    print(f"✅ AI initialization complete: {ai_status_message}")


def get_ai_status() -> Dict[str, Any]:
    return {
        "enabled": ai_enabled,
        "status_message": ai_status_message,
        "current_model": current_gemini_model,
        "working_models": list(working_gemini_models),
        "usage_stats": ai_usage_stats.copy(),
    }


initialize_ai()

__all__ = [
    'AIResponseError',
    'call_ai_with_rate_limiting',
    'generate_ai_response',
    'initialize_ai',
    'initialize_ai_async',
    'get_ai_status',
    'reset_usage_stats',
    'ai_usage_stats',
]
