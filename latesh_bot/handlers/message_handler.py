"""
Message Handler Module

Handles plain (non-command) messages: AI replies when the bot is mentioned
and channel forwarding through webhooks.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import discord

from ..config import AI_NOT_CONFIGURED_MESSAGE, MAX_MESSAGE_LENGTH
from ..persona.personalities import RESPONSES, get_current_personality
from ..utils.parsers import strip_user_mention
from ..utils.profiles import get_user_profile
from ..utils.webhooks import forward_message, get_forwarding
from . import ai_handler
from .ai_handler import AIResponseError, generate_ai_response

logger = logging.getLogger(__name__)

GREETING_PATTERN = re.compile(r"\b(?:hello|hi|hey)\b")
IDENTITY_QUESTIONS = ("who are you", "what are you")


def split_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split a long reply into Discord-sized chunks on sentence boundaries.

    Sentences longer than max_length are split by words. A chunk only exceeds
    max_length when a single word does.
    """
    chunks: List[str] = []
    current = ""

    for sentence in text.split('. '):
        if len(current) + len(sentence) + 2 <= max_length:
            current += ('. ' if current else '') + sentence
            continue

        if current:
            chunks.append(current.strip())
            current = ""

        if len(sentence) > max_length:
            for word in sentence.split(' '):
                if len(current) + len(word) + 1 > max_length:
                    if current:
                        chunks.append(current.strip())
                    current = word
                else:
                    current += (' ' if current else '') + word
        else:
            current = sentence

    if current.strip():
        chunks.append(current.strip())

    return chunks


def collect_mentioned_profiles(message: discord.Message, bot_user_id: int) -> List[Dict[str, Any]]:
    """Pair each mentioned user (other than the bot) with their saved profile"""
    mentioned = []
    for user in message.mentions:
        if user.id == bot_user_id:
            continue
        mentioned.append({'user': user, 'profile': get_user_profile(user.id)})
    return mentioned


def quick_reply(question: str) -> Optional[str]:
    """Canned replies that don't need the AI model"""
    personality = get_current_personality()
    if not question:
        return RESPONSES['greeting']

    lowered = question.lower()
    if GREETING_PATTERN.search(lowered):
        return f"{RESPONSES['greeting']} What can I help you with today?"
    if any(phrase in lowered for phrase in IDENTITY_QUESTIONS):
        return (f"I'm Latesh Analysis Bot! 🤖 {personality['motto']} "
                f"Use `/ai-character view` to learn more about my personality!")
    return None


async def handle_ai_mention(message: discord.Message, bot) -> None:
    """Reply to a message that mentions the bot"""
    if ai_handler.gemini_client is None:
        await message.reply(AI_NOT_CONFIGURED_MESSAGE)
        return

    question = strip_user_mention(message.content, bot.user.id)
    canned = quick_reply(question)
    if canned is not None:
        await message.reply(canned)
        return

    mentioned_profiles = collect_mentioned_profiles(message, bot.user.id)
    guild_name = message.guild.name if message.guild else None

    try:
        async with message.channel.typing():
            response = await generate_ai_response(
                question,
                message.author.name,
                guild_name,
                message.author.id,
                mentioned_profiles,
            )
    except AIResponseError as e:
        logger.error(f"AI mention reply failed for {message.author}: {e}")
        await message.reply(f"{RESPONSES['confused']} Please try again later.")
        return

    for chunk in split_message(response):
        await message.reply(chunk)


async def process_message(message: discord.Message, bot) -> bool:
    """
    Route a plain message. Returns True when the message was consumed by the
    mention handler, in which case text commands are not processed.
    """
    if message.author.bot:
        return True

    if bot.user is not None and bot.user in message.mentions:
        await handle_ai_mention(message, bot)
        return True

    if get_forwarding(message.channel.id):
        await forward_message(message)

    return False
