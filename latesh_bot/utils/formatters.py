"""
Text Formatters Module

Handles text formatting, embed construction and content presentation
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import discord

from .. import config


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Trim text to at most `limit` characters, marking the cut with suffix"""
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit - len(suffix)] + suffix


def preview(text: str, limit: int) -> str:
    """First `limit` characters followed by '...' when anything was dropped"""
    return text[:limit] + ("..." if len(text) > limit else "")


def discord_timestamp(moment: datetime, style: str = "F") -> str:
    """Render a datetime as a Discord <t:unix:style> tag"""
    return f"<t:{int(moment.timestamp())}:{style}>"


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:] if text else text


def format_location(data: Dict[str, Any]) -> str:
    return ", ".join(
        data.get(key) or "Unknown" for key in ("city", "state_prov", "country"))


def error_embed(description: str = config.COMMAND_ERROR_MESSAGE) -> discord.Embed:
    return discord.Embed(
        title="❌ Error",
        description=description,
        color=config.COLOR_ERROR,
        timestamp=datetime.now(timezone.utc),
    )


def success_embed(title: str, description: Optional[str] = None,
                  color: int = config.COLOR_SUCCESS) -> discord.Embed:
    return discord.Embed(
        title=title,
        description=description,
        color=color,
        timestamp=datetime.now(timezone.utc),
    )
