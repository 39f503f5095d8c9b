"""
Data Parsers Module

Handles parsing and extracting structured data from user input
"""

import re
from datetime import datetime
from typing import List, Optional

EVENT_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})\s+(\d{1,2}):(\d{2})$')
IMAGE_URL_PATTERN = re.compile(r'https?://\S+\.(png|jpg|jpeg|gif|webp)(\?\S*)?', re.IGNORECASE)
DEFAULT_EMBED_COLOR = 0x0099FF


def parse_event_datetime(text: str) -> Optional[datetime]:
    """Parse 'YYYY-MM-DD HH:MM' (24-hour) as a naive local datetime"""
    match = EVENT_DATE_PATTERN.match(text.strip())
    if not match:
        return None

    year, month, day, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def parse_duration_hours(text: str) -> Optional[float]:
    """Parse an event duration in hours. Valid range is (0, 24]."""
    try:
        duration = float(text.strip())
    except (ValueError, AttributeError):
        return None

    if duration != duration or duration <= 0 or duration > 24:
        return None
    return duration


def parse_hex_color(text: Optional[str], default: int = DEFAULT_EMBED_COLOR) -> int:
    """Parse a hex colour such as '0099ff' or '#ff6b35'"""
    if not text:
        return default
    try:
        value = int(text.strip().lstrip('#'), 16)
    except ValueError:
        return default
    return value if 0 <= value <= 0xFFFFFF else default


def extract_image_urls(text: str) -> List[str]:
    if not text:
        return []
    return [match.group(0) for match in IMAGE_URL_PATTERN.finditer(text)]


def strip_user_mention(text: str, user_id: int) -> str:
    """Remove <@id> and <@!id> mentions of the given user"""
    return re.sub(rf'<@!?{user_id}>', '', text).strip()


def parse_team_key(team_key: str) -> str:
    """Convert 'frc254' to '254'"""
    return team_key[3:] if team_key.startswith('frc') else team_key


def format_duration(hours: float) -> str:
    """Render 2.0 as '2' and 1.5 as '1.5'"""
    return f"{hours:g}"
