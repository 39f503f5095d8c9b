"""
The Blue Alliance (TBA) Integration Module

Fetches FRC team, event and match data from the TBA v3 REST API and
provides a simple experience-based match predictor.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
import discord

from .. import config
from ..utils.parsers import parse_team_key

logger = logging.getLogger(__name__)

# Team info fetched by /research, reused by the statistics button
_team_cache: Dict[int, Dict[str, Any]] = {}


class TBANotFound(Exception):
    """Raised internally when TBA answers 404"""


def _headers() -> Dict[str, str]:
    headers = {'User-Agent': config.TBA_USER_AGENT}
    if config.TBA_API_KEY:
        headers['X-TBA-Auth-Key'] = config.TBA_API_KEY
    return headers


async def _get(path: str) -> Any:
    """GET a TBA resource. Raises TBANotFound on 404 and aiohttp errors otherwise."""
    url = f"{config.TBA_BASE_URL}{path}"
    async with aiohttp.ClientSession() as session:
        async with session.get(url, headers=_headers()) as response:
            if response.status == 200:
                return await response.json()
            if response.status == 404:
                raise TBANotFound(path)
            raise aiohttp.ClientResponseError(
                response.request_info, response.history,
                status=response.status, message=f"TBA request failed: {path}")


async def _get_or_none(path: str, what: str) -> Optional[Any]:
    try:
        return await _get(path)
    except TBANotFound:
        return None
    except aiohttp.ClientError as e:
        logger.error(f"Error fetching {what}: {e}")
        return None


async def _get_list(path: str, what: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    data = await _get_or_none(path, what)
    if not isinstance(data, list):
        return []
    return data[:limit] if limit else data


# --- Teams ---

async def get_team(team_number: int) -> Optional[Dict[str, Any]]:
    """
    Fetch basic team info.

    Returns None when the team does not exist. Other HTTP failures are
    raised so the caller can report them.
    """
    try:
        team = await _get(f"/team/frc{team_number}")
    except TBANotFound:
        return None
    _team_cache[int(team_number)] = team
    return team


def get_cached_team(team_number: int) -> Optional[Dict[str, Any]]:
    return _team_cache.get(int(team_number))


async def get_team_matches(team_number: int, year: Optional[int] = None) -> List[Dict[str, Any]]:
    year = year or date.today().year
    return await _get_list(f"/team/frc{team_number}/matches/{year}", "team matches", limit=5)


async def get_team_awards(team_number: int, year: Optional[int] = None) -> List[Dict[str, Any]]:
    year = year or date.today().year
    return await _get_list(f"/team/frc{team_number}/awards/{year}", "team awards", limit=10)


async def get_team_events(team_number: int, year: Optional[int] = None) -> List[Dict[str, Any]]:
    year = year or date.today().year
    return await _get_list(f"/team/frc{team_number}/events/{year}", "team events", limit=8)


async def get_team_event_status(team_key: str, event_key: str) -> Optional[Dict[str, Any]]:
    return await _get_or_none(f"/team/{team_key}/event/{event_key}/status", "team performance")


# --- Events and matches ---

async def get_event(event_key: str) -> Optional[Dict[str, Any]]:
    return await _get_or_none(f"/event/{event_key}", "event")


async def get_event_matches(event_key: str) -> List[Dict[str, Any]]:
    return await _get_list(f"/event/{event_key}/matches", "event matches")


async def get_match(match_key: str) -> Optional[Dict[str, Any]]:
    return await _get_or_none(f"/match/{match_key}", "match")


def is_event_current(event: Dict[str, Any], today: Optional[date] = None) -> bool:
    today = today or date.today()
    try:
        start = date.fromisoformat(event['start_date'])
        end = date.fromisoformat(event['end_date'])
    except (KeyError, TypeError, ValueError):
        return False
    return start <= today <= end


async def get_current_events(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Events of the current season that are running today"""
    today = today or date.today()
    events = await _get_list(f"/events/{today.year}", "current events")
    return [event for event in events if is_event_current(event, today)]


# --- Analysis ---

def _alliance_teams(match: Dict[str, Any], color: str) -> List[str]:
    return match.get('alliances', {}).get(color, {}).get('team_keys', []) or []


def _experience_score(team_keys: List[str]) -> int:
    score = 0
    for key in team_keys:
        try:
            score += 10000 - int(parse_team_key(key))
        except ValueError:
            continue
    return score


def predict_match(match: Dict[str, Any]) -> Dict[str, Any]:
    """
    Predict a match winner from team numbers alone.

    Lower team numbers are older teams, so each alliance scores the sum of
    (10000 - team_number) across its members.
    """
    red = _alliance_teams(match, 'red')
    blue = _alliance_teams(match, 'blue')
    red_score = _experience_score(red)
    blue_score = _experience_score(blue)
    top = max(red_score, blue_score)

    return {
        'match_key': match.get('key'),
        'red_alliance': red,
        'blue_alliance': blue,
        'predicted_winner': 'red' if red_score > blue_score else 'blue',
        'confidence': abs(red_score - blue_score) / top if top else 0.0,
        'red_score': round(red_score / 100),
        'blue_score': round(blue_score / 100),
        'analysis': 'Basic prediction based on team experience (team numbers)',
        'disclaimer': 'This is a simplified prediction model for demonstration purposes',
    }


def comp_level_label(comp_level: str) -> str:
    if comp_level == 'qm':
        return 'Qualification'
    if comp_level == 'ef':
        return 'Elimination'
    return (comp_level or 'unknown').upper()


def format_match_embed(match: Dict[str, Any], prediction: Optional[Dict[str, Any]] = None) -> discord.Embed:
    embed = discord.Embed(
        title=f"🤖 FRC Match: {match.get('match_number') or 'Unknown'}",
        color=config.COLOR_FRC,
        timestamp=datetime.now(timezone.utc),
    )
    red = ", ".join(parse_team_key(k) for k in _alliance_teams(match, 'red')) or "TBD"
    blue = ", ".join(parse_team_key(k) for k in _alliance_teams(match, 'blue')) or "TBD"
    embed.add_field(name="🔴 Red Alliance", value=red, inline=True)
    embed.add_field(name="🔵 Blue Alliance", value=blue, inline=True)
    embed.add_field(name="📊 Status", value=comp_level_label(match.get('comp_level', '')), inline=True)

    alliances = match.get('alliances', {})
    red_score = alliances.get('red', {}).get('score', -1)
    if red_score is not None and red_score != -1:
        blue_score = alliances.get('blue', {}).get('score')
        embed.add_field(name="🏆 Final Score", value=f"Red: {red_score} | Blue: {blue_score}", inline=False)

    if prediction:
        embed.add_field(
            name="🔮 Prediction",
            value=(f"**Winner:** {prediction['predicted_winner'].upper()}\n"
                   f"**Confidence:** {prediction['confidence'] * 100:.1f}%\n"
                   f"**Analysis:** {prediction['analysis']}"),
            inline=False,
        )

    embed.set_footer(text="Data from The Blue Alliance")
    return embed
