"""
FRC match analysis commands for Latesh Analysis Bot
Handles match predictions, event summaries and the list of events running today
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from ..config import COLOR_FRC
from ..integrations import tba
from ..utils.formatters import format_location

logger = logging.getLogger(__name__)


def build_event_summary_embed(event: Dict[str, Any], matches: List[Dict[str, Any]]) -> discord.Embed:
    embed = discord.Embed(
        title=f"🏆 {event.get('name') or event.get('key')}",
        description=f"Event key: `{event.get('key')}`",
        color=COLOR_FRC,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="📍 Location", value=format_location(event), inline=False)
    embed.add_field(name="📅 Dates",
                    value=f"{event.get('start_date') or 'TBD'} - {event.get('end_date') or 'TBD'}", inline=True)
    embed.add_field(name="🎮 Matches", value=str(len(matches)), inline=True)
    embed.set_footer(text="Use /frc-match with a match number for a prediction")
    return embed


def format_team_status(status: Optional[Dict[str, Any]]) -> str:
    """Qualification rank and W-L-T record from a TBA team event status"""
    ranking = ((status or {}).get('qual') or {}).get('ranking') or {}
    if not ranking.get('rank'):
        return "No ranking data yet"

    num_teams = status['qual'].get('num_teams')
    text = f"Rank {ranking['rank']}" + (f" of {num_teams}" if num_teams else "")
    record = ranking.get('record')
    if record:
        text += f" ({record.get('wins', 0)}-{record.get('losses', 0)}-{record.get('ties', 0)})"
    return text


def build_current_events_embed(events: List[Dict[str, Any]]) -> discord.Embed:
    embed = discord.Embed(
        title="📅 FRC Events Happening Now",
        color=COLOR_FRC,
        timestamp=datetime.now(timezone.utc),
    )
    if not events:
        embed.description = "No FRC events are running today."
        return embed

    embed.description = f"Found {len(events)} event(s) in progress"
    for event in events[:25]:
        embed.add_field(
            name=event.get('name') or event.get('key'),
            value=(f"**Key:** {event.get('key')}\n"
                   f"**Location:** {event.get('city')}, {event.get('state_prov')}\n"
                   f"**Dates:** {event.get('start_date')} - {event.get('end_date')}"),
            inline=True,
        )
    embed.set_footer(text="Data from The Blue Alliance")
    return embed


class FRCCommands(commands.Cog):
    category = "FRC"
    permissions: List[str] = []
    cooldown = 5

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="frc-match", description="Get FRC match analysis and predictions")
    @app_commands.rename(match_number="match-number")
    @app_commands.describe(event="Event code (e.g., 2024cmptx)", match_number="Qualification match number",
                           team="Team number to show standings for in the event summary")
    @app_commands.checks.cooldown(1, 5)
    async def frc_match(self, interaction: discord.Interaction, event: str,
                        match_number: Optional[app_commands.Range[int, 1]] = None,
                        team: Optional[app_commands.Range[int, 1]] = None):
        await interaction.response.defer()

        event_key = event.strip().lower()
        if match_number is None:
            event_data = await tba.get_event(event_key)
            if not event_data:
                await interaction.followup.send(f"❌ Could not find event `{event_key}`.")
                return
            matches = await tba.get_event_matches(event_key)
            embed = build_event_summary_embed(event_data, matches)
            if team is not None:
                status = await tba.get_team_event_status(f"frc{team}", event_key)
                embed.add_field(name=f"📊 Team {team} Status", value=format_team_status(status), inline=False)
            await interaction.followup.send(embed=embed)
            return

        match_key = f"{event_key}_qm{match_number}"
        match = await tba.get_match(match_key)
        if not match:
            await interaction.followup.send(f"❌ Could not find match `{match_key}`.")
            return

        prediction = tba.predict_match(match)
        embed = tba.format_match_embed(match, prediction)
        embed.add_field(name="⚠️ Disclaimer", value=prediction['disclaimer'], inline=False)
        await interaction.followup.send(embed=embed)

    @app_commands.command(name="frc-events", description="List FRC events happening right now")
    @app_commands.checks.cooldown(1, 5)
    async def frc_events(self, interaction: discord.Interaction):
        await interaction.response.defer()
        events = await tba.get_current_events()
        await interaction.followup.send(embed=build_current_events_embed(events))


async def setup(bot):
    """Add the FRCCommands cog to the bot"""
    await bot.add_cog(FRCCommands(bot))
