"""
FRC team research command for Latesh Analysis Bot
Looks teams up on The Blue Alliance and offers drill-down buttons for matches, awards, events and statistics
"""

import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List

import aiohttp
import discord
from discord import app_commands
from discord.ext import commands

from ..config import COLOR_FRC, COLOR_INFO, COLOR_SUCCESS, COLOR_WARNING
from ..handlers.error_handler import SafeView
from ..integrations import tba
from ..utils.formatters import format_location
from ..utils.parsers import parse_team_key

logger = logging.getLogger(__name__)

RESEARCH_KINDS = {
    "matches": ("📈 Recent Matches", discord.ButtonStyle.primary),
    "awards": ("🏆 Awards", discord.ButtonStyle.success),
    "events": ("📅 Events", discord.ButtonStyle.secondary),
    "stats": ("📊 Statistics", discord.ButtonStyle.danger),
}

EMPTY_LABELS = {"matches": "recent matches", "awards": "awards", "events": "events"}


def _embed(title: str, description: str, color: int) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=color,
                         timestamp=datetime.now(timezone.utc))


def build_team_embed(team_number: int, team: Dict[str, Any]) -> discord.Embed:
    embed = _embed(
        f"🤖 FRC Team {team_number} - {team.get('nickname') or 'Unknown'}",
        f"**{team.get('name') or 'Team Name Unknown'}**\n{format_location(team)}",
        COLOR_FRC,
    )
    embed.add_field(name="📅 Rookie Year", value=str(team.get('rookie_year') or 'Unknown'), inline=True)
    embed.add_field(name="🌐 Website", value=team.get('website') or 'Not provided', inline=True)
    embed.add_field(name="📊 Status", value="Researching...", inline=True)
    embed.set_footer(text="Click buttons below for detailed information")
    return embed


def build_matches_embed(team_number: int, matches: List[Dict[str, Any]], year: int) -> discord.Embed:
    embed = _embed(f"📈 Recent Matches - Team {team_number}",
                   f"Showing {len(matches)} most recent matches from {year}", COLOR_SUCCESS)
    team = str(team_number)
    for match in matches:
        alliances = match.get('alliances') or {}
        red = alliances.get('red') or {}
        blue = alliances.get('blue') or {}
        red_teams = [parse_team_key(key) for key in red.get('team_keys') or []]
        blue_teams = [parse_team_key(key) for key in blue.get('team_keys') or []]
        red_score = red.get('score') or 0
        blue_score = blue.get('score') or 0

        won = (team in red_teams and red_score > blue_score) or (team in blue_teams and blue_score > red_score)
        embed.add_field(
            name=f"{match.get('comp_level', '').upper()} Match {match.get('match_number')} {'🏆' if won else '❌'}",
            value=(f"**Red Alliance:** {', '.join(red_teams)} ({red_score})\n"
                   f"**Blue Alliance:** {', '.join(blue_teams)} ({blue_score})\n"
                   f"**Event:** {match.get('event_key')}"),
            inline=False,
        )
    return embed


def build_awards_embed(team_number: int, awards: List[Dict[str, Any]], year: int) -> discord.Embed:
    embed = _embed(f"🏆 Awards - Team {team_number}", f"Awards won in {year}", COLOR_WARNING)
    for award in awards:
        embed.add_field(
            name=award.get('name') or 'Award',
            value=f"**Event:** {award.get('event_key')}\n**Year:** {award.get('year')}",
            inline=True,
        )
    return embed


def build_events_embed(team_number: int, events: List[Dict[str, Any]], year: int) -> discord.Embed:
    embed = _embed(f"📅 Events - Team {team_number}", f"Events participated in {year}", COLOR_INFO)
    for event in events:
        embed.add_field(
            name=event.get('name') or event.get('key'),
            value=(f"**Key:** {event.get('key')}\n"
                   f"**Location:** {event.get('city')}, {event.get('state_prov')}\n"
                   f"**Date:** {event.get('start_date') or 'TBD'} - {event.get('end_date') or 'TBD'}"),
            inline=True,
        )
    return embed


def build_stats_embed(team_number: int, team: Dict[str, Any]) -> discord.Embed:
    embed = _embed(f"📊 Statistics - Team {team_number}",
                   "Comprehensive team statistics and information", COLOR_FRC)
    embed.add_field(name="🏢 Team Name", value=team.get('name') or 'Unknown', inline=False)
    embed.add_field(name="🏷️ Nickname", value=team.get('nickname') or 'Unknown', inline=True)
    embed.add_field(name="📅 Rookie Year", value=str(team.get('rookie_year') or 'Unknown'), inline=True)
    embed.add_field(name="🌍 Location", value=format_location(team), inline=False)
    embed.add_field(name="🌐 Website", value=team.get('website') or 'Not provided', inline=True)
    embed.add_field(name="📧 School Name", value=team.get('school_name') or 'Not provided', inline=True)
    embed.add_field(name="📊 Data Source", value="The Blue Alliance API", inline=True)
    return embed


class TeamResearchButton(discord.ui.DynamicItem[discord.ui.Button],
                         template=r'team_(?P<kind>matches|awards|events|stats)_(?P<team>\d+)'):
    """One research button, rebuilt from its custom id so old /research replies keep working"""

    def __init__(self, kind: str, team_number: int):
        label, style = RESEARCH_KINDS[kind]
        super().__init__(discord.ui.Button(label=label, style=style, custom_id=f"team_{kind}_{team_number}"))
        self.kind = kind
        self.team_number = team_number

    @classmethod
    async def from_custom_id(cls, interaction: discord.Interaction, item: discord.ui.Button, match: re.Match):
        return cls(match['kind'], int(match['team']))

    async def callback(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True, thinking=True)

        team_number = self.team_number
        year = date.today().year

        if self.kind == "stats":
            team = tba.get_cached_team(team_number)
            if not team:
                await interaction.followup.send(
                    f"❌ Team data not found. Please run /research {team_number} again.", ephemeral=True)
                return
            await interaction.followup.send(embed=build_stats_embed(team_number, team), ephemeral=True)
            return

        fetchers = {
            "matches": (tba.get_team_matches, build_matches_embed),
            "awards": (tba.get_team_awards, build_awards_embed),
            "events": (tba.get_team_events, build_events_embed),
        }
        fetch, build = fetchers[self.kind]
        items = await fetch(team_number, year)
        if not items:
            await interaction.followup.send(
                f"❌ No {EMPTY_LABELS[self.kind]} found for team {team_number} in {year}.", ephemeral=True)
            return

        await interaction.followup.send(embed=build(team_number, items, year), ephemeral=True)


class TeamResearchView(SafeView):
    def __init__(self, team_number: int):
        super().__init__(timeout=None)
        for kind in RESEARCH_KINDS:
            self.add_item(TeamResearchButton(kind, team_number))


class ResearchCommands(commands.Cog):
    category = "FRC"
    permissions: List[str] = []
    cooldown = 10

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="research", description="Research an FRC team using The Blue Alliance API")
    @app_commands.describe(team="FRC team number (e.g., 254)")
    @app_commands.checks.cooldown(1, 10)
    async def research(self, interaction: discord.Interaction, team: app_commands.Range[int, 1, 9999]):
        await interaction.response.defer()

        try:
            team_info = await tba.get_team(team)
        except aiohttp.ClientError as e:
            logger.error(f"Research command error for team {team}: {e}")
            await interaction.followup.send(f"❌ Error researching team {team}: {e}")
            return

        if not team_info:
            await interaction.followup.send(f"❌ Team {team} not found in The Blue Alliance database.")
            return

        await interaction.followup.send(
            content=f"🔍 **Researching Team {team} via The Blue Alliance API...**",
            embed=build_team_embed(team, team_info),
            view=TeamResearchView(team),
        )


async def setup(bot):
    """Add the ResearchCommands cog to the bot"""
    bot.add_dynamic_items(TeamResearchButton)
    await bot.add_cog(ResearchCommands(bot))
