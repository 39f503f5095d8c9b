"""
Profile commands for Latesh Analysis Bot
Handles /remember: members save a short profile the AI uses for personalized answers
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from ..config import COLOR_INFO, COLOR_SUCCESS
from ..handlers.error_handler import SafeModal
from ..utils import profiles as profile_store
from ..utils.formatters import preview

logger = logging.getLogger(__name__)

MAX_LISTED_PROFILES = 10


def _date_only(timestamp: Optional[str]) -> str:
    if not timestamp:
        return "Unknown"
    try:
        return datetime.fromisoformat(timestamp).strftime("%Y-%m-%d")
    except ValueError:
        return timestamp[:10]


def _add_optional_fields(embed: discord.Embed, profile: Dict[str, Any]):
    if profile.get('team'):
        embed.add_field(name="🤖 FRC Team", value=f"Team {profile['team']}", inline=True)
    if profile.get('role'):
        embed.add_field(name="🏷️ Role", value=profile['role'], inline=True)
    if profile.get('location'):
        embed.add_field(name="📍 Location", value=profile['location'], inline=True)


def build_profile_embed(profile: Dict[str, Any], user) -> discord.Embed:
    embed = discord.Embed(
        title=f"👤 Profile: {profile['name']}",
        description=profile['description'],
        color=COLOR_INFO,
        timestamp=datetime.now(timezone.utc),
    )
    embed.set_thumbnail(url=user.display_avatar.url)
    embed.add_field(name="🆔 Discord User", value=f"{user.display_name} ({user.name})", inline=True)
    embed.add_field(name="📅 Profile Created", value=_date_only(profile.get('created_at')), inline=True)
    embed.add_field(name="🔄 Last Updated", value=_date_only(profile.get('updated_at')), inline=True)
    _add_optional_fields(embed, profile)
    return embed


def build_saved_embed(profile: Dict[str, Any], is_update: bool) -> discord.Embed:
    embed = discord.Embed(
        title=f"✅ Profile {'Updated' if is_update else 'Created'} Successfully!",
        description=(f"Your profile has been {'updated' if is_update else 'saved'} and can now be used "
                     f"by the AI system for personalized responses."),
        color=COLOR_SUCCESS,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="👤 Name", value=profile['name'], inline=True)
    embed.add_field(name="📝 Description", value=preview(profile['description'], 100), inline=False)
    _add_optional_fields(embed, profile)
    return embed


class ProfileModal(SafeModal, title="Create Your Personal Profile"):
    name = discord.ui.TextInput(
        label="Your Name",
        placeholder="Enter your real name or preferred name",
        max_length=50,
    )
    about = discord.ui.TextInput(
        label="About You",
        style=discord.TextStyle.paragraph,
        placeholder="Tell us about yourself, your interests, your role in FRC, etc.",
        max_length=1000,
    )
    team = discord.ui.TextInput(
        label="FRC Team Number (Optional)",
        placeholder="e.g., 254",
        required=False,
        max_length=4,
    )
    role = discord.ui.TextInput(
        label="Role/Position (Optional)",
        placeholder="e.g., Mentor, Student, Alumni, Parent",
        required=False,
        max_length=50,
    )
    location = discord.ui.TextInput(
        label="Location (Optional)",
        placeholder="e.g., California, USA",
        required=False,
        max_length=100,
    )

    def __init__(self, existing: Optional[Dict[str, Any]] = None):
        super().__init__(custom_id="profile_modal")
        if existing:
            self.name.default = existing.get('name')
            self.about.default = existing.get('description')
            self.team.default = existing.get('team')
            self.role.default = existing.get('role')
            self.location.default = existing.get('location')

    async def on_submit(self, interaction: discord.Interaction):
        profile, is_update = profile_store.save_profile_from_form(
            interaction.user,
            self.name.value,
            self.about.value,
            self.team.value,
            self.role.value,
            self.location.value,
        )
        logger.info(f"Profile {'updated' if is_update else 'created'} for {interaction.user}")
        await interaction.response.send_message(embed=build_saved_embed(profile, is_update), ephemeral=True)


class ProfileCommands(commands.Cog):
    category = "Profiles"
    permissions: List[str] = []
    cooldown = 5

    remember = app_commands.Group(name="remember", description="Create or view personal profiles for AI context")

    def __init__(self, bot):
        self.bot = bot

    @remember.command(name="me", description="Create/update your personal profile")
    async def remember_me(self, interaction: discord.Interaction):
        existing = profile_store.get_user_profile(interaction.user.id)
        await interaction.response.send_modal(ProfileModal(existing))

    @remember.command(name="view", description="View a user's profile")
    @app_commands.describe(user="User to view profile of")
    async def remember_view(self, interaction: discord.Interaction, user: Optional[discord.User] = None):
        target = user or interaction.user
        profile = profile_store.get_user_profile(target.id)
        if not profile:
            who = "You don't" if target.id == interaction.user.id else f"{target.display_name} doesn't"
            await interaction.response.send_message(
                f"❌ {who} have a profile saved. Use `/remember me` to create one!", ephemeral=True)
            return

        await interaction.response.send_message(embed=build_profile_embed(profile, target))

    @remember.command(name="list", description="List all saved profiles")
    async def remember_list(self, interaction: discord.Interaction):
        profiles = profile_store.get_all_profiles()
        if not profiles:
            await interaction.response.send_message(
                "❌ No profiles have been saved yet. Use `/remember me` to create the first one!", ephemeral=True)
            return

        embed = discord.Embed(
            title="📋 Saved User Profiles",
            description=f"Found {len(profiles)} saved profile(s)",
            color=COLOR_SUCCESS,
            timestamp=datetime.now(timezone.utc),
        )
        for user_id, profile in list(profiles.items())[:MAX_LISTED_PROFILES]:
            user = self.bot.get_user(int(user_id))
            discord_name = user.display_name if user else "Unknown User"
            embed.add_field(
                name=profile.get('name') or "Unnamed",
                value=(f"**Discord:** {discord_name}\n"
                       f"**Role:** {profile.get('role') or 'Not specified'}\n"
                       f"**Team:** {profile_store.format_team(profile)}"),
                inline=True,
            )

        if len(profiles) > MAX_LISTED_PROFILES:
            embed.set_footer(text=f"... and {len(profiles) - MAX_LISTED_PROFILES} more profiles")
        await interaction.response.send_message(embed=embed)

    @remember.command(name="delete", description="Delete your profile")
    async def remember_delete(self, interaction: discord.Interaction):
        if not profile_store.delete_profile(interaction.user.id):
            await interaction.response.send_message("❌ You don't have a profile to delete.", ephemeral=True)
            return
        await interaction.response.send_message("✅ Your profile has been deleted successfully.", ephemeral=True)


async def setup(bot):
    """Add the ProfileCommands cog to the bot"""
    await bot.add_cog(ProfileCommands(bot))
