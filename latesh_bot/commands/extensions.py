"""
Extension management commands for Latesh Analysis Bot
Lists loaded slash commands with their cog metadata and hot-reloads command modules
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import discord
from discord import app_commands
from discord.ext import commands

from ..config import COLOR_INFO, COLOR_SUCCESS, MAX_FIELD_VALUE

logger = logging.getLogger(__name__)

COLOR_PARTIAL = 0xFFAA00
AppCommand = Union[app_commands.Command, app_commands.Group]


def command_metadata(command: AppCommand, cog: Optional[commands.Cog]) -> Dict[str, Any]:
    """Category, permissions and cooldown from the cog, with per-command extras taking priority"""
    extras = getattr(command, 'extras', {}) or {}
    return {
        'category': extras.get('category', getattr(cog, 'category', 'uncategorized')),
        'permissions': extras.get('permissions', getattr(cog, 'permissions', [])),
        'cooldown': extras.get('cooldown', getattr(cog, 'cooldown', 0)),
    }


def iter_loaded_commands(bot) -> Iterator[Tuple[AppCommand, Optional[commands.Cog]]]:
    for cog in bot.cogs.values():
        for command in cog.get_app_commands():
            yield command, cog


def find_command(bot, name: str) -> Tuple[Optional[AppCommand], Optional[commands.Cog]]:
    name = name.strip().lstrip('/')
    for command, cog in iter_loaded_commands(bot):
        if command.name == name:
            return command, cog
    return None, None


def format_permissions(permissions: List[str]) -> str:
    return f"🔒 {', '.join(permissions)}" if permissions else "🔓 None"


def describe_options(command: AppCommand) -> List[str]:
    if isinstance(command, app_commands.Group):
        return [f"**{sub.name}**: {sub.description} (Subcommand)" for sub in command.commands]
    return [
        f"**{param.display_name}**: {param.description} ({'Required' if param.required else 'Optional'})"
        for param in command.parameters
    ]


def build_list_embed(bot) -> Optional[discord.Embed]:
    loaded = list(iter_loaded_commands(bot))
    if not loaded:
        return None

    embed = discord.Embed(
        title="🔌 Loaded Extensions",
        description=f"Found {len(loaded)} loaded extension(s)",
        color=COLOR_SUCCESS,
        timestamp=datetime.now(timezone.utc),
    )
    # Embeds hold at most 25 fields
    for command, cog in loaded[:25]:
        meta = command_metadata(command, cog)
        embed.add_field(
            name=f"/{command.name}",
            value=f"**Category:** {meta['category']}\n**Permissions:** {format_permissions(meta['permissions'])}",
            inline=True,
        )
    return embed


def build_info_embed(command: AppCommand, cog: Optional[commands.Cog]) -> discord.Embed:
    meta = command_metadata(command, cog)
    embed = discord.Embed(
        title=f"🔌 Extension: /{command.name}",
        description=command.description or "No description available",
        color=COLOR_INFO,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="Category", value=meta['category'], inline=True)
    embed.add_field(name="Cooldown", value=f"{meta['cooldown']}s", inline=True)
    embed.add_field(name="Permissions", value=", ".join(meta['permissions']) or "None", inline=True)

    options = describe_options(command)
    if options:
        embed.add_field(name="Options", value="\n".join(options)[:MAX_FIELD_VALUE], inline=False)
    return embed


async def reload_all_extensions(bot) -> Tuple[int, List[str]]:
    """Reload every loaded extension module. Returns (loaded count, error lines)."""
    loaded = 0
    errors = []
    for name in list(bot.extensions):
        try:
            await bot.reload_extension(name)
            loaded += 1
        except commands.ExtensionError as e:
            logger.error(f"Failed to reload {name}: {e}")
            errors.append(f"{name}: {e}")
    return loaded, errors


class ExtensionCommands(commands.Cog):
    category = "admin"
    permissions = ["Administrator"]
    cooldown = 5

    extensions = app_commands.Group(
        name="extensions",
        description="Manage bot extensions",
        default_permissions=discord.Permissions(administrator=True),
    )

    def __init__(self, bot):
        self.bot = bot

    @extensions.command(name="list", description="List all loaded extensions")
    async def extensions_list(self, interaction: discord.Interaction):
        embed = build_list_embed(self.bot)
        if embed is None:
            await interaction.response.send_message("❌ No extensions are currently loaded.", ephemeral=True)
            return
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @extensions.command(name="reload", description="Reload all extensions")
    async def extensions_reload(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)

        loaded, errors = await reload_all_extensions(self.bot)
        try:
            synced = await self.bot.tree.sync()
            print(f"🔄 Re-synced {len(synced)} application commands after reload")
        except discord.HTTPException as e:
            logger.error(f"Command sync after reload failed: {e}")
            errors.append(f"command sync: {e}")

        embed = discord.Embed(
            title="🔄 Extension Reload Complete",
            color=COLOR_PARTIAL if errors else COLOR_SUCCESS,
            timestamp=datetime.now(timezone.utc),
        )
        embed.add_field(name="Successfully Loaded", value=f"{loaded} extensions", inline=True)
        embed.add_field(name="Errors", value=("\n".join(errors) or "None")[:MAX_FIELD_VALUE], inline=True)
        await interaction.followup.send(embed=embed, ephemeral=True)

    @extensions.command(name="info", description="Get info about a specific extension")
    @app_commands.describe(name="Extension name")
    async def extensions_info(self, interaction: discord.Interaction, name: str):
        command, cog = find_command(self.bot, name)
        if command is None:
            await interaction.response.send_message(f"❌ Extension '{name}' not found.", ephemeral=True)
            return
        await interaction.response.send_message(embed=build_info_embed(command, cog), ephemeral=True)


async def setup(bot):
    """Add the ExtensionCommands cog to the bot"""
    await bot.add_cog(ExtensionCommands(bot))
