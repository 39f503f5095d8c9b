"""
Error handling for slash commands and UI components.

Every failure is logged and answered with a user-visible message. Replies
switch to a followup when the interaction was already responded to or deferred.
"""

import logging
from typing import Optional

import discord
from discord import app_commands

from ..config import INTERACTION_ERROR_MESSAGE
from ..utils.formatters import error_embed

logger = logging.getLogger(__name__)


async def send_interaction_message(interaction: discord.Interaction, content: Optional[str] = None,
                                   embed: Optional[discord.Embed] = None, ephemeral: bool = True,
                                   view: Optional[discord.ui.View] = None):
    """Reply, or follow up if the interaction was already answered"""
    kwargs = {"ephemeral": ephemeral}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed
    if view is not None:
        kwargs["view"] = view

    if interaction.response.is_done():
        await interaction.followup.send(**kwargs)
    else:
        await interaction.response.send_message(**kwargs)


async def send_interaction_error(interaction: discord.Interaction, content: str = INTERACTION_ERROR_MESSAGE):
    try:
        await send_interaction_message(interaction, content=content)
    except discord.HTTPException as e:
        logger.error(f"Could not deliver error reply: {e}")


async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError):
    """Command tree error handler"""
    command_name = interaction.command.name if interaction.command else "unknown"

    if isinstance(error, app_commands.CommandOnCooldown):
        await send_interaction_error(
            interaction, f"⏳ This command is on cooldown. Try again in {error.retry_after:.1f}s.")
        return

    if isinstance(error, (app_commands.MissingPermissions, app_commands.BotMissingPermissions)):
        missing = ", ".join(error.missing_permissions)
        await send_interaction_error(interaction, f"❌ Missing permissions: {missing}")
        return

    if isinstance(error, app_commands.NoPrivateMessage):
        await send_interaction_error(interaction, "❌ This command can only be used in a server.")
        return

    original = getattr(error, "original", error)
    logger.error(f"Error executing /{command_name}: {original}", exc_info=original)

    try:
        await send_interaction_message(interaction, embed=error_embed())
    except discord.HTTPException as e:
        logger.error(f"Could not deliver error embed for /{command_name}: {e}")


class SafeView(discord.ui.View):
    """View whose component callbacks reply with a generic error on failure"""

    async def on_error(self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item) -> None:
        logger.error(f"Error handling component {getattr(item, 'custom_id', item)}: {error}", exc_info=error)
        await send_interaction_error(interaction)


class SafeModal(discord.ui.Modal):
    """Modal whose submit handler replies with a generic error on failure"""

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        logger.error(f"Error handling modal {self.custom_id}: {error}", exc_info=error)
        await send_interaction_error(interaction)
