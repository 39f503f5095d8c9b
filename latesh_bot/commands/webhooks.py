"""
Webhook commands for Latesh Analysis Bot
Handles sending through webhooks, webhook creation and listing, and channel forwarding setup
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from .. import config
from ..config import COLOR_INFO, DEFAULT_WEBHOOK_USERNAME, MAX_FIELD_VALUE
from ..utils.formatters import success_embed
from ..utils.parsers import parse_hex_color
from ..utils.webhooks import fetch_image_bytes, set_forwarding, webhook_manager

logger = logging.getLogger(__name__)

NO_WEBHOOK_MESSAGE = "❌ No webhook URL provided and no default webhook configured."


class WebhookCommands(commands.Cog):
    category = "Webhooks"
    permissions = ["manage_webhooks"]
    cooldown = 3

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="webhook-send", description="Send a message through a webhook")
    @app_commands.rename(webhook_url="webhook-url")
    @app_commands.describe(
        message="Message to send",
        webhook_url="Webhook URL or an ID from /webhook-create (optional if default is set)",
        username="Custom username for the webhook",
        avatar="Avatar URL for the webhook",
    )
    @app_commands.default_permissions(manage_webhooks=True)
    @app_commands.checks.cooldown(1, 3)
    async def webhook_send(self, interaction: discord.Interaction, message: str,
                           webhook_url: Optional[str] = None, username: Optional[str] = None,
                           avatar: Optional[str] = None):
        await interaction.response.defer(ephemeral=True)

        target = webhook_manager.resolve_url(webhook_url) or config.DEFAULT_WEBHOOK_URL
        if not target:
            await interaction.followup.send(NO_WEBHOOK_MESSAGE, ephemeral=True)
            return

        username = username or DEFAULT_WEBHOOK_USERNAME
        result = await webhook_manager.send_message(target, message, username, avatar)
        if not result["success"]:
            await interaction.followup.send("❌ Failed to send message through webhook.", ephemeral=True)
            return

        embed = success_embed("✅ Message Sent", "Message successfully sent through webhook!")
        embed.add_field(name="Message", value=message[:MAX_FIELD_VALUE], inline=False)
        embed.add_field(name="Username", value=username, inline=True)
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="webhook-embed", description="Send an embed through a webhook")
    @app_commands.rename(webhook_url="webhook-url")
    @app_commands.describe(
        title="Embed title",
        description="Embed description",
        color="Embed color (hex code without #)",
        webhook_url="Webhook URL or an ID from /webhook-create (optional if default is set)",
        username="Custom username for the webhook",
    )
    @app_commands.default_permissions(manage_webhooks=True)
    @app_commands.checks.cooldown(1, 3)
    async def webhook_embed(self, interaction: discord.Interaction, title: str, description: str,
                            color: Optional[str] = None, webhook_url: Optional[str] = None,
                            username: Optional[str] = None):
        await interaction.response.defer(ephemeral=True)

        target = webhook_manager.resolve_url(webhook_url) or config.DEFAULT_WEBHOOK_URL
        if not target:
            await interaction.followup.send(NO_WEBHOOK_MESSAGE, ephemeral=True)
            return

        embed_payload = {
            "title": title,
            "description": description,
            "color": parse_hex_color(color, COLOR_INFO),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "footer": {"text": "Sent via Latesh Analysis Bot"},
        }
        result = await webhook_manager.send_embed(target, embed_payload, username or DEFAULT_WEBHOOK_USERNAME)
        if not result["success"]:
            await interaction.followup.send("❌ Failed to send embed through webhook.", ephemeral=True)
            return

        embed = success_embed("✅ Embed Sent", "Embed successfully sent through webhook!")
        embed.add_field(name="Title", value=title, inline=False)
        embed.add_field(name="Description", value=description[:MAX_FIELD_VALUE], inline=False)
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="webhook-create", description="Create a new webhook in this channel")
    @app_commands.describe(name="Name for the webhook", avatar="Avatar URL for the webhook")
    @app_commands.default_permissions(manage_webhooks=True)
    @app_commands.guild_only()
    @app_commands.checks.cooldown(1, 3)
    async def webhook_create(self, interaction: discord.Interaction, name: str, avatar: Optional[str] = None):
        await interaction.response.defer(ephemeral=True)

        avatar_bytes = await fetch_image_bytes(avatar) if avatar else None
        try:
            webhook = await interaction.channel.create_webhook(
                name=name,
                avatar=avatar_bytes,
                reason=f"Created by {interaction.user} via Latesh Bot",
            )
        except discord.HTTPException as e:
            logger.error(f"Webhook creation error: {e}")
            await interaction.followup.send("❌ Failed to create webhook. Check bot permissions.", ephemeral=True)
            return

        webhook_manager.add_webhook(str(webhook.id), {
            "url": webhook.url,
            "username": name,
            "avatar": avatar,
            "channel": interaction.channel.name,
        })

        embed = success_embed("✅ Webhook Created", f'Webhook "{name}" created successfully!')
        embed.add_field(name="Webhook URL", value=f"||{webhook.url}||", inline=False)
        embed.add_field(name="Webhook ID", value=str(webhook.id), inline=True)
        embed.add_field(name="Channel", value=interaction.channel.name, inline=True)
        embed.add_field(name="Created by", value=str(interaction.user), inline=True)
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="webhook-list", description="List all webhooks in this server")
    @app_commands.default_permissions(manage_webhooks=True)
    @app_commands.guild_only()
    @app_commands.checks.cooldown(1, 3)
    async def webhook_list(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)

        try:
            webhooks = await interaction.guild.webhooks()
        except discord.HTTPException as e:
            logger.error(f"Webhook list error: {e}")
            await interaction.followup.send("❌ Failed to fetch webhooks.", ephemeral=True)
            return

        if not webhooks:
            await interaction.followup.send("No webhooks found in this server.", ephemeral=True)
            return

        embed = success_embed("🔗 Server Webhooks", f"Found {len(webhooks)} webhook(s)", color=COLOR_INFO)
        # Discord caps embeds at 25 fields
        for webhook in webhooks[:25]:
            channel_name = webhook.channel.name if webhook.channel else "Unknown"
            embed.add_field(
                name=webhook.name or "Unnamed Webhook",
                value=f"Channel: {channel_name}\nID: {webhook.id}",
                inline=True,
            )
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="forward-setup", description="Setup message forwarding from a channel to a webhook")
    @app_commands.rename(webhook_url="webhook-url")
    @app_commands.describe(
        source="Source channel to forward from",
        webhook_url="Destination webhook URL",
        filter="Optional regex filter for messages",
        embed="Forward messages as embeds instead of plain text",
    )
    @app_commands.default_permissions(manage_webhooks=True)
    @app_commands.guild_only()
    @app_commands.checks.cooldown(1, 3)
    async def forward_setup(self, interaction: discord.Interaction, source: discord.TextChannel,
                            webhook_url: str, filter: Optional[str] = None, embed: bool = False):
        await interaction.response.defer(ephemeral=True)

        validation = await webhook_manager.validate_webhook(webhook_url)
        if not validation["valid"]:
            await interaction.followup.send(
                f"❌ Webhook validation failed ({validation['error']}). Check the URL and try again.", ephemeral=True)
            return

        set_forwarding(source.id, webhook_url, filter, as_embed=embed)
        print(f"✅ Forwarding configured: #{source.name} -> webhook (filter: {filter or 'none'})")

        reply = success_embed("✅ Forwarding Setup", "Message forwarding configured successfully!")
        reply.add_field(name="Source Channel", value=source.name, inline=True)
        reply.add_field(name="Filter", value=filter or "None", inline=True)
        reply.add_field(name="Format", value="Embed" if embed else "Plain text", inline=True)
        await interaction.followup.send(embed=reply, ephemeral=True)


async def setup(bot):
    """Add the WebhookCommands cog to the bot"""
    await bot.add_cog(WebhookCommands(bot))
