"""
AI commands for Latesh Analysis Bot
Handles /ask questions and switching between AI character personalities
"""

import logging
from datetime import datetime, timezone
from typing import List

import discord
from discord import app_commands
from discord.ext import commands

from ..config import AI_NOT_CONFIGURED_MESSAGE, COLOR_AI, MAX_EMBED_DESCRIPTION
from ..handlers import ai_handler
from ..handlers.ai_handler import AIResponseError, generate_ai_response
from ..persona.personalities import SWITCH_MESSAGES, get_current_personality, set_personality
from ..utils.formatters import truncate

logger = logging.getLogger(__name__)

AI_FAILURE_MESSAGE = "❌ Sorry, I encountered an error while generating a response. Please try again later."

CHARACTER_CHOICES = [
    app_commands.Choice(name="View Current Character", value="view"),
    app_commands.Choice(name="Professional Mode", value="professional"),
    app_commands.Choice(name="Charmer Mode", value="charmer"),
    app_commands.Choice(name="Sassy Girl Mode", value="sassygirl"),
    app_commands.Choice(name="Sweet Girl Mode", value="sweetgirl"),
    app_commands.Choice(name="Default Mode", value="default"),
]


def build_character_embed(personality) -> discord.Embed:
    embed = discord.Embed(
        title="🤖 Current AI Character",
        description=f"**{personality['name']}**\n*{personality['motto']}*",
        color=COLOR_AI,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="🎭 Personality Traits",
                    value="\n".join(f"• {trait}" for trait in personality['traits']), inline=False)
    embed.add_field(name="🗣️ Speaking Style", value=personality['speaking_style'], inline=False)
    embed.add_field(name="🎯 Expertise Areas",
                    value="\n".join(f"• {area}" for area in personality['expertise']), inline=False)
    embed.add_field(name="💬 Favorite Phrases",
                    value="\n".join(f'"{phrase}"' for phrase in personality['catchphrases']), inline=False)
    embed.add_field(name="✨ Response Style", value=personality['response_style'], inline=False)
    embed.set_footer(text="Switch personalities with /ai-character")
    return embed


class AICommands(commands.Cog):
    category = "AI"
    permissions: List[str] = []
    cooldown = 5

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="ask", description="Ask the AI assistant a question")
    @app_commands.describe(question="Your question for the AI")
    @app_commands.checks.cooldown(1, 5)
    async def ask(self, interaction: discord.Interaction, question: str):
        if ai_handler.gemini_client is None:
            await interaction.response.send_message(AI_NOT_CONFIGURED_MESSAGE, ephemeral=True)
            return

        await interaction.response.defer()

        guild_name = interaction.guild.name if interaction.guild else None
        try:
            response = await generate_ai_response(
                question, interaction.user.name, guild_name, interaction.user.id, [])
        except AIResponseError as e:
            logger.error(f"/ask failed for {interaction.user}: {e}")
            await interaction.followup.send(AI_FAILURE_MESSAGE)
            return

        embed = discord.Embed(
            title="🤖 AI Response",
            description=truncate(response, MAX_EMBED_DESCRIPTION),
            color=COLOR_AI,
            timestamp=datetime.now(timezone.utc),
        )
        embed.set_footer(text=f"Asked by {interaction.user.name} • Powered by Gemini AI")
        await interaction.followup.send(embed=embed)
        logger.info(f"AI response generated for {interaction.user}: {question[:50]}...")

    @app_commands.command(name="ai-character", description="View or customize the AI character personality")
    @app_commands.describe(action="What to do with the AI character")
    @app_commands.choices(action=CHARACTER_CHOICES)
    async def ai_character(self, interaction: discord.Interaction, action: app_commands.Choice[str]):
        await interaction.response.defer(ephemeral=True)

        if action.value == "view":
            await interaction.followup.send(embed=build_character_embed(get_current_personality()), ephemeral=True)
            return

        try:
            set_personality(action.value)
        except KeyError:
            await interaction.followup.send("❌ Unknown character option. Please try again.", ephemeral=True)
            return
        await interaction.followup.send(SWITCH_MESSAGES[action.value], ephemeral=True)


async def setup(bot):
    """Add the AICommands cog to the bot"""
    await bot.add_cog(AICommands(bot))
