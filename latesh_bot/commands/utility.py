"""
Utility commands for Latesh Analysis Bot
Handles help, latency checks, greetings, jokes and user information
"""

import random
from datetime import datetime, timezone
from typing import List, Optional, Union

import discord
from discord import app_commands
from discord.ext import commands

from ..config import COLOR_INFO, COLOR_SUCCESS, MAX_FIELD_VALUE
from ..utils.formatters import capitalize_first, discord_timestamp

COLOR_JOKE = 0xFFAA00

JOKES = {
    "programming": [
        "Why do programmers prefer dark mode? Because light attracts bugs! 🐛",
        "How many programmers does it take to change a light bulb? None, that's a hardware problem! 💡",
        "Why do Java developers wear glasses? Because they can't C# 👓",
        "A SQL query goes into a bar, walks up to two tables and asks... 'Can I join you?' 🍺",
    ],
    "dad": [
        "I'm reading a book about anti-gravity. It's impossible to put down! 📚",
        "Why don't scientists trust atoms? Because they make up everything! ⚛️",
        "Did you hear about the mathematician who's afraid of negative numbers? He'll stop at nothing to avoid them! ➖",
        "Why did the scarecrow win an award? He was outstanding in his field! 🌾",
    ],
    "random": [
        "Why do programmers prefer dark mode? Because light attracts bugs! 🐛",
        "I'm reading a book about anti-gravity. It's impossible to put down! 📚",
        "Why don't scientists trust atoms? Because they make up everything! ⚛️",
        "How many programmers does it take to change a light bulb? None, that's a hardware problem! 💡",
    ],
}

HELP_SECTIONS = [
    ("🔗 Webhook Commands",
     "`/webhook-send` - Send a message through webhook\n`/webhook-embed` - Send an embed through webhook\n"
     "`/webhook-create` - Create a new webhook\n`/webhook-list` - List server webhooks"),
    ("📡 Forwarding Commands", "`/forward-setup` - Setup message forwarding"),
    ("🤖 AI Commands",
     "`/ask` - Ask the AI a question\n`/ai-character` - View or customize AI personality\n"
     "`@Latesh-Analysis <question>` - Mention the bot with a question\n"
     "**Example:** `@Latesh-Analysis What is FRC?`"),
    ("🏆 FRC Commands",
     "`/research` - Research an FRC team\n`/frc-match` - Get match predictions\n"
     "`/frc-events` - List events happening now"),
    ("👤 Profiles & Events",
     "`/remember` - Save and view member profiles\n`/event` - Create and list scheduled events"),
    ("🧪 Lab Game",
     "`/latesh start` - Start an AI conversation simulation between members\n"
     "`/latesh status` - Show the current simulation"),
    ("😄 Fun Commands", "`/hi` - Say hello\n`/joke` - Get a random joke"),
    ("⚙️ Utility Commands",
     "`/ping` - Check bot latency\n`/userinfo` - Get information about a user\n"
     "`/extensions` - Manage loaded extensions\n`/help` - Show this help message"),
]


def pick_joke(joke_type: str) -> str:
    return random.choice(JOKES.get(joke_type, JOKES["random"]))


def build_help_embed() -> discord.Embed:
    embed = discord.Embed(
        title="🤖 Latesh Analysis Bot - Help",
        description="A powerful Discord bot for webhook management, FRC match analysis, and AI-powered assistance!",
        color=COLOR_INFO,
        timestamp=datetime.now(timezone.utc),
    )
    for name, value in HELP_SECTIONS:
        embed.add_field(name=name, value=value, inline=False)
    embed.set_footer(text="Made with ❤️ by Laney Williams and Ritesh Raj Arul Selvan • Powered by Gemini AI")
    return embed


def build_userinfo_embed(target: Union[discord.User, discord.Member]) -> discord.Embed:
    embed = discord.Embed(
        title=f"👤 User Information: {target.name}",
        color=COLOR_INFO,
        timestamp=datetime.now(timezone.utc),
    )
    embed.set_thumbnail(url=target.display_avatar.replace(size=256).url)
    embed.add_field(name="Username", value=target.name, inline=True)
    embed.add_field(name="Discriminator", value=f"#{target.discriminator}", inline=True)
    embed.add_field(name="ID", value=str(target.id), inline=True)
    embed.add_field(name="Account Created", value=discord_timestamp(target.created_at), inline=False)
    embed.add_field(name="Bot Account", value="Yes" if target.bot else "No", inline=True)

    if isinstance(target, discord.Member):
        joined = discord_timestamp(target.joined_at) if target.joined_at else "Unknown"
        roles = " ".join(role.mention for role in target.roles if not role.is_default())
        embed.add_field(name="Joined Server", value=joined, inline=False)
        embed.add_field(name="Nickname", value=target.nick or "None", inline=True)
        embed.add_field(name="Roles", value=(roles or "None")[:MAX_FIELD_VALUE], inline=False)
    return embed


class UtilityCommands(commands.Cog):
    category = "Utility"
    permissions: List[str] = []
    cooldown = 3

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="help", description="Show bot commands and usage")
    async def help(self, interaction: discord.Interaction):
        await interaction.response.send_message(embed=build_help_embed())

    @app_commands.command(name="ping", description="Check bot latency")
    async def ping(self, interaction: discord.Interaction):
        bot_latency = (datetime.now(timezone.utc) - interaction.created_at).total_seconds() * 1000
        embed = discord.Embed(title="🏓 Pong!", color=COLOR_SUCCESS, timestamp=datetime.now(timezone.utc))
        embed.add_field(name="Bot Latency", value=f"{round(bot_latency)}ms", inline=True)
        embed.add_field(name="API Latency", value=f"{round(self.bot.latency * 1000)}ms", inline=True)
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="hi", description="A friendly greeting command", extras={"category": "General"})
    @app_commands.describe(message="Optional message to include with the greeting")
    @app_commands.checks.cooldown(1, 3)
    async def hi(self, interaction: discord.Interaction, message: Optional[str] = None):
        display = interaction.user.display_name
        embed = discord.Embed(
            title="👋 Hello there!",
            description=f"Hi {display}! {message}" if message else f"Hi {display}! How are you doing today?",
            color=COLOR_SUCCESS,
            timestamp=datetime.now(timezone.utc),
        )
        embed.set_thumbnail(url=interaction.user.display_avatar.url)
        embed.set_footer(text="Extension System Test")
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="joke", description="Get a random programming joke",
                          extras={"category": "Fun", "cooldown": 5})
    @app_commands.describe(type="Type of joke")
    @app_commands.choices(type=[
        app_commands.Choice(name="Programming", value="programming"),
        app_commands.Choice(name="Dad Joke", value="dad"),
        app_commands.Choice(name="Random", value="random"),
    ])
    @app_commands.checks.cooldown(1, 5)
    async def joke(self, interaction: discord.Interaction, type: Optional[app_commands.Choice[str]] = None):
        joke_type = type.value if type else "random"
        embed = discord.Embed(
            title="😄 Here's a joke for you!",
            description=pick_joke(joke_type),
            color=COLOR_JOKE,
            timestamp=datetime.now(timezone.utc),
        )
        embed.add_field(name="Type", value=capitalize_first(joke_type), inline=True)
        embed.add_field(name="Requested by", value=interaction.user.display_name, inline=True)
        embed.set_footer(text="Hope that made you smile! 😊")
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="userinfo", description="Get information about a user")
    @app_commands.describe(target="The user to get info about")
    @app_commands.checks.cooldown(1, 3)
    async def userinfo(self, interaction: discord.Interaction,
                       target: Optional[Union[discord.Member, discord.User]] = None):
        target = target or interaction.user
        await interaction.response.send_message(embed=build_userinfo_embed(target))


async def setup(bot):
    """Add the UtilityCommands cog to the bot"""
    await bot.add_cog(UtilityCommands(bot))
