"""
Event commands for Latesh Analysis Bot
Handles creating Discord scheduled events from typed templates and listing upcoming events
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import discord
from discord import app_commands
from discord.ext import commands

from ..config import COLOR_INFO, COLOR_SUCCESS
from ..handlers.error_handler import SafeModal
from ..utils.formatters import discord_timestamp, preview
from ..utils.parsers import format_duration, parse_duration_hours, parse_event_datetime

logger = logging.getLogger(__name__)

EVENT_TYPES: Dict[str, Dict[str, str]] = {
    "meeting": {
        "name": "Team Meeting",
        "emoji": "🤖",
        "choice": "🤖 Team Meeting",
        "template": "Regular team meetings, planning sessions, and status updates",
        "name_placeholder": "Weekly Team Meeting #12",
        "description_placeholder": ("Review progress, plan upcoming tasks, and coordinate team activities. "
                                    "We'll discuss robot design updates and prepare for the next competition."),
    },
    "competition": {
        "name": "Competition",
        "emoji": "🏆",
        "choice": "🏆 Competition",
        "template": "FRC competitions, scrimmages, and tournaments",
        "name_placeholder": "FRC District Competition - San Diego",
        "description_placeholder": ("Official FRC competition at San Diego Sports Arena. Arrive 2 hours early "
                                    "for setup. Bring all competition gear and paperwork."),
    },
    "build": {
        "name": "Build Session",
        "emoji": "🔧",
        "choice": "🔧 Build Session",
        "template": "Robot building, prototyping, and hands-on work sessions",
        "name_placeholder": "Robot Build Session - Drivetrain",
        "description_placeholder": ("Focus on assembling the robot drivetrain. Bring safety equipment. "
                                    "All team members welcome, mentors will provide guidance."),
    },
    "training": {
        "name": "Training/Workshop",
        "emoji": "📚",
        "choice": "📚 Training/Workshop",
        "template": "Skill development, technical training, and learning sessions",
        "name_placeholder": "CAD Workshop - SolidWorks Basics",
        "description_placeholder": ("Learn fundamentals of SolidWorks for robot design. Laptops provided, "
                                    "bring notebook for taking notes."),
    },
    "social": {
        "name": "Social Event",
        "emoji": "🎉",
        "choice": "🎉 Social Event",
        "template": "Team bonding, celebrations, and social activities",
        "name_placeholder": "End of Season Pizza Party",
        "description_placeholder": ("Celebrate the end of build season! Pizza, games, and team bonding. "
                                    "Family members welcome."),
    },
    "outreach": {
        "name": "Outreach Event",
        "emoji": "📋",
        "choice": "📋 Outreach",
        "template": "Community outreach, demos, and public events",
        "name_placeholder": "Elementary School Robot Demo",
        "description_placeholder": ("Demonstrate our robot to elementary students. Inspire the next "
                                    "generation of engineers and scientists."),
    },
    "custom": {
        "name": "Custom Event",
        "emoji": "⚙️",
        "choice": "⚙️ Custom Event",
        "template": "",
        "name_placeholder": "Custom Team Event",
        "description_placeholder": "Describe your custom event here...",
    },
}

# Inferred from event names when listing, first match wins
NAME_EMOJI_KEYWORDS = [
    ("🤖", ("🤖", "meeting")),
    ("🏆", ("🏆", "competition")),
    ("🔧", ("🔧", "build")),
    ("📚", ("📚", "training", "workshop")),
    ("🎉", ("🎉", "social", "party")),
    ("📋", ("📋", "outreach")),
]

INVALID_DATE_MESSAGE = "❌ Invalid date format. Please use YYYY-MM-DD HH:MM (e.g., 2025-01-15 14:30)"
INVALID_DURATION_MESSAGE = "❌ Invalid duration. Please enter a number between 0.1 and 24 hours."


def get_event_type_name(event_type: str) -> str:
    return EVENT_TYPES.get(event_type, {}).get("name", "Event")


def get_event_type_emoji(event_type: str) -> str:
    return EVENT_TYPES.get(event_type, {}).get("emoji", "📅")


def get_event_placeholder(event_type: str, field: str) -> str:
    return EVENT_TYPES.get(event_type, {}).get(f"{field}_placeholder", "Enter details here...")


def get_event_emoji(event_name: str) -> str:
    """Guess a display emoji for an existing event from its name"""
    lowered = event_name.lower()
    for emoji, keywords in NAME_EMOJI_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return emoji
    return "📅"


def build_templates_embed() -> discord.Embed:
    embed = discord.Embed(
        title="📋 Event Templates",
        description="Quick templates for common FRC events. Use `/event create` and select a type!",
        color=COLOR_INFO,
        timestamp=datetime.now(timezone.utc),
    )
    for details in EVENT_TYPES.values():
        if details["template"]:
            embed.add_field(name=details["choice"], value=details["template"], inline=True)
    embed.set_footer(text="Each template provides suggested content for faster event creation")
    return embed


def build_events_list_embed(events: List[Any]) -> discord.Embed:
    ordered = sorted(events, key=lambda event: event.start_time)
    embed = discord.Embed(
        title="📅 Upcoming Discord Events",
        description=f"Found {len(ordered)} upcoming event(s)",
        color=COLOR_SUCCESS,
        timestamp=datetime.now(timezone.utc),
    )
    for event in ordered[:25]:
        embed.add_field(
            name=f"{get_event_emoji(event.name)} {event.name}",
            value=(f"**When:** {discord_timestamp(event.start_time)} ({discord_timestamp(event.start_time, 'R')})\n"
                   f"**Location:** {event.location or 'Not specified'}\n"
                   f"**Interested:** {event.user_count or 0} users"),
            inline=False,
        )
    return embed


class EventModal(SafeModal):
    def __init__(self, event_type: str):
        super().__init__(title=f"Create {get_event_type_name(event_type)}", custom_id=f"event_modal_{event_type}")
        self.event_type = event_type

        # Placeholders depend on the type, so the inputs are built per instance
        self.event_name = discord.ui.TextInput(
            label="Event Name",
            placeholder=get_event_placeholder(event_type, "name"),
            max_length=100,
        )
        self.description = discord.ui.TextInput(
            label="Event Description",
            style=discord.TextStyle.paragraph,
            placeholder=get_event_placeholder(event_type, "description")[:100],
            max_length=1000,
        )
        self.date = discord.ui.TextInput(
            label="Date and Time",
            placeholder="YYYY-MM-DD HH:MM (24-hour format, e.g., 2025-01-15 14:30)",
            max_length=50,
        )
        self.duration = discord.ui.TextInput(
            label="Duration (in hours)",
            placeholder="e.g., 2 or 1.5",
            max_length=10,
        )
        self.location = discord.ui.TextInput(
            label="Location (optional)",
            placeholder="e.g., Team Workshop, Competition Venue, Online",
            required=False,
            max_length=100,
        )
        for item in (self.event_name, self.description, self.date, self.duration, self.location):
            self.add_item(item)

    async def on_submit(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True, thinking=True)

        start_naive = parse_event_datetime(self.date.value)
        if start_naive is None:
            await interaction.followup.send(INVALID_DATE_MESSAGE, ephemeral=True)
            return

        duration = parse_duration_hours(self.duration.value)
        if duration is None:
            await interaction.followup.send(INVALID_DURATION_MESSAGE, ephemeral=True)
            return

        # Naive input is the host's local time
        start = start_naive.astimezone()
        end = start + timedelta(hours=duration)
        if start <= datetime.now(timezone.utc):
            await interaction.followup.send("❌ Event date must be in the future.", ephemeral=True)
            return

        try:
            event = await self._create_event(interaction, start, end, duration)
        except discord.HTTPException as e:
            logger.error(f"Error creating event: {e}")
            await interaction.followup.send(
                f"❌ Failed to create event: {e}\n\nMake sure the bot has \"Manage Events\" permission.",
                ephemeral=True)
            return

        location = self.location.value.strip() or None
        type_name = get_event_type_name(self.event_type)
        success = discord.Embed(
            title="✅ Event Created Successfully!",
            description=f"Your {type_name.lower()} has been created and published.",
            color=COLOR_SUCCESS,
            timestamp=datetime.now(timezone.utc),
        )
        success.add_field(name="📅 Event Name", value=event.name, inline=False)
        success.add_field(name="📝 Description", value=preview(self.description.value, 200), inline=False)
        success.add_field(name="🕒 Start Time", value=discord_timestamp(start), inline=True)
        success.add_field(name="⏱️ Duration", value=f"{format_duration(duration)} hour(s)", inline=True)
        success.add_field(name="📍 Location", value=location or "Voice Channel", inline=True)
        success.add_field(name="🔗 Event Link",
                          value=f"[View Event](https://discord.com/events/{interaction.guild.id}/{event.id})",
                          inline=False)
        success.set_footer(text="Event will appear in the Events section of the server")
        await interaction.followup.send(embed=success, ephemeral=True)

        notification = discord.Embed(
            title="📢 New Event Created!",
            description=f"{interaction.user.display_name} just created a new event: **{event.name}**",
            color=COLOR_INFO,
            timestamp=datetime.now(timezone.utc),
        )
        notification.add_field(name="🕒 When", value=discord_timestamp(start), inline=True)
        notification.add_field(name="⏱️ Duration", value=f"{format_duration(duration)} hour(s)", inline=True)
        await interaction.followup.send(embed=notification)

    async def _create_event(self, interaction: discord.Interaction, start: datetime, end: datetime,
                            duration: float) -> discord.ScheduledEvent:
        guild = interaction.guild
        location = self.location.value.strip() or None
        options: Dict[str, Any] = {
            "name": f"{get_event_type_emoji(self.event_type)} {self.event_name.value}",
            "description": (f"{self.description.value}\n\n"
                            f"📋 Event Type: {get_event_type_name(self.event_type)}\n"
                            f"⏱️ Duration: {format_duration(duration)} hour(s)\n"
                            f"🤖 Created by: {interaction.user.display_name}"),
            "start_time": start,
            "end_time": end,
            "privacy_level": discord.PrivacyLevel.guild_only,
            "reason": f"Event created by {interaction.user} via Latesh Analysis Bot",
        }

        voice_channels = guild.voice_channels
        if location:
            options.update(entity_type=discord.EntityType.external, location=location)
        elif voice_channels:
            options.update(entity_type=discord.EntityType.voice, channel=voice_channels[0])
        else:
            options.update(entity_type=discord.EntityType.external, location="TBD")

        return await guild.create_scheduled_event(**options)


class EventCommands(commands.Cog):
    category = "Events"
    permissions = ["manage_events"]
    cooldown = 10

    event = app_commands.Group(
        name="event",
        description="Create and manage Discord events",
        guild_only=True,
        default_permissions=discord.Permissions(manage_events=True),
    )

    def __init__(self, bot):
        self.bot = bot

    @event.command(name="create", description="Create a new Discord event")
    @app_commands.describe(type="Type of event")
    @app_commands.choices(type=[
        app_commands.Choice(name=details["choice"], value=key) for key, details in EVENT_TYPES.items()
    ])
    async def event_create(self, interaction: discord.Interaction, type: app_commands.Choice[str]):
        await interaction.response.send_modal(EventModal(type.value))

    @event.command(name="list", description="List upcoming events")
    @app_commands.checks.cooldown(1, 10)
    async def event_list(self, interaction: discord.Interaction):
        await interaction.response.defer()
        try:
            events = await interaction.guild.fetch_scheduled_events(with_counts=True)
        except discord.HTTPException as e:
            logger.error(f"Error fetching events: {e}")
            await interaction.followup.send(
                "❌ Error fetching events. Make sure the bot has permission to view events.")
            return

        if not events:
            await interaction.followup.send("📅 No upcoming events found. Use `/event create` to create one!")
            return
        await interaction.followup.send(embed=build_events_list_embed(events))

    @event.command(name="templates", description="Show event templates")
    async def event_templates(self, interaction: discord.Interaction):
        await interaction.response.send_message(embed=build_templates_embed())


async def setup(bot):
    """Add the EventCommands cog to the bot"""
    await bot.add_cog(EventCommands(bot))
