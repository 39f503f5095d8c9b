"""
Tests for scheduled event creation and listing.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from latesh_bot.commands import events
from latesh_bot.commands.events import (
    EVENT_TYPES,
    INVALID_DATE_MESSAGE,
    INVALID_DURATION_MESSAGE,
    EventCommands,
    EventModal,
    build_events_list_embed,
    get_event_emoji,
    get_event_placeholder,
    get_event_type_emoji,
    get_event_type_name,
)


def fill(modal, **values):
    """Simulate the user typing into the modal."""
    for name, value in values.items():
        getattr(modal, name)._value = value


def future_date(days=7) -> str:
    return (datetime.now() + timedelta(days=days)).strftime("%Y-%m-%d %H:%M")


@pytest.fixture
def event_interaction(mock_interaction):
    created = MagicMock()
    created.id = 4242
    created.name = "🔧 Drivetrain Build"
    mock_interaction.guild.voice_channels = []
    mock_interaction.guild.create_scheduled_event = AsyncMock(return_value=created)
    return mock_interaction


class TestEventHelpers:
    """Test the pure type helpers."""

    def test_type_lookups(self):
        assert get_event_type_name("build") == "Build Session"
        assert get_event_type_emoji("competition") == "🏆"
        assert get_event_type_name("unknown") == "Event"
        assert get_event_type_emoji("unknown") == "📅"
        assert get_event_placeholder("social", "name") == "End of Season Pizza Party"
        assert get_event_placeholder("unknown", "name") == "Enter details here..."

    def test_all_types_present(self):
        assert set(EVENT_TYPES) == {"meeting", "competition", "build", "training", "social", "outreach", "custom"}

    def test_emoji_from_name(self):
        assert get_event_emoji("Weekly Team Meeting") == "🤖"
        assert get_event_emoji("CAD Workshop") == "📚"
        assert get_event_emoji("Pizza party!") == "🎉"
        assert get_event_emoji("Something else") == "📅"

    def test_list_embed_sorted(self):
        later = MagicMock(start_time=datetime(2030, 5, 2, tzinfo=timezone.utc), location=None, user_count=3)
        later.name = "Build Session"
        sooner = MagicMock(start_time=datetime(2030, 5, 1, tzinfo=timezone.utc), location="Shop", user_count=None)
        sooner.name = "Team Meeting"

        embed = build_events_list_embed([later, sooner])

        assert embed.description == "Found 2 upcoming event(s)"
        assert embed.fields[0].name == "🤖 Team Meeting"
        assert "**Interested:** 0 users" in embed.fields[0].value
        assert "**Location:** Not specified" in embed.fields[1].value


class TestEventModal:
    """Test submitting the event form."""

    @pytest.mark.asyncio
    async def test_modal_fields_follow_type(self):
        modal = EventModal("competition")
        assert modal.custom_id == "event_modal_competition"
        assert modal.title == "Create Competition"
        assert modal.event_name.placeholder == "FRC District Competition - San Diego"
        assert [item.label for item in modal.children] == [
            "Event Name", "Event Description", "Date and Time", "Duration (in hours)", "Location (optional)"]

    @pytest.mark.asyncio
    async def test_invalid_date(self, event_interaction):
        modal = EventModal("build")
        fill(modal, event_name="Drivetrain Build", description="Bring goggles", date="next tuesday",
             duration="2", location="")

        await modal.on_submit(event_interaction)

        event_interaction.followup.send.assert_awaited_once_with(INVALID_DATE_MESSAGE, ephemeral=True)
        event_interaction.guild.create_scheduled_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_duration(self, event_interaction):
        modal = EventModal("build")
        fill(modal, event_name="Drivetrain Build", description="Bring goggles", date=future_date(),
             duration="30", location="")

        await modal.on_submit(event_interaction)

        event_interaction.followup.send.assert_awaited_once_with(INVALID_DURATION_MESSAGE, ephemeral=True)

    @pytest.mark.asyncio
    async def test_past_date(self, event_interaction):
        modal = EventModal("build")
        fill(modal, event_name="Drivetrain Build", description="Bring goggles", date="2020-01-01 10:00",
             duration="2", location="")

        await modal.on_submit(event_interaction)

        assert "must be in the future" in event_interaction.followup.send.await_args.args[0]

    @pytest.mark.asyncio
    async def test_external_event_with_location(self, event_interaction):
        modal = EventModal("build")
        fill(modal, event_name="Drivetrain Build", description="Bring goggles", date=future_date(),
             duration="1.5", location="Team Workshop")

        await modal.on_submit(event_interaction)

        options = event_interaction.guild.create_scheduled_event.await_args.kwargs
        assert options["name"] == "🔧 Drivetrain Build"
        assert options["entity_type"] == discord.EntityType.external
        assert options["location"] == "Team Workshop"
        assert options["end_time"] - options["start_time"] == timedelta(hours=1.5)
        assert "⏱️ Duration: 1.5 hour(s)" in options["description"]

        success, notification = event_interaction.followup.send.await_args_list
        assert success.kwargs["ephemeral"] is True
        link = success.kwargs["embed"].fields[-1].value
        assert link == "[View Event](https://discord.com/events/999/4242)"
        assert notification.kwargs["embed"].title == "📢 New Event Created!"

    @pytest.mark.asyncio
    async def test_voice_channel_fallback(self, event_interaction):
        voice = MagicMock()
        event_interaction.guild.voice_channels = [voice]
        modal = EventModal("meeting")
        fill(modal, event_name="Weekly", description="Status", date=future_date(), duration="1", location="  ")

        await modal.on_submit(event_interaction)

        options = event_interaction.guild.create_scheduled_event.await_args.kwargs
        assert options["entity_type"] == discord.EntityType.voice
        assert options["channel"] is voice

    @pytest.mark.asyncio
    async def test_tbd_when_no_location_or_voice(self, event_interaction):
        modal = EventModal("social")
        fill(modal, event_name="Pizza", description="Party", date=future_date(), duration="3", location="")

        await modal.on_submit(event_interaction)

        options = event_interaction.guild.create_scheduled_event.await_args.kwargs
        assert options["location"] == "TBD"

    @pytest.mark.asyncio
    async def test_discord_failure_is_reported(self, event_interaction):
        event_interaction.guild.create_scheduled_event.side_effect = discord.Forbidden(
            MagicMock(status=403), "Missing Permissions")
        modal = EventModal("custom")
        fill(modal, event_name="Thing", description="Stuff", date=future_date(), duration="1", location="Here")

        await modal.on_submit(event_interaction)

        message = event_interaction.followup.send.await_args.args[0]
        assert message.startswith("❌ Failed to create event:")
        assert "Manage Events" in message


class TestEventCommands:
    """Test /event subcommands."""

    @pytest.mark.asyncio
    async def test_create_opens_modal(self, mock_discord_bot, mock_interaction):
        cog = EventCommands(mock_discord_bot)
        choice = MagicMock(value="training")

        await cog.event_create.callback(cog, mock_interaction, choice)

        modal = mock_interaction.response.send_modal.await_args.args[0]
        assert isinstance(modal, EventModal)
        assert modal.event_type == "training"

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_discord_bot, mock_interaction):
        cog = EventCommands(mock_discord_bot)
        mock_interaction.guild.fetch_scheduled_events = AsyncMock(return_value=[])

        await cog.event_list.callback(cog, mock_interaction)

        assert "No upcoming events" in mock_interaction.followup.send.await_args.args[0]

    @pytest.mark.asyncio
    async def test_templates(self, mock_discord_bot, mock_interaction):
        cog = EventCommands(mock_discord_bot)
        await cog.event_templates.callback(cog, mock_interaction)

        embed = mock_interaction.response.send_message.await_args.kwargs["embed"]
        assert len(embed.fields) == 6
        assert events.EVENT_TYPES["custom"]["choice"] not in [field.name for field in embed.fields]
