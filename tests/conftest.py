"""
Pytest configuration and fixtures for Discord bot testing.
"""
import json
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from latesh_bot import config
from latesh_bot.commands import labgame
from latesh_bot.handlers import ai_handler
from latesh_bot.persona import personalities
from latesh_bot.utils import webhooks as webhook_utils

# Test environment variables
TEST_ENV_VARS = {
    'DISCORD_TOKEN': 'test_discord_token',
    'CLIENT_ID': '123456789012345678',
    'GEMINI_API_KEY': 'test_gemini_api_key',
    'TBA_API_KEY': 'test_tba_api_key',
    'PORT': '3000',
}


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables for all tests."""
    for key, value in TEST_ENV_VARS.items():
        monkeypatch.setenv(key, value)


@pytest.fixture(autouse=True)
def reset_bot_state():
    """Module-level bot state is process-wide, so every test starts clean."""
    personalities.current_personality = "default"
    ai_handler.reset_usage_stats()
    ai_handler.model_failure_counts.clear()
    webhook_utils.forwarding_configs.clear()
    webhook_utils.webhook_manager.webhooks.clear()
    labgame.active_games.clear()
    labgame.game_webhooks.clear()
    yield
    labgame.active_games.clear()
    labgame.game_webhooks.clear()


@pytest.fixture
def profiles_file(tmp_path, monkeypatch):
    """Point the profile store at a temporary file."""
    path = tmp_path / "data" / "user_profiles.json"
    monkeypatch.setattr(config, "PROFILES_FILE", str(path))
    return path


@pytest.fixture
def sample_profile() -> Dict[str, Any]:
    """Sample saved profile for testing."""
    return {
        'name': 'Alex Rivera',
        'description': 'Build lead who loves CAD and swerve drives.',
        'team': '254',
        'role': 'Mentor',
        'location': 'San Jose, CA',
        'discord_id': '111',
        'discord_username': 'alexr',
        'discord_display_name': 'Alex',
        'created_at': '2024-01-15T10:00:00+00:00',
        'updated_at': '2024-01-15T10:00:00+00:00',
    }


@pytest.fixture
def saved_profiles(profiles_file, sample_profile) -> Dict[str, Dict[str, Any]]:
    """Two profiles written to the temporary store."""
    second = dict(sample_profile, name='Jordan Lee', team=None, role='Student', location='Austin, TX',
                  discord_id='222', discord_username='jlee', discord_display_name='Jordan')
    profiles = {'111': dict(sample_profile), '222': second}
    profiles_file.parent.mkdir(parents=True, exist_ok=True)
    profiles_file.write_text(json.dumps(profiles))
    return profiles


@pytest.fixture
def mock_gemini_client(monkeypatch) -> MagicMock:
    """Install a fake Gemini client on the AI handler."""
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text="Test Gemini response")
    monkeypatch.setattr(ai_handler, "gemini_client", client)
    return client


@pytest.fixture
def mock_discord_bot() -> MagicMock:
    """Create a mock Discord bot for testing."""
    bot = MagicMock()
    bot.user = MagicMock()
    bot.user.id = 12345
    bot.user.name = "TestBot"
    bot.latency = 0.05

    mock_channel = MagicMock()
    mock_channel.id = 555
    mock_channel.send = AsyncMock()
    mock_channel.webhooks = AsyncMock(return_value=[])
    mock_channel.create_webhook = AsyncMock()
    bot.get_channel.return_value = mock_channel

    bot.get_user.return_value = None
    bot.fetch_user = AsyncMock(side_effect=discord.NotFound(MagicMock(status=404), "Unknown User"))
    bot.process_commands = AsyncMock()
    return bot


@pytest.fixture
def mock_interaction() -> MagicMock:
    """Create a mock slash command interaction."""
    interaction = MagicMock()
    interaction.user = MagicMock()
    interaction.user.id = 111
    interaction.user.name = "alexr"
    interaction.user.display_name = "Alex"
    interaction.channel_id = 555
    interaction.guild_id = 999
    interaction.guild = MagicMock()
    interaction.guild.id = 999
    interaction.guild.name = "Test Server"

    interaction.response = MagicMock()
    interaction.response.is_done.return_value = False
    interaction.response.send_message = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.response.edit_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction


@pytest.fixture
def mock_discord_message() -> MagicMock:
    """Create a mock Discord message."""
    message = MagicMock(spec=discord.Message)

    message.author = MagicMock()
    message.author.id = 123456789
    message.author.name = "TestUser"
    message.author.display_name = "Test User"
    message.author.display_avatar.url = "https://cdn.discordapp.com/avatars/123/abc.png"
    message.author.bot = False

    message.guild = MagicMock()
    message.guild.name = "Test Server"

    message.channel = MagicMock()
    message.channel.id = 555
    message.channel.send = AsyncMock()

    # Create proper async context manager mock for typing()
    typing_context = AsyncMock()
    typing_context.__aenter__ = AsyncMock(return_value=typing_context)
    typing_context.__aexit__ = AsyncMock(return_value=None)
    message.channel.typing = MagicMock(return_value=typing_context)

    message.content = "Test message"
    message.mentions = []
    message.attachments = []
    message.reply = AsyncMock()
    message.add_reaction = AsyncMock()
    return message
