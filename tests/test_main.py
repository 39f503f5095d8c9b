"""
Tests for bot startup: configuration checks, extension loading and the setup checker.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest
from discord.ext import commands

from latesh_bot import config
from latesh_bot import main as bot_main
from latesh_bot.setup_check import check_environment


class TestStartupConfig:
    """Test the pre-login configuration check."""

    def test_valid_config(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN", "token")
        monkeypatch.setattr(config, "CLIENT_ID", "123")
        assert bot_main.check_startup_config() is True

    def test_missing_token(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN", None)
        assert bot_main.check_startup_config() is False

    def test_missing_gemini_key_only_warns(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN", "token")
        monkeypatch.setattr(config, "CLIENT_ID", "123")
        monkeypatch.setattr(config, "GEMINI_API_KEY", None)

        with patch.object(bot_main.logger, "warning") as warn:
            assert bot_main.check_startup_config() is True
        assert "aistudio.google.com" in warn.call_args_list[-1].args[0]

    def test_main_exits_when_config_missing(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN", None)
        with pytest.raises(SystemExit) as exc:
            bot_main.main()
        assert exc.value.code == 1

    def test_main_exits_on_login_failure(self, monkeypatch):
        monkeypatch.setattr(config, "TOKEN", "token")
        monkeypatch.setattr(config, "CLIENT_ID", "123")

        with patch.object(bot_main.bot, "run", side_effect=discord.LoginFailure("bad token")):
            with pytest.raises(SystemExit) as exc:
                bot_main.main()
        assert exc.value.code == 1


class TestExtensionLoading:
    """Test loading the command modules."""

    def test_every_command_module_is_registered(self):
        assert len(bot_main.EXTENSION_MODULES) == 9
        assert all(name.startswith("latesh_bot.commands.") for name in bot_main.EXTENSION_MODULES)

    @pytest.mark.asyncio
    async def test_failures_are_skipped(self):
        target = MagicMock()
        target.load_extension = AsyncMock(side_effect=[None, commands.ExtensionNotFound("latesh_bot.commands.nope")])

        loaded = await bot_main.load_extensions(target, ["latesh_bot.commands.ai", "latesh_bot.commands.nope"])

        assert loaded == ["latesh_bot.commands.ai"]
        assert target.load_extension.await_count == 2

    @pytest.mark.asyncio
    async def test_handled_messages_skip_prefix_commands(self, mock_discord_message):
        with patch.object(bot_main, "process_message", AsyncMock(return_value=True)), \
                patch.object(bot_main.bot, "process_commands", AsyncMock()) as process_commands:
            await bot_main.on_message(mock_discord_message)
        process_commands.assert_not_awaited()


class TestHealthServerLifecycle:
    """Test that the bot owns the health server runner."""

    @pytest.mark.asyncio
    async def test_setup_hook_keeps_runner(self, monkeypatch):
        runner = MagicMock()
        monkeypatch.setattr(bot_main, "load_extensions", AsyncMock(return_value=[]))
        monkeypatch.setattr(bot_main, "start_web_server", AsyncMock(return_value=runner))
        monkeypatch.setattr(bot_main.bot, "web_runner", None)

        await bot_main.bot.setup_hook()

        assert bot_main.bot.web_runner is runner

    @pytest.mark.asyncio
    async def test_port_conflict_is_logged(self, monkeypatch):
        monkeypatch.setattr(bot_main, "load_extensions", AsyncMock(return_value=[]))
        monkeypatch.setattr(bot_main, "start_web_server", AsyncMock(side_effect=OSError("address in use")))
        monkeypatch.setattr(bot_main.bot, "web_runner", None)

        with patch.object(bot_main.logger, "error") as log_error:
            await bot_main.bot.setup_hook()

        assert bot_main.bot.web_runner is None
        assert "Health server failed to start" in log_error.call_args.args[0]

    @pytest.mark.asyncio
    async def test_close_cleans_up_runner(self, monkeypatch):
        runner = MagicMock()
        runner.cleanup = AsyncMock()
        monkeypatch.setattr(bot_main.bot, "web_runner", runner)

        with patch.object(commands.Bot, "close", AsyncMock()) as bot_close:
            await bot_main.bot.close()

        bot_close.assert_awaited_once()
        runner.cleanup.assert_awaited_once()
        assert bot_main.bot.web_runner is None

    @pytest.mark.asyncio
    async def test_close_without_runner(self, monkeypatch):
        monkeypatch.setattr(bot_main.bot, "web_runner", None)

        with patch.object(commands.Bot, "close", AsyncMock()) as bot_close:
            await bot_main.bot.close()

        bot_close.assert_awaited_once()


class TestSetupCheck:
    """Test the environment checker."""

    def test_all_required_present(self, capsys):
        assert check_environment({"DISCORD_TOKEN": "x", "CLIENT_ID": "1"}) is True
        out = capsys.readouterr().out
        assert "✅ DISCORD_TOKEN: Set" in out
        assert "⚠️  TBA_API_KEY: Not set (Optional)" in out
        assert "Setup looks good" in out

    def test_missing_required(self, capsys):
        assert check_environment({"DISCORD_TOKEN": "x"}) is False
        out = capsys.readouterr().out
        assert "❌ CLIENT_ID: Missing (Required)" in out
        assert "Setup incomplete" in out
