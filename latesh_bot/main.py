"""
Latesh Analysis Bot - Main Entry Point
Bot startup, extension loading and core event handlers
"""

import logging
import sys
from typing import List, Optional

import discord
from discord.ext import commands

from . import config
from .handlers.ai_handler import get_ai_status, initialize_ai_async
from .handlers.error_handler import on_app_command_error
from .handlers.message_handler import process_message
from .server import start_web_server

logger = logging.getLogger(__name__)

EXTENSION_MODULES = [
    'latesh_bot.commands.webhooks',
    'latesh_bot.commands.research',
    'latesh_bot.commands.frc',
    'latesh_bot.commands.ai',
    'latesh_bot.commands.profiles',
    'latesh_bot.commands.events',
    'latesh_bot.commands.labgame',
    'latesh_bot.commands.utility',
    'latesh_bot.commands.extensions',
]

INTENT_HELP_LINES = [
    "",
    "🔧 INTENT CONFIGURATION NEEDED:",
    "1. Go to https://discord.com/developers/applications",
    "2. Select your bot application",
    "3. Go to the \"Bot\" section",
    "4. Enable these Privileged Gateway Intents:",
    "   - Message Content Intent (for message forwarding)",
    "   - Server Members Intent (for member info)",
    "5. Save changes and restart the bot",
    "",
]

# Bot setup with proper intents
intents = discord.Intents.default()
intents.guilds = True
intents.guild_messages = True
intents.webhooks = True
intents.message_content = True


class LateshBot(commands.Bot):
    """Bot that owns the health server runner and stops it on close"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.web_runner = None

    async def setup_hook(self):
        await load_extensions(self)
        try:
            self.web_runner = await start_web_server(config.PORT)
        except OSError as e:
            logger.error(f"Health server failed to start on port {config.PORT}: {e}")

    async def close(self):
        try:
            await super().close()
        finally:
            if self.web_runner is not None:
                await self.web_runner.cleanup()
                self.web_runner = None
                print("🛑 Health server stopped")


bot = LateshBot(
    command_prefix=config.PREFIX,
    intents=intents,
    help_command=None,
    case_insensitive=True
)
bot.tree.error(on_app_command_error)


async def load_extensions(target: commands.Bot, modules: Optional[List[str]] = None) -> List[str]:
    """Load command extensions, skipping any that fail. Returns the loaded module names."""
    loaded = []
    for module in modules or EXTENSION_MODULES:
        try:
            await target.load_extension(module)
        except commands.ExtensionError as e:
            logger.error(f"Failed to load extension {module}: {e}", exc_info=e)
            print(f"❌ Failed to load extension {module}: {e}")
            continue
        loaded.append(module)
        print(f"✅ Loaded extension: {module.rsplit('.', 1)[-1]}")

    print(f"✅ {len(loaded)}/{len(modules or EXTENSION_MODULES)} extensions loaded")
    return loaded


@bot.event
async def on_ready():
    print(f"🤖 {config.BOT_NAME} is ready. Logged in as {bot.user}")
    print(f"📡 Connected to {len(bot.guilds)} guild(s)")

    await bot.change_presence(
        activity=discord.Activity(type=discord.ActivityType.watching, name=config.BOT_ACTIVITY))

    try:
        synced = await bot.tree.sync()
        print(f"✅ Synced {len(synced)} application commands")
    except discord.HTTPException as e:
        logger.error(f"Failed to sync application commands: {e}")

    await initialize_ai_async()
    print(f"🤖 AI status: {get_ai_status()['status_message']}")


@bot.event
async def on_message(message: discord.Message):
    if await process_message(message, bot):
        return
    await bot.process_commands(message)


def check_startup_config() -> bool:
    """Log missing required settings. Returns False when the bot cannot start."""
    if not config.TOKEN:
        logger.error("No Discord token provided. Please set DISCORD_TOKEN in your .env file.")
        return False

    if not config.CLIENT_ID:
        logger.error("No Discord client ID provided. Please set CLIENT_ID in your .env file.")
        return False

    if not config.GEMINI_API_KEY:
        logger.warning("Gemini API key not configured. AI features will be disabled.")
        logger.warning("To enable AI chat, get an API key from: https://aistudio.google.com/app/apikey")

    return True


def main():
    """Main entry point for the bot and its health server"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not check_startup_config():
        sys.exit(1)

    try:
        print(f"🚀 Starting {config.BOT_NAME}...")
        bot.run(config.TOKEN, log_handler=None)
    except discord.PrivilegedIntentsRequired as e:
        logger.error(f"Failed to login to Discord: {e}")
        for line in INTENT_HELP_LINES:
            print(line)
        sys.exit(1)
    except discord.LoginFailure as e:
        logger.error(f"Failed to login to Discord: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n🛑 Bot stopped by user")


if __name__ == "__main__":
    main()
