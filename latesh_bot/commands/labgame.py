"""
Lab game commands for Latesh Analysis Bot
Runs an AI personality simulation: saved member profiles talk to each other through per-member webhooks

The moderator picks participants, then a background loop has a random participant
speak each turn until the message limit, a pause, or /latesh stop.
"""

import asyncio
import logging
import random
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import discord
from discord import app_commands
from discord.ext import commands

from .. import config
from ..config import COLOR_ERROR, COLOR_LAB, COLOR_SUCCESS, COLOR_WARNING
from ..handlers.ai_handler import call_ai_with_rate_limiting
from ..handlers.error_handler import SafeView, send_interaction_message
from ..persona.prompts import build_participant_prompt
from ..utils.formatters import truncate
from ..utils.parsers import extract_image_urls
from ..utils.profiles import get_all_profiles, load_profiles, update_profile_fields
from ..utils.webhooks import fetch_image_bytes

logger = logging.getLogger(__name__)

COLOR_SCENE = 0xFFA500
COLOR_PROMPT = 0x9932CC
COLOR_RESTART = 0x00BFFF
COLOR_COMPLETE = 0xFF9900

DEFAULT_SETTING = "General discussion environment"
NO_GAME_MESSAGE = "❌ No lab game found. Use `/latesh start` to begin one, or ensure you are the game creator."
GENERATED_AVATAR_HOST = "ui-avatars.com"


class LabGame:
    """State of one simulation, keyed by its simulation channel"""

    def __init__(self, description: str, creator_id: int, setup_channel_id: int, simulation_channel_id: int):
        self.description = description
        self.creator_id = creator_id
        self.setup_channel_id = setup_channel_id
        self.simulation_channel_id = simulation_channel_id
        self.participants: List[str] = []
        self.started = False
        self.paused = False
        self.setting: Optional[str] = None
        self.conversation: List[Dict[str, Any]] = []
        self.avatars_requested = False
        self.task: Optional[asyncio.Task] = None

    def add_entry(self, speaker: str, message: str, is_prompt: bool = False, is_reminder: bool = False):
        entry = {
            'speaker': speaker,
            'message': message,
            'timestamp': datetime.now(timezone.utc),
        }
        if is_prompt:
            entry['is_prompt'] = True
        if is_reminder:
            entry['is_reminder'] = True
        self.conversation.append(entry)

    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()

    def status_text(self) -> str:
        if self.paused:
            return "⏸️ Paused"
        if not self.started:
            return "🟡 Setup"
        return "🟢 Active"


# Simulation channel ID -> game
active_games: Dict[int, LabGame] = {}

# Simulation channel ID -> participant user ID -> webhook
game_webhooks: Dict[int, Dict[str, discord.Webhook]] = {}


def find_game(channel_id: int, user_id: int) -> Tuple[Optional[int], Optional[LabGame]]:
    """The game in this channel, else the first game this user created"""
    game = active_games.get(channel_id)
    if game is not None:
        return channel_id, game
    for game_channel_id, candidate in active_games.items():
        if candidate.creator_id == user_id:
            return game_channel_id, candidate
    return None, None


def is_game_live(channel_id: int, game: LabGame) -> bool:
    return active_games.get(channel_id) is game and not game.paused


# --- Participant identity ---

def generated_avatar_url(name: str) -> str:
    return f"https://{GENERATED_AVATAR_HOST}/api/?name={quote(name, safe='')}&background=random&color=fff"


async def resolve_avatar_url(profile: Dict[str, Any], bot) -> str:
    """Discord avatar, then the saved avatar_url, then a generated initials avatar"""
    discord_id = profile.get('discord_id')
    if discord_id:
        user = bot.get_user(int(discord_id))
        if user is None:
            try:
                user = await bot.fetch_user(int(discord_id))
            except discord.HTTPException:
                logger.info(f"Could not fetch Discord avatar for {profile.get('name')}")
                user = None
        if user is not None:
            return str(user.display_avatar.replace(size=128).url)

    if profile.get('avatar_url'):
        return profile['avatar_url']

    return generated_avatar_url(profile.get('name', 'Unknown'))


def participant_option(user_id: str, profile: Dict[str, Any]) -> discord.SelectOption:
    role = profile.get('role') or 'Not specified'
    detail = f"Team {profile['team']}" if profile.get('team') else (profile.get('location') or 'Unknown')
    return discord.SelectOption(
        label=truncate(profile.get('name') or 'Unknown', 100),
        value=user_id,
        description=truncate(f"{role} - {detail}", 100),
    )


async def get_participant_webhook(channel, user_id: str, profile: Dict[str, Any], bot) -> Optional[discord.Webhook]:
    """
    Find or create the webhook a participant speaks through.

    Order: cached for this channel, the URL saved on the profile, a channel
    webhook with the participant's name, then a new webhook. Found and created
    webhook URLs are saved to the profile.
    """
    channel_webhooks = game_webhooks.setdefault(channel.id, {})
    if user_id in channel_webhooks:
        return channel_webhooks[user_id]

    name = profile.get('name', 'Unknown')

    if profile.get('webhook_url'):
        try:
            webhook = discord.Webhook.from_url(profile['webhook_url'], client=bot)
        except ValueError:
            logger.info(f"Saved webhook URL for {name} is invalid, looking for an existing one")
        else:
            channel_webhooks[user_id] = webhook
            return webhook

    try:
        existing = discord.utils.get(await channel.webhooks(), name=name)
    except discord.HTTPException as e:
        logger.warning(f"Error fetching existing webhooks: {e}")
        existing = None

    if existing is not None:
        logger.info(f"Found existing webhook for {name}, reusing it")
        update_profile_fields(user_id, webhook_url=existing.url)
        channel_webhooks[user_id] = existing
        return existing

    avatar_url = await resolve_avatar_url(profile, bot)
    avatar_bytes = await fetch_image_bytes(avatar_url)
    try:
        webhook = await channel.create_webhook(
            name=name,
            avatar=avatar_bytes,
            reason=f"Lab game simulation for {name}",
        )
    except discord.HTTPException as e:
        logger.error(f"Error creating webhook for {name}: {e}")
        return None

    logger.info(f"Created webhook for {name}")
    update_profile_fields(user_id, webhook_url=webhook.url)
    channel_webhooks[user_id] = webhook
    return webhook


async def setup_participant_webhooks(channel, participants: List[str], bot) -> int:
    """Prepare a webhook for every participant. Returns how many succeeded."""
    profiles = load_profiles()
    tasks = [
        get_participant_webhook(channel, user_id, profiles[user_id], bot)
        for user_id in participants if user_id in profiles
    ]
    webhooks = await asyncio.gather(*tasks)
    ready = sum(1 for webhook in webhooks if webhook is not None)
    print(f"✅ Lab game webhooks ready: {ready}/{len(participants)}")
    return ready


# --- Simulation ---

def shorten_response(text: str, limit: int = config.LABGAME_MAX_RESPONSE_LENGTH) -> str:
    """Keep only the first sentence of an overlong reply"""
    text = text.strip()
    if len(text) <= limit:
        return text
    first = re.split(r'[.!?]+', text)[0].strip()
    return f"{first}."


async def generate_participant_response(profile: Dict[str, Any], game: LabGame) -> str:
    name = profile.get('name', 'Unknown')
    history = game.conversation[-config.LABGAME_HISTORY_WINDOW:]
    prompt = build_participant_prompt(profile, history, game.setting or DEFAULT_SETTING, game.description)

    text, status = await call_ai_with_rate_limiting(prompt, context="labgame")
    if not text:
        logger.info(f"Lab game turn for {name} produced no text ({status})")
        return f"*{name} is thinking...*"
    return shorten_response(text)


async def send_as_participant(channel, user_id: str, profile: Dict[str, Any], text: str, bot):
    name = profile.get('name', 'Unknown')
    try:
        webhook = await get_participant_webhook(channel, user_id, profile, bot)
        if webhook is not None:
            await webhook.send(
                content=text,
                username=name,
                avatar_url=await resolve_avatar_url(profile, bot),
                allowed_mentions=discord.AllowedMentions.none(),
            )
        else:
            await channel.send(f"**{name}:** {text}")
    except discord.HTTPException as e:
        logger.error(f"Error sending lab game message as {name}: {e}")
        try:
            await channel.send(f"{name}: {text}")
        except discord.HTTPException as fallback_error:
            logger.error(f"Failed to send fallback message: {fallback_error}")


async def request_profile_pictures(channel, game: LabGame, bot) -> bool:
    """Ask once per game for pictures of participants who would get a generated avatar"""
    if game.avatars_requested:
        return False
    game.avatars_requested = True

    profiles = load_profiles()
    asked = False
    for user_id in game.participants:
        profile = profiles.get(user_id)
        if not profile or profile.get('avatar_url'):
            continue
        if GENERATED_AVATAR_HOST not in await resolve_avatar_url(profile, bot):
            continue

        name = profile.get('name', 'Unknown')
        embed = discord.Embed(
            title="📸 Profile Picture Request",
            description=(f"**{name}** doesn't have a profile picture set.\n\n"
                         f"If you have a PNG/JPG link for {name}'s profile picture, please reply with "
                         f"the link to make the simulation more realistic!"),
            color=COLOR_LAB,
        )
        embed.set_footer(text="This is optional - the simulation will continue with a generated avatar "
                              "if no link is provided")
        await channel.send(embed=embed)
        asked = True
    return asked


async def simulate_conversation(bot, channel_id: int):
    """Drive one run of the conversation until the limit, a pause, or a stop"""
    game = active_games.get(channel_id)
    channel = bot.get_channel(channel_id)
    if game is None or channel is None:
        return

    if await request_profile_pictures(channel, game, bot):
        await asyncio.sleep(config.LABGAME_AVATAR_WAIT)
    await asyncio.sleep(config.LABGAME_START_DELAY)

    message_count = 0
    while message_count < config.LABGAME_MAX_MESSAGES and is_game_live(channel_id, game):
        profiles = load_profiles()
        speakers = [user_id for user_id in game.participants if user_id in profiles]
        if not speakers:
            logger.warning(f"Lab game in {channel_id} has no participants with profiles")
            break

        speaker_id = random.choice(speakers)
        speaker = profiles[speaker_id]
        response = await generate_participant_response(speaker, game)

        if message_count > 0 and message_count % config.LABGAME_REMINDER_EVERY == 0:
            game.add_entry('System', f"*Remember: {game.description}*", is_reminder=True)
        game.add_entry(speaker.get('name', 'Unknown'), response)

        await send_as_participant(channel, speaker_id, speaker, response, bot)
        message_count += 1

        await asyncio.sleep(random.uniform(config.LABGAME_MIN_DELAY, config.LABGAME_MAX_DELAY))

    if is_game_live(channel_id, game):
        embed = discord.Embed(
            title="🎬 Conversation Simulation Complete",
            description="The personality simulation has reached its natural conclusion.",
            color=COLOR_COMPLETE,
        )
        embed.set_footer(text="Use /latesh setting to change context or /latesh stop to end the game")
        await channel.send(embed=embed)


async def _delayed_simulation(bot, channel_id: int, delay: float):
    await asyncio.sleep(delay)
    game = active_games.get(channel_id)
    if game is not None and not game.paused:
        await simulate_conversation(bot, channel_id)


def start_simulation(bot, channel_id: int, delay: float = 0) -> bool:
    """Schedule the conversation loop unless one is already running for this game"""
    game = active_games.get(channel_id)
    if game is None or game.is_running():
        return False
    game.task = asyncio.create_task(_delayed_simulation(bot, channel_id, delay))
    return True


# --- Components ---

class ParticipantSelect(discord.ui.DynamicItem[discord.ui.Select],
                        template=r'select_participants_(?P<channel>\d+)'):
    """Participant picker, resolved from its custom id so it survives bot restarts"""

    def __init__(self, simulation_channel_id: int, profiles: Optional[Dict[str, Dict[str, Any]]] = None,
                 item: Optional[discord.ui.Select] = None):
        if item is None:
            options = [participant_option(user_id, profile)
                       for user_id, profile in list((profiles or {}).items())[:config.LABGAME_MAX_OPTIONS]]
            item = discord.ui.Select(
                custom_id=f"select_participants_{simulation_channel_id}",
                placeholder="Choose participants for the lab game",
                min_values=config.LABGAME_MIN_PARTICIPANTS,
                max_values=min(len(options), config.LABGAME_MAX_PARTICIPANTS),
                options=options,
            )
        super().__init__(item)
        self.simulation_channel_id = simulation_channel_id

    @classmethod
    async def from_custom_id(cls, interaction: discord.Interaction, item: discord.ui.Select, match: re.Match):
        return cls(int(match['channel']), item=item)

    async def callback(self, interaction: discord.Interaction):
        game = active_games.get(self.simulation_channel_id)
        if game is None:
            await interaction.response.send_message("❌ Game session expired. Please start a new game.",
                                                    ephemeral=True)
            return

        profiles = load_profiles()
        game.participants = list(self.item.values)
        game.started = True
        game.conversation = []

        participant_list = "\n".join(
            f"• **{profiles.get(user_id, {}).get('name', 'Unknown')}** - "
            f"{profiles.get(user_id, {}).get('role') or 'Not specified'}"
            for user_id in game.participants
        )
        channel_info = ""
        if self.simulation_channel_id != interaction.channel_id:
            channel_info = f"**Simulation Channel:** <#{self.simulation_channel_id}>\n"

        embed = discord.Embed(
            title="✅ Lab Game Ready",
            description=f"{channel_info}**Scenario:** {game.description}\n\n**Participants:**\n{participant_list}",
            color=COLOR_SUCCESS,
        )
        embed.set_footer(text="Click the button below to begin the conversation simulation")
        await interaction.response.edit_message(embed=embed, view=StartConversationView(self.simulation_channel_id))


class StartConversationButton(discord.ui.DynamicItem[discord.ui.Button],
                              template=r'start_conversation_(?P<channel>\d+)'):
    def __init__(self, simulation_channel_id: int):
        super().__init__(discord.ui.Button(
            label="🚀 Start Conversation",
            style=discord.ButtonStyle.primary,
            custom_id=f"start_conversation_{simulation_channel_id}",
        ))
        self.simulation_channel_id = simulation_channel_id

    @classmethod
    async def from_custom_id(cls, interaction: discord.Interaction, item: discord.ui.Button, match: re.Match):
        return cls(int(match['channel']))

    async def callback(self, interaction: discord.Interaction):
        bot = interaction.client
        channel_id = self.simulation_channel_id
        game = active_games.get(channel_id)
        if game is None or not game.started:
            await interaction.response.send_message("❌ No active game found.", ephemeral=True)
            return

        await interaction.response.send_message(
            "🎬 **Setting up participant webhooks...**\n*This may take a moment for realistic messaging.*")

        channel = bot.get_channel(channel_id)
        if channel is not None:
            ready = await setup_participant_webhooks(channel, game.participants, bot)
            channel_info = f" in {channel.mention}" if channel_id != interaction.channel_id else ""
            embed = discord.Embed(
                title="✅ Webhooks Ready",
                description=(f"Successfully set up {ready} participant webhooks{channel_info}.\n"
                             f"*Conversation simulation starting...*"),
                color=COLOR_SUCCESS,
            )
            embed.set_footer(text="Messages will appear as real users")
            await interaction.edit_original_response(content=None, embed=embed)

        start_simulation(bot, channel_id, config.LABGAME_START_DELAY)


class ParticipantSelectView(SafeView):
    def __init__(self, simulation_channel_id: int, profiles: Dict[str, Dict[str, Any]]):
        super().__init__(timeout=None)
        self.add_item(ParticipantSelect(simulation_channel_id, profiles))


class StartConversationView(SafeView):
    def __init__(self, simulation_channel_id: int):
        super().__init__(timeout=None)
        self.add_item(StartConversationButton(simulation_channel_id))


# --- Cog ---

class LabGameCommands(commands.Cog):
    category = "Lab Game"
    permissions: List[str] = []
    cooldown = 5

    latesh = app_commands.Group(name="latesh", description="Start a personality simulation lab game",
                                guild_only=True)

    def __init__(self, bot):
        self.bot = bot

    def _channel_suffix(self, game_channel_id: int, interaction: discord.Interaction, preposition: str) -> str:
        if game_channel_id == interaction.channel_id:
            return ""
        return f" {preposition} <#{game_channel_id}>"

    @latesh.command(name="start", description="Start a new lab game")
    @app_commands.describe(description="Description of the scenario/issue to discuss",
                           channel="Channel where the simulation will take place")
    async def latesh_start(self, interaction: discord.Interaction, description: str,
                           channel: Optional[discord.TextChannel] = None):
        simulation_channel_id = channel.id if channel else interaction.channel_id

        if simulation_channel_id in active_games:
            where = channel.mention if channel else "this channel"
            await interaction.response.send_message(
                f"❌ A lab game is already running in {where}. Use `/latesh stop` to end it first.", ephemeral=True)
            return

        profiles = get_all_profiles()
        if not profiles:
            await interaction.response.send_message(
                "❌ No user profiles found. Ask members to create one with `/remember me` first.", ephemeral=True)
            return
        if len(profiles) < config.LABGAME_MIN_PARTICIPANTS:
            await interaction.response.send_message(
                f"❌ A lab game needs at least {config.LABGAME_MIN_PARTICIPANTS} saved profiles. "
                "Ask more members to use `/remember me` first.", ephemeral=True)
            return

        if channel is not None and channel.id != interaction.channel_id:
            permissions = channel.permissions_for(interaction.guild.me)
            if not (permissions.view_channel and permissions.send_messages):
                await interaction.response.send_message(
                    f"❌ I don't have permission to send messages in {channel.mention}. Please check my permissions.",
                    ephemeral=True)
                return

            if not permissions.manage_webhooks:
                warning = discord.Embed(
                    title="⚠️ Limited Permissions",
                    description=(f"I don't have webhook permissions in {channel.mention}.\n\n"
                                 f"The simulation will work but messages will be less realistic.\n"
                                 f"For the best experience, please give me \"Manage Webhooks\" permission."),
                    color=COLOR_WARNING,
                )
                warning.set_footer(text="The game will continue in 5 seconds...")
                await interaction.response.send_message(embed=warning, ephemeral=True)
                await asyncio.sleep(config.LABGAME_PERMISSION_WARNING_WAIT)

        channel_info = f"**Simulation Channel:** {channel.mention}\n" if channel else ""
        embed = discord.Embed(
            title="🧪 Lab Game Setup",
            description=(f"{channel_info}**Scenario:** {description}\n\n"
                         f"Select the participants who will be involved in this conversation simulation."),
            color=COLOR_LAB,
        )
        embed.set_footer(text=f"Choose 2-{config.LABGAME_MAX_PARTICIPANTS} participants to simulate")

        active_games[simulation_channel_id] = LabGame(
            description, interaction.user.id, interaction.channel_id, simulation_channel_id)
        print(f"🧪 Lab game created by {interaction.user} for channel {simulation_channel_id}")

        await send_interaction_message(interaction, embed=embed, ephemeral=False,
                                       view=ParticipantSelectView(simulation_channel_id, profiles))

    @latesh.command(name="setting", description="Update the current setting/context")
    @app_commands.describe(description="Describe what is happening in the current setting")
    async def latesh_setting(self, interaction: discord.Interaction, description: str):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message(NO_GAME_MESSAGE, ephemeral=True)
            return

        game.setting = description
        suffix = self._channel_suffix(game_channel_id, interaction, "for")
        embed = discord.Embed(title="🎭 Setting Updated", description=f"**New Setting{suffix}:** {description}",
                              color=COLOR_WARNING)
        embed.set_footer(text="Participants will now respond based on this new context")
        await interaction.response.send_message(embed=embed)

        simulation_channel = self.bot.get_channel(game_channel_id)
        if game.started and simulation_channel is not None:
            scene = discord.Embed(title="📍 Scene Change", description=f"*The setting has changed: {description}*",
                                  color=COLOR_SCENE, timestamp=datetime.now(timezone.utc))
            await simulation_channel.send(embed=scene)

    @latesh.command(name="pause", description="Pause the current conversation")
    async def latesh_pause(self, interaction: discord.Interaction):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message(NO_GAME_MESSAGE, ephemeral=True)
            return

        game.paused = True
        suffix = self._channel_suffix(game_channel_id, interaction, "in")
        embed = discord.Embed(title="⏸️ Game Paused",
                              description=f"The conversation simulation{suffix} has been paused.",
                              color=COLOR_WARNING)
        embed.set_footer(text="Use /latesh resume to continue the conversation")
        await interaction.response.send_message(embed=embed)

    @latesh.command(name="resume", description="Resume the paused conversation")
    async def latesh_resume(self, interaction: discord.Interaction):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message(NO_GAME_MESSAGE, ephemeral=True)
            return
        if not game.paused:
            await interaction.response.send_message("❌ The game is not paused.", ephemeral=True)
            return

        game.paused = False
        suffix = self._channel_suffix(game_channel_id, interaction, "in")
        embed = discord.Embed(title="▶️ Game Resumed",
                              description=f"The conversation simulation{suffix} has been resumed.",
                              color=COLOR_SUCCESS)
        embed.set_footer(text="The conversation will continue shortly")
        await interaction.response.send_message(embed=embed)

        if game.started:
            start_simulation(self.bot, game_channel_id, config.LABGAME_RESUME_DELAY)

    @latesh.command(name="prompt", description="Add a prompt to guide the conversation")
    @app_commands.describe(message="A prompt or question to inject into the conversation")
    async def latesh_prompt(self, interaction: discord.Interaction, message: str):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message(NO_GAME_MESSAGE, ephemeral=True)
            return

        game.add_entry('Moderator', message, is_prompt=True)
        suffix = self._channel_suffix(game_channel_id, interaction, "to")
        embed = discord.Embed(title="💭 Conversation Prompt", description=message, color=COLOR_PROMPT)
        embed.set_footer(text=f"Participants will respond to this prompt{suffix}")
        await interaction.response.send_message(embed=embed)

        simulation_channel = self.bot.get_channel(game_channel_id)
        if simulation_channel is not None and game_channel_id != interaction.channel_id:
            mirrored = discord.Embed(title="💭 Moderator Prompt", description=message, color=COLOR_PROMPT,
                                     timestamp=datetime.now(timezone.utc))
            await simulation_channel.send(embed=mirrored)

    @latesh.command(name="restart", description="Restart the conversation with a fresh context reminder")
    async def latesh_restart(self, interaction: discord.Interaction):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message(NO_GAME_MESSAGE, ephemeral=True)
            return

        recent = game.conversation[-3:]
        game.conversation = []
        game.add_entry('Moderator', f"Let's get back to the main topic: {game.description}", is_prompt=True)
        game.conversation.extend(recent)

        suffix = self._channel_suffix(game_channel_id, interaction, "in")
        embed = discord.Embed(title="🔄 Conversation Restarted",
                              description=f"Refocusing the discussion{suffix} on: **{game.description}**",
                              color=COLOR_RESTART)
        embed.set_footer(text="Participants will now get back on topic")
        await interaction.response.send_message(embed=embed)

        simulation_channel = self.bot.get_channel(game_channel_id)
        if simulation_channel is not None and game_channel_id != interaction.channel_id:
            refocus = discord.Embed(title="🔄 Back to Topic", description=f"**Let's refocus on:** {game.description}",
                                    color=COLOR_RESTART, timestamp=datetime.now(timezone.utc))
            await simulation_channel.send(embed=refocus)

        if game.started and not game.paused:
            start_simulation(self.bot, game_channel_id, config.LABGAME_START_DELAY)

    @latesh.command(name="stop", description="Stop the current lab game")
    async def latesh_stop(self, interaction: discord.Interaction):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message("❌ No lab game found.", ephemeral=True)
            return

        is_admin = isinstance(interaction.user, discord.Member) and interaction.user.guild_permissions.administrator
        if game.creator_id != interaction.user.id and not is_admin:
            await interaction.response.send_message(
                "❌ Only the game creator or an administrator can stop the game.", ephemeral=True)
            return

        # Webhooks stay in the channel for the next game, only our references go
        game_webhooks.pop(game_channel_id, None)
        active_games.pop(game_channel_id, None)
        if game.is_running():
            game.task.cancel()
        print(f"🛑 Lab game in channel {game_channel_id} stopped by {interaction.user}")

        suffix = self._channel_suffix(game_channel_id, interaction, "in")
        embed = discord.Embed(title="🛑 Lab Game Stopped",
                              description=f"The personality simulation{suffix} has been ended.",
                              color=COLOR_ERROR, timestamp=datetime.now(timezone.utc))
        await interaction.response.send_message(embed=embed)

        simulation_channel = self.bot.get_channel(game_channel_id)
        if simulation_channel is not None and game_channel_id != interaction.channel_id:
            ended = discord.Embed(title="🛑 Simulation Ended",
                                  description="The lab game has been stopped by the moderator.",
                                  color=COLOR_ERROR, timestamp=datetime.now(timezone.utc))
            await simulation_channel.send(embed=ended)

    @latesh.command(name="status", description="Check the status of the current lab game")
    async def latesh_status(self, interaction: discord.Interaction):
        game_channel_id, game = find_game(interaction.channel_id, interaction.user.id)
        if game is None:
            await interaction.response.send_message("❌ No lab game found.", ephemeral=True)
            return

        profiles = load_profiles()
        names = ", ".join(profiles.get(user_id, {}).get('name', 'Unknown') for user_id in game.participants)
        channel_label = "Current channel" if game_channel_id == interaction.channel_id else f"<#{game_channel_id}>"

        embed = discord.Embed(title="📊 Lab Game Status", color=COLOR_LAB, timestamp=datetime.now(timezone.utc))
        embed.add_field(name="📝 Scenario", value=truncate(game.description, config.MAX_FIELD_VALUE), inline=False)
        embed.add_field(name="📺 Simulation Channel", value=channel_label, inline=False)
        embed.add_field(name="👥 Participants", value=names or "None selected", inline=False)
        embed.add_field(name="🎭 Current Setting", value=game.setting or "No specific setting defined", inline=False)
        embed.add_field(name="💬 Messages Exchanged", value=str(len(game.conversation)), inline=True)
        embed.add_field(name="🎮 Status", value=game.status_text(), inline=True)

        if game.started:
            controls = ["Use `/latesh resume` to continue" if game.paused else "Use `/latesh pause` to pause",
                        "Use `/latesh setting` to change context",
                        "Use `/latesh prompt` to add a prompt",
                        "Use `/latesh stop` to end the game"]
            embed.add_field(name="🎛️ Controls", value="\n".join(controls), inline=False)

        await interaction.response.send_message(embed=embed)

    @latesh.command(name="cleanup", description="Clean up old webhooks in the current channel")
    @app_commands.default_permissions(manage_webhooks=True)
    async def latesh_cleanup(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)

        try:
            webhooks = await interaction.channel.webhooks()
        except discord.HTTPException as e:
            logger.error(f"Error during webhook cleanup: {e}")
            await interaction.followup.send("❌ Error occurred during cleanup. Check bot permissions.", ephemeral=True)
            return

        owned = [webhook for webhook in webhooks if webhook.user and webhook.user.id == self.bot.user.id]
        if not owned:
            await interaction.followup.send("❌ No lab game webhooks found in this channel.", ephemeral=True)
            return

        deleted = 0
        for webhook in owned:
            try:
                await webhook.delete(reason="Lab game webhook cleanup")
                deleted += 1
            except discord.HTTPException as e:
                logger.error(f"Failed to delete webhook {webhook.name}: {e}")
        game_webhooks.pop(interaction.channel_id, None)

        embed = discord.Embed(title="🧹 Webhook Cleanup Complete",
                              description=f"Successfully deleted {deleted} lab game webhooks from this channel.",
                              color=COLOR_SUCCESS)
        embed.set_footer(text="New webhooks will be created as needed for future games")
        await interaction.followup.send(embed=embed, ephemeral=True)

    @latesh.command(name="avatar", description="Set a profile picture for a user")
    @app_commands.describe(user="The user to set the avatar for", url="Direct link to the image (PNG/JPG)")
    async def latesh_avatar(self, interaction: discord.Interaction, user: discord.User, url: str):
        url = url.strip()
        if not url.startswith(("http://", "https://")):
            await interaction.response.send_message("❌ Please provide a direct http(s) link to the image.",
                                                    ephemeral=True)
            return

        profile = update_profile_fields(user.id, avatar_url=url)
        if profile is None:
            await interaction.response.send_message(
                f"❌ {user.display_name} doesn't have a profile saved. They can create one with `/remember me`.",
                ephemeral=True)
            return

        embed = discord.Embed(title="✅ Profile Picture Set",
                              description=f"Profile picture updated for **{profile['name']}**",
                              color=COLOR_SUCCESS)
        embed.set_thumbnail(url=url)
        embed.set_footer(text="This will be used in the simulation")
        await interaction.response.send_message(embed=embed)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        """Capture image links posted in a game channel as participant avatars"""
        if message.author.bot:
            return

        game = active_games.get(message.channel.id)
        if game is None:
            return

        urls = extract_image_urls(message.content)
        if not urls:
            return

        profiles = load_profiles()
        missing = [(user_id, profiles[user_id]) for user_id in game.participants
                   if user_id in profiles and not profiles[user_id].get('avatar_url')]
        if not missing:
            return

        if len(missing) == 1:
            user_id, profile = missing[0]
            if update_profile_fields(user_id, avatar_url=urls[0]) is None:
                return
            embed = discord.Embed(title="✅ Profile Picture Set",
                                  description=f"Automatically set profile picture for **{profile['name']}**",
                                  color=COLOR_SUCCESS)
            embed.set_thumbnail(url=urls[0])
            embed.set_footer(text="This will be used in the simulation")
            await message.add_reaction("✅")
            await message.channel.send(embed=embed)
            return

        names = ", ".join(profile['name'] for _, profile in missing)
        embed = discord.Embed(
            title="📸 Multiple Profiles Need Pictures",
            description=(f"Found an image URL, but multiple participants need profile pictures: **{names}**\n\n"
                         f"Please use `/latesh avatar @user <url>` to specify which person this picture is for."),
            color=COLOR_WARNING,
        )
        embed.set_footer(text="You can also mention the person's name with the URL")
        await message.channel.send(embed=embed)


async def setup(bot):
    """Add the LabGameCommands cog to the bot"""
    bot.add_dynamic_items(ParticipantSelect, StartConversationButton)
    await bot.add_cog(LabGameCommands(bot))
