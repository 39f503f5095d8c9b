"""
Configuration Module for Latesh Analysis Bot
Contains all constants and configuration values used across modular components
"""

import os

# Discord Configuration
TOKEN = os.getenv('DISCORD_TOKEN')
CLIENT_ID = os.getenv('CLIENT_ID')
PREFIX = os.getenv('PREFIX', '!')
BOT_ACTIVITY = os.getenv('BOT_ACTIVITY', 'AI-powered FRC Analysis')
BOT_NAME = "Latesh Analysis Bot"

# Webhook Configuration
DEFAULT_WEBHOOK_URL = os.getenv('DEFAULT_WEBHOOK_URL')
DEFAULT_WEBHOOK_USERNAME = "Latesh Bot"

# External APIs
GEMINI_API_KEY = os.getenv('GEMINI_API_KEY') or os.getenv('GOOGLE_API_KEY')
TBA_API_KEY = os.getenv('TBA_API_KEY')
TBA_BASE_URL = "https://www.thebluealliance.com/api/v3"
TBA_USER_AGENT = "Latesh-Analysis-Bot/1.0"

# Web server
PORT = int(os.getenv('PORT', '3000'))
APP_VERSION = "1.0.0"

# Profile storage (flat JSON file keyed by Discord user ID)
PROFILES_FILE = os.getenv('PROFILES_FILE', os.path.join('data', 'user_profiles.json'))

# Environment checks used by setup_check
REQUIRED_ENV_VARS = ['DISCORD_TOKEN', 'CLIENT_ID']
OPTIONAL_ENV_VARS = ['PORT', 'DEFAULT_WEBHOOK_URL', 'TBA_API_KEY', 'GEMINI_API_KEY']

# Rate Limiting Configuration
PRIORITY_INTERVALS = {
    "high": 0.5,     # Direct /ask and mention questions
    "medium": 1.0,   # General chat responses
    "low": 1.0       # Lab game turns and other background generation
}

RATE_LIMIT_COOLDOWNS = {
    "first": 30,
    "second": 60,
    "third": 120,
    "persistent": 300
}

# AI Configuration
MAX_DAILY_REQUESTS = int(os.getenv('MAX_DAILY_REQUESTS', '1500'))
MAX_HOURLY_REQUESTS = int(os.getenv('MAX_HOURLY_REQUESTS', '300'))
MIN_REQUEST_INTERVAL = 1.0
RATE_LIMIT_COOLDOWN = 30
AI_REQUEST_TIMEOUT = 30.0

# Discord message limits
MAX_MESSAGE_LENGTH = 2000
MAX_EMBED_DESCRIPTION = 4096
MAX_FIELD_VALUE = 1024

# Lab game pacing (seconds)
LABGAME_MAX_MESSAGES = 50
LABGAME_HISTORY_WINDOW = 8
LABGAME_REMINDER_EVERY = 12
LABGAME_MAX_RESPONSE_LENGTH = 150
LABGAME_MIN_DELAY = 1.0
LABGAME_MAX_DELAY = 4.0
LABGAME_START_DELAY = 2.0
LABGAME_RESUME_DELAY = 3.0
LABGAME_AVATAR_WAIT = 10.0
LABGAME_PERMISSION_WARNING_WAIT = 5.0
LABGAME_MIN_PARTICIPANTS = 2
LABGAME_MAX_PARTICIPANTS = 10
LABGAME_MAX_OPTIONS = 25

# Embed colours
COLOR_SUCCESS = 0x00FF00
COLOR_INFO = 0x0099FF
COLOR_ERROR = 0xFF0000
COLOR_WARNING = 0xFFD700
COLOR_FRC = 0xFF6B35
COLOR_AI = 0x4285F4
COLOR_LAB = 0x00AE86

# Standard messages
AI_NOT_CONFIGURED_MESSAGE = "❌ AI functionality is not configured. Please set GEMINI_API_KEY in the environment."
EMPTY_AI_RESPONSE = "I apologize, but I couldn't generate a response. Please try rephrasing your question."
COMMAND_ERROR_MESSAGE = "An error occurred while executing this command."
INTERACTION_ERROR_MESSAGE = "❌ An error occurred while processing your request."
