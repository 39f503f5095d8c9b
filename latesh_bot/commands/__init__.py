"""
Command modules package for Latesh Analysis Bot
Contains all slash command cogs organized by functionality
"""

# Each module exposes `async def setup(bot)` and is loaded by main.py as an extension

__all__ = ['ai', 'events', 'extensions', 'frc', 'labgame', 'profiles', 'research', 'utility', 'webhooks']
