"""
Latesh Analysis Bot
Discord bot for webhook management, FRC match analysis and AI-powered assistance
"""

__version__ = "1.0.0"
