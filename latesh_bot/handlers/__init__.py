"""
Handlers package for Latesh Analysis Bot.

This package contains event handlers and processing logic: the Gemini AI
handler, plain message routing and interaction error handling.
"""

__all__ = ['ai_handler', 'message_handler', 'error_handler']
