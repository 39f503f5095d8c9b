"""
Utilities module for Latesh Analysis Bot

This module contains various utility functions and helpers:
- Profile storage on a flat JSON file
- Webhook delivery and message forwarding
- Text formatting and embed helpers
- Input parsing (dates, durations, colours, image links)
"""

from . import formatters, parsers, profiles, webhooks

__all__ = ['formatters', 'parsers', 'profiles', 'webhooks']
