"""
Integrations module for Latesh Analysis Bot

This module contains integration handlers for external services like:
- The Blue Alliance API for FRC team, event and match data
"""

from . import tba

__all__ = ['tba']
