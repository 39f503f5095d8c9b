"""
Persona package: selectable AI personalities and prompt builders.
"""

__all__ = ['personalities', 'prompts']
