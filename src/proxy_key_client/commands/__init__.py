"""Command groups for the access-key CLI."""

from .keys import keys_group

__all__ = ['keys_group']
