"""
Database models for linkhop.
"""

from .mapping import ShortcodeMapping

__all__ = ["ShortcodeMapping"]
