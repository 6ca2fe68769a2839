"""
Hourbook Auth Module

Current identity and user profiles.
"""

from hourbook.auth.identity import Identity
from hourbook.auth.profiles import ProfileStore

__all__ = ["Identity", "ProfileStore"]
