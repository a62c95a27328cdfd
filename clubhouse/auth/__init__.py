"""
Authentication module - bearer JWT verification for club admins and players
"""
from clubhouse.auth.utils import get_current_admin, get_current_player, create_access_token, Principal

__all__ = [
    "get_current_admin",
    "get_current_player",
    "create_access_token",
    "Principal",
]
