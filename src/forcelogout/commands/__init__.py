"""Command modules for forcelogout."""

from . import logout, server, user

__all__ = ["logout", "server", "user"]
