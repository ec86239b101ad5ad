"""Portal route handlers."""

from . import auth, home

__all__ = ["auth", "home"]
