"""Database models."""

from .document import Document
from .user import User

__all__ = ["Document", "User"]
