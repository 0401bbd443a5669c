from .user import User
from .review import Review

__all__ = ["User", "Review"]
