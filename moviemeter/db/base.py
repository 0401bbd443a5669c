# moviemeter/db/base.py
"""
MovieMeter: SQLAlchemy Base registry
=====================================

Import all ORM models so their tables are registered on `Base.metadata`
before `create_all` runs. Keep this file import-only; no runtime logic.
"""

from moviemeter.db.base_class import Base
from moviemeter.db.models.user import User
from moviemeter.db.models.review import Review

__all__ = ["Base", "User", "Review"]
