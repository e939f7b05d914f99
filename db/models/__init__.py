"""
SQLAlchemy models for the pkeeper database.

All models inherit from db.engine.Base.
"""

from db.models.user import UserRow
from db.models.auth import RefreshTokenRow

__all__ = [
    "UserRow",
    "RefreshTokenRow",
]
