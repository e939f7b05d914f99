"""
User model.

UserRow: account identity, password hash and the client KDF salt
"""

from sqlalchemy import Column, DateTime, LargeBinary, String
from sqlalchemy.orm import relationship

from auth.models import utcnow
from db.engine import Base


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    login = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(LargeBinary, nullable=False)
    kdf_salt = Column(LargeBinary, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    refresh_tokens = relationship(
        "RefreshTokenRow", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<UserRow(id={self.id}, login={self.login})>"
