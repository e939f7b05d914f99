"""
Auth models for refresh token management.

RefreshTokenRow: one live refresh token; only the SHA-256 digest of the secret is stored
"""

from sqlalchemy import Column, DateTime, ForeignKey, LargeBinary, String
from sqlalchemy.orm import relationship

from auth.models import utcnow
from db.engine import Base


class RefreshTokenRow(Base):
    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token_hash = Column(LargeBinary(32), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationship
    user = relationship("UserRow", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshTokenRow(id={self.id}, user_id={self.user_id})>"
