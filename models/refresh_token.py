"""
RefreshToken model: one row per issued refresh token, kept for audit.
Fields:
- token (unique, base64 of 64 random bytes)
- user_id (String(36)) - FK to users.id
- expires_on
- created_on, created_by_ip
- revoked_on, revoked_by_ip (both set when revoked)

Rows are never deleted; revocation only fills the revoked_* columns.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, utcnow


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(128), nullable=False, unique=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_on = Column(DateTime, nullable=False)
    created_on = Column(DateTime, nullable=False, default=utcnow)
    created_by_ip = Column(String(45), nullable=False)
    revoked_on = Column(DateTime, nullable=True)
    revoked_by_ip = Column(String(45), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_refresh_tokens_user_token", "user_id", "token"),
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_on is not None or self.revoked_by_ip is not None

    @property
    def is_expired(self) -> bool:
        return self.expires_on <= utcnow()

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired

    def revoke(self, ip_address: str):
        self.revoked_by_ip = ip_address
        self.revoked_on = utcnow()

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id} expires_on={self.expires_on}>"
