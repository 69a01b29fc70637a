"""
Token model: every access token handed out is recorded here so it can be revoked.
Fields:
- user_id (String(36)) - FK to users.id
- token - the signed JWT string
- token_type - always BEARER
- expired, revoked (bool) - both flipped when a newer token supersedes this one
Refresh tokens are never stored.
"""
from enum import Enum

from sqlalchemy import Column, String, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base


class TokenType(str, Enum):
    BEARER = "BEARER"


class Token(BaseModel, Base):
    __tablename__ = "tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(1024), nullable=False, unique=True)
    token_type = Column(SAEnum(TokenType, name="token_type", native_enum=False), nullable=False, default=TokenType.BEARER)
    expired = Column(Boolean, default=False, nullable=False)
    revoked = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        Index("ix_tokens_user_valid", "user_id", "expired", "revoked"),
    )

    @property
    def is_valid(self) -> bool:
        return not self.expired and not self.revoked

    def __repr__(self):
        return f"<Token user={self.user_id} expired={self.expired} revoked={self.revoked}>"
