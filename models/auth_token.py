import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from models.base import Base, TimestampMixin

class AuthToken(Base, TimestampMixin):
    """Bearer token issued by the identity provider for a portal user."""
    __tablename__ = "auth_tokens"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    token = Column(String(512), unique=True, nullable=False)
    user_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

Index("idx_auth_tokens_user_id", AuthToken.user_id)
