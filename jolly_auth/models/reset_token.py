"""Password reset token model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from jolly_auth.database import Base


class ResetToken(Base):
    """Hashed, time-limited password reset token. At most one row per user."""

    __tablename__ = "reset_token"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)
