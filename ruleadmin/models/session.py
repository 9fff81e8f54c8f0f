from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from ruleadmin.models.base import Base, utcnow


class UserSession(Base):
    """Opaque cookie token mapped to a user until ``expires_at``."""

    __tablename__ = "user_sessions"
    token = Column(String(64), primary_key=True)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (Index("idx_user_sessions_user_id", "user_id"),)
