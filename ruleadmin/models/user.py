import uuid

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from ruleadmin.models.base import Base, utcnow


class User(Base):
    """Administrator account allowed to manage engagement rules.

    ``email`` is stored lower-cased and doubles as the actor identity
    written to ``modified_by`` / ``inactivated_by`` on rule versions.
    """

    __tablename__ = "users"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    sessions = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )
