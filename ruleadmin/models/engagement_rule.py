import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
    Uuid,
    text,
)

from ruleadmin.core.constants import (
    BILLING_TYPE_CHECK_CLAUSE,
    EVENT_NAME_MAX_LENGTH,
    FLAG_CHECK_CLAUSE,
    TACTIC_FIELD_MAX_LENGTH,
)
from ruleadmin.models.base import Base, utcnow


class EngagementRule(Base):
    """One version record of a named engagement rule (SCD Type 2).

    All versions sharing ``event_name`` form the rule chain.  Exactly one
    record per chain has ``is_latest = 1``; older versions are closed by
    setting ``valid_to`` and are never modified again.  ``is_active`` is
    an independent flag that may only change on the latest record, with
    ``inactivated_at`` / ``inactivated_by`` set exactly while it is 0.
    """

    __tablename__ = "engagement_rules"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_name = Column(String(EVENT_NAME_MAX_LENGTH), nullable=False)
    billing_type = Column(String(10), nullable=False)
    tactic_field = Column(String(TACTIC_FIELD_MAX_LENGTH))
    is_engagement = Column(SmallInteger, nullable=False)
    is_exposure = Column(SmallInteger, nullable=False)
    is_active = Column(SmallInteger, nullable=False, default=1)
    is_latest = Column(SmallInteger, nullable=False, default=1)
    version = Column(Integer, nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    valid_to = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    modified_by = Column(String(255), nullable=False)
    inactivated_at = Column(DateTime(timezone=True))
    inactivated_by = Column(String(255))

    __table_args__ = (
        UniqueConstraint("event_name", "version", name="uq_engagement_rules_version"),
        # At most one latest record per chain, enforced by the database so
        # two racing writers cannot both commit a new latest version.
        Index(
            "uq_engagement_rules_latest",
            "event_name",
            unique=True,
            postgresql_where=text("is_latest = 1"),
            sqlite_where=text("is_latest = 1"),
        ),
        Index("idx_engagement_rules_event_latest", "event_name", "is_latest"),
        CheckConstraint(BILLING_TYPE_CHECK_CLAUSE, name="ck_billing_type"),
        CheckConstraint(
            FLAG_CHECK_CLAUSE.format(col="is_engagement"), name="ck_is_engagement"
        ),
        CheckConstraint(
            FLAG_CHECK_CLAUSE.format(col="is_exposure"), name="ck_is_exposure"
        ),
        CheckConstraint(FLAG_CHECK_CLAUSE.format(col="is_active"), name="ck_is_active"),
        CheckConstraint(FLAG_CHECK_CLAUSE.format(col="is_latest"), name="ck_is_latest"),
        CheckConstraint("version >= 1", name="ck_version_positive"),
        CheckConstraint(
            "valid_to IS NULL OR valid_to >= valid_from", name="ck_valid_range"
        ),
        CheckConstraint(
            "(is_active = 1 AND inactivated_at IS NULL AND inactivated_by IS NULL)"
            " OR (is_active = 0 AND inactivated_at IS NOT NULL"
            " AND inactivated_by IS NOT NULL)",
            name="ck_inactivation_consistent",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<EngagementRule {self.event_name!r} v{self.version}"
            f" latest={self.is_latest} active={self.is_active}>"
        )
