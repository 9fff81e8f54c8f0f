"""create users, user_sessions and engagement_rules

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "a1c4e7f20b31"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "user_sessions",
        sa.Column("token", sa.String(length=64), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_user_sessions_user_id", "user_sessions", ["user_id"])

    op.create_table(
        "engagement_rules",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("event_name", sa.String(length=255), nullable=False),
        sa.Column("billing_type", sa.String(length=10), nullable=False),
        sa.Column("tactic_field", sa.String(length=255), nullable=True),
        sa.Column("is_engagement", sa.SmallInteger(), nullable=False),
        sa.Column("is_exposure", sa.SmallInteger(), nullable=False),
        sa.Column("is_active", sa.SmallInteger(), nullable=False),
        sa.Column("is_latest", sa.SmallInteger(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_to", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_by", sa.String(length=255), nullable=False),
        sa.Column("inactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inactivated_by", sa.String(length=255), nullable=True),
        sa.UniqueConstraint(
            "event_name", "version", name="uq_engagement_rules_version"
        ),
        sa.CheckConstraint(
            "billing_type IN ('CPX', 'CPE', 'CPVS')", name="ck_billing_type"
        ),
        sa.CheckConstraint("is_engagement IN (0, 1)", name="ck_is_engagement"),
        sa.CheckConstraint("is_exposure IN (0, 1)", name="ck_is_exposure"),
        sa.CheckConstraint("is_active IN (0, 1)", name="ck_is_active"),
        sa.CheckConstraint("is_latest IN (0, 1)", name="ck_is_latest"),
        sa.CheckConstraint("version >= 1", name="ck_version_positive"),
        sa.CheckConstraint(
            "valid_to IS NULL OR valid_to >= valid_from", name="ck_valid_range"
        ),
        sa.CheckConstraint(
            "(is_active = 1 AND inactivated_at IS NULL AND inactivated_by IS NULL)"
            " OR (is_active = 0 AND inactivated_at IS NOT NULL"
            " AND inactivated_by IS NOT NULL)",
            name="ck_inactivation_consistent",
        ),
    )
    # Single latest version per event name
    op.create_index(
        "uq_engagement_rules_latest",
        "engagement_rules",
        ["event_name"],
        unique=True,
        postgresql_where=sa.text("is_latest = 1"),
        sqlite_where=sa.text("is_latest = 1"),
    )
    op.create_index(
        "idx_engagement_rules_event_latest",
        "engagement_rules",
        ["event_name", "is_latest"],
    )


def downgrade() -> None:
    op.drop_index("idx_engagement_rules_event_latest", table_name="engagement_rules")
    op.drop_index("uq_engagement_rules_latest", table_name="engagement_rules")
    op.drop_table("engagement_rules")
    op.drop_index("idx_user_sessions_user_id", table_name="user_sessions")
    op.drop_table("user_sessions")
    op.drop_table("users")
