"""monitor subscriptions

Revision ID: 0003_monitor_subscription
Revises: 0002_notification_history
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0003_monitor_subscription"
down_revision = "0002_notification_history"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "monitor_subscription",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("monitor_id", sa.Integer(), sa.ForeignKey("monitor.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("monitor_id", "user_id", name="uq_monitor_subscription_monitor_user"),
    )
    op.create_index("ix_monitor_subscription_user_id", "monitor_subscription", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_monitor_subscription_user_id", table_name="monitor_subscription")
    op.drop_table("monitor_subscription")
