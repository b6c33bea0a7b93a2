"""Create sos_alerts and sos_volunteer_responses tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "sos_alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("citizen_id", sa.Integer(), nullable=False),
        sa.Column("citizen_name", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="Pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["citizen_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sos_alerts_citizen_id"), "sos_alerts", ["citizen_id"], unique=False)
    op.create_index("ix_sos_alerts_location", "sos_alerts", ["latitude", "longitude"], unique=False)

    op.create_table(
        "sos_volunteer_responses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sos_alert_id", sa.Integer(), nullable=False),
        sa.Column("volunteer_id", sa.Integer(), nullable=False),
        sa.Column("volunteer_name", sa.String(255), nullable=False),
        sa.Column("push_token", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("response_status", sa.String(32), nullable=False, server_default="Notified"),
        sa.Column("response_timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["sos_alert_id"], ["sos_alerts.id"]),
        sa.ForeignKeyConstraint(["volunteer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sos_alert_id", "volunteer_id", name="uq_sos_response_volunteer"),
    )
    op.create_index(op.f("ix_sos_volunteer_responses_sos_alert_id"), "sos_volunteer_responses", ["sos_alert_id"], unique=False)
    op.create_index(op.f("ix_sos_volunteer_responses_volunteer_id"), "sos_volunteer_responses", ["volunteer_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_sos_volunteer_responses_volunteer_id"), table_name="sos_volunteer_responses")
    op.drop_index(op.f("ix_sos_volunteer_responses_sos_alert_id"), table_name="sos_volunteer_responses")
    op.drop_table("sos_volunteer_responses")
    op.drop_index("ix_sos_alerts_location", table_name="sos_alerts")
    op.drop_index(op.f("ix_sos_alerts_citizen_id"), table_name="sos_alerts")
    op.drop_table("sos_alerts")
