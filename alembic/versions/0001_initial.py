"""Initial schema: change requests, user profiles, audit log.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "change_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="PENDING", nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("requester_id", sa.Uuid(), nullable=False),
        sa.Column("admin_remark", sa.String(), nullable=True),
        sa.Column("manager_response", sa.String(), nullable=True),
        sa.Column("decided_by", sa.Uuid(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("merge_status", sa.String(length=50), server_default="NOT_APPLICABLE", nullable=False),
        sa.Column("merge_attempts", sa.Integer(), server_default="0", nullable=False),
        sa.Column("merge_error", sa.String(), nullable=True),
        sa.Column("merged_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_change_request_type", "change_request", ["type"])
    op.create_index("ix_change_request_status", "change_request", ["status"])
    op.create_index("ix_change_request_user_id", "change_request", ["user_id"])
    op.create_index("ix_change_request_requester_id", "change_request", ["requester_id"])
    op.create_index("ix_change_request_status_type", "change_request", ["status", "type"])
    op.create_index("ix_change_request_merge", "change_request", ["status", "merge_status"])

    op.create_table(
        "user_profile",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("personal_details", sa.JSON(), nullable=True),
        sa.Column("family", sa.JSON(), nullable=True),
        sa.Column("education", sa.JSON(), nullable=True),
        sa.Column("medical", sa.JSON(), nullable=True),
        sa.Column("others", sa.JSON(), nullable=True),
        sa.Column("leave_data", sa.JSON(), nullable=True),
        sa.Column("salary_data", sa.JSON(), nullable=True),
        sa.Column("documents", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_created_at", table_name="audit_log")
    op.drop_index("ix_audit_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("user_profile")
    op.drop_index("ix_change_request_merge", table_name="change_request")
    op.drop_index("ix_change_request_status_type", table_name="change_request")
    op.drop_index("ix_change_request_requester_id", table_name="change_request")
    op.drop_index("ix_change_request_user_id", table_name="change_request")
    op.drop_index("ix_change_request_status", table_name="change_request")
    op.drop_index("ix_change_request_type", table_name="change_request")
    op.drop_table("change_request")
