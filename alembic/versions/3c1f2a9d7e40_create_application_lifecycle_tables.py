# This project was developed with assistance from AI tools.
"""create application lifecycle tables

Revision ID: 3c1f2a9d7e40
Revises:
Create Date: 2026-10-19 09:12:41.518204

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1f2a9d7e40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("applicant_id", sa.String(255), nullable=False),
        sa.Column("property_id", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="DRAFT"),
        sa.Column("current_step", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_saved_step", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("draft_revision", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("property_title", sa.Text(), nullable=True),
        sa.Column("property_address", sa.Text(), nullable=True),
        sa.Column("property_owner_id", sa.String(255), nullable=True),
        sa.Column("application_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("payment_status", sa.String(50), nullable=False, server_default="PENDING"),
        sa.Column("payment_paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("info_requested_reason", sa.Text(), nullable=True),
        sa.Column("info_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("info_requested_by", sa.String(255), nullable=True),
        sa.Column("info_requested_due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("conditional_approval_reason", sa.Text(), nullable=True),
        sa.Column("conditional_approval_due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("conditional_approval_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("conditional_approval_by", sa.String(255), nullable=True),
        sa.Column("rejection_category", sa.String(50), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("withdrawn_reason", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_applications_applicant_id", "applications", ["applicant_id"])
    op.create_index("ix_applications_property_id", "applications", ["property_id"])
    op.create_index("ix_applications_property_owner_id", "applications", ["property_owner_id"])
    op.create_index("ix_applications_expires_at", "applications", ["expires_at"])
    op.create_index(
        "ix_applications_applicant_property", "applications", ["applicant_id", "property_id"]
    )
    op.create_index(
        "uq_applications_open_applicant_property",
        "applications",
        ["applicant_id", "property_id"],
        unique=True,
        postgresql_where=sa.text("status NOT IN ('APPROVED', 'REJECTED', 'WITHDRAWN', 'EXPIRED')"),
    )

    op.create_table(
        "payment_attempts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("reference_id", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("method", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reference_id"),
    )
    op.create_index("ix_payment_attempts_application_id", "payment_attempts", ["application_id"])

    op.create_table(
        "conditional_requirements",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("satisfied", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("satisfied_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("satisfied_by", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("file_id", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_conditional_requirements_application_id", "conditional_requirements", ["application_id"]
    )

    op.create_table(
        "application_status_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("from_status", sa.String(50), nullable=True),
        sa.Column("to_status", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.String(255), nullable=False),
        sa.Column("actor", sa.String(50), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_application_status_events_application_id",
        "application_status_events",
        ["application_id"],
    )


def downgrade() -> None:
    op.drop_table("application_status_events")
    op.drop_table("conditional_requirements")
    op.drop_table("payment_attempts")
    op.drop_index("uq_applications_open_applicant_property", table_name="applications")
    op.drop_index("ix_applications_applicant_property", table_name="applications")
    op.drop_index("ix_applications_expires_at", table_name="applications")
    op.drop_index("ix_applications_property_owner_id", table_name="applications")
    op.drop_index("ix_applications_property_id", table_name="applications")
    op.drop_index("ix_applications_applicant_id", table_name="applications")
    op.drop_table("applications")
