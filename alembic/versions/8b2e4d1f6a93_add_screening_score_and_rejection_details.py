# This project was developed with assistance from AI tools.
"""add screening score and rejection details

Revision ID: 8b2e4d1f6a93
Revises: 3c1f2a9d7e40
Create Date: 2026-10-19 15:40:07.204311

"""

import sqlalchemy as sa
from alembic import op

revision = "8b2e4d1f6a93"
down_revision = "3c1f2a9d7e40"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("applications", sa.Column("score", sa.Integer(), nullable=True))
    op.add_column("applications", sa.Column("score_breakdown", sa.JSON(), nullable=True))
    op.add_column("applications", sa.Column("scored_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("applications", sa.Column("rejection_details", sa.JSON(), nullable=True))


def downgrade() -> None:
    op.drop_column("applications", "rejection_details")
    op.drop_column("applications", "scored_at")
    op.drop_column("applications", "score_breakdown")
    op.drop_column("applications", "score")
