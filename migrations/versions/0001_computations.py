"""computations table

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "computations",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("trust_id", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("input_hash", sa.String(), nullable=False),
        sa.Column("trigger", sa.String(), nullable=False),
        sa.Column("trust", sa.Text(), nullable=False),
        sa.Column("results", sa.Text(), nullable=False),
        sa.Column("app_version", sa.String(), nullable=True),
        sa.Column("engine_version", sa.String(), nullable=True),
        sa.Column("ruleset_version", sa.String(), nullable=True),
        sa.Column("schema_version", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("trust_id", "version", name="uq_computation_trust_version"),
    )
    op.create_index("ix_computations_trust_id", "computations", ["trust_id"])
    op.create_index("ix_computations_input_hash", "computations", ["input_hash"])


def downgrade() -> None:
    op.drop_index("ix_computations_input_hash", table_name="computations")
    op.drop_index("ix_computations_trust_id", table_name="computations")
    op.drop_table("computations")
