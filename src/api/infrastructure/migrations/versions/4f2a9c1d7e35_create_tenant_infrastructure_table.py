"""create tenant_infrastructure table

Revision ID: 4f2a9c1d7e35
Revises:
Create Date: 2026-10-19 09:12:44.318205

Creates the tenant registry. ``version`` backs compare-and-swap writes and
is never defaulted by the database: the registry always writes it.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "4f2a9c1d7e35"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tenant_infrastructure table and its state index."""
    op.create_table(
        "tenant_infrastructure",
        sa.Column("tenant_id", sa.String(100), primary_key=True),
        sa.Column("tier", sa.String(16), nullable=False),
        sa.Column("provisioning_state", sa.String(32), nullable=False),
        sa.Column("operation", sa.String(16), nullable=False),
        sa.Column("target_account_id", sa.String(32), nullable=True),
        sa.Column("template_ref", sa.String(255), nullable=True),
        sa.Column("stack_name", sa.String(128), nullable=True),
        sa.Column("stack_id", sa.String(512), nullable=True),
        sa.Column(
            "poll_attempts", sa.Integer, nullable=False, server_default=sa.text("0")
        ),
        sa.Column("last_polled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("operation_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_detail", sa.Text, nullable=True),
        sa.Column(
            "stack_outputs",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
    )
    op.create_index(
        "idx_tenant_infrastructure_state",
        "tenant_infrastructure",
        ["provisioning_state"],
    )


def downgrade() -> None:
    """Drop tenant_infrastructure table."""
    op.drop_index(
        "idx_tenant_infrastructure_state", table_name="tenant_infrastructure"
    )
    op.drop_table("tenant_infrastructure")
