"""003: create settlements table

No FK to entries: deleting an entry leaves its settlements in place.

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlements (
            id                  VARCHAR(64)     PRIMARY KEY,
            owner_id            VARCHAR(64)     NOT NULL,
            original_entry_id   VARCHAR(64)     NOT NULL,
            settlement_type     VARCHAR(10)     NOT NULL,
            amount              NUMERIC(14, 2)  NOT NULL,
            settlement_date     DATE            NOT NULL,
            derived_entry_id    VARCHAR(64),
            notes               VARCHAR(1000),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlements_type CHECK (settlement_type IN ('credit', 'advance')),
            CONSTRAINT ck_settlements_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_settlements_entry
        ON settlements (original_entry_id, settlement_date);
    """)
    op.execute("CREATE INDEX idx_settlements_owner ON settlements (owner_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlements CASCADE;")
