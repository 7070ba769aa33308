"""002: create entries table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE entries (
            id                      VARCHAR(64)     PRIMARY KEY,
            owner_id                VARCHAR(64)     NOT NULL,
            entry_type              VARCHAR(10)     NOT NULL,
            category                VARCHAR(10)     NOT NULL,
            payment_method          VARCHAR(10)     NOT NULL,
            amount                  NUMERIC(14, 2)  NOT NULL,
            remaining_amount        NUMERIC(14, 2)  NOT NULL,
            settled                 BOOLEAN         NOT NULL DEFAULT FALSE,
            settled_at              DATE,
            entry_date              DATE            NOT NULL,
            notes                   VARCHAR(1000),
            party_id                VARCHAR(64)     REFERENCES parties (id) ON DELETE SET NULL,
            is_settlement_derived   BOOLEAN         NOT NULL DEFAULT FALSE,
            source_settlement_id    VARCHAR(64),
            original_entry_id       VARCHAR(64),
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_entries_type CHECK (
                entry_type IN ('Cash IN', 'Cash OUT', 'Credit', 'Advance')
            ),
            CONSTRAINT ck_entries_category CHECK (
                category IN ('Sales', 'COGS', 'Opex', 'Assets')
            ),
            CONSTRAINT ck_entries_payment_method CHECK (
                payment_method IN ('Cash', 'Bank', 'None')
            ),
            CONSTRAINT ck_entries_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_entries_remaining_range CHECK (
                remaining_amount >= 0 AND remaining_amount <= amount
            ),
            CONSTRAINT ck_entries_settled_flag CHECK (settled = (remaining_amount = 0))
        );
    """)
    op.execute("CREATE INDEX idx_entries_owner_date ON entries (owner_id, entry_date DESC);")
    op.execute("""
        CREATE INDEX idx_entries_open
        ON entries (owner_id, entry_type)
        WHERE settled = FALSE AND entry_type IN ('Credit', 'Advance');
    """)
    op.execute("CREATE INDEX idx_entries_party ON entries (party_id) WHERE party_id IS NOT NULL;")
    op.execute("""
        CREATE TRIGGER trg_entries_updated_at
            BEFORE UPDATE ON entries
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE entries IS 'Ledger entries, amounts in rupees at 2dp';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS entries CASCADE;")
