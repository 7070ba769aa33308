"""001: create updated_at trigger function and parties table

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE parties (
            id              VARCHAR(64)     PRIMARY KEY,
            owner_id        VARCHAR(64)     NOT NULL,
            name            VARCHAR(120)    NOT NULL,
            mobile          VARCHAR(20),
            party_type      VARCHAR(10)     NOT NULL,
            opening_balance NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_parties_type CHECK (party_type IN ('Customer', 'Vendor', 'Both')),
            CONSTRAINT ck_parties_name_len CHECK (LENGTH(TRIM(name)) >= 1)
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_parties_owner_name ON parties (owner_id, LOWER(name));")
    op.execute("""
        CREATE TRIGGER trg_parties_updated_at
            BEFORE UPDATE ON parties
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE parties IS 'Customers / vendors an entry can be attributed to';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS parties CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
