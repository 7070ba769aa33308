"""004: create alerts table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE alerts (
            id                  VARCHAR(64)     PRIMARY KEY,
            owner_id            VARCHAR(64)     NOT NULL,
            alert_type          VARCHAR(10)     NOT NULL,
            priority            SMALLINT        NOT NULL DEFAULT 0,
            title               VARCHAR(200)    NOT NULL,
            message             VARCHAR(1000)   NOT NULL,
            is_read             BOOLEAN         NOT NULL DEFAULT FALSE,
            read_at             TIMESTAMPTZ,
            related_entity_type VARCHAR(30),
            related_entity_id   VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_alerts_type CHECK (alert_type IN ('info', 'warning', 'critical')),
            CONSTRAINT ck_alerts_read_at CHECK (is_read OR read_at IS NULL)
        );
    """)
    op.execute("""
        CREATE INDEX idx_alerts_inbox
        ON alerts (owner_id, priority DESC, created_at DESC);
    """)
    op.execute("CREATE INDEX idx_alerts_unread ON alerts (owner_id) WHERE is_read = FALSE;")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS alerts CASCADE;")
