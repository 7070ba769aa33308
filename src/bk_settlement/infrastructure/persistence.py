"""SettlementRepository — raw SQL over the settlements table.

settlements.original_entry_id carries no foreign key: deleting an entry leaves
its settlement history in place (reported to the caller as orphaned).
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.enums import SettlementType
from src.bk_common.errors import InternalError
from src.bk_settlement.domain.models import Settlement

_COLUMNS = """
    id, owner_id, original_entry_id, settlement_type, amount,
    settlement_date, derived_entry_id, notes, created_at
"""

_GET_SQL = text(f"SELECT {_COLUMNS} FROM settlements WHERE id = :id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM settlements
    WHERE owner_id = :owner_id
      AND (CAST(:entry_id AS VARCHAR) IS NULL OR original_entry_id = :entry_id)
    ORDER BY settlement_date DESC, created_at DESC
""")

_INSERT_SQL = text(f"""
    INSERT INTO settlements
        (id, owner_id, original_entry_id, settlement_type, amount,
         settlement_date, derived_entry_id, notes)
    VALUES
        (:id, :owner_id, :original_entry_id, :settlement_type, :amount,
         :settlement_date, :derived_entry_id, :notes)
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("""
    DELETE FROM settlements WHERE id = :id AND owner_id = :owner_id RETURNING id
""")


def _row_to_settlement(row: Any) -> Settlement:
    return Settlement(
        id=row.id,
        owner_id=row.owner_id,
        original_entry_id=row.original_entry_id,
        settlement_type=SettlementType(row.settlement_type),
        amount=Decimal(row.amount),
        settlement_date=row.settlement_date,
        derived_entry_id=row.derived_entry_id,
        notes=row.notes,
        created_at=row.created_at,
    )


class SettlementRepository:
    async def get_settlement(self, db: AsyncSession, settlement_id: str) -> Settlement | None:
        result = await db.execute(_GET_SQL, {"id": settlement_id})
        row = result.fetchone()
        return _row_to_settlement(row) if row else None

    async def list_settlements(
        self, db: AsyncSession, owner_id: str, entry_id: str | None = None
    ) -> list[Settlement]:
        result = await db.execute(_LIST_SQL, {"owner_id": owner_id, "entry_id": entry_id})
        return [_row_to_settlement(row) for row in result.fetchall()]

    async def insert_settlement(self, db: AsyncSession, settlement: Settlement) -> Settlement:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": settlement.id,
                "owner_id": settlement.owner_id,
                "original_entry_id": settlement.original_entry_id,
                "settlement_type": settlement.settlement_type.value,
                "amount": settlement.amount,
                "settlement_date": settlement.settlement_date,
                "derived_entry_id": settlement.derived_entry_id,
                "notes": settlement.notes,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Settlement insert returned no rows")
        return _row_to_settlement(row)

    async def delete_settlement(
        self, db: AsyncSession, settlement_id: str, owner_id: str
    ) -> bool:
        result = await db.execute(_DELETE_SQL, {"id": settlement_id, "owner_id": owner_id})
        return result.fetchone() is not None
