"""EntryRepository / PartyRepository: concrete implementations of the ledger Protocols.

State-changing writes to an entry go through a conditional
UPDATE ... WHERE remaining_amount = :expected RETURNING. PostgreSQL takes the
row lock for the UPDATE, so of two concurrent writers reading the same
remaining_amount exactly one matches; the other gets 0 rows -> ConflictError.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back via `transaction(db)`.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.enums import Category, EntryType, PartyType, PaymentMethod
from src.bk_common.errors import ConflictError, InternalError
from src.bk_ledger.domain.models import Entry, Party

_ENTRY_COLUMNS = """
    id, owner_id, entry_type, category, payment_method,
    amount, remaining_amount, settled, settled_at, entry_date,
    notes, party_id, is_settlement_derived, source_settlement_id,
    original_entry_id, created_at, updated_at
"""

# Columns a compare-and-update patch may touch. amount is deliberately included:
# update_entry re-derives remaining_amount in the same statement.
_PATCHABLE_ENTRY_COLUMNS = frozenset({
    "entry_type", "category", "payment_method", "amount", "remaining_amount",
    "settled", "settled_at", "entry_date", "notes", "party_id",
})

# ---------------------------------------------------------------------------
# SQL: entries
# ---------------------------------------------------------------------------

_GET_ENTRY_SQL = text(f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE id = :id")

_LIST_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM entries
    WHERE owner_id = :owner_id
      AND (CAST(:start AS DATE) IS NULL OR entry_date >= :start)
      AND (CAST(:end AS DATE) IS NULL OR entry_date <= :end)
    ORDER BY entry_date DESC, created_at DESC
""")

_INSERT_ENTRY_SQL = text(f"""
    INSERT INTO entries
        (id, owner_id, entry_type, category, payment_method,
         amount, remaining_amount, settled, settled_at, entry_date,
         notes, party_id, is_settlement_derived, source_settlement_id, original_entry_id)
    VALUES
        (:id, :owner_id, :entry_type, :category, :payment_method,
         :amount, :remaining_amount, :settled, :settled_at, :entry_date,
         :notes, :party_id, :is_settlement_derived, :source_settlement_id, :original_entry_id)
    RETURNING {_ENTRY_COLUMNS}
""")

_DELETE_ENTRY_SQL = text("""
    DELETE FROM entries WHERE id = :id AND owner_id = :owner_id RETURNING id
""")

_CLEAR_PARTY_SQL = text("""
    UPDATE entries SET party_id = NULL, updated_at = NOW()
    WHERE owner_id = :owner_id AND party_id = :party_id
""")

# ---------------------------------------------------------------------------
# SQL: parties
# ---------------------------------------------------------------------------

_PARTY_COLUMNS = "id, owner_id, name, mobile, party_type, opening_balance, created_at, updated_at"

_GET_PARTY_SQL = text(f"SELECT {_PARTY_COLUMNS} FROM parties WHERE id = :id")

_GET_PARTY_BY_NAME_SQL = text(f"""
    SELECT {_PARTY_COLUMNS} FROM parties
    WHERE owner_id = :owner_id AND lower(name) = lower(:name)
""")

_LIST_PARTIES_SQL = text(f"""
    SELECT {_PARTY_COLUMNS} FROM parties WHERE owner_id = :owner_id ORDER BY name
""")

_INSERT_PARTY_SQL = text(f"""
    INSERT INTO parties (id, owner_id, name, mobile, party_type, opening_balance)
    VALUES (:id, :owner_id, :name, :mobile, :party_type, :opening_balance)
    RETURNING {_PARTY_COLUMNS}
""")

_DELETE_PARTY_SQL = text("""
    DELETE FROM parties WHERE id = :id AND owner_id = :owner_id RETURNING id
""")

_PATCHABLE_PARTY_COLUMNS = frozenset({"name", "mobile", "party_type", "opening_balance"})


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _row_to_entry(row: Any) -> Entry:
    return Entry(
        id=row.id,
        owner_id=row.owner_id,
        entry_type=EntryType(row.entry_type),
        category=Category(row.category),
        payment_method=PaymentMethod(row.payment_method),
        amount=Decimal(row.amount),
        remaining_amount=Decimal(row.remaining_amount),
        settled=row.settled,
        settled_at=row.settled_at,
        entry_date=row.entry_date,
        notes=row.notes,
        party_id=row.party_id,
        is_settlement_derived=row.is_settlement_derived,
        source_settlement_id=row.source_settlement_id,
        original_entry_id=row.original_entry_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_party(row: Any) -> Party:
    return Party(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        mobile=row.mobile,
        party_type=PartyType(row.party_type),
        opening_balance=Decimal(row.opening_balance),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _set_clause(patch: dict[str, Any], allowed: frozenset[str]) -> str:
    unknown = set(patch) - allowed
    if unknown:
        raise InternalError(f"Unpatchable columns: {sorted(unknown)}")
    return ", ".join(f"{column} = :p_{column}" for column in sorted(patch))


class EntryRepository:
    """Concrete repository; all mutations atomic at the SQL level."""

    async def get_entry(self, db: AsyncSession, entry_id: str) -> Entry | None:
        result = await db.execute(_GET_ENTRY_SQL, {"id": entry_id})
        row = result.fetchone()
        return _row_to_entry(row) if row else None

    async def list_entries(
        self,
        db: AsyncSession,
        owner_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Entry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL, {"owner_id": owner_id, "start": start, "end": end}
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def insert_entry(self, db: AsyncSession, entry: Entry) -> Entry:
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "id": entry.id,
                "owner_id": entry.owner_id,
                "entry_type": entry.entry_type.value,
                "category": entry.category.value,
                "payment_method": entry.payment_method.value,
                "amount": entry.amount,
                "remaining_amount": entry.remaining_amount,
                "settled": entry.settled,
                "settled_at": entry.settled_at,
                "entry_date": entry.entry_date,
                "notes": entry.notes,
                "party_id": entry.party_id,
                "is_settlement_derived": entry.is_settlement_derived,
                "source_settlement_id": entry.source_settlement_id,
                "original_entry_id": entry.original_entry_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Entry insert returned no rows")
        return _row_to_entry(row)

    async def compare_and_update_entry(
        self,
        db: AsyncSession,
        entry_id: str,
        owner_id: str,
        expected_remaining: Decimal,
        patch: dict[str, Any],
    ) -> Entry:
        sql = text(f"""
            UPDATE entries
            SET {_set_clause(patch, _PATCHABLE_ENTRY_COLUMNS)}, updated_at = NOW()
            WHERE id = :id AND owner_id = :owner_id
              AND remaining_amount = :expected_remaining
            RETURNING {_ENTRY_COLUMNS}
        """)
        params: dict[str, Any] = {
            "id": entry_id,
            "owner_id": owner_id,
            "expected_remaining": expected_remaining,
        }
        params.update({f"p_{k}": _db_value(v) for k, v in patch.items()})
        result = await db.execute(sql, params)
        row = result.fetchone()
        if row is None:
            raise ConflictError(
                f"Entry {entry_id} changed since it was read (expected remaining {expected_remaining})"
            )
        return _row_to_entry(row)

    async def delete_entry(self, db: AsyncSession, entry_id: str, owner_id: str) -> bool:
        result = await db.execute(_DELETE_ENTRY_SQL, {"id": entry_id, "owner_id": owner_id})
        return result.fetchone() is not None

    async def clear_party(self, db: AsyncSession, owner_id: str, party_id: str) -> int:
        result = await db.execute(
            _CLEAR_PARTY_SQL, {"owner_id": owner_id, "party_id": party_id}
        )
        return int(result.rowcount or 0)


class PartyRepository:
    async def get_party(self, db: AsyncSession, party_id: str) -> Party | None:
        result = await db.execute(_GET_PARTY_SQL, {"id": party_id})
        row = result.fetchone()
        return _row_to_party(row) if row else None

    async def get_party_by_name(
        self, db: AsyncSession, owner_id: str, name: str
    ) -> Party | None:
        result = await db.execute(_GET_PARTY_BY_NAME_SQL, {"owner_id": owner_id, "name": name})
        row = result.fetchone()
        return _row_to_party(row) if row else None

    async def list_parties(self, db: AsyncSession, owner_id: str) -> list[Party]:
        result = await db.execute(_LIST_PARTIES_SQL, {"owner_id": owner_id})
        return [_row_to_party(row) for row in result.fetchall()]

    async def insert_party(self, db: AsyncSession, party: Party) -> Party:
        result = await db.execute(
            _INSERT_PARTY_SQL,
            {
                "id": party.id,
                "owner_id": party.owner_id,
                "name": party.name,
                "mobile": party.mobile,
                "party_type": party.party_type.value,
                "opening_balance": party.opening_balance,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Party insert returned no rows")
        return _row_to_party(row)

    async def update_party(
        self, db: AsyncSession, party_id: str, owner_id: str, patch: dict[str, Any]
    ) -> Party | None:
        sql = text(f"""
            UPDATE parties
            SET {_set_clause(patch, _PATCHABLE_PARTY_COLUMNS)}, updated_at = NOW()
            WHERE id = :id AND owner_id = :owner_id
            RETURNING {_PARTY_COLUMNS}
        """)
        params: dict[str, Any] = {"id": party_id, "owner_id": owner_id}
        params.update({f"p_{k}": _db_value(v) for k, v in patch.items()})
        result = await db.execute(sql, params)
        row = result.fetchone()
        return _row_to_party(row) if row else None

    async def delete_party(self, db: AsyncSession, party_id: str, owner_id: str) -> bool:
        result = await db.execute(_DELETE_PARTY_SQL, {"id": party_id, "owner_id": owner_id})
        return result.fetchone() is not None
