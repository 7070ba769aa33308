"""Repository Protocols — dependency inversion for testability.

Unit tests inject an in-memory fake or a mock that conforms to these Protocols.
Infrastructure layer provides the real implementation.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_ledger.domain.models import Entry, Party


class EntryRepositoryProtocol(Protocol):
    async def get_entry(self, db: AsyncSession, entry_id: str) -> Entry | None: ...

    async def list_entries(
        self,
        db: AsyncSession,
        owner_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Entry]: ...

    async def insert_entry(self, db: AsyncSession, entry: Entry) -> Entry: ...

    async def compare_and_update_entry(
        self,
        db: AsyncSession,
        entry_id: str,
        owner_id: str,
        expected_remaining: Decimal,
        patch: dict[str, Any],
    ) -> Entry:
        """Apply ``patch`` only if remaining_amount still equals ``expected_remaining``.

        Raises ConflictError when the row changed (or vanished) since it was read.
        """
        ...

    async def delete_entry(self, db: AsyncSession, entry_id: str, owner_id: str) -> bool: ...

    async def clear_party(self, db: AsyncSession, owner_id: str, party_id: str) -> int: ...


class PartyRepositoryProtocol(Protocol):
    async def get_party(self, db: AsyncSession, party_id: str) -> Party | None: ...

    async def get_party_by_name(
        self, db: AsyncSession, owner_id: str, name: str
    ) -> Party | None: ...

    async def list_parties(self, db: AsyncSession, owner_id: str) -> list[Party]: ...

    async def insert_party(self, db: AsyncSession, party: Party) -> Party: ...

    async def update_party(
        self, db: AsyncSession, party_id: str, owner_id: str, patch: dict[str, Any]
    ) -> Party | None: ...

    async def delete_party(self, db: AsyncSession, party_id: str, owner_id: str) -> bool: ...
