from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_settlement.domain.models import Settlement


class SettlementRepositoryProtocol(Protocol):
    async def get_settlement(self, db: AsyncSession, settlement_id: str) -> Settlement | None: ...

    async def list_settlements(
        self, db: AsyncSession, owner_id: str, entry_id: str | None = None
    ) -> list[Settlement]:
        """Newest first; restricted to one original entry when ``entry_id`` is given."""
        ...

    async def insert_settlement(self, db: AsyncSession, settlement: Settlement) -> Settlement: ...

    async def delete_settlement(
        self, db: AsyncSession, settlement_id: str, owner_id: str
    ) -> bool: ...
