"""PartyApplicationService — counterparties used to group entries.

Parties are for grouping only. Deleting one clears ``party_id`` on the owner's
entries in the same transaction; the entries themselves are untouched.
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import transaction
from src.bk_common.errors import (
    AuthorizationError,
    DuplicatePartyError,
    PartyNotFoundError,
    ValidationError,
)
from src.bk_common.id_generator import new_id
from src.bk_common.money import to_money
from src.bk_ledger.application.schemas import (
    PartyBalanceResponse,
    PartyListResponse,
    PartyResponse,
)
from src.bk_ledger.domain.models import Party
from src.bk_ledger.domain.party_balance import party_balance
from src.bk_ledger.domain.repository import EntryRepositoryProtocol, PartyRepositoryProtocol
from src.bk_ledger.domain.validation import validate_party_name, validate_party_type
from src.bk_ledger.infrastructure.persistence import EntryRepository, PartyRepository

logger = logging.getLogger(__name__)


def _opening_balance(value: Any) -> Decimal:
    try:
        return to_money(value if value is not None else 0)
    except ValueError as exc:
        raise ValidationError("opening_balance", str(exc)) from None


class PartyApplicationService:
    def __init__(
        self,
        repo: PartyRepositoryProtocol | None = None,
        entry_repo: EntryRepositoryProtocol | None = None,
    ) -> None:
        self._repo: PartyRepositoryProtocol = repo or PartyRepository()
        self._entries: EntryRepositoryProtocol = entry_repo or EntryRepository()

    async def create_party(
        self, db: AsyncSession, owner_id: str, data: dict[str, Any]
    ) -> PartyResponse:
        name = validate_party_name(data.get("name"))
        party = Party(
            id=new_id("pty"),
            owner_id=owner_id,
            name=name,
            party_type=validate_party_type(data.get("party_type")),
            opening_balance=_opening_balance(data.get("opening_balance")),
            mobile=(data.get("mobile") or None),
        )
        async with transaction(db):
            if await self._repo.get_party_by_name(db, owner_id, name) is not None:
                raise DuplicatePartyError(name)
            party = await self._repo.insert_party(db, party)
        logger.info("Party created: id=%s owner=%s", party.id, owner_id)
        return PartyResponse.from_domain(party)

    async def update_party(
        self, db: AsyncSession, owner_id: str, party_id: str, patch: dict[str, Any]
    ) -> PartyResponse:
        changes: dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = validate_party_name(patch["name"])
        if "party_type" in patch:
            changes["party_type"] = validate_party_type(patch["party_type"])
        if "opening_balance" in patch:
            changes["opening_balance"] = _opening_balance(patch["opening_balance"])
        if "mobile" in patch:
            changes["mobile"] = patch["mobile"] or None

        async with transaction(db):
            current = await self._load_owned(db, owner_id, party_id)
            if not changes:
                return PartyResponse.from_domain(current)
            if "name" in changes and changes["name"].lower() != current.name.lower():
                if await self._repo.get_party_by_name(db, owner_id, changes["name"]) is not None:
                    raise DuplicatePartyError(changes["name"])
            updated = await self._repo.update_party(db, party_id, owner_id, changes)
            if updated is None:
                raise PartyNotFoundError(party_id)
        return PartyResponse.from_domain(updated)

    async def delete_party(self, db: AsyncSession, owner_id: str, party_id: str) -> int:
        """Returns how many entries were unlinked."""
        async with transaction(db):
            await self._load_owned(db, owner_id, party_id)
            unlinked = await self._entries.clear_party(db, owner_id, party_id)
            if not await self._repo.delete_party(db, party_id, owner_id):
                raise PartyNotFoundError(party_id)
        logger.info("Party deleted: id=%s unlinked_entries=%d", party_id, unlinked)
        return unlinked

    async def get_party(self, db: AsyncSession, owner_id: str, party_id: str) -> PartyResponse:
        return PartyResponse.from_domain(await self._load_owned(db, owner_id, party_id))

    async def list_parties(self, db: AsyncSession, owner_id: str) -> PartyListResponse:
        parties = await self._repo.list_parties(db, owner_id)
        return PartyListResponse(items=[PartyResponse.from_domain(p) for p in parties])

    async def get_party_balance(
        self, db: AsyncSession, owner_id: str, party_id: str
    ) -> PartyBalanceResponse:
        """Opening balance plus the party's debits minus its credits."""
        party = await self._load_owned(db, owner_id, party_id)
        entries = await self._entries.list_entries(db, owner_id)
        return PartyBalanceResponse.from_domain(party, party_balance(party, entries))

    async def _load_owned(self, db: AsyncSession, owner_id: str, party_id: str) -> Party:
        party = await self._repo.get_party(db, party_id)
        if party is None:
            raise PartyNotFoundError(party_id)
        if party.owner_id != owner_id:
            raise AuthorizationError("parties", party_id)
        return party
