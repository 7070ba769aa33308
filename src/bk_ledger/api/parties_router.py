"""bk_ledger party endpoints: CRUD over counterparties plus each party's running balance."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import get_db_session
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_current_owner, get_party_service
from src.bk_ledger.application.party_service import PartyApplicationService
from src.bk_ledger.application.schemas import CreatePartyRequest, UpdatePartyRequest

router = APIRouter(prefix="/parties", tags=["parties"])

Owner = Annotated[str, Depends(get_current_owner)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[PartyApplicationService, Depends(get_party_service)]


@router.post("")
async def create_party(
    body: CreatePartyRequest, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.create_party(db, owner_id, body.model_dump())
    return success_response(data.model_dump(mode="json"), request)


@router.get("")
async def list_parties(owner_id: Owner, db: Db, service: Service, request: Request) -> ApiResponse:
    data = await service.list_parties(db, owner_id)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{party_id}")
async def get_party(
    party_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.get_party(db, owner_id, party_id)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{party_id}/balance")
async def get_party_balance(
    party_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.get_party_balance(db, owner_id, party_id)
    return success_response(data.model_dump(mode="json"), request)


@router.patch("/{party_id}")
async def update_party(
    party_id: str,
    body: UpdatePartyRequest,
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
) -> ApiResponse:
    data = await service.update_party(db, owner_id, party_id, body.model_dump(exclude_unset=True))
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{party_id}")
async def delete_party(
    party_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    unlinked = await service.delete_party(db, owner_id, party_id)
    return success_response({"party_id": party_id, "unlinked_entries": unlinked}, request)
