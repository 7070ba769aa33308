"""bk_ledger entry endpoints — all require a Bearer token.

POST   /entries             create (rate limited, may raise alerts)
GET    /entries             list, optional [start, end] on entry_date
GET    /entries/{entry_id}
PATCH  /entries/{entry_id}  re-validated, remaining re-derived
DELETE /entries/{entry_id}  unrestricted; reports orphaned settlements
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import get_db_session
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_current_owner, get_ledger_service
from src.bk_ledger.application.schemas import CreateEntryRequest, UpdateEntryRequest
from src.bk_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/entries", tags=["entries"])

Owner = Annotated[str, Depends(get_current_owner)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[LedgerApplicationService, Depends(get_ledger_service)]


@router.post("")
async def create_entry(
    body: CreateEntryRequest, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.create_entry(db, owner_id, body.model_dump())
    return success_response(data.model_dump(mode="json"), request)


@router.get("")
async def list_entries(
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
    start: date | None = Query(None, description="Inclusive lower bound on entry_date"),
    end: date | None = Query(None, description="Inclusive upper bound on entry_date"),
) -> ApiResponse:
    data = await service.list_entries(db, owner_id, start, end)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{entry_id}")
async def get_entry(
    entry_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.get_entry(db, owner_id, entry_id)
    return success_response(data.model_dump(mode="json"), request)


@router.patch("/{entry_id}")
async def update_entry(
    entry_id: str,
    body: UpdateEntryRequest,
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
) -> ApiResponse:
    data = await service.update_entry(db, owner_id, entry_id, body.model_dump(exclude_unset=True))
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.delete_entry(db, owner_id, entry_id)
    return success_response(data.model_dump(mode="json"), request)
