"""bk_settlement endpoints.

POST   /settlements                  settle a Credit / Advance entry (partially or fully)
GET    /settlements?entry_id=...     settlement history
DELETE /settlements/{settlement_id}  reverse one settlement
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import get_db_session
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_current_owner, get_settlement_engine
from src.bk_settlement.application.schemas import CreateSettlementRequest
from src.bk_settlement.application.service import SettlementEngine

router = APIRouter(prefix="/settlements", tags=["settlements"])

Owner = Annotated[str, Depends(get_current_owner)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Engine = Annotated[SettlementEngine, Depends(get_settlement_engine)]


@router.post("")
async def create_settlement(
    body: CreateSettlementRequest, owner_id: Owner, db: Db, engine: Engine, request: Request
) -> ApiResponse:
    data = await engine.create_settlement(
        db,
        owner_id,
        body.entry_id,
        body.amount,
        body.settlement_date,
        notes=body.notes,
        payment_method=body.payment_method,
    )
    return success_response(data.model_dump(mode="json"), request)


@router.get("")
async def list_settlements(
    owner_id: Owner,
    db: Db,
    engine: Engine,
    request: Request,
    entry_id: str | None = Query(None, description="Only settlements of this entry"),
) -> ApiResponse:
    data = await engine.list_settlements(db, owner_id, entry_id)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{settlement_id}")
async def reverse_settlement(
    settlement_id: str, owner_id: Owner, db: Db, engine: Engine, request: Request
) -> ApiResponse:
    data = await engine.reverse_settlement(db, owner_id, settlement_id)
    return success_response(data.model_dump(mode="json"), request)
