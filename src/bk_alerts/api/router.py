"""bk_alerts endpoints: the caller's alert inbox.

GET    /alerts                     list (most urgent first)
GET    /alerts/counts              total / unread / critical unread
POST   /alerts/{alert_id}/read     mark one read
POST   /alerts/read-all            mark all read
DELETE /alerts/read                delete every read alert
POST   /alerts/cleanup             retention sweep of old read alerts
DELETE /alerts/{alert_id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_alerts.application.schemas import CleanupRequest
from src.bk_alerts.application.service import AlertApplicationService
from src.bk_common.database import get_db_session
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_alert_service, get_current_owner

router = APIRouter(prefix="/alerts", tags=["alerts"])

Owner = Annotated[str, Depends(get_current_owner)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[AlertApplicationService, Depends(get_alert_service)]


@router.get("")
async def list_alerts(
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    data = await service.list_alerts(db, owner_id, unread_only, limit)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/counts")
async def alert_counts(owner_id: Owner, db: Db, service: Service, request: Request) -> ApiResponse:
    data = await service.alert_counts(db, owner_id)
    return success_response(data.model_dump(mode="json"), request)


@router.post("/read-all")
async def mark_all_read(owner_id: Owner, db: Db, service: Service, request: Request) -> ApiResponse:
    data = await service.mark_all_read(db, owner_id)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/read")
async def delete_read_alerts(
    owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.delete_read_alerts(db, owner_id)
    return success_response(data.model_dump(mode="json"), request)


@router.post("/cleanup")
async def cleanup_old_read_alerts(
    owner_id: Owner, db: Db, service: Service, request: Request, body: CleanupRequest | None = None
) -> ApiResponse:
    retention_days = body.retention_days if body else None
    data = await service.cleanup_old_read_alerts(db, owner_id, retention_days)
    return success_response(data.model_dump(mode="json"), request)


@router.post("/{alert_id}/read")
async def mark_read(
    alert_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.mark_read(db, owner_id, alert_id)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: str, owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    await service.delete_alert(db, owner_id, alert_id)
    return success_response({"alert_id": alert_id}, request)
