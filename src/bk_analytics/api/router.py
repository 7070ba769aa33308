"""bk_analytics endpoints: read-only views over the caller's entries.

GET /analytics/cash                 cash-basis view
GET /analytics/accrual              accrual-basis view
GET /analytics/pending              open Credit / Advance balances by party
GET /analytics/monthly-comparison   this month vs last month, cash basis
GET /analytics/recommendations      plain-language advice for a period
GET /analytics/health-score         0-100 business health score

cash / accrual / recommendations take either
?range=this-month|last-month|this-year|last-year|all-time or an explicit
?start=YYYY-MM-DD&end=YYYY-MM-DD.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_analytics.application.service import AnalyticsApplicationService
from src.bk_analytics.domain.period import DateRange
from src.bk_common.database import get_db_session
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_analytics_service, get_current_owner

router = APIRouter(prefix="/analytics", tags=["analytics"])

Owner = Annotated[str, Depends(get_current_owner)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[AnalyticsApplicationService, Depends(get_analytics_service)]


@router.get("/cash")
async def cash_view(
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
    date_range: DateRange = Query(DateRange.THIS_MONTH, alias="range"),
    start: date | None = Query(None),
    end: date | None = Query(None),
) -> ApiResponse:
    data = await service.cash_view(db, owner_id, date_range, start, end)
    return success_response(data, request)


@router.get("/accrual")
async def accrual_view(
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
    date_range: DateRange = Query(DateRange.THIS_MONTH, alias="range"),
    start: date | None = Query(None),
    end: date | None = Query(None),
) -> ApiResponse:
    data = await service.accrual_view(db, owner_id, date_range, start, end)
    return success_response(data, request)


@router.get("/pending")
async def pending(owner_id: Owner, db: Db, service: Service, request: Request) -> ApiResponse:
    data = await service.pending(db, owner_id)
    return success_response(data, request)


@router.get("/monthly-comparison")
async def monthly_comparison(
    owner_id: Owner, db: Db, service: Service, request: Request
) -> ApiResponse:
    data = await service.monthly_comparison(db, owner_id)
    return success_response(data, request)


@router.get("/recommendations")
async def recommendations(
    owner_id: Owner,
    db: Db,
    service: Service,
    request: Request,
    date_range: DateRange = Query(DateRange.THIS_MONTH, alias="range"),
    start: date | None = Query(None),
    end: date | None = Query(None),
) -> ApiResponse:
    data = await service.recommendations(db, owner_id, date_range, start, end)
    return success_response(data, request)


@router.get("/health-score")
async def health_score(owner_id: Owner, db: Db, service: Service, request: Request) -> ApiResponse:
    data = await service.health_score(db, owner_id)
    return success_response(data, request)
