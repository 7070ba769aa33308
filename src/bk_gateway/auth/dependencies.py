"""FastAPI dependencies: caller identity and per-request application services.

Usage in any protected router:
    @router.get("/entries")
    async def list_entries(owner_id: Annotated[str, Depends(get_current_owner)]):
        ...

Services are built per request around the app's shared rate limiter and
event publisher (``app.state``), so the core never reaches for globals.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.bk_alerts.application.service import AlertApplicationService
from src.bk_analytics.application.service import AnalyticsApplicationService
from src.bk_common.errors import UnauthorizedError
from src.bk_common.events import EventPublisher
from src.bk_common.rate_limit import NoopRateLimiter, RateLimiterProtocol
from src.bk_gateway.auth.jwt_handler import owner_id_from_token
from src.bk_ledger.application.party_service import PartyApplicationService
from src.bk_ledger.application.service import LedgerApplicationService
from src.bk_settlement.application.service import SettlementEngine

_bearer = HTTPBearer(auto_error=False)


async def get_current_owner(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Owner id from the Bearer token's ``sub`` claim. HTTP 401 when missing or invalid."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return owner_id_from_token(credentials.credentials)
    except UnauthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


def _limiter(request: Request) -> RateLimiterProtocol:
    return getattr(request.app.state, "rate_limiter", None) or NoopRateLimiter()


def _events(request: Request) -> EventPublisher:
    events = getattr(request.app.state, "events", None)
    return events if events is not None else EventPublisher()


def get_ledger_service(request: Request) -> LedgerApplicationService:
    return LedgerApplicationService(rate_limiter=_limiter(request), events=_events(request))


def get_settlement_engine(request: Request) -> SettlementEngine:
    return SettlementEngine(rate_limiter=_limiter(request), events=_events(request))


def get_party_service() -> PartyApplicationService:
    return PartyApplicationService()


def get_analytics_service() -> AnalyticsApplicationService:
    return AnalyticsApplicationService()


def get_alert_service() -> AlertApplicationService:
    return AlertApplicationService()
