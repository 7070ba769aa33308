"""Bearer token verification.

Tokens are issued by the external identity service; this service only
verifies them. HS256 with the shared JWT_SECRET; the ``sub`` claim is the
caller's owner id. Tokens without ``exp`` are rejected.
"""

from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from config.settings import settings
from src.bk_common.errors import UnauthorizedError


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry. Raises UnauthorizedError on any failure."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
            options={"require_exp": True},
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired") from None
    except JWTError:
        raise UnauthorizedError("Invalid token") from None
    return payload


def owner_id_from_token(token: str) -> str:
    owner_id = decode_token(token).get("sub")
    if not owner_id or not isinstance(owner_id, str):
        raise UnauthorizedError("Token has no subject")
    return owner_id
