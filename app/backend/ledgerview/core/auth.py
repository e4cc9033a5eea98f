"""Request identity extraction."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from ledgerview.core.config import get_settings


@dataclass(frozen=True)
class RequestUserContext:
    """Caller identity resolved once per request and passed explicitly to services."""

    user_id: int


def _parse_user_id(raw_value: str) -> int:
    try:
        user_id = int(raw_value.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header. Expected a positive integer.",
        ) from None
    if user_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header. Expected a positive integer.",
        )
    return user_id


def _resolve_user_id(x_user_id: str | None) -> int:
    if x_user_id:
        return _parse_user_id(x_user_id)

    settings = get_settings()
    if settings.auth_allow_dev_principal:
        return settings.auth_dev_user_id

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing identity header. Expected X-User-Id or enable development principal fallback.",
    )


def get_current_user_context(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> RequestUserContext:
    """Resolve the current request user.

    Header strategy: a trusted ``X-User-Id`` set by the upstream session
    layer (or test clients). Whether the user exists is checked by the
    services, which report an unknown user as not found.
    """

    return RequestUserContext(user_id=_resolve_user_id(x_user_id))
