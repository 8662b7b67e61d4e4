"""Request dependencies: acting identity and relay secret."""

import hmac
from typing import Optional

from fastapi import Header, Query

from church_ledger.api.errors import InvalidQueryError, InvalidWebhookSecretError
from church_ledger.config import settings
from church_ledger.services.periods import Period

DEFAULT_ACTOR = "system"


def get_actor(x_user_email: str | None = Header(None)) -> str:  # noqa: B008
    """Identity recorded as created_by; authentication happens upstream."""
    return (x_user_email or "").strip() or DEFAULT_ACTOR


def require_webhook_secret(x_webhook_secret: str | None = Header(None)) -> None:  # noqa: B008
    """Reject relayed calls without the shared secret."""
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, settings.webhook_secret):
        raise InvalidWebhookSecretError()


def get_period(
    year: Optional[int] = Query(None, description="Filter by year"),  # noqa: B008
    month: Optional[int] = Query(None, description="Filter by month (requires year)"),  # noqa: B008
) -> Optional[Period]:
    try:
        return Period.from_query(year, month)
    except ValueError as e:
        raise InvalidQueryError(str(e)) from e
