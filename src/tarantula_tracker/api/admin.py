"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from tarantula_tracker.containers import AppContainer
    from tarantula_tracker.domain.notifications import AlertPayload

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health(request: Request) -> dict[str, str]:
    """Admin health check endpoint with the clock state."""
    clock = request.app.state.clock
    return {
        "status": "ok",
        "scheduler": clock.state.value if clock is not None else "disabled",
    }


@router.get("/owners", dependencies=[Depends(require_admin)])
async def list_owners(request: Request) -> dict[str, object]:
    """Return owners that currently receive scheduled alerts."""
    container: AppContainer = request.app.state.container
    owners = container.owner_service.list_active_owners(datetime.now(tz=UTC))
    return {
        "owners": [
            {
                "id": str(owner.id),
                "telegram_user_id": owner.telegram_user_id,
                "last_active_at": (
                    owner.last_active_at.isoformat() if owner.last_active_at else None
                ),
            }
            for owner in owners
        ]
    }


@router.post("/owners/{owner_id}/evaluate", dependencies=[Depends(require_admin)])
async def evaluate_owner(owner_id: UUID, request: Request) -> dict[str, object]:
    """Run the care checks for one owner now and send any alerts."""
    container: AppContainer = request.app.state.container
    owner = container.owner_service.get_owner(owner_id)
    if owner is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    preferences = container.preferences_service.get(owner.id)
    payload = await container.notification_service.evaluate_owner(
        owner, preferences, datetime.now(tz=UTC)
    )
    return _payload_summary(payload)


def _payload_summary(payload: AlertPayload) -> dict[str, object]:
    return {
        "owner_id": str(payload.owner_id),
        "generated_at": payload.generated_at.isoformat(),
        "feeding": [
            {
                "subject": alert.subject_name,
                "status": alert.status.value,
                "days_since_feeding": round(alert.days_since_feeding, 1),
            }
            for alert in payload.feeding
        ],
        "molts": [
            {
                "subject": alert.subject_name,
                "days_until": alert.prediction.days_until,
                "confidence": alert.prediction.confidence.value,
            }
            for alert in payload.molts
        ],
        "maintenance": [
            {
                "group": alert.group_name,
                "task": alert.task,
                "days_overdue": alert.days_overdue,
            }
            for alert in payload.maintenance
        ],
    }
