import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user_id
from app.core.db import get_session
from app.schemas.notifications import MonitorStatusAccepted, MonitorStatusIn, NotificationOut, NotificationsOut
from app.services.notifications import history
from workers.tasks import notify_monitor_status

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger("notifications")


@router.get("", response_model=NotificationsOut)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    try:
        rows = await history.list_for_user(session, user_id, limit)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    return NotificationsOut(
        items=[
            NotificationOut(
                id=str(r.id),
                type=r.type,
                data=r.data,
                channels=r.channels,
                read_at=r.read_at,
                created_at=r.created_at,
            )
            for r in rows
        ]
    )


@router.post("/monitor-status", response_model=MonitorStatusAccepted, status_code=status.HTTP_202_ACCEPTED)
async def monitor_status_changed(payload: MonitorStatusIn, user_id: str = Depends(get_current_user_id)):
    event = payload.model_dump(exclude={"user_ids"})
    try:
        result = notify_monitor_status.delay(event, payload.user_ids)
    except Exception as exc:
        logger.error("could not enqueue status change for monitor %s: %s", payload.id, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail={"error": "queue_unavailable"})
    return MonitorStatusAccepted(queued=True, task_id=getattr(result, "id", None))
