from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user_id
from app.core.db import get_session
from app.models.models import Monitor
from app.schemas.notifications import SubscriptionOut
from app.services.notifications import recipients

router = APIRouter(prefix="/monitor", tags=["monitors"])


@router.post("/{monitor_id}/subscribe", response_model=SubscriptionOut)
async def subscribe(
    monitor_id: int,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    if await session.get(Monitor, monitor_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="monitor not found")
    try:
        created = await recipients.subscribe(session, monitor_id, user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    await session.commit()
    return SubscriptionOut(monitor_id=monitor_id, subscribed=True, changed=created)


@router.delete("/{monitor_id}/unsubscribe", response_model=SubscriptionOut)
async def unsubscribe(
    monitor_id: int,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    try:
        removed = await recipients.unsubscribe(session, monitor_id, user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
    await session.commit()
    return SubscriptionOut(monitor_id=monitor_id, subscribed=False, changed=removed)
