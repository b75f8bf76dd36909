import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import Monitor, MonitorSubscription
from app.services.notifications.history import _as_uuid


async def recipient_ids(session: AsyncSession, monitor_id: int) -> list[str]:
    """Owner first, then subscribers in subscription order; each user once."""
    res = await session.execute(select(Monitor.user_id).where(Monitor.id == monitor_id))
    ids = [str(uid) for uid in res.scalars().all()]
    res = await session.execute(
        select(MonitorSubscription.user_id)
        .where(MonitorSubscription.monitor_id == monitor_id)
        .order_by(MonitorSubscription.created_at, MonitorSubscription.id)
    )
    ids.extend(str(uid) for uid in res.scalars().all())
    return list(dict.fromkeys(ids))


async def subscribe(session: AsyncSession, monitor_id: int, user_id: uuid.UUID | str) -> bool:
    """Returns False when the user was already subscribed."""
    uid = _as_uuid(user_id)
    res = await session.execute(
        select(MonitorSubscription.id).where(
            MonitorSubscription.monitor_id == monitor_id,
            MonitorSubscription.user_id == uid,
        )
    )
    if res.scalar_one_or_none() is not None:
        return False
    session.add(MonitorSubscription(monitor_id=monitor_id, user_id=uid))
    await session.flush()
    return True


async def unsubscribe(session: AsyncSession, monitor_id: int, user_id: uuid.UUID | str) -> bool:
    res = await session.execute(
        delete(MonitorSubscription).where(
            MonitorSubscription.monitor_id == monitor_id,
            MonitorSubscription.user_id == _as_uuid(user_id),
        )
    )
    return (res.rowcount or 0) > 0
