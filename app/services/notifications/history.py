import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import NotificationRecord


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


async def record(session: AsyncSession, user_id: uuid.UUID | str, data: dict, channels: Iterable[str] | None = None) -> NotificationRecord:
    row = NotificationRecord(
        user_id=_as_uuid(user_id),
        type=data.get("type", "notification"),
        data=data,
        channels=list(channels) if channels is not None else None,
    )
    session.add(row)
    await session.flush()
    return row


async def list_for_user(session: AsyncSession, user_id: uuid.UUID | str, limit: int = 50) -> list[NotificationRecord]:
    res = await session.execute(
        select(NotificationRecord)
        .where(NotificationRecord.user_id == _as_uuid(user_id))
        .order_by(NotificationRecord.created_at.desc())
        .limit(limit)
    )
    return list(res.scalars().all())


async def prune(session: AsyncSession, retention_days: int) -> int:
    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    res = await session.execute(delete(NotificationRecord).where(NotificationRecord.created_at < cutoff))
    return res.rowcount or 0
