from .celery_app import celery
import asyncio
import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from app.core.config import settings
from app.models.models import User
from app.notifications.config import NotificationsConfig
from app.notifications.rate_limit import RateLimiter, build_rate_limiter
from app.notifications.status_changed import MonitorStatusChanged
from app.services.notifications import history
from app.services.notifications.dispatcher import dispatch_to_user
from app.services.notifications.recipients import recipient_ids
from app.services.notifications.service import NotificationService

logger = logging.getLogger("notifications")

_rate_limiter: Optional[RateLimiter] = None
_service: Optional[NotificationService] = None


def _notification_deps() -> tuple[NotificationsConfig, RateLimiter, NotificationService]:
    global _rate_limiter, _service
    config = NotificationsConfig.from_settings(settings)
    if _rate_limiter is None:
        _rate_limiter = build_rate_limiter(config)
    if _service is None:
        _service = NotificationService(config)
    return config, _rate_limiter, _service


def _session_factory():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def _recipients(event: dict) -> list[str]:
    try:
        monitor_id = int(event.get("id"))
    except (TypeError, ValueError):
        return []
    engine, Session = _session_factory()
    try:
        async with Session() as session:
            return await recipient_ids(session, monitor_id)
    finally:
        await engine.dispose()


@celery.task(name="tasks.notify_monitor_status")
def notify_monitor_status(event: dict, user_ids: list[str] | None = None) -> dict:
    """Fan a monitor flip out to one task per recipient (owner and subscribers unless given)."""
    targets = list(user_ids) if user_ids else asyncio.run(_recipients(event))
    if not targets:
        logger.info("no recipients for monitor %s", event.get("id"))
        return {"ok": True, "users": 0}
    for uid in dict.fromkeys(targets):
        notify_user_monitor_status.delay(event, uid)
    return {"ok": True, "users": len(set(targets))}


@celery.task(name="tasks.notify_user_monitor_status")
def notify_user_monitor_status(event: dict, user_id: str) -> dict:
    config, rate_limiter, service = _notification_deps()

    async def _run() -> dict:
        try:
            uid = uuid.UUID(str(user_id))
        except ValueError:
            return {"ok": False, "error": "invalid_user_id"}
        engine, Session = _session_factory()
        try:
            async with Session() as session:
                user = await session.get(User, uid)
                if not user:
                    return {"ok": False, "error": "user_not_found"}
                notification = MonitorStatusChanged(event, rate_limiter, app_url=config.app_url, locale=config.locale)
                report = dispatch_to_user(notification, user, service)
                try:
                    await history.record(session, user.id, report.record, report.delivered)
                    await session.commit()
                except Exception as e:
                    await session.rollback()
                    logger.error("history write failed for user %s: %s", user.id, e)
                    return {"ok": False, "error": f"db_write_failed:{e}", "delivered": report.delivered}
                return {"ok": True, "delivered": report.delivered, "failed": report.failed}
        finally:
            await engine.dispose()

    return asyncio.run(_run())


@celery.task(name="tasks.prune_notification_history")
def prune_notification_history() -> dict:
    """Delete notification history older than the retention window."""

    async def _run() -> dict:
        engine, Session = _session_factory()
        try:
            async with Session() as session:
                deleted = await history.prune(session, settings.NOTIFY_HISTORY_RETENTION_DAYS)
                await session.commit()
                return {"ok": True, "deleted": deleted}
        finally:
            await engine.dispose()

    return asyncio.run(_run())
