"""
Shadi Recommendations - Celery Tasks

Background tasks for scheduled operations.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from celery import shared_task

from app.config import settings
from app.database import async_session_maker

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async functions in Celery tasks."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ===========================================
# AUDIT LOG RETENTION
# ===========================================

@shared_task(name='app.tasks.celery_tasks.cleanup_audit_logs_task')
def cleanup_audit_logs_task(days: Optional[int] = None) -> Dict[str, Any]:
    """Delete audit logs older than the retention period."""
    return run_async(cleanup_audit_logs(days or settings.audit_retention_days))


async def cleanup_audit_logs(days: int) -> Dict[str, Any]:
    from app.services.audit_log_service import AuditLogQueryService

    async with async_session_maker() as db:
        deleted = await AuditLogQueryService(db).delete_older_than(days)

    logger.info(f"Audit retention cleanup removed {deleted} entries")
    return {"deleted": deleted, "retention_days": days}
