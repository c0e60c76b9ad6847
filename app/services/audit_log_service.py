"""
Shadi Recommendations - Audit Log Query Service

Read access to stored audit entries, plus the retention cleanup used by the
scheduled task. Nothing here updates an entry.
"""

import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditAction, AuditLog, AuditSeverity

logger = logging.getLogger(__name__)


class AuditLogQueryService:
    """Service for reading audit logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_audit_logs(
        self,
        action: Optional[AuditAction] = None,
        severity: Optional[AuditSeverity] = None,
        user_id: Optional[uuid.UUID] = None,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[AuditLog], int]:
        """
        Get audit logs with optional filtering.

        Args:
            action: Filter by action type
            severity: Filter by severity
            user_id: Filter by user
            target_type: Filter by resource type
            target_id: Filter by specific resource
            start_date: Filter by date range start
            end_date: Filter by date range end
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            (matching audit logs newest first, total matches)
        """
        conditions = []

        if action:
            conditions.append(AuditLog.action == action.value)

        if severity:
            conditions.append(AuditLog.severity == severity.value)

        if user_id:
            conditions.append(AuditLog.user_id == user_id)

        if target_type:
            conditions.append(AuditLog.target_type == target_type)

        if target_id:
            conditions.append(AuditLog.target_id == target_id)

        if start_date:
            conditions.append(func.date(AuditLog.timestamp) >= start_date)

        if end_date:
            conditions.append(func.date(AuditLog.timestamp) <= end_date)

        total = await self.db.scalar(
            select(func.count(AuditLog.id)).where(*conditions)
        ) or 0

        query = (
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.timestamp.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def delete_older_than(self, days: int = 90) -> int:
        """
        Retention cleanup: delete entries older than ``days``.

        Returns:
            Number of deleted rows
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        result = await self.db.execute(
            delete(AuditLog).where(AuditLog.timestamp < cutoff)
        )
        await self.db.commit()
        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} audit log entries older than {days} days")
        return deleted
