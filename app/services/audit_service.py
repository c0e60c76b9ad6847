"""
Shadi Recommendations - Audit Logging Service

Buffered, severity-tiered audit logging for security-sensitive operations.

- Critical events are written immediately
- Other events are buffered and written in batches (size or timer)
- Audit logging never raises to the caller
"""

import asyncio
import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.audit import AuditAction, AuditLog, AuditSeverity
from app.utils.request_context import get_request_context

logger = logging.getLogger(__name__)


# ===========================================
# SEVERITY MAPPING
# ===========================================

ACTION_SEVERITY: Dict[AuditAction, AuditSeverity] = {
    # Authentication
    AuditAction.AUTH_LOGIN: AuditSeverity.INFO,
    AuditAction.AUTH_LOGOUT: AuditSeverity.INFO,
    AuditAction.AUTH_SIGNUP: AuditSeverity.INFO,
    AuditAction.AUTH_PASSWORD_RESET: AuditSeverity.WARNING,
    AuditAction.AUTH_PASSWORD_CHANGE: AuditSeverity.WARNING,
    AuditAction.AUTH_FAILED_LOGIN: AuditSeverity.WARNING,
    # Profile
    AuditAction.PROFILE_VIEW: AuditSeverity.INFO,
    AuditAction.PROFILE_UPDATE: AuditSeverity.INFO,
    AuditAction.PROFILE_DELETE: AuditSeverity.WARNING,
    # Data
    AuditAction.DATA_CREATE: AuditSeverity.INFO,
    AuditAction.DATA_UPDATE: AuditSeverity.INFO,
    AuditAction.DATA_DELETE: AuditSeverity.WARNING,
    AuditAction.DATA_EXPORT: AuditSeverity.WARNING,
    # Admin
    AuditAction.ADMIN_ROLE_CHANGE: AuditSeverity.CRITICAL,
    AuditAction.ADMIN_USER_DELETE: AuditSeverity.CRITICAL,
    AuditAction.ADMIN_SETTINGS_UPDATE: AuditSeverity.WARNING,
    AuditAction.ADMIN_IMPERSONATION: AuditSeverity.CRITICAL,
    # Security
    AuditAction.SECURITY_RATE_LIMIT: AuditSeverity.WARNING,
    AuditAction.SECURITY_CSRF_BLOCKED: AuditSeverity.ERROR,
    AuditAction.SECURITY_UNAUTHORIZED: AuditSeverity.ERROR,
    AuditAction.SECURITY_SUSPICIOUS: AuditSeverity.CRITICAL,
}


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit event, built when the action happens."""
    timestamp: datetime
    action: AuditAction
    severity: AuditSeverity
    user_id: Optional[str] = None
    target_id: Optional[str] = None
    target_type: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["action"] = self.action.value
        data["severity"] = self.severity.value
        return data


def calculate_changes(
    old_values: Dict[str, Any],
    new_values: Dict[str, Any],
) -> Dict[str, Any]:
    """Calculate what changed between old and new values."""
    changes = {}

    all_keys = set(old_values.keys()) | set(new_values.keys())

    for key in all_keys:
        old_val = old_values.get(key)
        new_val = new_values.get(key)

        if old_val != new_val:
            changes[key] = {
                "old": old_val,
                "new": new_val,
            }

    return changes


# ===========================================
# DURABLE STORAGE
# ===========================================

class AuditStore(ABC):
    """Durable storage for audit entries."""

    @abstractmethod
    async def insert_many(self, entries: List[AuditLogEntry]) -> None:
        """Write a batch of entries in one operation."""
        pass


def _as_uuid(value: Optional[Union[str, uuid.UUID]]) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class SQLAlchemyAuditStore(AuditStore):
    """Writes audit entries to the audit_logs table with a bulk insert."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @staticmethod
    def to_row(entry: AuditLogEntry) -> Dict[str, Any]:
        return {
            "timestamp": entry.timestamp,
            "action": entry.action.value,
            "severity": entry.severity.value,
            "user_id": _as_uuid(entry.user_id),
            "target_id": entry.target_id,
            "target_type": entry.target_type,
            "ip_address": entry.ip_address,
            "user_agent": entry.user_agent,
            "event_metadata": json.dumps(entry.metadata, default=str),
            "success": entry.success,
            "error_message": entry.error_message,
        }

    async def insert_many(self, entries: List[AuditLogEntry]) -> None:
        if not entries:
            return
        async with self.session_factory() as session:
            await session.execute(insert(AuditLog), [self.to_row(e) for e in entries])
            await session.commit()


# ===========================================
# AUDIT LOGGER
# ===========================================

class AuditLogger:
    """
    Process-wide audit logger.

    Owned by SecurityService; one instance per process.
    """

    def __init__(
        self,
        store: AuditStore,
        buffer_size: int = 10,
        flush_interval: float = 5.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.buffer_size = buffer_size
        self.flush_interval = flush_interval
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._buffer: List[AuditLogEntry] = []
        self._flush_task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        """Number of buffered entries not yet written."""
        return len(self._buffer)

    def _build_entry(
        self,
        action: AuditAction,
        user_id: Optional[str],
        metadata: Optional[Dict[str, Any]],
        success: bool,
        error_message: Optional[str] = None,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
    ) -> AuditLogEntry:
        action = AuditAction(action)
        context = get_request_context()
        return AuditLogEntry(
            timestamp=self._clock(),
            action=action,
            severity=ACTION_SEVERITY[action],
            user_id=str(user_id) if user_id is not None else None,
            target_id=str(target_id) if target_id is not None else None,
            target_type=target_type,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            metadata=dict(metadata or {}),
            success=success,
            error_message=error_message,
        )

    # ===========================================
    # PUBLIC API
    # ===========================================

    async def user_action(
        self,
        action: AuditAction,
        user_id: Optional[str],
        metadata: Optional[Dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> None:
        """Log a user action."""
        try:
            entry = self._build_entry(action, user_id, metadata, success, error_message)
        except Exception:
            logger.exception(f"Failed to build audit entry for {action}")
            return
        await self._log(entry)

    async def data_modification(
        self,
        action: AuditAction,
        user_id: Optional[str],
        target_type: str,
        target_id: str,
        changes: Optional[Dict[str, Any]] = None,
        success: bool = True,
    ) -> None:
        """Log a create/update/delete of a resource row."""
        try:
            entry = self._build_entry(
                action,
                user_id,
                {"changes": changes or {}},
                success,
                target_type=target_type,
                target_id=target_id,
            )
        except Exception:
            logger.exception(f"Failed to build audit entry for {action}")
            return
        await self._log(entry)

    async def admin_action(
        self,
        action: AuditAction,
        admin_user_id: str,
        target_user_id: Optional[str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log an action an administrator performed on another user."""
        try:
            entry = self._build_entry(
                action,
                admin_user_id,
                {**(metadata or {}), "admin_action": True},
                True,
                target_type="user",
                target_id=target_user_id,
            )
        except Exception:
            logger.exception(f"Failed to build audit entry for {action}")
            return
        await self._log(entry)

    async def security_event(
        self,
        action: AuditAction,
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a denied or flagged condition. Always recorded as unsuccessful."""
        try:
            entry = self._build_entry(action, user_id, metadata, False)
        except Exception:
            logger.exception(f"Failed to build audit entry for {action}")
            return
        await self._log(entry)

    # ===========================================
    # BUFFERING
    # ===========================================

    async def _log(self, entry: AuditLogEntry) -> None:
        if entry.severity == AuditSeverity.CRITICAL:
            await self._write([entry])
            return

        self._buffer.append(entry)

        if len(self._buffer) >= self.buffer_size:
            await self.flush()
            return

        if self._flush_task is None:
            self._flush_task = asyncio.create_task(self._delayed_flush())

    async def _delayed_flush(self) -> None:
        await asyncio.sleep(self.flush_interval)
        await self.flush()

    async def flush(self) -> None:
        """Write every buffered entry in one batch."""
        task = self._flush_task
        self._flush_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

        if not self._buffer:
            return

        entries, self._buffer = self._buffer, []
        await self._write(entries)

    async def aclose(self) -> None:
        """Flush remaining entries at shutdown."""
        await self.flush()

    async def _write(self, entries: List[AuditLogEntry]) -> None:
        try:
            await self.store.insert_many(entries)
        except Exception as e:
            logger.error(f"Failed to write {len(entries)} audit entries: {e}")
            for entry in entries:
                logger.debug(f"Unwritten audit entry: {json.dumps(entry.to_dict(), default=str)}")
