"""
Shadi Recommendations - Activity Tracking & Anomaly Detection

Keeps a bounded window of recent actions per user and flags:
- Rapid request rate (more than 50 actions in 5 minutes)
- Repeated failures (more than 5 "failed" actions in 5 minutes)

State is per process and held in memory only.
"""

import logging
import threading
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Deque, Dict, List, Optional

from app.models.audit import AuditAction
from app.services.audit_service import AuditLogger

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ActivityContext:
    """One tracked action."""
    user_id: str
    action: str
    ip_address: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        # Naive timestamps are taken as UTC
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))


class ActivityTracker:
    """
    Per-user sliding window of recent activity.

    Each user keeps at most ``capacity`` entries; the oldest entry is
    dropped first. Idle users are not evicted.
    """

    def __init__(
        self,
        audit_logger: AuditLogger,
        capacity: int = 100,
        window: timedelta = timedelta(minutes=5),
        rapid_request_threshold: int = 50,
        failed_attempt_threshold: int = 5,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.audit_logger = audit_logger
        self.capacity = capacity
        self.window = window
        self.rapid_request_threshold = rapid_request_threshold
        self.failed_attempt_threshold = failed_attempt_threshold
        self._clock = clock
        self._activity: Dict[str, Deque[ActivityContext]] = defaultdict(
            lambda: deque(maxlen=self.capacity)
        )
        self._lock = threading.Lock()

    @property
    def window_label(self) -> str:
        minutes = int(self.window.total_seconds() // 60)
        return f"{minutes} minutes"

    async def track_activity(self, context: ActivityContext) -> None:
        """Record an action and emit audit events for detected anomalies."""
        with self._lock:
            # deque(maxlen=...) drops the oldest entry before appending
            activities = self._activity[context.user_id]
            activities.append(context)
            now = self._clock()
            recent = [a for a in activities if now - a.timestamp < self.window]

        failed = [a for a in recent if "failed" in a.action]

        if len(recent) > self.rapid_request_threshold:
            logger.warning(
                f"Rapid request rate for user {context.user_id}: "
                f"{len(recent)} actions in {self.window_label}"
            )
            await self.audit_logger.security_event(
                AuditAction.SECURITY_SUSPICIOUS,
                {
                    "reason": "Rapid request rate",
                    "requestCount": len(recent),
                    "timeWindow": self.window_label,
                },
                context.user_id,
            )

        if len(failed) > self.failed_attempt_threshold:
            logger.warning(
                f"Multiple failed attempts for user {context.user_id}: "
                f"{len(failed)} in {self.window_label}"
            )
            await self.audit_logger.security_event(
                AuditAction.SECURITY_SUSPICIOUS,
                {
                    "reason": "Multiple failed attempts",
                    "failedCount": len(failed),
                    "timeWindow": self.window_label,
                },
                context.user_id,
            )

    def get_activity(self, user_id: str) -> List[ActivityContext]:
        """Snapshot of a user's tracked activity, oldest first."""
        with self._lock:
            return list(self._activity.get(user_id, ()))

    def reset(self) -> None:
        with self._lock:
            self._activity.clear()
