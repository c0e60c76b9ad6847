"""
Shadi Recommendations - Security Service

Owns the process-wide security state (audit logger, activity tracker).
Built once in the application lifespan and stored on app.state.
"""

from datetime import timedelta
from typing import Optional

from app.config import Settings, settings as default_settings
from app.services.activity_tracker import ActivityContext, ActivityTracker
from app.services.audit_service import AuditLogger, AuditStore


class SecurityService:
    """Composition root for the audit logger and activity tracker."""

    def __init__(self, audit_store: AuditStore, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.audit_logger = AuditLogger(
            audit_store,
            buffer_size=settings.audit_buffer_size,
            flush_interval=settings.audit_flush_interval_seconds,
        )
        self.activity_tracker = ActivityTracker(
            self.audit_logger,
            capacity=settings.activity_capacity,
            window=timedelta(seconds=settings.activity_window_seconds),
            rapid_request_threshold=settings.rapid_request_threshold,
            failed_attempt_threshold=settings.failed_attempt_threshold,
        )

    async def track_activity(
        self,
        user_id: str,
        action: str,
        ip_address: Optional[str] = None,
    ) -> None:
        await self.activity_tracker.track_activity(
            ActivityContext(user_id=user_id, action=action, ip_address=ip_address)
        )

    async def shutdown(self) -> None:
        """Flush buffered audit entries."""
        await self.audit_logger.aclose()
