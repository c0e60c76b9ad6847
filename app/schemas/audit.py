"""
Shadi Recommendations - Audit Schemas

Pydantic schemas for audit log responses.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class AuditLogResponse(BaseModel):
    """One stored audit entry."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    timestamp: datetime
    action: str
    severity: str
    user_id: Optional[UUID] = None
    target_id: Optional[str] = None
    target_type: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict[str, Any] = {}
    success: bool
    error_message: Optional[str] = None

    @field_validator("ip_address", mode="before")
    @classmethod
    def ip_to_str(cls, v):
        return str(v) if v is not None else None

    @field_validator("metadata", mode="before")
    @classmethod
    def parse_metadata(cls, v):
        if v is None:
            return {}
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                return {"raw": v}
        return v

    @classmethod
    def from_model(cls, log) -> "AuditLogResponse":
        return cls(
            id=log.id,
            timestamp=log.timestamp,
            action=log.action,
            severity=log.severity,
            user_id=log.user_id,
            target_id=log.target_id,
            target_type=log.target_type,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            metadata=log.event_metadata,
            success=log.success,
            error_message=log.error_message,
        )


class AuditLogListResponse(BaseModel):
    items: List[AuditLogResponse]
    total: int
    page: int
    limit: int
