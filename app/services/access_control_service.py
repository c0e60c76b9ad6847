"""
Shadi Recommendations - Access Control Service

Permission queries and per-resource ownership checks on top of the
request's SessionVerifier. Denials are returned as AccessCheck values;
nothing here raises or writes audit entries.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import UserRole
from app.models.restaurant import Restaurant, Review
from app.services.session_verifier import SessionVerifier, VerifiedUser
from app.utils.permissions import Permission

logger = logging.getLogger(__name__)


NOT_AUTHENTICATED = "Not authenticated"
INSUFFICIENT_PERMISSIONS = "Insufficient permissions"
RESOURCE_NOT_FOUND = "Resource not found"
NOT_RESOURCE_OWNER = "Not resource owner"
UNKNOWN_ACTION = "Unknown action"


class ResourceAction(str, Enum):
    """Row-level actions checked by can_access_resource."""
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class AccessCheck:
    """Outcome of an access query. reason is set only when denied."""
    allowed: bool
    reason: Optional[str] = None
    user: Optional[VerifiedUser] = None


# ===========================================
# RESOURCE STORE
# ===========================================

@dataclass(frozen=True)
class OwnedResource:
    """A resource row reduced to its owner."""
    id: str
    owner_id: Optional[str]


class ResourceStore(ABC):
    """Lookup of resource rows by type and id."""

    @abstractmethod
    async def get_resource(self, resource_type: str, resource_id: str) -> Optional[OwnedResource]:
        """The row's owner, or None if the row (or the resource type) does not exist."""
        pass


class SQLAlchemyResourceStore(ResourceStore):
    """Resolves owners from tables with a user_id column."""

    RESOURCE_MODELS: Dict[str, Type] = {
        "reviews": Review,
        "restaurants": Restaurant,
    }

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_resource(self, resource_type: str, resource_id: str) -> Optional[OwnedResource]:
        model = self.RESOURCE_MODELS.get(resource_type)
        if model is None:
            return None
        try:
            row_id = uuid.UUID(str(resource_id))
        except ValueError:
            return None

        result = await self.db.execute(
            select(model.id, model.user_id).where(model.id == row_id)
        )
        row = result.first()
        if row is None:
            return None
        return OwnedResource(
            id=str(row.id),
            owner_id=str(row.user_id) if row.user_id is not None else None,
        )


# ===========================================
# ACCESS CHECKER
# ===========================================

class AccessChecker:
    """Permission and ownership checks for the current request."""

    def __init__(
        self,
        verifier: SessionVerifier,
        resource_store: Optional[ResourceStore] = None,
    ):
        self.verifier = verifier
        self.resource_store = resource_store

    async def has_permission(self, permission: Permission) -> bool:
        user = await self.verifier.verify_session()
        if user is None:
            return False
        return permission in user.permissions

    async def has_any_permission(self, permissions: Iterable[Permission]) -> bool:
        user = await self.verifier.verify_session()
        if user is None:
            return False
        return any(p in user.permissions for p in permissions)

    async def has_all_permissions(self, permissions: Iterable[Permission]) -> bool:
        user = await self.verifier.verify_session()
        if user is None:
            return False
        return all(p in user.permissions for p in permissions)

    async def check_access(self, permission: Optional[Permission] = None) -> AccessCheck:
        """Non-raising access check, optionally for one permission."""
        user = await self.verifier.verify_session()

        if user is None:
            return AccessCheck(allowed=False, reason=NOT_AUTHENTICATED)

        if permission is not None and permission not in user.permissions:
            return AccessCheck(allowed=False, reason=INSUFFICIENT_PERMISSIONS, user=user)

        return AccessCheck(allowed=True, user=user)

    async def can_access_resource(
        self,
        resource_type: str,
        resource_id: str,
        action: str,
    ) -> AccessCheck:
        """
        Check a row-level action against a specific resource.

        Admins bypass ownership. Reads are allowed for any authenticated
        user. Updates and deletes need ownership or the moderator role.
        Ownership is looked up on every call.
        """
        user = await self.verifier.verify_session()

        if user is None:
            return AccessCheck(allowed=False, reason=NOT_AUTHENTICATED)

        if user.role == UserRole.ADMIN:
            return AccessCheck(allowed=True, user=user)

        resource = None
        if self.resource_store is not None:
            try:
                resource = await self.resource_store.get_resource(resource_type, resource_id)
            except Exception as e:
                logger.warning(f"Ownership lookup failed for {resource_type}/{resource_id}: {e}")
                resource = None

        if resource is None:
            return AccessCheck(allowed=False, reason=RESOURCE_NOT_FOUND, user=user)

        try:
            resource_action = ResourceAction(action)
        except ValueError:
            return AccessCheck(allowed=False, reason=UNKNOWN_ACTION, user=user)

        if resource_action == ResourceAction.READ:
            return AccessCheck(allowed=True, user=user)

        is_owner = resource.owner_id is not None and resource.owner_id == user.id
        if is_owner or user.role == UserRole.MODERATOR:
            return AccessCheck(allowed=True, user=user)

        return AccessCheck(allowed=False, reason=NOT_RESOURCE_OWNER, user=user)
