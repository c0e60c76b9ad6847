"""
Shadi Recommendations - Reviews Router

Review edits and deletions. Every attempt is checked against ownership,
tracked for anomaly detection, and recorded in the audit log.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_access_checker, get_security_service, require_auth
from app.models.audit import AuditAction
from app.schemas.review import ReviewResponse, ReviewUpdate
from app.services.access_control_service import (
    RESOURCE_NOT_FOUND,
    AccessChecker,
    ResourceAction,
)
from app.services.review_service import ReviewService
from app.services.security_service import SecurityService
from app.services.session_verifier import VerifiedUser
from app.utils.error_handling import AuthorizationException, NotFoundException
from app.utils.request_context import get_request_context


router = APIRouter()

RESOURCE_TYPE = "reviews"


def get_review_service(db: AsyncSession = Depends(get_async_session)) -> ReviewService:
    return ReviewService(db)


async def _authorize(
    checker: AccessChecker,
    security: SecurityService,
    user: VerifiedUser,
    review_id: uuid.UUID,
    action: ResourceAction,
) -> None:
    """Ownership check for one review. Raises on denial."""
    outcome = "allowed"
    check = await checker.can_access_resource(RESOURCE_TYPE, str(review_id), action.value)
    if not check.allowed:
        outcome = "failed"
    await security.track_activity(
        user.id,
        f"review_{action.value}_{outcome}",
        get_request_context().ip_address,
    )

    if check.allowed:
        return

    if check.reason == RESOURCE_NOT_FOUND:
        raise NotFoundException("Review", review_id, message=check.reason)
    raise AuthorizationException(message=check.reason)


@router.patch(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Owners, moderators and admins can edit a review.",
)
async def update_review(
    review_id: uuid.UUID,
    request: ReviewUpdate,
    user: VerifiedUser = Depends(require_auth()),
    checker: AccessChecker = Depends(get_access_checker),
    security: SecurityService = Depends(get_security_service),
    review_service: ReviewService = Depends(get_review_service),
):
    await _authorize(checker, security, user, review_id, ResourceAction.UPDATE)

    review = await review_service.get_review(review_id)
    if review is None:
        raise NotFoundException("Review", review_id, message=RESOURCE_NOT_FOUND)

    changes = await review_service.update_review(review, request.model_dump(exclude_unset=True))

    await security.audit_logger.data_modification(
        AuditAction.DATA_UPDATE,
        user.id,
        RESOURCE_TYPE,
        str(review_id),
        changes,
    )
    return review


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    description="Owners, moderators and admins can delete a review.",
)
async def delete_review(
    review_id: uuid.UUID,
    user: VerifiedUser = Depends(require_auth()),
    checker: AccessChecker = Depends(get_access_checker),
    security: SecurityService = Depends(get_security_service),
    review_service: ReviewService = Depends(get_review_service),
):
    await _authorize(checker, security, user, review_id, ResourceAction.DELETE)

    review = await review_service.get_review(review_id)
    if review is None:
        raise NotFoundException("Review", review_id, message=RESOURCE_NOT_FOUND)

    snapshot = {
        "rating": review.rating,
        "title": review.title,
        "owner_id": str(review.user_id),
    }
    await review_service.delete_review(review)

    await security.audit_logger.data_modification(
        AuditAction.DATA_DELETE,
        user.id,
        RESOURCE_TYPE,
        str(review_id),
        {"deleted": snapshot},
    )
