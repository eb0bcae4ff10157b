"""User feedback endpoints: ratings and comments on catalog records.

Every endpoint is gated by the local rating setting, which must be
``advanced``. Anonymous callers only see published feedback; any
authenticated caller also sees drafts. Deleting and publishing need
the Reviewer profile.
"""

import time

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from starlette.requests import Request
import structlog

from src.api.auth import get_current_principal, require_reviewer
from src.api.dependencies import (
    get_catalog_repository,
    get_setting_manager,
    get_userfeedback_service,
)
from src.api.models import ErrorResponse, RatingAverageResponse, UserFeedbackDTO
from src.api.rate_limit import limiter, submission_limit
from src.catalog.repository import CatalogRepository
from src.catalog.schemas import Principal
from src.observability.metrics import get_metrics
from src.system_settings.schemas import RatingsSetting
from src.system_settings.service import SettingManager
from src.userfeedback.aggregation import average_of_ratings, compute_rating_average
from src.userfeedback.schemas import FeedbackNotFoundError, UserFeedback
from src.userfeedback.service import UNLIMITED, UserFeedbackService

logger = structlog.get_logger(__name__)
router = APIRouter()

NOT_ALLOWED_ONLY_REVIEWER = "Operation not allowed. Only Reviewers can do this."
NOT_ALLOWED_CAN_VIEW = "Operation not allowed. User needs to be able to view the resource."
FEATURE_DISABLED = "User feedback is disabled. The local rating mode must be 'advanced'."

_FORBIDDEN = {"model": ErrorResponse, "description": FEATURE_DISABLED}


async def require_rating_enabled(
    setting_manager: SettingManager = Depends(get_setting_manager),
) -> None:
    """Reject the request with 403 unless the rating mode is ``advanced``."""
    try:
        mode = await setting_manager.get_rating_mode()
    except Exception as e:
        logger.error("rating_mode_lookup_failed", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read rating mode",
        )

    enabled = mode == RatingsSetting.ADVANCED
    get_metrics().set_rating_mode_enabled(enabled)
    if not enabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=FEATURE_DISABLED,
        )


def _published_only(principal: Principal | None) -> bool:
    # Drafts are shown to any logged-in user, not only reviewers
    return principal is None or not principal.is_authenticated


def _observe(operation: str, outcome: str, start_time: float) -> float:
    latency = time.perf_counter() - start_time
    get_metrics().record_operation(operation, outcome, latency)
    return round(latency * 1000, 2)


def to_dto(feedback: UserFeedback) -> UserFeedbackDTO:
    """Map a UserFeedback to its wire representation."""
    return UserFeedbackDTO(
        uuid=feedback.uuid,
        parent_uuid=feedback.parent_uuid,
        metadata_uuid=feedback.metadata_uuid,
        comment_text=feedback.comment_text,
        rating=dict(feedback.ratings),
        rating_avg=average_of_ratings(feedback.ratings),
        keywords=list(feedback.keywords),
        author_name=feedback.author_name or feedback.author_user_id,
        author_user_id=feedback.author_user_id,
        author_email=None if feedback.author_privacy else feedback.author_email,
        author_organization=None if feedback.author_privacy else feedback.author_organization,
        author_privacy=feedback.author_privacy,
        approver_name=feedback.approver_user_id,
        date=feedback.created_at.isoformat(),
        published=feedback.is_published,
    )


def from_dto(dto: UserFeedbackDTO) -> UserFeedback:
    """Build a new UserFeedback from a submitted DTO.

    Identity, status and approver are left to the service.

    Raises:
        ValueError: If the DTO carries invalid values
    """
    return UserFeedback(
        metadata_uuid=dto.metadata_uuid,
        parent_uuid=(dto.parent_uuid or "").strip() or None,
        comment_text=dto.comment_text,
        ratings=dict(dto.rating),
        keywords=[k.strip() for k in dto.keywords if k.strip()],
        author_name=dto.author_name,
        author_email=dto.author_email,
        author_organization=dto.author_organization,
        author_privacy=dto.author_privacy,
    )


# ── DELETE /userfeedback/{uuid} ──────────────────────────


@router.delete(
    "/userfeedback/{uuid}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        403: {"model": ErrorResponse, "description": NOT_ALLOWED_ONLY_REVIEWER},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Removes a user feedback",
)
async def delete_user_feedback(
    uuid: str,
    principal: Principal = Depends(require_reviewer),
    _enabled: None = Depends(require_rating_enabled),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> Response:
    start_time = time.perf_counter()

    try:
        deleted = await service.remove_user_feedback(uuid)

        latency_ms = _observe("delete", "ok", start_time)
        logger.info(
            "User feedback removed",
            feedback_uuid=uuid,
            deleted=deleted,
            reviewer=principal.username,
            latency_ms=latency_ms,
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except Exception as e:
        _observe("delete", "error", start_time)
        logger.error("delete_user_feedback_failed", feedback_uuid=uuid, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove user feedback",
        )


# ── GET /records/{metadata_uuid}/userfeedbackrating ──────


@router.get(
    "/records/{metadata_uuid}/userfeedbackrating",
    response_model=RatingAverageResponse,
    responses={
        403: {"model": ErrorResponse, "description": NOT_ALLOWED_CAN_VIEW},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Provides an average rating for a metadata record",
)
async def get_metadata_rating(
    metadata_uuid: str,
    _enabled: None = Depends(require_rating_enabled),
    principal: Principal | None = Depends(get_current_principal),
    catalog: CatalogRepository = Depends(get_catalog_repository),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> RatingAverageResponse:
    start_time = time.perf_counter()

    try:
        record = await catalog.can_view_record(metadata_uuid, principal)
        if record is None:
            _observe("rating", "forbidden", start_time)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=NOT_ALLOWED_CAN_VIEW,
            )

        feedback_list = await service.retrieve_user_feedback_for_metadata(
            metadata_uuid,
            UNLIMITED,
            published_only=_published_only(principal),
        )
        average = compute_rating_average(feedback_list)

        latency_ms = _observe("rating", "ok", start_time)
        logger.info(
            "Rating average computed",
            metadata_uuid=metadata_uuid,
            count=average.count,
            average=average.average,
            latency_ms=latency_ms,
        )

        return RatingAverageResponse(
            rating_averages=average.rating_averages,
            average=average.average,
            count=average.count,
        )

    except HTTPException:
        raise
    except Exception as e:
        _observe("rating", "error", start_time)
        logger.error("get_metadata_rating_failed", metadata_uuid=metadata_uuid, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute rating average",
        )


# ── GET /userfeedback/{uuid} ─────────────────────────────


@router.get(
    "/userfeedback/{uuid}",
    response_model=UserFeedbackDTO,
    responses={
        403: {"model": ErrorResponse, "description": NOT_ALLOWED_CAN_VIEW},
        404: {"model": ErrorResponse, "description": "User feedback not found"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Finds a specific user feedback",
)
async def get_user_comment(
    uuid: str,
    _enabled: None = Depends(require_rating_enabled),
    principal: Principal | None = Depends(get_current_principal),
    catalog: CatalogRepository = Depends(get_catalog_repository),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> UserFeedbackDTO:
    start_time = time.perf_counter()

    try:
        feedback = await service.retrieve_user_feedback(
            uuid, published_only=_published_only(principal)
        )
        if feedback is None:
            _observe("get", "not_found", start_time)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User feedback {uuid!r} not found",
            )

        record = await catalog.can_view_record(feedback.metadata_uuid, principal)
        if record is None:
            _observe("get", "forbidden", start_time)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=NOT_ALLOWED_CAN_VIEW,
            )

        latency_ms = _observe("get", "ok", start_time)
        logger.debug("User feedback retrieved", feedback_uuid=uuid, latency_ms=latency_ms)
        return to_dto(feedback)

    except HTTPException:
        raise
    except Exception as e:
        _observe("get", "error", start_time)
        logger.error("get_user_comment_failed", feedback_uuid=uuid, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get user feedback",
        )


# ── GET /records/{metadata_uuid}/userfeedback, GET /userfeedback ──


async def _list_user_feedback(
    metadata_uuid: str | None,
    size: int,
    principal: Principal | None,
    service: UserFeedbackService,
) -> list[UserFeedbackDTO]:
    start_time = time.perf_counter()
    published_only = _published_only(principal)

    try:
        if metadata_uuid:
            feedback_list = await service.retrieve_user_feedback_for_metadata(
                metadata_uuid, size, published_only=published_only
            )
        else:
            feedback_list = await service.retrieve_user_feedback_list(
                size, published_only=published_only
            )

        items = [to_dto(f) for f in feedback_list]

        latency_ms = _observe("list", "ok", start_time)
        logger.info(
            "User feedback listed",
            metadata_uuid=metadata_uuid or None,
            published_only=published_only,
            total=len(items),
            latency_ms=latency_ms,
        )
        return items

    except ValueError as e:
        _observe("list", "invalid", start_time)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except Exception as e:
        _observe("list", "error", start_time)
        logger.error("list_user_feedback_failed", metadata_uuid=metadata_uuid, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list user feedback",
        )


@router.get(
    "/records/{metadata_uuid}/userfeedback",
    response_model=list[UserFeedbackDTO],
    responses={
        403: _FORBIDDEN,
        422: {"model": ErrorResponse, "description": "Invalid size"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Finds a list of user feedback for a specific record",
    description=(
        "Anonymous callers get published feedback only; "
        "authenticated callers also get drafts."
    ),
)
async def get_user_comments_on_a_record(
    metadata_uuid: str,
    size: int = Query(default=UNLIMITED, ge=UNLIMITED, description="Maximum number of feedback to return (-1 = all)"),
    _enabled: None = Depends(require_rating_enabled),
    principal: Principal | None = Depends(get_current_principal),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> list[UserFeedbackDTO]:
    return await _list_user_feedback(metadata_uuid, size, principal, service)


@router.get(
    "/userfeedback",
    response_model=list[UserFeedbackDTO],
    responses={
        403: _FORBIDDEN,
        422: {"model": ErrorResponse, "description": "Invalid size"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Finds a list of user feedback records",
    description=(
        "Lists feedback across records, or for one record when metadataUuid "
        "is given. Anonymous callers get published feedback only."
    ),
)
async def get_user_comments(
    metadata_uuid: str = Query(default="", alias="metadataUuid", description="Metadata record UUID"),
    size: int = Query(default=UNLIMITED, ge=UNLIMITED, description="Maximum number of feedback to return (-1 = all)"),
    _enabled: None = Depends(require_rating_enabled),
    principal: Principal | None = Depends(get_current_principal),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> list[UserFeedbackDTO]:
    return await _list_user_feedback(metadata_uuid.strip() or None, size, principal, service)


# ── POST /userfeedback ───────────────────────────────────


@router.post(
    "/userfeedback",
    response_model=UserFeedbackDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        403: _FORBIDDEN,
        422: {"model": ErrorResponse, "description": "Invalid feedback"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Creates a user feedback",
    description=(
        "Creates a user feedback in draft status if the user is not logged in. "
        "Feedback from a logged-in user is published right away."
    ),
)
@limiter.limit(submission_limit)
async def new_user_feedback(
    request: Request,
    feedback_dto: UserFeedbackDTO,
    _enabled: None = Depends(require_rating_enabled),
    principal: Principal | None = Depends(get_current_principal),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> UserFeedbackDTO:
    start_time = time.perf_counter()

    try:
        feedback = from_dto(feedback_dto)
        created = await service.save_user_feedback(feedback, principal)

        latency_ms = _observe("create", "ok", start_time)
        logger.info(
            "User feedback created",
            feedback_uuid=created.uuid,
            metadata_uuid=created.metadata_uuid,
            status=created.status.value,
            latency_ms=latency_ms,
        )
        return to_dto(created)

    except ValueError as e:
        _observe("create", "invalid", start_time)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except Exception as e:
        _observe("create", "error", start_time)
        logger.error("new_user_feedback_failed", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user feedback",
        )


# ── GET /userfeedback/{uuid}/publish ─────────────────────


@router.get(
    "/userfeedback/{uuid}/publish",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        403: {"model": ErrorResponse, "description": NOT_ALLOWED_ONLY_REVIEWER},
        404: {"model": ErrorResponse, "description": "User feedback not found"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Publishes a feedback",
    description="For reviewers.",
)
async def publish(
    uuid: str,
    principal: Principal = Depends(require_reviewer),
    _enabled: None = Depends(require_rating_enabled),
    service: UserFeedbackService = Depends(get_userfeedback_service),
) -> Response:
    start_time = time.perf_counter()

    try:
        await service.publish_user_feedback(uuid, principal)

        latency_ms = _observe("publish", "ok", start_time)
        logger.info(
            "User feedback published",
            feedback_uuid=uuid,
            reviewer=principal.username,
            latency_ms=latency_ms,
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except FeedbackNotFoundError as e:
        _observe("publish", "not_found", start_time)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except Exception as e:
        _observe("publish", "error", start_time)
        logger.error("publish_user_feedback_failed", feedback_uuid=uuid, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to publish user feedback",
        )
