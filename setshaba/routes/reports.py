"""
Report endpoints - citizen submission, official triage, upvotes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from setshaba.core.errors import DomainError, InternalError
from setshaba.models.base import ApiResponse, Page
from setshaba.models.report import (
    ReportCreate,
    ReportPayload,
    ReportResponse,
    ReportStatus,
    ReportUpdate,
    UpvotePayload,
)
from setshaba.models.user import CurrentUser
from setshaba.dependencies import (
    get_current_user,
    get_report_service,
    get_vote_service,
    require_citizen,
    require_official,
)
from setshaba.services.report_service import ReportService
from setshaba.services.vote_service import VoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

LIMIT_QUERY = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Page size")
OFFSET_QUERY = Query(0, ge=0, description="Zero-based offset")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[ReportPayload])
def create_report(
    report: ReportCreate,
    caller: CurrentUser = Depends(require_citizen),
    service: ReportService = Depends(get_report_service),
):
    """
    Submit a new citizen report.

    The report's municipality is the citizen's own, or resolved from the
    coordinates. Returns 400 when neither is available.
    """
    try:
        created = service.create_report(caller, report)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Create report failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=ReportPayload(report=created), message="Report created successfully")


@router.get("/mine", response_model=ApiResponse[Page[ReportResponse]])
def list_my_reports(
    status: Optional[ReportStatus] = Query(None, description="Filter by status"),
    category: Optional[str] = Query(None, max_length=100, description="Filter by category"),
    limit: int = LIMIT_QUERY,
    offset: int = OFFSET_QUERY,
    caller: CurrentUser = Depends(require_citizen),
    service: ReportService = Depends(get_report_service),
):
    """The caller's own reports, newest first."""
    try:
        page = service.list_my_reports(caller, status=status, category=category, limit=limit, offset=offset)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Get user reports failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=page)


@router.get("", response_model=ApiResponse[Page[ReportResponse]])
def list_municipality_reports(
    municipality_id: Optional[str] = Query(None, description="Must equal the caller's municipality if given"),
    status: Optional[ReportStatus] = Query(None, description="Filter by status"),
    category: Optional[str] = Query(None, max_length=100, description="Filter by category"),
    limit: int = LIMIT_QUERY,
    offset: int = OFFSET_QUERY,
    caller: CurrentUser = Depends(require_official),
    service: ReportService = Depends(get_report_service),
):
    """
    Reports of the official's municipality, newest first.

    Asking for another municipality is refused with 403 rather than
    narrowed to the caller's own.
    """
    try:
        page = service.list_municipality_reports(
            caller,
            municipality_id=municipality_id,
            status=status,
            category=category,
            limit=limit,
            offset=offset,
        )
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Get municipality reports failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=page)


@router.get("/{report_id}", response_model=ApiResponse[ReportPayload])
def get_report(
    report_id: str,
    caller: CurrentUser = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    try:
        report = service.get_report(caller, report_id)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Get report {report_id} failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=ReportPayload(report=report))


@router.post("/{report_id}/upvote", response_model=ApiResponse[UpvotePayload])
def toggle_upvote(
    report_id: str,
    caller: CurrentUser = Depends(require_citizen),
    votes: VoteService = Depends(get_vote_service),
):
    """
    Toggle the caller's upvote: adds it when absent, removes it when present.
    Authors cannot upvote their own reports.
    """
    try:
        result = votes.toggle_upvote(caller, report_id)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Upvote on {report_id} failed: {e}", exc_info=True)
        raise InternalError() from e
    message = "Report upvoted" if result["upvoted"] else "Upvote removed"
    return ApiResponse(data=UpvotePayload(**result), message=message)


@router.put("/{report_id}", response_model=ApiResponse[ReportPayload])
def update_report(
    report_id: str,
    updates: ReportUpdate,
    caller: CurrentUser = Depends(require_official),
    service: ReportService = Depends(get_report_service),
):
    """Update status, category or assignment of a report in the official's municipality."""
    try:
        report = service.update_report(caller, report_id, updates)
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Update report {report_id} failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=ReportPayload(report=report), message="Report updated successfully")
