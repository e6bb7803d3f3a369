"""Case API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from mq_case_service.api.deps import get_case_manager
from mq_case_service.api.responses import api_response
from mq_case_service.core.case_manager import CaseManager
from mq_case_service.core.validators import build_case_filter
from mq_case_service.models import (
    ApiResponse,
    CaseAssignRequest,
    CaseCategorizeRequest,
    CaseCloseRequest,
)

router = APIRouter(prefix="/case", tags=["cases"])


@router.get(
    "",
    response_model=ApiResponse,
    summary="List cases",
    description="""
Retrieves at most 100 cases, newest first unless `sort=1`.

**Query Parameters**:
- `location` (optional): Intake site
- `status` (optional): open/processing/closed/completed
- `category` (optional): normal/welfare/minister
- `sort` (optional): `1`/`asc` for oldest first, `-1`/`desc` for newest first

Any other value for `status`, `category` or `sort` is rejected with 400
rather than ignored. There is no pagination cursor.
    """,
    responses={
        200: {"description": "Cases retrieved"},
        400: {"description": "Unsupported filter value"},
    },
)
async def list_cases(
    location: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """List cases with optional filters."""
    case_filter = build_case_filter(
        location=location,
        status=status_filter,
        category=category,
        sort=sort,
    )
    cases = await case_manager.list_cases(case_filter)
    return api_response(status.HTTP_200_OK, "Cases retrieved.", cases)


@router.get(
    "/{uid}",
    response_model=ApiResponse,
    summary="Get case by uid",
    responses={404: {"description": "Case not found"}},
)
async def get_case(
    uid: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    case = await case_manager.get_case(uid)
    return api_response(status.HTTP_200_OK, "Case retrieved.", case)


@router.api_route(
    "/{uid}/assign",
    methods=["PATCH", "POST"],
    response_model=ApiResponse,
    summary="Assign case to a kiosk manager",
    description="""
Moves an **open** case to `processing` and records the kiosk manager.

**Request Example**:
```json
{"assignee": "5f0c8f6e-4a55-4c1b-9d2b-0f6f3f0f9a11"}
```

A case that is already processing, closed or completed cannot be
(re)assigned.
    """,
    responses={
        200: {"description": "Case is assigned"},
        400: {"description": "assignee missing or case is not open"},
        404: {"description": "Case or kiosk manager not found"},
    },
)
async def assign_case(
    uid: str,
    request: Optional[CaseAssignRequest] = None,
    case_manager: CaseManager = Depends(get_case_manager),
):
    assignee = request.assignee if request else None
    case = await case_manager.assign_case(uid, assignee)
    return api_response(status.HTTP_200_OK, "Case is assigned.", case)


@router.api_route(
    "/{uid}/categorize",
    methods=["POST", "PATCH"],
    response_model=ApiResponse,
    summary="Categorize case",
    description="""
Sets the category (normal/welfare/minister) of a case that is not closed
or completed. Status is left untouched.
    """,
    responses={
        200: {"description": "Case categorized"},
        400: {"description": "Invalid category or case already closed"},
        404: {"description": "Case not found"},
    },
)
async def categorize_case(
    uid: str,
    request: Optional[CaseCategorizeRequest] = None,
    case_manager: CaseManager = Depends(get_case_manager),
):
    category = request.category if request else None
    case = await case_manager.categorize_case(uid, category)
    return api_response(status.HTTP_200_OK, f"Case is categorized as {category}.", case)


async def _close(uid: str, request: Optional[CaseCloseRequest], case_manager: CaseManager):
    case = await case_manager.close_case(uid, request.status if request else None)
    return api_response(status.HTTP_200_OK, "Case is updated and closed.", case)


@router.patch(
    "/{uid}",
    response_model=ApiResponse,
    summary="Close case",
    description="""
Closes a case with a terminal status.

**Request Example**:
```json
{"status": "completed"}
```

Allowed from `open` and `processing`; a closed or completed case cannot be
updated again.
    """,
    responses={
        200: {"description": "Case is updated and closed"},
        400: {"description": "status missing/not terminal, or case already closed"},
        404: {"description": "Case not found"},
    },
)
async def close_case(
    uid: str,
    request: Optional[CaseCloseRequest] = None,
    case_manager: CaseManager = Depends(get_case_manager),
):
    return await _close(uid, request, case_manager)


@router.post(
    "/{uid}/close",
    response_model=ApiResponse,
    summary="Close case (POST variant)",
)
async def close_case_post(
    uid: str,
    request: Optional[CaseCloseRequest] = None,
    case_manager: CaseManager = Depends(get_case_manager),
):
    return await _close(uid, request, case_manager)


@router.delete(
    "/{uid}",
    response_model=ApiResponse,
    summary="Delete case",
    description="Removes a case in any status and returns the deleted record.",
    responses={
        200: {"description": "Case deleted"},
        400: {"description": "Nothing was deleted"},
    },
)
async def delete_case(
    uid: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    deleted = await case_manager.delete_case(uid)
    return api_response(status.HTTP_200_OK, f"Case '{deleted.uid}' delete successfully", deleted)
