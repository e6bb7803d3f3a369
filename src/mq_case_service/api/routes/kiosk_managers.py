"""Kiosk manager API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from mq_case_service.api.deps import get_identity_manager
from mq_case_service.api.responses import api_response
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.models import ApiResponse, KioskManagerCreateRequest, KioskManagerDeleteRequest

router = APIRouter(prefix="/kiosk/manager", tags=["kiosk managers"])


@router.get("", response_model=ApiResponse, summary="List kiosk managers")
async def list_kiosk_managers(identity: IdentityManager = Depends(get_identity_manager)):
    managers = await identity.list_kiosk_managers()
    return api_response(status.HTTP_200_OK, "Kiosk managers retrieved.", managers)


@router.post(
    "",
    response_model=ApiResponse,
    summary="Register kiosk manager",
    responses={
        400: {"description": "Missing name/email or invalid kiosk phone"},
        409: {"description": "Email or kiosk phone already registered"},
    },
)
async def create_kiosk_manager(
    request: KioskManagerCreateRequest,
    identity: IdentityManager = Depends(get_identity_manager),
):
    manager = await identity.register_kiosk_manager(request)
    return api_response(status.HTTP_200_OK, "Kiosk manager created.", manager)


@router.delete(
    "/{uid}",
    response_model=ApiResponse,
    summary="Delete kiosk manager",
    description="Deletes the kiosk manager and the linked kiosk phone.",
)
async def delete_kiosk_manager(
    uid: str,
    identity: IdentityManager = Depends(get_identity_manager),
):
    manager = await identity.delete_kiosk_manager(uid)
    return api_response(status.HTTP_200_OK, f"Kiosk manager '{uid}' delete successfully", manager)


@router.delete(
    "",
    response_model=ApiResponse,
    summary="Delete kiosk manager by email or kiosk phone",
    description="""
**Request Body Example**:
```json
{"kioskPhone": {"countryCode": "65", "number": "81234567"}}
```

`email` takes precedence when both selectors are sent.
    """,
    responses={400: {"description": "Selector missing or kiosk manager not found"}},
)
async def delete_kiosk_manager_by_selector(
    request: Optional[KioskManagerDeleteRequest] = None,
    identity: IdentityManager = Depends(get_identity_manager),
):
    request = request or KioskManagerDeleteRequest()
    manager = await identity.delete_kiosk_manager_by(email=request.email, kiosk_phone=request.kiosk_phone)
    selector = request.email or f"{request.kiosk_phone.country_code}{request.kiosk_phone.number}"
    return api_response(status.HTTP_200_OK, f"Kiosk manager '{selector}' delete successfully", manager)
