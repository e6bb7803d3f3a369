"""Phone and kiosk phone API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from mq_case_service.api.deps import get_identity_manager
from mq_case_service.api.responses import api_response
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.models import ApiResponse, KioskPhoneBody, PhoneBody

router = APIRouter(tags=["phones"])


def _label(phone) -> str:
    return f"{phone.country_code}{phone.number}"


@router.get("/phone", response_model=ApiResponse, summary="List citizen phones")
async def list_phones(identity: IdentityManager = Depends(get_identity_manager)):
    phones = await identity.list_phones()
    return api_response(status.HTTP_200_OK, "Phones retrieved.", phones)


@router.post(
    "/phone",
    response_model=ApiResponse,
    summary="Register phone",
    description="""
**Request Body Example**:
```json
{"phone": {"countryCode": "65", "number": "91234567"}}
```
    """,
    responses={
        400: {"description": "Invalid country code or number"},
        409: {"description": "Number already registered"},
    },
)
async def create_phone(
    request: Optional[PhoneBody] = None,
    identity: IdentityManager = Depends(get_identity_manager),
):
    phone = await identity.add_phone(request.phone if request else None)
    return api_response(status.HTTP_200_OK, "Phone created.", phone)


@router.delete(
    "/phone",
    response_model=ApiResponse,
    summary="Delete phone by country code and number",
    responses={400: {"description": "Invalid phone or nothing was deleted"}},
)
async def delete_phone(
    request: Optional[PhoneBody] = None,
    identity: IdentityManager = Depends(get_identity_manager),
):
    phone = await identity.delete_phone(request.phone if request else None)
    return api_response(status.HTTP_200_OK, f"Phone '{_label(phone)}' delete successfully", phone)


@router.get("/kiosk/phone", response_model=ApiResponse, summary="List kiosk phones")
async def list_kiosk_phones(identity: IdentityManager = Depends(get_identity_manager)):
    phones = await identity.list_phones(kiosk=True)
    return api_response(status.HTTP_200_OK, "Kiosk phones retrieved.", phones)


@router.post("/kiosk/phone", response_model=ApiResponse, summary="Register kiosk phone")
async def create_kiosk_phone(
    request: Optional[KioskPhoneBody] = None,
    identity: IdentityManager = Depends(get_identity_manager),
):
    phone = await identity.add_phone(request.kiosk_phone if request else None, kiosk=True)
    return api_response(status.HTTP_200_OK, "Kiosk phone created.", phone)


@router.delete("/kiosk/phone", response_model=ApiResponse, summary="Delete kiosk phone")
async def delete_kiosk_phone(
    request: Optional[KioskPhoneBody] = None,
    identity: IdentityManager = Depends(get_identity_manager),
):
    phone = await identity.delete_phone(request.kiosk_phone if request else None, kiosk=True)
    return api_response(status.HTTP_200_OK, f"Kiosk phone '{_label(phone)}' delete successfully", phone)
