"""User API routes, including case intake."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from mq_case_service.api.deps import get_case_manager, get_identity_manager
from mq_case_service.api.responses import api_response
from mq_case_service.core.case_manager import CaseManager
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.models import (
    ApiResponse,
    CaseCreateRequest,
    UserCreateRequest,
    UserDeleteRequest,
    UserSearchRequest,
    UserUpdateRequest,
)

router = APIRouter(prefix="/user", tags=["users"])


@router.get("", response_model=ApiResponse, summary="List users")
async def list_users(identity: IdentityManager = Depends(get_identity_manager)):
    users = await identity.list_users()
    return api_response(status.HTTP_200_OK, "Users retrieved.", users)


@router.post(
    "",
    response_model=ApiResponse,
    summary="Register user",
    description="""
Registers a citizen together with their phone.

**Request Body Example**:
```json
{
  "name": "Tan Ah Kow",
  "email": "ahkow@example.com",
  "race": "chinese",
  "gender": "male",
  "maritalStatus": "married",
  "occupation": "retired",
  "postalCode": "560123",
  "blockHseNo": "123",
  "floorNo": "05",
  "unitNo": "67",
  "address": "Ang Mo Kio Avenue 3",
  "flatType": "4-room",
  "phone": {"countryCode": "65", "number": "91234567"}
}
```
    """,
    responses={
        200: {"description": "User created"},
        400: {"description": "Invalid phone or profile field"},
        409: {"description": "Phone or email already registered"},
    },
)
async def create_user(
    request: UserCreateRequest,
    identity: IdentityManager = Depends(get_identity_manager),
):
    user = await identity.register_user(request)
    return api_response(status.HTTP_200_OK, "User created.", user)


@router.post("/search", response_model=ApiResponse, summary="Find user by phone")
async def search_user(
    request: UserSearchRequest,
    identity: IdentityManager = Depends(get_identity_manager),
):
    user = await identity.search_user(request.phone)
    return api_response(status.HTTP_200_OK, "User found.", user)


@router.post(
    "/{uid}/case",
    response_model=ApiResponse,
    summary="Open a case for a user",
    description="""
Creates a case for the user and gives it the next queue number of the day
at that location.

**Request Body Example**:
```json
{
  "subject": "Water leak",
  "description": "Ceiling leaking in the kitchen",
  "language": "english",
  "location": "L1",
  "whatsappCall": false
}
```

**Response Example**:
```json
{
  "status": 200,
  "message": "Case created.",
  "data": {
    "uid": "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
    "userId": "...",
    "subject": "Water leak",
    "status": "open",
    "category": "normal",
    "location": "L1",
    "queueNo": 1,
    "refId": "123-05-67-560123",
    "whatsappCall": false,
    "createdAt": "2026-10-18T09:30:00Z"
  }
}
```

A user may only have one open case at a time.
    """,
    responses={
        200: {"description": "Case created"},
        400: {"description": "Missing or invalid fields"},
        404: {"description": "User not found"},
        409: {"description": "User already has an open case"},
    },
)
async def create_case(
    uid: str,
    request: CaseCreateRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    case = await case_manager.create_case(uid, request)
    return api_response(status.HTTP_200_OK, "Case created.", case)


@router.patch("/{uid}", response_model=ApiResponse, summary="Update user profile")
async def update_user(
    uid: str,
    request: UserUpdateRequest,
    identity: IdentityManager = Depends(get_identity_manager),
):
    user = await identity.update_user(uid, request)
    return api_response(status.HTTP_200_OK, "User updated.", user)


@router.delete(
    "",
    response_model=ApiResponse,
    summary="Delete user by email or phone",
    description="Deletes the user and the linked phone record.",
)
async def delete_user(
    request: Optional[UserDeleteRequest] = None,
    identity: IdentityManager = Depends(get_identity_manager),
):
    request = request or UserDeleteRequest()
    user = await identity.delete_user(email=request.email, phone=request.phone)
    selector = request.email or f"{request.phone.country_code}{request.phone.number}"
    return api_response(status.HTTP_200_OK, f"User '{selector}' delete successfully", user)
