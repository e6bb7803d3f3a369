"""Models package."""

from .case import FINAL_STATES, Case, CaseCategory, CaseFilter, CaseStatus, SortOrder
from .identity import KioskManager, Phone, User
from .requests import (
    ApiResponse,
    CaseAssignRequest,
    CaseCategorizeRequest,
    CaseCloseRequest,
    CaseCreateRequest,
    HealthResponse,
    KioskManagerCreateRequest,
    KioskManagerDeleteRequest,
    KioskPhoneBody,
    PhoneBody,
    PhoneRequest,
    UserCreateRequest,
    UserDeleteRequest,
    UserSearchRequest,
    UserUpdateRequest,
)

__all__ = [
    "FINAL_STATES",
    "Case",
    "CaseCategory",
    "CaseFilter",
    "CaseStatus",
    "SortOrder",
    "KioskManager",
    "Phone",
    "User",
    "ApiResponse",
    "CaseAssignRequest",
    "CaseCategorizeRequest",
    "CaseCloseRequest",
    "CaseCreateRequest",
    "HealthResponse",
    "KioskManagerCreateRequest",
    "KioskManagerDeleteRequest",
    "KioskPhoneBody",
    "PhoneBody",
    "PhoneRequest",
    "UserCreateRequest",
    "UserDeleteRequest",
    "UserSearchRequest",
    "UserUpdateRequest",
]
