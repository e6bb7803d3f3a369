"""API request and response models.

Request bodies are deliberately loose (plain optional strings): the
validators in ``core.validators`` produce the 400 messages the kiosk app
expects, so pydantic only guards the JSON shape.
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CaseCreateRequest(_RequestModel):
    """Request to open a new case for a user."""

    subject: Optional[str] = None
    description: Optional[str] = ""
    language: Optional[str] = ""
    location: Optional[str] = None
    nric: Optional[str] = None
    whatsapp_call: bool = False


class CaseAssignRequest(_RequestModel):
    """Request to assign an open case to a kiosk manager."""

    assignee: Optional[str] = None


class CaseCategorizeRequest(_RequestModel):
    """Request to change a case category."""

    category: Optional[str] = None


class CaseCloseRequest(_RequestModel):
    """Request to close a case with a terminal status."""

    status: Optional[str] = None


class PhoneRequest(_RequestModel):
    """Phone as sent by clients: ``{"countryCode": "65", "number": "91234567"}``."""

    country_code: Optional[str] = None
    number: Optional[str] = None

    @field_validator("country_code", "number", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class UserProfileFields(_RequestModel):
    """Profile attributes shared by user creation and update."""

    nric: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[date] = None
    race: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    occupation: Optional[str] = None
    no_of_children: Optional[int] = None
    postal_code: Optional[str] = None
    block_hse_no: Optional[str] = None
    floor_no: Optional[str] = None
    unit_no: Optional[str] = None
    address: Optional[str] = None
    flat_type: Optional[str] = None

    @field_validator("postal_code", "block_hse_no", "floor_no", "unit_no", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class UserCreateRequest(UserProfileFields):
    """Request to register a user together with their phone."""

    phone: Optional[PhoneRequest] = None


class UserUpdateRequest(UserProfileFields):
    """Partial profile update; only supplied fields are validated."""


class UserSearchRequest(_RequestModel):
    phone: Optional[PhoneRequest] = None


class UserDeleteRequest(_RequestModel):
    """Delete a user selected by email or, failing that, by phone."""

    email: Optional[str] = None
    phone: Optional[PhoneRequest] = None


class KioskManagerCreateRequest(_RequestModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    kiosk_phone: Optional[PhoneRequest] = None


class KioskManagerDeleteRequest(_RequestModel):
    """Delete a kiosk manager selected by email or, failing that, by kiosk phone."""

    email: Optional[str] = None
    kiosk_phone: Optional[PhoneRequest] = None


class PhoneBody(_RequestModel):
    phone: Optional[PhoneRequest] = None


class KioskPhoneBody(_RequestModel):
    kiosk_phone: Optional[PhoneRequest] = None


class ApiResponse(BaseModel):
    """Envelope carried by every response body, success or failure."""

    status: int
    message: str
    data: Any = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    database: str
    storage: str = Field(default="inmemory")
