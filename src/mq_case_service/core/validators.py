"""Request validation.

Validators are pure and never raise for bad input: they return ``None`` when
the value is acceptable and a human-readable message otherwise. Composite
validators stop at the first failing check. Callers turn a message into a
``BadRequestError``.
"""

import re
from typing import Iterable, Optional

from mq_case_service.core.exceptions import BadRequestError
from mq_case_service.models import (
    FINAL_STATES,
    CaseCategory,
    CaseCreateRequest,
    CaseFilter,
    CaseStatus,
    KioskManagerCreateRequest,
    PhoneRequest,
    SortOrder,
)
from mq_case_service.models.requests import UserProfileFields

NRIC_PATTERN = re.compile(r"^[STFG]\d{7}.$")
EMAIL_PATTERN = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")
DIGITS_PATTERN = re.compile(r"^\d+$")

RACES = ("chinese", "malay", "indian", "others")
GENDERS = ("male", "female")
MARITAL_STATUSES = ("single", "married", "divorced", "widowed")

SUBJECT_MAX_LENGTH = 80
DESCRIPTION_MAX_LENGTH = 280
LANGUAGE_MAX_LENGTH = 80
LOCATION_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 254

_SORT_VALUES = {
    "1": SortOrder.ASCENDING,
    "asc": SortOrder.ASCENDING,
    "-1": SortOrder.DESCENDING,
    "desc": SortOrder.DESCENDING,
}


def _choices(values: Iterable[str]) -> str:
    return "[" + "|".join(values) + "]"


def is_final_state(status) -> bool:
    """Check if the status is closed or completed."""
    try:
        return CaseStatus(status) in FINAL_STATES
    except ValueError:
        return False


def is_status(value) -> bool:
    return value in {s.value for s in CaseStatus}


def is_category(value) -> bool:
    return value in {c.value for c in CaseCategory}


def validate_nric(value: Optional[str]) -> Optional[str]:
    """Validate an NRIC/FIN: one of S, T, F, G, then 7 digits and a check character."""
    if not value:
        return "nric is required"
    if not NRIC_PATTERN.match(value):
        return "nric format is wrong"
    return None


def validate_email(value: Optional[str], field: str = "email") -> Optional[str]:
    if not value:
        return f"{field} is required."
    if len(value) > EMAIL_MAX_LENGTH:
        return f"Maximum characters allowed for {field} is {EMAIL_MAX_LENGTH}."
    if not EMAIL_PATTERN.match(value):
        return f"{field} format is wrong."
    return None


def validate_length(
    value: Optional[str],
    field: str,
    max_length: int,
    min_length: int = 0,
) -> Optional[str]:
    """Check ``min_length <= len(value) <= max_length``; ``None`` counts as empty."""
    length = len(value) if value else 0
    if min_length and length == 0:
        return f"{field} is required."
    if length < min_length:
        return f"{field} needs to be at least {min_length} characters."
    if length > max_length:
        return f"Maximum characters allowed for {field} is {max_length}."
    return None


def validate_choice(value: Optional[str], field: str, choices: Iterable[str]) -> Optional[str]:
    choices = tuple(choices)
    if not value:
        return f"{field} is required."
    if value.lower() not in choices:
        return f"{field} can only be {_choices(choices)}."
    return None


def validate_digits(value: Optional[str], field: str, length: int) -> Optional[str]:
    """Check that ``value`` is exactly ``length`` digits."""
    if not value:
        return f"{field} is required."
    if not DIGITS_PATTERN.match(value):
        return f"{field} can only be digits."
    if len(value) != length:
        return f"{field} needs to be {length}-digit long."
    return None


def validate_phone(phone: Optional[PhoneRequest], field: str = "phone") -> Optional[str]:
    """Validate a phone: 2-digit country code and 8-digit number."""
    if phone is None:
        return f"{field} is required."
    return validate_digits(phone.country_code, f"{field}.countryCode", 2) or validate_digits(
        phone.number, f"{field}.number", 8
    )


def validate_user_profile(profile: UserProfileFields, partial: bool = False) -> Optional[str]:
    """Validate user profile fields, first failure wins.

    With ``partial`` only the fields present in the request are checked,
    which is what profile updates need.
    """
    checks = [
        ("name", lambda v: validate_length(v, "name", 80, min_length=1)),
        ("email", validate_email),
        ("race", lambda v: validate_choice(v, "race", RACES)),
        ("gender", lambda v: validate_choice(v, "gender", GENDERS)),
        ("marital_status", lambda v: validate_choice(v, "maritalStatus", MARITAL_STATUSES)),
        ("occupation", lambda v: validate_length(v, "occupation", 80, min_length=1)),
        ("postal_code", lambda v: validate_digits(v, "postalCode", 6)),
        ("block_hse_no", lambda v: validate_length(v, "blockHseNo", 10, min_length=1)),
        ("floor_no", lambda v: validate_length(v, "floorNo", 5)),
        ("unit_no", lambda v: validate_length(v, "unitNo", 5)),
        ("address", lambda v: validate_length(v, "address", 200, min_length=1)),
        ("flat_type", lambda v: validate_length(v, "flatType", 40, min_length=1)),
    ]
    provided = profile.model_fields_set
    for name, check in checks:
        if partial and name not in provided:
            continue
        error = check(getattr(profile, name))
        if error:
            return error

    if profile.nric:
        error = validate_nric(profile.nric)
        if error:
            return error
    if profile.no_of_children is not None and profile.no_of_children < 0:
        return "noOfChildren cannot be negative."
    return None


def validate_kiosk_manager(request: KioskManagerCreateRequest) -> Optional[str]:
    if not (request.email and request.first_name and request.last_name and request.kiosk_phone):
        return "email, firstName, lastName, kioskPhone is required"
    return (
        validate_email(request.email)
        or validate_length(request.first_name.strip(), "firstName", 80, min_length=1)
        or validate_length(request.last_name.strip(), "lastName", 80, min_length=1)
        or validate_phone(request.kiosk_phone, "kioskPhone")
    )


def validate_case_create(request: CaseCreateRequest) -> Optional[str]:
    """Validate a case intake request."""
    if not request.subject or not request.subject.strip():
        return "subject is required."
    if not request.location or not request.location.strip():
        return "location is required."
    error = (
        validate_length(request.subject, "subject", SUBJECT_MAX_LENGTH)
        or validate_length(request.description, "description", DESCRIPTION_MAX_LENGTH)
        or validate_length(request.language, "language", LANGUAGE_MAX_LENGTH)
        or validate_length(request.location.strip(), "location", LOCATION_MAX_LENGTH)
    )
    if error:
        return error
    # An empty nric counts as not supplied
    if request.nric:
        return validate_nric(request.nric)
    return None


def build_case_filter(
    location: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
) -> CaseFilter:
    """Build a typed listing filter, rejecting any unsupported value.

    Raises:
        BadRequestError: If status, category or sort is not a known value
    """
    if status is not None and not is_status(status):
        raise BadRequestError(
            f"status can only be {_choices(s.value for s in CaseStatus)}.",
            {"status": status},
        )
    if category is not None and not is_category(category):
        raise BadRequestError(
            f"category can only be {_choices(c.value for c in CaseCategory)}.",
            {"category": category},
        )
    if sort is not None and sort.lower() not in _SORT_VALUES:
        raise BadRequestError(
            f"sort can only be {_choices(_SORT_VALUES)}.",
            {"sort": sort},
        )
    if location is not None and not location.strip():
        raise BadRequestError("location cannot be empty.", {"location": location})

    return CaseFilter(
        location=location.strip() if location is not None else None,
        status=CaseStatus(status) if status is not None else None,
        category=CaseCategory(category) if category is not None else None,
        sort=_SORT_VALUES[sort.lower()] if sort is not None else SortOrder.DESCENDING,
    )
