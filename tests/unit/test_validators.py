"""Unit tests for request validators."""

import pytest
from pydantic import ValidationError

from mq_case_service.config import Settings
from mq_case_service.core import validators
from mq_case_service.core.exceptions import BadRequestError
from mq_case_service.models import (
    CaseCategory,
    CaseCreateRequest,
    CaseStatus,
    KioskManagerCreateRequest,
    PhoneRequest,
    SortOrder,
    UserCreateRequest,
    UserUpdateRequest,
)

from tests.payloads import user_payload


@pytest.mark.unit
class TestNric:
    @pytest.mark.parametrize("value", ["S1234567D", "T0000000A", "F9999999Z", "G1234567X"])
    def test_accepts_valid(self, value):
        assert validators.validate_nric(value) is None

    def test_missing(self):
        assert validators.validate_nric(None) == "nric is required"
        assert validators.validate_nric("") == "nric is required"

    @pytest.mark.parametrize("value", ["A1234567D", "S123456D", "S12345678D", "s1234567d"])
    def test_rejects_wrong_format(self, value):
        assert validators.validate_nric(value) == "nric format is wrong"


@pytest.mark.unit
class TestStateHelpers:
    def test_final_states(self):
        assert validators.is_final_state("closed")
        assert validators.is_final_state(CaseStatus.COMPLETED)
        assert not validators.is_final_state("open")
        assert not validators.is_final_state("processing")
        assert not validators.is_final_state("bogus")

    def test_category(self):
        assert validators.is_category("minister")
        assert not validators.is_category("urgent")


@pytest.mark.unit
class TestPhone:
    def test_valid(self):
        assert validators.validate_phone(PhoneRequest(country_code="65", number="91234567")) is None

    def test_integers_are_accepted(self):
        phone = PhoneRequest.model_validate({"countryCode": 65, "number": 91234567})
        assert validators.validate_phone(phone) is None

    def test_missing(self):
        assert validators.validate_phone(None) == "phone is required."

    def test_country_code_length(self):
        error = validators.validate_phone(PhoneRequest(country_code="651", number="91234567"))
        assert error == "phone.countryCode needs to be 2-digit long."

    def test_number_digits_only(self):
        error = validators.validate_phone(PhoneRequest(country_code="65", number="9123456a"))
        assert error == "phone.number can only be digits."


@pytest.mark.unit
class TestUserProfile:
    def test_complete_profile(self):
        assert validators.validate_user_profile(UserCreateRequest.model_validate(user_payload())) is None

    def test_race_must_be_known(self):
        request = UserCreateRequest.model_validate(user_payload(race="martian"))
        assert validators.validate_user_profile(request) == "race can only be [chinese|malay|indian|others]."

    def test_postal_code_six_digits(self):
        request = UserCreateRequest.model_validate(user_payload(postalCode="1234"))
        assert validators.validate_user_profile(request) == "postalCode needs to be 6-digit long."

    def test_missing_name(self):
        payload = user_payload()
        del payload["name"]
        assert validators.validate_user_profile(UserCreateRequest.model_validate(payload)) == "name is required."

    def test_partial_only_checks_supplied_fields(self):
        request = UserUpdateRequest.model_validate({"occupation": "nurse"})
        assert validators.validate_user_profile(request, partial=True) is None

    def test_partial_rejects_bad_email(self):
        request = UserUpdateRequest.model_validate({"email": "not-an-email"})
        assert validators.validate_user_profile(request, partial=True) == "email format is wrong."

    def test_email_length_capped(self):
        email = "a" * 250 + "@example.com"
        request = UserUpdateRequest.model_validate({"email": email})
        assert validators.validate_user_profile(request, partial=True) == "Maximum characters allowed for email is 254."


@pytest.mark.unit
def test_kiosk_manager_requires_all_fields():
    request = KioskManagerCreateRequest(email="a@example.com", first_name="Siti")
    assert validators.validate_kiosk_manager(request) == "email, firstName, lastName, kioskPhone is required"


@pytest.mark.unit
class TestCaseCreate:
    def test_valid(self):
        request = CaseCreateRequest(subject="Leak", location="L1")
        assert validators.validate_case_create(request) is None

    def test_subject_required(self):
        assert validators.validate_case_create(CaseCreateRequest(location="L1")) == "subject is required."
        assert validators.validate_case_create(CaseCreateRequest(subject="  ", location="L1")) == "subject is required."

    def test_location_required(self):
        assert validators.validate_case_create(CaseCreateRequest(subject="Leak")) == "location is required."

    def test_subject_too_long(self):
        request = CaseCreateRequest(subject="x" * 81, location="L1")
        assert validators.validate_case_create(request) == "Maximum characters allowed for subject is 80."

    def test_description_too_long(self):
        request = CaseCreateRequest(subject="Leak", location="L1", description="x" * 281)
        assert validators.validate_case_create(request) == "Maximum characters allowed for description is 280."

    def test_bad_nric(self):
        request = CaseCreateRequest(subject="Leak", location="L1", nric="X1")
        assert validators.validate_case_create(request) == "nric format is wrong"

    def test_empty_nric_is_not_supplied(self):
        request = CaseCreateRequest(subject="Leak", location="L1", nric="")
        assert validators.validate_case_create(request) is None

    def test_location_too_long(self):
        request = CaseCreateRequest(subject="Leak", location="x" * 201)
        assert validators.validate_case_create(request) == "Maximum characters allowed for location is 200."


@pytest.mark.unit
class TestBuildCaseFilter:
    def test_defaults_to_newest_first(self):
        case_filter = validators.build_case_filter()
        assert case_filter.sort == SortOrder.DESCENDING
        assert case_filter.status is None

    @pytest.mark.parametrize("sort,expected", [
        ("1", SortOrder.ASCENDING),
        ("asc", SortOrder.ASCENDING),
        ("-1", SortOrder.DESCENDING),
        ("desc", SortOrder.DESCENDING),
    ])
    def test_sort_values(self, sort, expected):
        assert validators.build_case_filter(sort=sort).sort == expected

    def test_typed_values(self):
        case_filter = validators.build_case_filter(location="L1", status="open", category="welfare")
        assert case_filter.location == "L1"
        assert case_filter.status == CaseStatus.OPEN
        assert case_filter.category == CaseCategory.WELFARE

    def test_rejects_unknown_status(self):
        with pytest.raises(BadRequestError) as exc_info:
            validators.build_case_filter(status="bogus")
        assert exc_info.value.message == "status can only be [open|processing|closed|completed]."

    def test_rejects_unknown_category(self):
        with pytest.raises(BadRequestError) as exc_info:
            validators.build_case_filter(category="urgent")
        assert exc_info.value.message == "category can only be [normal|welfare|minister]."

    def test_rejects_unknown_sort(self):
        with pytest.raises(BadRequestError) as exc_info:
            validators.build_case_filter(sort="sideways")
        assert exc_info.value.message == "sort can only be [1|asc|-1|desc]."

    def test_rejects_blank_location(self):
        with pytest.raises(BadRequestError):
            validators.build_case_filter(location="  ")

    def test_location_is_stripped(self):
        assert validators.build_case_filter(location=" L1 ").location == "L1"


@pytest.mark.unit
class TestQueueTimezoneSetting:
    def test_known_zone(self):
        assert Settings(queue_timezone="Asia/Singapore").queue_timezone == "Asia/Singapore"

    @pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "../etc/passwd"])
    def test_unknown_zone_fails_at_load(self, zone):
        with pytest.raises(ValidationError):
            Settings(queue_timezone=zone)
