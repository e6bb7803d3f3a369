"""Shared fixtures: fresh in-memory stores and managers per test."""

import asyncio

import pytest

from mq_case_service.config import Settings
from mq_case_service.core.case_manager import CaseManager
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.infrastructure.persistence import (
    InMemoryCaseRepository,
    InMemoryIdentityRepository,
)
from mq_case_service.models import (
    CaseCreateRequest,
    KioskManagerCreateRequest,
    PhoneRequest,
    UserCreateRequest,
)

from tests.payloads import case_payload, kiosk_manager_payload, user_payload


@pytest.fixture
def test_settings():
    return Settings(storage_type="inmemory", case_list_limit=100, queue_timezone="UTC")


@pytest.fixture
def case_repository():
    return InMemoryCaseRepository()


@pytest.fixture
def identity_repository():
    return InMemoryIdentityRepository()


@pytest.fixture
def identity_manager(identity_repository):
    return IdentityManager(identity_repository)


@pytest.fixture
def case_manager(case_repository, identity_manager, test_settings):
    return CaseManager(case_repository, identity_manager, test_settings)


@pytest.fixture
def make_user(identity_manager):
    def _make(number="91234567", email="ahkow@example.com", **overrides):
        request = UserCreateRequest.model_validate(user_payload(number, email, **overrides))
        return asyncio.run(identity_manager.register_user(request))

    return _make


@pytest.fixture
def kiosk_manager(identity_manager):
    request = KioskManagerCreateRequest.model_validate(kiosk_manager_payload())
    return asyncio.run(identity_manager.register_kiosk_manager(request))


@pytest.fixture
def open_case(case_manager, make_user):
    user = make_user()
    return asyncio.run(case_manager.create_case(user.uid, CaseCreateRequest(**case_payload())))


@pytest.fixture
def phone():
    return PhoneRequest(country_code="65", number="91234567")
