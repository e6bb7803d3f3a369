"""SQLAlchemy repositories against a throwaway SQLite file."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from mq_case_service.config import Settings
from mq_case_service.core.case_manager import CaseManager
from mq_case_service.core.exceptions import ConflictError
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.infrastructure.database import DatabaseClient
from mq_case_service.infrastructure.persistence import (
    SQLAlchemyCaseRepository,
    SQLAlchemyIdentityRepository,
)
from mq_case_service.models import (
    Case,
    CaseCategory,
    CaseCreateRequest,
    CaseFilter,
    CaseStatus,
    KioskManagerCreateRequest,
    PhoneRequest,
    SortOrder,
    UserCreateRequest,
)

from tests.payloads import case_payload, kiosk_manager_payload, user_payload


@pytest.fixture
def sql_settings(tmp_path):
    return Settings(
        storage_type="sql",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'cases.db'}",
    )


def run_with_session(settings, scenario):
    """Create the schema, run ``scenario(session)``, then drop it and dispose the engine."""

    async def _run():
        client = DatabaseClient(settings)
        await client.create_tables()
        try:
            async with client.async_session_maker() as session:
                return await scenario(session)
        finally:
            await client.drop_tables()
            await client.close()

    return asyncio.run(_run())


def managers(session, settings):
    identity = IdentityManager(SQLAlchemyIdentityRepository(session))
    return identity, CaseManager(SQLAlchemyCaseRepository(session), identity, settings)


@pytest.mark.integration
def test_case_lifecycle(sql_settings):
    async def scenario(session):
        identity, cases = managers(session, sql_settings)
        user = await identity.register_user(UserCreateRequest.model_validate(user_payload()))
        volunteer = await identity.register_kiosk_manager(
            KioskManagerCreateRequest.model_validate(kiosk_manager_payload())
        )

        case = await cases.create_case(user.uid, CaseCreateRequest(**case_payload()))
        assert case.queue_no == 1

        with pytest.raises(ConflictError):
            await cases.create_case(user.uid, CaseCreateRequest(**case_payload()))

        await cases.assign_case(case.uid, volunteer.uid)
        await cases.categorize_case(case.uid, "welfare")
        await cases.close_case(case.uid, "closed")

        stored = await cases.get_case(case.uid)
        assert stored.status == CaseStatus.CLOSED
        assert stored.category == CaseCategory.WELFARE
        assert stored.assignee == volunteer.uid
        assert stored.created_at.tzinfo is not None

        second = await cases.create_case(user.uid, CaseCreateRequest(**case_payload()))
        assert second.queue_no == 2

        listed = await cases.list_cases(CaseFilter(sort=SortOrder.ASCENDING))
        assert [c.uid for c in listed] == [case.uid, second.uid]

        deleted = await cases.delete_case(case.uid)
        assert deleted.uid == case.uid
        assert await cases.repository.get(case.uid) is None

    run_with_session(sql_settings, scenario)


@pytest.mark.integration
def test_queue_ignores_previous_day(sql_settings):
    async def scenario(session):
        repository = SQLAlchemyCaseRepository(session)
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)
        await repository.create(Case(
            user_id="u-1",
            subject="Old",
            location="L1",
            queue_no=7,
            ref_id="NA",
            created_at=yesterday,
            updated_at=yesterday,
        ))
        _, cases = managers(session, sql_settings)
        return await cases.next_queue_no("L1")

    assert run_with_session(sql_settings, scenario) == 1


@pytest.mark.integration
def test_duplicate_uid_is_conflict(sql_settings):
    async def scenario(session):
        repository = SQLAlchemyCaseRepository(session)
        case = Case(user_id="u-1", subject="Leak", location="L1", queue_no=1, ref_id="NA")
        await repository.create(case)
        # Force the insert to reach the database instead of the identity map
        session.expunge_all()
        with pytest.raises(ConflictError):
            await repository.create(case.model_copy())

    run_with_session(sql_settings, scenario)


@pytest.mark.integration
def test_user_registration_and_delete(sql_settings):
    async def scenario(session):
        repository = SQLAlchemyIdentityRepository(session)
        identity = IdentityManager(repository)
        user = await identity.register_user(UserCreateRequest.model_validate(user_payload()))

        with pytest.raises(ConflictError):
            await identity.register_user(
                UserCreateRequest.model_validate(user_payload(number="98887777"))
            )
        # Phone created for the rejected user is gone again
        assert await repository.find_phone("65", "98887777") is None

        phone = PhoneRequest(country_code="65", number="91234567")
        assert (await identity.find_user_by_phone(phone)).uid == user.uid

        await identity.delete_user(phone=phone)
        assert await repository.find_phone("65", "91234567") is None
        assert await repository.get_user(user.uid) is None

    run_with_session(sql_settings, scenario)


@pytest.mark.integration
def test_phones_and_kiosk_manager_selectors(sql_settings):
    async def scenario(session):
        repository = SQLAlchemyIdentityRepository(session)
        identity = IdentityManager(repository)
        phone = PhoneRequest(country_code="65", number="91234567")

        await identity.add_phone(phone)
        assert [p.number for p in await identity.list_phones()] == ["91234567"]
        assert await identity.list_phones(kiosk=True) == []

        await identity.delete_phone(phone)
        assert await identity.list_phones() == []

        manager = await identity.register_kiosk_manager(
            KioskManagerCreateRequest.model_validate(kiosk_manager_payload())
        )
        assert (await repository.get_kiosk_manager_by_email(manager.email)).uid == manager.uid
        assert (await repository.get_kiosk_manager_by_phone_id(manager.kiosk_phone_id)).uid == manager.uid

        kiosk_phone = PhoneRequest(country_code="65", number="81234567")
        deleted = await identity.delete_kiosk_manager_by(kiosk_phone=kiosk_phone)
        assert deleted.uid == manager.uid
        assert await identity.list_phones(kiosk=True) == []

    run_with_session(sql_settings, scenario)
