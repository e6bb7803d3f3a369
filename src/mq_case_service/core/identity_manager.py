"""Identity lookup and registration for citizens and kiosk managers."""

import logging
from typing import List, Optional

from mq_case_service.core import validators
from mq_case_service.core.exceptions import BadRequestError, NotFoundError
from mq_case_service.infrastructure.persistence import IdentityRepository
from mq_case_service.models import (
    KioskManager,
    KioskManagerCreateRequest,
    Phone,
    PhoneRequest,
    User,
    UserCreateRequest,
    UserUpdateRequest,
)

logger = logging.getLogger(__name__)

_LOWERCASE_FIELDS = ("race", "gender", "marital_status")


def _phone_field(kiosk: bool) -> str:
    return "kioskPhone" if kiosk else "phone"


def _phone_label(phone: PhoneRequest) -> str:
    return f"{phone.country_code}{phone.number}"


def _phone_payload(phone: Optional[PhoneRequest]) -> Optional[dict]:
    return phone.model_dump(by_alias=True) if phone else None


def _normalize_profile(values: dict) -> dict:
    for field in _LOWERCASE_FIELDS:
        if values.get(field):
            values[field] = values[field].lower()
    return values


class IdentityManager:
    """Resolves phones and uids to identity records.

    Lookups never raise for a clean miss except where the caller needs the
    record to exist (``get_user``, ``get_kiosk_manager``).
    """

    def __init__(self, repository: IdentityRepository):
        self.repository = repository

    async def list_phones(self, kiosk: bool = False) -> List[Phone]:
        return await self.repository.list_phones(kiosk=kiosk)

    async def add_phone(self, phone: Optional[PhoneRequest], kiosk: bool = False) -> Phone:
        """Register a standalone phone (or kiosk phone)."""
        error = validators.validate_phone(phone, _phone_field(kiosk))
        if error:
            raise BadRequestError(error)
        created = await self.repository.add_phone(
            Phone(country_code=phone.country_code, number=phone.number), kiosk=kiosk
        )
        logger.info(f"Registered {_phone_field(kiosk)} {created.id}")
        return created

    async def delete_phone(self, phone: Optional[PhoneRequest], kiosk: bool = False) -> Phone:
        """Delete a phone selected by country code and number.

        Owners are not touched; a user or kiosk manager linked to the phone
        keeps a dangling reference.
        """
        error = validators.validate_phone(phone, _phone_field(kiosk))
        if error:
            raise BadRequestError(error)

        record = await self.repository.find_phone(phone.country_code, phone.number, kiosk=kiosk)
        if record is None or not await self.repository.delete_phone(record.id, kiosk=kiosk):
            raise BadRequestError(
                f"Something went wrong, {_phone_field(kiosk)} '{_phone_label(phone)}' not deleted.",
                phone.model_dump(by_alias=True),
            )

        logger.info(f"Deleted {_phone_field(kiosk)} {record.id}")
        return record

    async def find_user_by_phone(self, phone: PhoneRequest) -> Optional[User]:
        """Return the user whose linked phone matches, None if there is none."""
        phone_record = await self.repository.find_phone(phone.country_code, phone.number)
        if phone_record is None:
            return None
        return await self.repository.get_user_by_phone_id(phone_record.id)

    async def get_user(self, uid: str) -> User:
        user = await self.repository.get_user(uid)
        if user is None:
            raise NotFoundError("User not found", {"uid": uid})
        return user

    async def get_kiosk_manager(self, uid: str) -> KioskManager:
        manager = await self.repository.get_kiosk_manager(uid)
        if manager is None:
            raise NotFoundError("volunteer does not exist.", {"assignee": uid})
        return manager

    async def list_users(self) -> List[User]:
        return await self.repository.list_users()

    async def search_user(self, phone: Optional[PhoneRequest]) -> User:
        error = validators.validate_phone(phone)
        if error:
            raise BadRequestError(error)
        user = await self.find_user_by_phone(phone)
        if user is None:
            raise NotFoundError("User not found", phone.model_dump(by_alias=True))
        return user

    async def register_user(self, request: UserCreateRequest) -> User:
        """Create the user's phone, then the user.

        If the user cannot be stored the phone created for it is removed
        again before the error propagates.
        """
        error = validators.validate_phone(request.phone) or validators.validate_user_profile(request)
        if error:
            raise BadRequestError(error)

        phone = await self.repository.add_phone(
            Phone(country_code=request.phone.country_code, number=request.phone.number)
        )

        values = _normalize_profile(request.model_dump(exclude={"phone"}))
        try:
            user = await self.repository.add_user(User(phone_id=phone.id, **values))
        except Exception:
            await self.repository.delete_phone(phone.id)
            raise

        logger.info(f"Registered user {user.uid}")
        return user

    async def update_user(self, uid: str, request: UserUpdateRequest) -> User:
        error = validators.validate_user_profile(request, partial=True)
        if error:
            raise BadRequestError(error)

        user = await self.get_user(uid)
        changes = _normalize_profile(request.model_dump(include=request.model_fields_set))
        updated = user.model_copy(update=changes)
        await self.repository.update_user(updated)

        logger.info(f"Updated user {uid}: {sorted(changes)}")
        return updated

    async def delete_user(
        self,
        email: Optional[str] = None,
        phone: Optional[PhoneRequest] = None,
    ) -> User:
        """Delete a user selected by email, or by phone when no email is given.

        The linked phone record is removed by the repository as part of the
        same call.
        """
        if email:
            user = await self.repository.get_user_by_email(email)
            selector = email
        elif phone is not None:
            error = validators.validate_phone(phone)
            if error:
                raise BadRequestError(error)
            user = await self.find_user_by_phone(phone)
            selector = _phone_label(phone)
        else:
            raise BadRequestError("Email or phone is required")

        if user is None:
            raise BadRequestError("User not found", {"selector": selector})

        deleted = await self.repository.delete_user(user.uid)
        if deleted is None:
            raise BadRequestError(f"Something went wrong, user '{selector}' not deleted.")

        logger.info(f"Deleted user {deleted.uid} and phone {deleted.phone_id}")
        return deleted

    async def list_kiosk_managers(self) -> List[KioskManager]:
        return await self.repository.list_kiosk_managers()

    async def register_kiosk_manager(self, request: KioskManagerCreateRequest) -> KioskManager:
        error = validators.validate_kiosk_manager(request)
        if error:
            raise BadRequestError(error)

        kiosk_phone = await self.repository.add_phone(
            Phone(country_code=request.kiosk_phone.country_code, number=request.kiosk_phone.number),
            kiosk=True,
        )
        try:
            manager = await self.repository.add_kiosk_manager(
                KioskManager(
                    email=request.email,
                    first_name=request.first_name.strip(),
                    last_name=request.last_name.strip(),
                    kiosk_phone_id=kiosk_phone.id,
                )
            )
        except Exception:
            await self.repository.delete_phone(kiosk_phone.id, kiosk=True)
            raise

        logger.info(f"Registered kiosk manager {manager.uid}")
        return manager

    async def delete_kiosk_manager(self, uid: str) -> KioskManager:
        manager = await self.repository.delete_kiosk_manager(uid)
        if manager is None:
            raise NotFoundError("Kiosk manager not found", {"uid": uid})
        logger.info(f"Deleted kiosk manager {uid} and kiosk phone {manager.kiosk_phone_id}")
        return manager

    async def delete_kiosk_manager_by(
        self,
        email: Optional[str] = None,
        kiosk_phone: Optional[PhoneRequest] = None,
    ) -> KioskManager:
        """Delete a kiosk manager selected by email, or by kiosk phone when no email is given."""
        if email:
            manager = await self.repository.get_kiosk_manager_by_email(email)
        elif kiosk_phone is not None:
            error = validators.validate_phone(kiosk_phone, "kioskPhone")
            if error:
                raise BadRequestError(error)
            phone_record = await self.repository.find_phone(
                kiosk_phone.country_code, kiosk_phone.number, kiosk=True
            )
            manager = (
                await self.repository.get_kiosk_manager_by_phone_id(phone_record.id)
                if phone_record
                else None
            )
        else:
            raise BadRequestError("Email or kioskPhone is required")

        if manager is None:
            raise BadRequestError(
                "KioskManager not found", {"email": email, "kioskPhone": _phone_payload(kiosk_phone)}
            )
        return await self.delete_kiosk_manager(manager.uid)
