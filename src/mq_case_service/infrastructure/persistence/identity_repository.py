"""Identity Repository: users, kiosk managers and their phones.

Phones are stored apart from their owners. Deleting a user or a kiosk
manager removes the linked phone as an explicit second step of the same
repository call.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mq_case_service.core.exceptions import ConflictError, RepositoryException
from mq_case_service.infrastructure.database.models import (
    KioskManagerDB,
    KioskPhoneDB,
    PhoneDB,
    UserDB,
)
from mq_case_service.models import KioskManager, Phone, User

logger = logging.getLogger(__name__)

# Unique columns, checked in this order when reporting a duplicate
_UNIQUE_FIELDS = ("email", "number", "kiosk_phone_id", "phone_id", "uid")


def _duplicate_field(error: Exception) -> str:
    message = str(getattr(error, "orig", error))
    for field in _UNIQUE_FIELDS:
        if field in message:
            return field
    return "unknown"


class IdentityRepository(ABC):
    """Abstract repository for identity records."""

    # Phones -------------------------------------------------------------

    @abstractmethod
    async def add_phone(self, phone: Phone, kiosk: bool = False) -> Phone:
        """
        Insert a phone (a kiosk phone when ``kiosk`` is set).

        Raises:
            ConflictError: If the number is already registered
        """

    @abstractmethod
    async def find_phone(self, country_code: str, number: str, kiosk: bool = False) -> Optional[Phone]:
        """Look up a phone by country code and number."""

    @abstractmethod
    async def delete_phone(self, phone_id: str, kiosk: bool = False) -> bool:
        """Delete a phone, True if one was removed."""

    @abstractmethod
    async def list_phones(self, kiosk: bool = False, limit: int = 100) -> List[Phone]:
        """List phones (kiosk phones when ``kiosk`` is set), oldest first."""

    # Users --------------------------------------------------------------

    @abstractmethod
    async def add_user(self, user: User) -> User:
        """
        Insert a user.

        Raises:
            ConflictError: If the email or phone is already taken
        """

    @abstractmethod
    async def get_user(self, uid: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_phone_id(self, phone_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def list_users(self, limit: int = 100) -> List[User]:
        pass

    @abstractmethod
    async def update_user(self, user: User) -> User:
        pass

    @abstractmethod
    async def delete_user(self, uid: str) -> Optional[User]:
        """Delete a user and then their linked phone."""

    # Kiosk managers -----------------------------------------------------

    @abstractmethod
    async def add_kiosk_manager(self, manager: KioskManager) -> KioskManager:
        pass

    @abstractmethod
    async def get_kiosk_manager(self, uid: str) -> Optional[KioskManager]:
        pass

    @abstractmethod
    async def get_kiosk_manager_by_email(self, email: str) -> Optional[KioskManager]:
        pass

    @abstractmethod
    async def get_kiosk_manager_by_phone_id(self, kiosk_phone_id: str) -> Optional[KioskManager]:
        pass

    @abstractmethod
    async def list_kiosk_managers(self, limit: int = 100) -> List[KioskManager]:
        pass

    @abstractmethod
    async def delete_kiosk_manager(self, uid: str) -> Optional[KioskManager]:
        """Delete a kiosk manager and then their linked kiosk phone."""


# ============================================================
# In-Memory Implementation (for Testing)
# ============================================================

class InMemoryIdentityRepository(IdentityRepository):
    """In-memory identity store for testing and development."""

    def __init__(self):
        self._phones: Dict[str, Phone] = {}
        self._kiosk_phones: Dict[str, Phone] = {}
        self._users: Dict[str, User] = {}
        self._kiosk_managers: Dict[str, KioskManager] = {}

    def _phone_store(self, kiosk: bool) -> Dict[str, Phone]:
        return self._kiosk_phones if kiosk else self._phones

    async def add_phone(self, phone: Phone, kiosk: bool = False) -> Phone:
        store = self._phone_store(kiosk)
        if any(p.number == phone.number for p in store.values()):
            raise ConflictError("Duplicates found: 'number'", {"number": phone.number})
        store[phone.id] = phone.model_copy()
        return phone

    async def find_phone(self, country_code: str, number: str, kiosk: bool = False) -> Optional[Phone]:
        for phone in self._phone_store(kiosk).values():
            if phone.country_code == country_code and phone.number == number:
                return phone.model_copy()
        return None

    async def delete_phone(self, phone_id: str, kiosk: bool = False) -> bool:
        return self._phone_store(kiosk).pop(phone_id, None) is not None

    async def list_phones(self, kiosk: bool = False, limit: int = 100) -> List[Phone]:
        # dicts keep insertion order
        return [p.model_copy() for p in list(self._phone_store(kiosk).values())[:limit]]

    async def add_user(self, user: User) -> User:
        for existing in self._users.values():
            if existing.email == user.email:
                raise ConflictError("Duplicates found: 'email'", {"email": user.email})
            if existing.phone_id == user.phone_id:
                raise ConflictError("Duplicates found: 'phone_id'", {"phoneId": user.phone_id})
        self._users[user.uid] = user.model_copy()
        return user

    async def get_user(self, uid: str) -> Optional[User]:
        user = self._users.get(uid)
        return user.model_copy() if user else None

    async def get_user_by_phone_id(self, phone_id: str) -> Optional[User]:
        for user in self._users.values():
            if user.phone_id == phone_id:
                return user.model_copy()
        return None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def list_users(self, limit: int = 100) -> List[User]:
        users = sorted(self._users.values(), key=lambda u: u.created_at)
        return [u.model_copy() for u in users[:limit]]

    async def update_user(self, user: User) -> User:
        for existing in self._users.values():
            if existing.uid != user.uid and existing.email == user.email:
                raise ConflictError("Duplicates found: 'email'", {"email": user.email})
        if user.uid not in self._users:
            raise RepositoryException(f"User {user.uid} does not exist")
        self._users[user.uid] = user.model_copy()
        return user

    async def delete_user(self, uid: str) -> Optional[User]:
        user = self._users.pop(uid, None)
        if user is not None:
            self._phones.pop(user.phone_id, None)
        return user

    async def add_kiosk_manager(self, manager: KioskManager) -> KioskManager:
        for existing in self._kiosk_managers.values():
            if existing.email == manager.email:
                raise ConflictError("Duplicates found: 'email'", {"email": manager.email})
        self._kiosk_managers[manager.uid] = manager.model_copy()
        return manager

    async def get_kiosk_manager(self, uid: str) -> Optional[KioskManager]:
        manager = self._kiosk_managers.get(uid)
        return manager.model_copy() if manager else None

    async def get_kiosk_manager_by_email(self, email: str) -> Optional[KioskManager]:
        for manager in self._kiosk_managers.values():
            if manager.email == email:
                return manager.model_copy()
        return None

    async def get_kiosk_manager_by_phone_id(self, kiosk_phone_id: str) -> Optional[KioskManager]:
        for manager in self._kiosk_managers.values():
            if manager.kiosk_phone_id == kiosk_phone_id:
                return manager.model_copy()
        return None

    async def list_kiosk_managers(self, limit: int = 100) -> List[KioskManager]:
        managers = sorted(self._kiosk_managers.values(), key=lambda m: m.created_at)
        return [m.model_copy() for m in managers[:limit]]

    async def delete_kiosk_manager(self, uid: str) -> Optional[KioskManager]:
        manager = self._kiosk_managers.pop(uid, None)
        if manager is not None:
            self._kiosk_phones.pop(manager.kiosk_phone_id, None)
        return manager


# ============================================================
# SQLAlchemy Implementation (SQLite / PostgreSQL)
# ============================================================

def _row_to_model(model_cls, row):
    return model_cls(**{column.name: getattr(row, column.name) for column in row.__table__.columns})


class SQLAlchemyIdentityRepository(IdentityRepository):
    """SQL identity repository sharing the request's session."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    @asynccontextmanager
    async def _guard(self, operation: str):
        try:
            yield
        except IntegrityError as e:
            await self.db.rollback()
            field = _duplicate_field(e)
            logger.warning(f"Duplicate {field} during {operation}")
            raise ConflictError(f"Duplicates found: '{field}'") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise RepositoryException(f"{operation} failed") from e

    @staticmethod
    def _phone_table(kiosk: bool):
        return KioskPhoneDB if kiosk else PhoneDB

    async def add_phone(self, phone: Phone, kiosk: bool = False) -> Phone:
        async with self._guard("add_phone"):
            self.db.add(self._phone_table(kiosk)(**phone.model_dump()))
            await self.db.commit()
        return phone

    async def find_phone(self, country_code: str, number: str, kiosk: bool = False) -> Optional[Phone]:
        table = self._phone_table(kiosk)
        query = select(table).where(table.country_code == country_code, table.number == number)
        async with self._guard("find_phone"):
            row = (await self.db.execute(query)).scalars().first()
        if row is None:
            return None
        return Phone(id=row.id, country_code=row.country_code, number=row.number)

    async def delete_phone(self, phone_id: str, kiosk: bool = False) -> bool:
        table = self._phone_table(kiosk)
        async with self._guard("delete_phone"):
            result = await self.db.execute(delete(table).where(table.id == phone_id))
            await self.db.commit()
        return result.rowcount > 0

    async def list_phones(self, kiosk: bool = False, limit: int = 100) -> List[Phone]:
        table = self._phone_table(kiosk)
        query = select(table).order_by(table.created_at.asc()).limit(limit)
        async with self._guard("list_phones"):
            rows = (await self.db.execute(query)).scalars().all()
        return [Phone(id=row.id, country_code=row.country_code, number=row.number) for row in rows]

    async def add_user(self, user: User) -> User:
        async with self._guard("add_user"):
            self.db.add(UserDB(**user.model_dump()))
            await self.db.commit()
        return user

    async def _get_user_where(self, operation: str, *conditions) -> Optional[User]:
        async with self._guard(operation):
            row = (await self.db.execute(select(UserDB).where(*conditions))).scalars().first()
        return _row_to_model(User, row) if row else None

    async def get_user(self, uid: str) -> Optional[User]:
        return await self._get_user_where("get_user", UserDB.uid == uid)

    async def get_user_by_phone_id(self, phone_id: str) -> Optional[User]:
        return await self._get_user_where("get_user_by_phone_id", UserDB.phone_id == phone_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self._get_user_where("get_user_by_email", UserDB.email == email)

    async def list_users(self, limit: int = 100) -> List[User]:
        query = select(UserDB).order_by(UserDB.created_at.asc()).limit(limit)
        async with self._guard("list_users"):
            rows = (await self.db.execute(query)).scalars().all()
        return [_row_to_model(User, row) for row in rows]

    async def update_user(self, user: User) -> User:
        values = user.model_dump(exclude={"uid", "created_at", "phone_id"})
        async with self._guard("update_user"):
            result = await self.db.execute(
                update(UserDB).where(UserDB.uid == user.uid).values(**values)
            )
            await self.db.commit()
        if result.rowcount == 0:
            raise RepositoryException(f"User {user.uid} does not exist")
        return user

    async def delete_user(self, uid: str) -> Optional[User]:
        async with self._guard("delete_user"):
            row = await self.db.get(UserDB, uid, populate_existing=True)
            if row is None:
                return None
            user = _row_to_model(User, row)
            await self.db.execute(delete(UserDB).where(UserDB.uid == uid))
            await self.db.execute(delete(PhoneDB).where(PhoneDB.id == user.phone_id))
            await self.db.commit()
        return user

    async def add_kiosk_manager(self, manager: KioskManager) -> KioskManager:
        async with self._guard("add_kiosk_manager"):
            self.db.add(KioskManagerDB(**manager.model_dump()))
            await self.db.commit()
        return manager

    async def get_kiosk_manager(self, uid: str) -> Optional[KioskManager]:
        async with self._guard("get_kiosk_manager"):
            row = await self.db.get(KioskManagerDB, uid, populate_existing=True)
        return _row_to_model(KioskManager, row) if row else None

    async def _get_kiosk_manager_where(self, operation: str, *conditions) -> Optional[KioskManager]:
        async with self._guard(operation):
            row = (await self.db.execute(select(KioskManagerDB).where(*conditions))).scalars().first()
        return _row_to_model(KioskManager, row) if row else None

    async def get_kiosk_manager_by_email(self, email: str) -> Optional[KioskManager]:
        return await self._get_kiosk_manager_where(
            "get_kiosk_manager_by_email", KioskManagerDB.email == email
        )

    async def get_kiosk_manager_by_phone_id(self, kiosk_phone_id: str) -> Optional[KioskManager]:
        return await self._get_kiosk_manager_where(
            "get_kiosk_manager_by_phone_id", KioskManagerDB.kiosk_phone_id == kiosk_phone_id
        )

    async def list_kiosk_managers(self, limit: int = 100) -> List[KioskManager]:
        query = select(KioskManagerDB).order_by(KioskManagerDB.created_at.asc()).limit(limit)
        async with self._guard("list_kiosk_managers"):
            rows = (await self.db.execute(query)).scalars().all()
        return [_row_to_model(KioskManager, row) for row in rows]

    async def delete_kiosk_manager(self, uid: str) -> Optional[KioskManager]:
        async with self._guard("delete_kiosk_manager"):
            row = await self.db.get(KioskManagerDB, uid, populate_existing=True)
            if row is None:
                return None
            manager = _row_to_model(KioskManager, row)
            await self.db.execute(delete(KioskManagerDB).where(KioskManagerDB.uid == uid))
            await self.db.execute(delete(KioskPhoneDB).where(KioskPhoneDB.id == manager.kiosk_phone_id))
            await self.db.commit()
        return manager
