"""Case Repository for kiosk intake persistence.

This module provides the repository pattern for Case domain model persistence.
It abstracts database operations and provides clean interfaces for the service layer.

Neither implementation wraps the workflow's read-then-write sequences
(open-case check, queue numbering) in a transaction.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mq_case_service.core.exceptions import ConflictError, RepositoryException
from mq_case_service.infrastructure.database.models import CaseDB
from mq_case_service.models import Case, CaseFilter, CaseStatus, SortOrder

logger = logging.getLogger(__name__)


# ============================================================
# Repository Interface
# ============================================================

class CaseRepository(ABC):
    """
    Abstract repository interface for Case persistence.

    Implementations:
    - SQLAlchemyCaseRepository: SQLite / PostgreSQL
    - InMemoryCaseRepository: Testing and development
    """

    @abstractmethod
    async def create(self, case: Case) -> Case:
        """
        Insert a new case.

        Raises:
            ConflictError: If a case with the same uid already exists
            RepositoryException: If the insert fails
        """

    @abstractmethod
    async def get(self, uid: str) -> Optional[Case]:
        """Retrieve case by uid, None if absent."""

    @abstractmethod
    async def update(self, case: Case) -> Case:
        """
        Save the mutable fields of an existing case.

        Returns:
            Saved case with refreshed ``updated_at``
        """

    @abstractmethod
    async def delete(self, uid: str) -> Optional[Case]:
        """
        Delete case by uid.

        Returns:
            The removed case, or None if nothing matched
        """

    @abstractmethod
    async def find_open_by_user(self, user_id: str) -> Optional[Case]:
        """Return the user's open case, if any."""

    @abstractmethod
    async def find_latest_by_location_and_day(
        self,
        location: str,
        day_start: datetime,
        day_end: datetime,
    ) -> Optional[Case]:
        """
        Return the most recently created case at ``location`` with
        ``day_start <= created_at < day_end``.
        """

    @abstractmethod
    async def list(self, case_filter: CaseFilter, limit: int = 100) -> List[Case]:
        """
        List cases matching the filter, ordered by ``created_at``.

        Args:
            case_filter: Validated location/status/category filter and sort order
            limit: Hard cap on returned records
        """


# ============================================================
# In-Memory Implementation (for Testing)
# ============================================================

class InMemoryCaseRepository(CaseRepository):
    """
    In-memory case repository for testing and development.

    Data stored in dictionary, not persistent across restarts. Cases are
    copied on the way in and out so callers cannot mutate stored state.
    """

    def __init__(self):
        """Initialize empty in-memory store."""
        self._cases: Dict[str, Case] = {}

    async def create(self, case: Case) -> Case:
        if case.uid in self._cases:
            raise ConflictError("Duplicates found: 'uid'", {"uid": case.uid})
        self._cases[case.uid] = case.model_copy(deep=True)
        return case

    async def get(self, uid: str) -> Optional[Case]:
        case = self._cases.get(uid)
        return case.model_copy(deep=True) if case else None

    async def update(self, case: Case) -> Case:
        if case.uid not in self._cases:
            raise RepositoryException(f"Case {case.uid} does not exist")
        case.updated_at = datetime.now(timezone.utc)
        self._cases[case.uid] = case.model_copy(deep=True)
        return case

    async def delete(self, uid: str) -> Optional[Case]:
        return self._cases.pop(uid, None)

    async def find_open_by_user(self, user_id: str) -> Optional[Case]:
        for case in self._cases.values():
            if case.user_id == user_id and case.status == CaseStatus.OPEN:
                return case.model_copy(deep=True)
        return None

    async def find_latest_by_location_and_day(
        self,
        location: str,
        day_start: datetime,
        day_end: datetime,
    ) -> Optional[Case]:
        candidates = [
            c for c in self._cases.values()
            if c.location == location and day_start <= c.created_at < day_end
        ]
        if not candidates:
            return None
        latest = max(candidates, key=lambda c: (c.created_at, c.queue_no))
        return latest.model_copy(deep=True)

    async def list(self, case_filter: CaseFilter, limit: int = 100) -> List[Case]:
        filtered = list(self._cases.values())

        if case_filter.location is not None:
            filtered = [c for c in filtered if c.location == case_filter.location]

        if case_filter.status is not None:
            filtered = [c for c in filtered if c.status == case_filter.status]

        if case_filter.category is not None:
            filtered = [c for c in filtered if c.category == case_filter.category]

        filtered.sort(
            key=lambda c: c.created_at,
            reverse=case_filter.sort == SortOrder.DESCENDING,
        )

        return [c.model_copy(deep=True) for c in filtered[:limit]]


# ============================================================
# SQLAlchemy Implementation (SQLite / PostgreSQL)
# ============================================================

class SQLAlchemyCaseRepository(CaseRepository):
    """
    SQL case repository for production use.

    Commits after every write; the session comes from
    ``DatabaseClient.get_session`` and lives for one request.
    """

    def __init__(self, db_session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.db = db_session

    @asynccontextmanager
    async def _guard(self, operation: str):
        """Translate driver errors into repository errors."""
        try:
            yield
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Integrity error during {operation}: {e.orig}")
            raise ConflictError("Duplicates found: 'uid'") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise RepositoryException(f"{operation} failed") from e

    async def create(self, case: Case) -> Case:
        async with self._guard("create_case"):
            self.db.add(CaseDB(**self._case_to_row(case)))
            await self.db.commit()
        return case

    async def get(self, uid: str) -> Optional[Case]:
        async with self._guard("get_case"):
            row = await self.db.get(CaseDB, uid, populate_existing=True)
        return self._row_to_case(row) if row else None

    async def update(self, case: Case) -> Case:
        case.updated_at = datetime.now(timezone.utc)
        values = self._case_to_row(case)
        # Identity and intake fields are immutable
        for key in ("uid", "user_id", "created_at", "queue_no", "location"):
            values.pop(key)

        async with self._guard("update_case"):
            result = await self.db.execute(
                update(CaseDB).where(CaseDB.uid == case.uid).values(**values)
            )
            await self.db.commit()

        if result.rowcount == 0:
            raise RepositoryException(f"Case {case.uid} does not exist")
        return case

    async def delete(self, uid: str) -> Optional[Case]:
        async with self._guard("delete_case"):
            row = await self.db.get(CaseDB, uid, populate_existing=True)
            if row is None:
                return None
            case = self._row_to_case(row)
            await self.db.execute(delete(CaseDB).where(CaseDB.uid == uid))
            await self.db.commit()
        return case

    async def find_open_by_user(self, user_id: str) -> Optional[Case]:
        query = (
            select(CaseDB)
            .where(CaseDB.user_id == user_id, CaseDB.status == CaseStatus.OPEN)
            .limit(1)
        )
        async with self._guard("find_open_by_user"):
            row = (await self.db.execute(query)).scalars().first()
        return self._row_to_case(row) if row else None

    async def find_latest_by_location_and_day(
        self,
        location: str,
        day_start: datetime,
        day_end: datetime,
    ) -> Optional[Case]:
        query = (
            select(CaseDB)
            .where(
                CaseDB.location == location,
                CaseDB.created_at >= day_start,
                CaseDB.created_at < day_end,
            )
            .order_by(CaseDB.created_at.desc(), CaseDB.queue_no.desc())
            .limit(1)
        )
        async with self._guard("find_latest_by_location_and_day"):
            row = (await self.db.execute(query)).scalars().first()
        return self._row_to_case(row) if row else None

    async def list(self, case_filter: CaseFilter, limit: int = 100) -> List[Case]:
        query = select(CaseDB)

        if case_filter.location is not None:
            query = query.where(CaseDB.location == case_filter.location)
        if case_filter.status is not None:
            query = query.where(CaseDB.status == case_filter.status)
        if case_filter.category is not None:
            query = query.where(CaseDB.category == case_filter.category)

        if case_filter.sort == SortOrder.ASCENDING:
            query = query.order_by(CaseDB.created_at.asc())
        else:
            query = query.order_by(CaseDB.created_at.desc())

        async with self._guard("list_cases"):
            rows = (await self.db.execute(query.limit(limit))).scalars().all()
        return [self._row_to_case(row) for row in rows]

    @staticmethod
    def _case_to_row(case: Case) -> dict:
        return case.model_dump(by_alias=False)

    @staticmethod
    def _row_to_case(row: CaseDB) -> Case:
        """Convert database row to Case domain model."""
        case = Case(**{column.name: getattr(row, column.name) for column in CaseDB.__table__.columns})
        # SQLite hands back naive datetimes; everything is stored in UTC
        if case.created_at.tzinfo is None:
            case.created_at = case.created_at.replace(tzinfo=timezone.utc)
        if case.updated_at.tzinfo is None:
            case.updated_at = case.updated_at.replace(tzinfo=timezone.utc)
        return case
