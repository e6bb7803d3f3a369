"""Case business logic manager - Repository Pattern.

Lifecycle::

    open ──assign──> processing ──close──> closed | completed
      └──────────────close──────────────────┘

Every request is validated before the first repository write. Two
sequences are read-then-write without a transaction and can race under
concurrent intake: the one-open-case-per-user check and queue numbering.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from mq_case_service.config import Settings
from mq_case_service.core import validators
from mq_case_service.core.exceptions import (
    BadRequestError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.infrastructure.persistence import CaseRepository
from mq_case_service.models import (
    Case,
    CaseCategory,
    CaseCreateRequest,
    CaseFilter,
    CaseStatus,
)

logger = logging.getLogger(__name__)


class CaseManager:
    """Business logic for the case lifecycle.

    This class implements the service layer using the Repository pattern.
    It handles business logic while delegating persistence to CaseRepository
    and identity resolution to IdentityManager.
    """

    def __init__(
        self,
        repository: CaseRepository,
        identity: IdentityManager,
        settings: Settings,
    ):
        """Initialize case manager.

        Args:
            repository: CaseRepository implementation (InMemory or SQLAlchemy)
            identity: Resolves submitting users and assignees
            settings: Listing cap and queue timezone are read from here
        """
        self.repository = repository
        self.identity = identity
        self.settings = settings

    def _day_window(self, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """Return the [start, end) UTC bounds of the current intake day."""
        tz = ZoneInfo(self.settings.queue_timezone)
        local_now = (now or datetime.now(timezone.utc)).astimezone(tz)
        day_start = datetime.combine(local_now.date(), time.min, tzinfo=tz)
        day_end = day_start + timedelta(days=1)
        return day_start.astimezone(timezone.utc), day_end.astimezone(timezone.utc)

    async def next_queue_no(self, location: str) -> int:
        """1 + the latest queue number at ``location`` today, or 1."""
        day_start, day_end = self._day_window()
        latest = await self.repository.find_latest_by_location_and_day(location, day_start, day_end)
        return latest.queue_no + 1 if latest else 1

    async def create_case(self, user_uid: str, request: CaseCreateRequest) -> Case:
        """Open a new case for a user.

        Args:
            user_uid: Submitting user's uid
            request: Case intake request

        Returns:
            Created case (status open, category normal)

        Raises:
            BadRequestError: Missing or invalid fields
            NotFoundError: User does not exist
            ConflictError: User already has an open case
        """
        error = validators.validate_case_create(request)
        if error:
            raise BadRequestError(error, request.model_dump(by_alias=True))

        user = await self.identity.get_user(user_uid)

        existing = await self.repository.find_open_by_user(user.uid)
        if existing:
            logger.warning(f"User {user.uid} already has open case {existing.uid}")
            raise ConflictError("User already has an open case.", {"uid": existing.uid})

        location = request.location.strip()
        queue_no = await self.next_queue_no(location)

        case = Case(
            user_id=user.uid,
            nric=request.nric or user.nric,
            subject=request.subject.strip(),
            description=request.description or "",
            language=request.language or "",
            location=location,
            queue_no=queue_no,
            ref_id=user.ref_id,
            whatsapp_call=request.whatsapp_call,
        )

        saved_case = await self.repository.create(case)

        logger.info(
            f"Created case {saved_case.uid} for user {user.uid} "
            f"at {location} with queue number {queue_no}"
        )

        return saved_case

    async def get_case(self, uid: str) -> Case:
        case = await self.repository.get(uid)
        if not case:
            raise NotFoundError("Case not found", {"uid": uid})
        return case

    async def assign_case(self, uid: str, assignee: Optional[str]) -> Case:
        """Assign an open case to a kiosk manager (open -> processing)."""
        if not assignee:
            raise BadRequestError(
                "body.assignee is required (uuid of volunteer)", {"assignee": assignee}
            )

        case = await self.get_case(uid)
        if case.status != CaseStatus.OPEN:
            logger.warning(f"Rejected assignment of case {uid} in status {case.status.value}")
            raise InvalidStateError("Case is not open.", {"status": case.status.value})

        manager = await self.identity.get_kiosk_manager(assignee)

        case.assignee = manager.uid
        case.status = CaseStatus.PROCESSING
        updated_case = await self.repository.update(case)

        logger.info(f"Assigned case {uid} to kiosk manager {manager.uid}")

        return updated_case

    async def categorize_case(self, uid: str, category: Optional[str]) -> Case:
        """Change the category of a case that is not yet closed."""
        if not category:
            raise BadRequestError("body.category is required", {"category": category})
        if not validators.is_category(category):
            raise BadRequestError(
                "category can only be [normal|welfare|minister].", {"category": category}
            )

        case = await self.get_case(uid)
        if case.is_final:
            logger.warning(f"Rejected categorizing case {uid} in status {case.status.value}")
            raise InvalidStateError(f"Case is {case.status.value}.", {"status": case.status.value})

        case.category = CaseCategory(category)
        updated_case = await self.repository.update(case)

        logger.info(f"Categorized case {uid} as {category}")

        return updated_case

    async def close_case(self, uid: str, status: Optional[str]) -> Case:
        """Move a case to closed or completed."""
        if status is None or not validators.is_final_state(status):
            raise BadRequestError(
                "closing status can only be [closed|completed].", {"status": status}
            )

        case = await self.get_case(uid)
        if case.is_final:
            logger.warning(f"Rejected closing case {uid}, already {case.status.value}")
            raise InvalidStateError("Case is closed.", {"status": case.status.value})

        case.status = CaseStatus(status)
        updated_case = await self.repository.update(case)

        logger.info(f"Closed case {uid} as {status}")

        return updated_case

    async def delete_case(self, uid: str) -> Case:
        """Delete a case regardless of its status.

        Returns:
            The deleted record
        """
        deleted = await self.repository.delete(uid)
        if deleted is None:
            raise BadRequestError("Something went wrong, case not deleted.", {"uid": uid})

        logger.info(f"Deleted case {uid}")

        return deleted

    async def list_cases(self, case_filter: CaseFilter) -> List[Case]:
        """List cases, capped at ``settings.case_list_limit``."""
        return await self.repository.list(case_filter, limit=self.settings.case_list_limit)
