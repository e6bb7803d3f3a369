"""Case data models for mq-case-service.

Cases are serialized with camelCase keys (``userId``, ``queueNo`` ...) so the
kiosk app keeps the wire format it already consumes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CaseStatus(str, Enum):
    """Case lifecycle status."""

    OPEN = "open"
    PROCESSING = "processing"
    CLOSED = "closed"
    COMPLETED = "completed"


FINAL_STATES = (CaseStatus.CLOSED, CaseStatus.COMPLETED)


class CaseCategory(str, Enum):
    """Case categories."""

    NORMAL = "normal"
    WELFARE = "welfare"
    MINISTER = "minister"


class SortOrder(str, Enum):
    """Ordering of case listings by creation time."""

    ASCENDING = "asc"
    DESCENDING = "desc"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Case(BaseModel):
    """Case domain model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    uid: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str = Field(description="Submitting user uid")
    nric: Optional[str] = None

    subject: str = Field(min_length=1, max_length=80)
    description: str = Field(default="", max_length=280)
    language: str = Field(default="", max_length=80)

    status: CaseStatus = Field(default=CaseStatus.OPEN)
    category: CaseCategory = Field(default=CaseCategory.NORMAL)
    assignee: Optional[str] = Field(default=None, description="Kiosk manager uid")

    location: str = Field(min_length=1)
    queue_no: int = Field(ge=1)
    ref_id: str
    whatsapp_call: bool = False

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_final(self) -> bool:
        """True once the case reached closed or completed."""
        return self.status in FINAL_STATES


class CaseFilter(BaseModel):
    """Validated filter for case listings.

    Built once at the API boundary by ``validators.build_case_filter``.
    """

    location: Optional[str] = None
    status: Optional[CaseStatus] = None
    category: Optional[CaseCategory] = None
    sort: SortOrder = SortOrder.DESCENDING
