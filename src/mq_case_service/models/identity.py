"""Identity records: citizens, kiosk managers and their phones."""

from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Phone(_CamelModel):
    """Phone number linked to a user or a kiosk manager."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    country_code: str
    number: str


class User(_CamelModel):
    """Citizen submitting cases at a kiosk."""

    uid: str = Field(default_factory=lambda: str(uuid4()))
    nric: Optional[str] = None
    name: str
    email: str
    dob: Optional[date] = None
    race: str
    gender: str
    marital_status: str
    occupation: str
    no_of_children: Optional[int] = None
    phone_id: str
    postal_code: Optional[str] = None
    block_hse_no: str
    floor_no: Optional[str] = None
    unit_no: Optional[str] = None
    address: str
    flat_type: str

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ref_id(self) -> str:
        """Reference string derived from the address, e.g. ``123-05-67-560123``."""
        parts = [self.block_hse_no, self.floor_no, self.unit_no, self.postal_code]
        parts = [str(part).strip() for part in parts if part and str(part).strip()]
        return "-".join(parts) if parts else "NA"


class KioskManager(_CamelModel):
    """Kiosk operator (volunteer) that open cases get assigned to."""

    uid: str = Field(default_factory=lambda: str(uuid4()))
    email: str
    first_name: str
    last_name: str
    kiosk_phone_id: str

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
