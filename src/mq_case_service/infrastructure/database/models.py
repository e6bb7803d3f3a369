"""SQLAlchemy database models."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

from mq_case_service.models.case import CaseCategory, CaseStatus

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CaseDB(Base):
    """SQLAlchemy model for cases table."""

    __tablename__ = "cases"

    uid = Column(String(36), primary_key=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    nric = Column(String(9), nullable=True)

    subject = Column(String(80), nullable=False)
    description = Column(Text, nullable=False, default="")
    language = Column(String(80), nullable=False, default="")

    status = Column(
        Enum(CaseStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CaseStatus.OPEN,
        index=True,
    )
    category = Column(
        Enum(CaseCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CaseCategory.NORMAL,
        index=True,
    )
    assignee = Column(String(36), nullable=True)

    location = Column(String(200), nullable=False, index=True)
    queue_no = Column(Integer, nullable=False)
    ref_id = Column(String(100), nullable=False)
    whatsapp_call = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )


class PhoneDB(Base):
    """Citizen phones, one per user."""

    __tablename__ = "phones"
    __table_args__ = (UniqueConstraint("country_code", "number", name="uq_phones_country_number"),)

    id = Column(String(32), primary_key=True)
    country_code = Column(String(2), nullable=False)
    number = Column(String(8), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class KioskPhoneDB(Base):
    """Kiosk manager phones, kept apart from citizen phones."""

    __tablename__ = "kiosk_phones"
    __table_args__ = (UniqueConstraint("country_code", "number", name="uq_kiosk_phones_country_number"),)

    id = Column(String(32), primary_key=True)
    country_code = Column(String(2), nullable=False)
    number = Column(String(8), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class UserDB(Base):
    __tablename__ = "users"

    uid = Column(String(36), primary_key=True, index=True)
    nric = Column(String(9), nullable=True)
    name = Column(String(80), nullable=False)
    email = Column(String(254), nullable=False, unique=True)
    dob = Column(Date, nullable=True)
    race = Column(String(20), nullable=False)
    gender = Column(String(10), nullable=False)
    marital_status = Column(String(20), nullable=False)
    occupation = Column(String(80), nullable=False)
    no_of_children = Column(Integer, nullable=True)
    phone_id = Column(String(32), nullable=False, unique=True, index=True)
    postal_code = Column(String(6), nullable=True)
    block_hse_no = Column(String(10), nullable=False)
    floor_no = Column(String(5), nullable=True)
    unit_no = Column(String(5), nullable=True)
    address = Column(String(200), nullable=False)
    flat_type = Column(String(40), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class KioskManagerDB(Base):
    __tablename__ = "kiosk_managers"

    uid = Column(String(36), primary_key=True, index=True)
    email = Column(String(254), nullable=False, unique=True)
    first_name = Column(String(80), nullable=False)
    last_name = Column(String(80), nullable=False)
    kiosk_phone_id = Column(String(32), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
