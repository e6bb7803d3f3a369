"""Database infrastructure package."""

from .client import DatabaseClient, db_client, service_startup_retry
from .models import Base, CaseDB, KioskManagerDB, KioskPhoneDB, PhoneDB, UserDB

__all__ = [
    "db_client",
    "DatabaseClient",
    "service_startup_retry",
    "Base",
    "CaseDB",
    "KioskManagerDB",
    "KioskPhoneDB",
    "PhoneDB",
    "UserDB",
]
