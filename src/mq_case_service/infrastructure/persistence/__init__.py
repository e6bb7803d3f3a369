"""Persistence layer - Repository Pattern implementation."""

from mq_case_service.infrastructure.persistence.case_repository import (
    CaseRepository,
    InMemoryCaseRepository,
    SQLAlchemyCaseRepository,
)
from mq_case_service.infrastructure.persistence.identity_repository import (
    IdentityRepository,
    InMemoryIdentityRepository,
    SQLAlchemyIdentityRepository,
)

__all__ = [
    "CaseRepository",
    "InMemoryCaseRepository",
    "SQLAlchemyCaseRepository",
    "IdentityRepository",
    "InMemoryIdentityRepository",
    "SQLAlchemyIdentityRepository",
]
