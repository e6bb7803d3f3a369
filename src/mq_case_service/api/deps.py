"""FastAPI dependencies wiring repositories and managers."""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mq_case_service.config import Settings, settings
from mq_case_service.core.case_manager import CaseManager
from mq_case_service.core.identity_manager import IdentityManager
from mq_case_service.infrastructure.database import db_client
from mq_case_service.infrastructure.persistence import (
    CaseRepository,
    IdentityRepository,
    InMemoryCaseRepository,
    InMemoryIdentityRepository,
    SQLAlchemyCaseRepository,
    SQLAlchemyIdentityRepository,
)

# Global singleton in-memory repositories (persist across requests)
_inmemory_case_repository: Optional[InMemoryCaseRepository] = None
_inmemory_identity_repository: Optional[InMemoryIdentityRepository] = None


def get_settings() -> Settings:
    return settings


async def get_db_session(
    app_settings: Settings = Depends(get_settings),
) -> AsyncGenerator[Optional[AsyncSession], None]:
    """Yield a request-scoped session, or None when storage is in-memory."""
    if not app_settings.uses_sql_storage:
        yield None
        return
    async for session in db_client.get_session():
        yield session


async def get_case_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
) -> CaseRepository:
    """Dependency to get case repository.

    Returns the implementation selected by ``settings.storage_type``:
    - inmemory (default): InMemoryCaseRepository singleton for dev/testing
    - sql: SQLAlchemyCaseRepository bound to the request's session
    """
    if session is not None:
        return SQLAlchemyCaseRepository(session)

    global _inmemory_case_repository
    if _inmemory_case_repository is None:
        _inmemory_case_repository = InMemoryCaseRepository()
    return _inmemory_case_repository


async def get_identity_repository(
    session: Optional[AsyncSession] = Depends(get_db_session),
) -> IdentityRepository:
    """Dependency to get identity repository, same backend as cases."""
    if session is not None:
        return SQLAlchemyIdentityRepository(session)

    global _inmemory_identity_repository
    if _inmemory_identity_repository is None:
        _inmemory_identity_repository = InMemoryIdentityRepository()
    return _inmemory_identity_repository


async def get_identity_manager(
    repository: IdentityRepository = Depends(get_identity_repository),
) -> IdentityManager:
    return IdentityManager(repository)


async def get_case_manager(
    repository: CaseRepository = Depends(get_case_repository),
    identity: IdentityManager = Depends(get_identity_manager),
    app_settings: Settings = Depends(get_settings),
) -> CaseManager:
    """Dependency to get case manager with repositories and settings."""
    return CaseManager(repository, identity, app_settings)
