"""API route modules."""

from mq_case_service.api.routes.cases import router as cases_router
from mq_case_service.api.routes.kiosk_managers import router as kiosk_managers_router
from mq_case_service.api.routes.phones import router as phones_router
from mq_case_service.api.routes.users import router as users_router

__all__ = ["cases_router", "kiosk_managers_router", "phones_router", "users_router"]
