from .anniversary import generate_anniversaries, generate_anniversaries_between
from .biweekly import generate_biweekly
from .descriptor import EventDescriptor
from .errors import (
    AuthExpired,
    ExternalServiceError,
    NotFound,
    OmoideError,
    ValidationError,
)
from .holidays import HolidaySource, StaticHolidaySource
from .identity import Credential
from .memorial import generate_memorials
from .orchestrator import (
    Deletion,
    DeletionResult,
    Registration,
    RegistrationResult,
    RunStatus,
    delete_all_events,
    register_event,
    register_events,
    title_contains,
)
from .store import CalendarStore

__all__ = [
    "EventDescriptor",
    "generate_anniversaries",
    "generate_anniversaries_between",
    "generate_memorials",
    "generate_biweekly",
    "HolidaySource",
    "StaticHolidaySource",
    "CalendarStore",
    "Credential",
    "Registration",
    "RegistrationResult",
    "Deletion",
    "DeletionResult",
    "RunStatus",
    "register_events",
    "register_event",
    "delete_all_events",
    "title_contains",
    "OmoideError",
    "ValidationError",
    "AuthExpired",
    "NotFound",
    "ExternalServiceError",
]
