"""Calendar store support for write operations.

This module provides the abstract base class for the external calendar
backend omoide writes to, along with implementations for different backends.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from omoide.descriptor import EventDescriptor


class CalendarStore(ABC):
    """Abstract base class for calendar backends.

    Every method issues exactly one backend call and raises the omoide error
    kinds (``AuthExpired``, ``NotFound``, ``ExternalServiceError``) on failure.
    Batching, pacing and per-item bookkeeping are left to the orchestrators.
    """

    @abstractmethod
    def create_event(self, calendar_id: str, descriptor: EventDescriptor) -> str:
        """Create one event.

        Args:
            calendar_id: Target calendar
            descriptor: Event to create (its ``id`` is ignored)

        Returns:
            The backend-assigned event ID
        """
        pass

    @abstractmethod
    def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> list[EventDescriptor]:
        """List events overlapping ``[time_min, time_max)``, each with its ``id`` set."""
        pass

    @abstractmethod
    def delete_event(self, calendar_id: str, event_id: str) -> None:
        """Delete one event permanently."""
        pass

    @abstractmethod
    def create_calendar(self, name: str, description: str = "") -> str:
        """Create a secondary calendar and return its ID."""
        pass


__all__ = ["CalendarStore"]
