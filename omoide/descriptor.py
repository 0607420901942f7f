from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from omoide.errors import ValidationError


@dataclass(frozen=True, kw_only=True)
class EventDescriptor:
    """One calendar event before (or after) it reaches the store.

    Attributes:
        title: Human-readable summary
        start: Plain ``date`` for all-day events, tz-aware ``datetime`` for
            timed events
        end: Same kind as ``start``; all-day events end on their start date
        description: Free-text note carried through unchanged
        id: External event ID (only set on events read back from a store)
    """

    title: str
    start: date | datetime
    end: date | datetime
    description: str = ""
    id: str | None = None

    def __post_init__(self) -> None:
        start_timed = isinstance(self.start, datetime)
        end_timed = isinstance(self.end, datetime)
        if start_timed != end_timed:
            raise ValidationError(
                "Event start and end must both be dates or both be datetimes"
            )

        if start_timed:
            assert isinstance(self.start, datetime)
            assert isinstance(self.end, datetime)
            if self.start.tzinfo is None or self.end.tzinfo is None:
                raise ValidationError(
                    f"Timed event '{self.title}' needs an explicit UTC offset"
                )
            if self.end <= self.start:
                raise ValidationError(
                    f"Event end ({self.end.isoformat()}) must be after "
                    f"start ({self.start.isoformat()})"
                )
        elif self.end < self.start:
            raise ValidationError(
                f"Event end ({self.end.isoformat()}) must not precede "
                f"start ({self.start.isoformat()})"
            )

    @property
    def is_all_day(self) -> bool:
        return not isinstance(self.start, datetime)

    @property
    def date_string(self) -> str:
        """Calendar date of the start as ``YYYY-MM-DD``."""
        if isinstance(self.start, datetime):
            return self.start.date().isoformat()
        return self.start.isoformat()

    @property
    def start_string(self) -> str:
        return self.start.isoformat()

    @property
    def end_string(self) -> str:
        return self.end.isoformat()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "start": self.start_string,
            "end": self.end_string,
            "all_day": self.is_all_day,
            "description": self.description,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    def __str__(self) -> str:
        """Human-friendly string showing the title and when it happens."""
        if self.is_all_day:
            return f"EventDescriptor('{self.title}', {self.date_string})"
        return f"EventDescriptor('{self.title}', {self.start_string}→{self.end_string})"
