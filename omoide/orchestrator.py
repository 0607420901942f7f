"""Batch registration and bulk deletion against a calendar store.

Both orchestrators issue one store call at a time, pause between calls, and
record an outcome per item in list order. Iterating an orchestrator yields a
:class:`Progress` notification after each item; ``run()`` drains it and
returns the final result.

Registration aborts only when the credential expires, or when the target
calendar turns out not to exist on the very first item. Deletion aborts only
on an expired credential. Every other failure is recorded and the run moves on.
Nothing is rolled back and nothing is retried.
"""

import enum
import logging
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

from omoide.descriptor import EventDescriptor
from omoide.errors import AuthExpired, NotFound
from omoide.store import CalendarStore
from omoide.util import DISTANT_FUTURE, DISTANT_PAST, RATE_LIMIT_DELAY

logger = logging.getLogger(__name__)


class CancelSignal(Protocol):
    """Anything with ``is_set()``, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


class RunStatus(enum.Enum):
    COMPLETED = "completed"
    AUTH_EXPIRED = "auth_expired"
    CALENDAR_NOT_FOUND = "calendar_not_found"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ItemOutcome:
    """Result of one create or delete call.

    Attributes:
        index: Position of the item in the submitted list
        succeeded: True if the call went through
        external_id: Store-assigned (or deleted) event ID on success
        error_message: What went wrong on failure
    """

    index: int
    succeeded: bool
    external_id: str | None = None
    error_message: str | None = None


@dataclass
class RunResult:
    total_count: int
    outcomes: list[ItemOutcome] = field(default_factory=list)
    status: RunStatus = RunStatus.COMPLETED
    error_message: str | None = None

    @property
    def succeeded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "succeeded_count": self.succeeded_count,
            "failed_count": self.failed_count,
            "total_count": self.total_count,
            "error_message": self.error_message,
            "outcomes": [asdict(outcome) for outcome in self.outcomes],
        }


@dataclass
class RegistrationResult(RunResult):
    """Outcome of a registration run; ``created_count`` counts successes."""

    @property
    def created_count(self) -> int:
        return self.succeeded_count


@dataclass
class DeletionResult(RunResult):
    """Outcome of a bulk deletion run; ``deleted_count`` counts successes."""

    @property
    def deleted_count(self) -> int:
        return self.succeeded_count


@dataclass(frozen=True)
class Progress:
    """Notification emitted after each item completes.

    Attributes:
        completed_count: Items processed so far (succeeded or not)
        total_count: Items in the run
        descriptor: The item just processed
        outcome: What happened to it
    """

    completed_count: int
    total_count: int
    descriptor: EventDescriptor
    outcome: ItemOutcome


class _Run:
    """Shared pacing, cancellation and bookkeeping for both orchestrators."""

    verb = "process"

    def __init__(
        self,
        store: CalendarStore,
        calendar_id: str,
        *,
        delay: float = RATE_LIMIT_DELAY,
        cancel: CancelSignal | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store: CalendarStore = store
        self.calendar_id: str = calendar_id
        self.delay: float = delay
        self.cancel: CancelSignal | None = cancel
        self._sleep: Callable[[float], None] = sleep
        self._calls = 0
        self._started = False

    def _start(self) -> None:
        """Mark the run as started; a run executes its calls at most once."""
        if self._started:
            raise RuntimeError(f"This {self.verb} run has already been started")
        self._started = True

    def _cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def _pace(self) -> None:
        """Pause before every call except the first."""
        if self._calls and self.delay > 0:
            self._sleep(self.delay)
        self._calls += 1

    def _abort(self, result: RunResult, status: RunStatus, error: Exception) -> None:
        result.status = status
        result.error_message = str(error)
        logger.error(
            "Aborted %s run on calendar %s after %d/%d items: %s",
            self.verb,
            self.calendar_id,
            len(result.outcomes),
            result.total_count,
            error,
        )

    def _finish(self, result: RunResult) -> None:
        logger.info(
            "Finished %s run on calendar %s: %d succeeded, %d failed, %d total (%s)",
            self.verb,
            self.calendar_id,
            result.succeeded_count,
            result.failed_count,
            result.total_count,
            result.status.value,
        )


class Registration(_Run):
    """Create events in a calendar one by one, preserving list order.

    Example:
        >>> registration = Registration(store, "primary", events)
        >>> for progress in registration:
        ...     print(f"{progress.completed_count}/{progress.total_count}")
        >>> registration.result.created_count

    A run is single-shot: iterating it again, or calling :meth:`run` a second
    time, raises ``RuntimeError``. Build a new ``Registration`` to retry.
    """

    verb = "registration"

    def __init__(
        self,
        store: CalendarStore,
        calendar_id: str,
        events: Sequence[EventDescriptor],
        *,
        delay: float = RATE_LIMIT_DELAY,
        cancel: CancelSignal | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(store, calendar_id, delay=delay, cancel=cancel, sleep=sleep)
        self.events: list[EventDescriptor] = list(events)
        self.result: RegistrationResult = RegistrationResult(total_count=len(self.events))

    def __iter__(self) -> Iterator[Progress]:
        self._start()
        result = self.result
        logger.info(
            "Registering %d events into calendar %s", result.total_count, self.calendar_id
        )

        for index, descriptor in enumerate(self.events):
            if self._cancelled():
                result.status = RunStatus.CANCELLED
                logger.warning("Registration cancelled at item %d", index)
                break

            self._pace()
            try:
                external_id = self.store.create_event(self.calendar_id, descriptor)
            except AuthExpired as e:
                self._abort(result, RunStatus.AUTH_EXPIRED, e)
                break
            except NotFound as e:
                if index == 0:
                    self._abort(result, RunStatus.CALENDAR_NOT_FOUND, e)
                    break
                outcome = ItemOutcome(index=index, succeeded=False, error_message=str(e))
                logger.warning("Failed to create '%s': %s", descriptor.title, e)
            except Exception as e:
                outcome = ItemOutcome(index=index, succeeded=False, error_message=str(e))
                logger.warning("Failed to create '%s': %s", descriptor.title, e)
            else:
                outcome = ItemOutcome(index=index, succeeded=True, external_id=external_id)

            result.outcomes.append(outcome)
            yield Progress(
                completed_count=len(result.outcomes),
                total_count=result.total_count,
                descriptor=descriptor,
                outcome=outcome,
            )

        self._finish(result)

    def run(self) -> RegistrationResult:
        for _ in self:
            pass
        return self.result


class Deletion(_Run):
    """Delete every event of a calendar (optionally only matching ones)."""

    verb = "deletion"

    def __init__(
        self,
        store: CalendarStore,
        calendar_id: str,
        *,
        match: Callable[[EventDescriptor], bool] | None = None,
        delay: float = RATE_LIMIT_DELAY,
        cancel: CancelSignal | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(store, calendar_id, delay=delay, cancel=cancel, sleep=sleep)
        self.match: Callable[[EventDescriptor], bool] | None = match
        self.targets: list[EventDescriptor] | None = None
        self.result: DeletionResult = DeletionResult(total_count=0)

    def collect(self) -> list[EventDescriptor]:
        """List the events this run will delete.

        Raises:
            AuthExpired, NotFound, ExternalServiceError: If listing fails
        """
        if self.targets is None:
            events = self.store.list_events(self.calendar_id, DISTANT_PAST, DISTANT_FUTURE)
            if self.match is not None:
                events = [event for event in events if self.match(event)]
            self.targets = events
            self.result.total_count = len(events)
        return self.targets

    def __iter__(self) -> Iterator[Progress]:
        self._start()
        targets = self.collect()
        result = self.result
        logger.info("Deleting %d events from calendar %s", len(targets), self.calendar_id)

        for index, descriptor in enumerate(targets):
            if self._cancelled():
                result.status = RunStatus.CANCELLED
                logger.warning("Deletion cancelled at item %d", index)
                break

            if not descriptor.id:
                outcome = ItemOutcome(
                    index=index, succeeded=False, error_message="Event has no ID"
                )
            else:
                self._pace()
                try:
                    self.store.delete_event(self.calendar_id, descriptor.id)
                except AuthExpired as e:
                    self._abort(result, RunStatus.AUTH_EXPIRED, e)
                    break
                except Exception as e:
                    outcome = ItemOutcome(
                        index=index, succeeded=False, error_message=str(e)
                    )
                    logger.warning("Failed to delete '%s': %s", descriptor.title, e)
                else:
                    outcome = ItemOutcome(
                        index=index, succeeded=True, external_id=descriptor.id
                    )

            result.outcomes.append(outcome)
            yield Progress(
                completed_count=len(result.outcomes),
                total_count=result.total_count,
                descriptor=descriptor,
                outcome=outcome,
            )

        self._finish(result)

    def run(self) -> DeletionResult:
        for _ in self:
            pass
        return self.result


def title_contains(*keywords: str) -> Callable[[EventDescriptor], bool]:
    """Predicate matching events whose title contains any of ``keywords``."""

    def match(event: EventDescriptor) -> bool:
        return any(keyword in event.title for keyword in keywords)

    return match


def register_events(
    store: CalendarStore,
    calendar_id: str,
    events: Sequence[EventDescriptor],
    **kwargs: Any,
) -> RegistrationResult:
    return Registration(store, calendar_id, events, **kwargs).run()


def register_event(
    store: CalendarStore, calendar_id: str, event: EventDescriptor
) -> RegistrationResult:
    """Single-item registration: the batch contract with a list of one."""
    return Registration(store, calendar_id, [event], delay=0).run()


def delete_all_events(
    store: CalendarStore, calendar_id: str, **kwargs: Any
) -> DeletionResult:
    return Deletion(store, calendar_id, **kwargs).run()


__all__ = [
    "RunStatus",
    "ItemOutcome",
    "RegistrationResult",
    "DeletionResult",
    "Progress",
    "Registration",
    "Deletion",
    "title_contains",
    "register_events",
    "register_event",
    "delete_all_events",
]
