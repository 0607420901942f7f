"""Error kinds raised by omoide.

Store adapters translate library exceptions into these at the boundary, so
generators and orchestrators only ever classify ``OmoideError`` subclasses.
"""


class OmoideError(Exception):
    """Base class for every error omoide raises on purpose."""


class ValidationError(OmoideError, ValueError):
    """Malformed input parameters; generation never proceeds."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field: str | None = field


class AuthExpired(OmoideError):
    """The bearer credential was rejected and the caller must re-authenticate."""


class NotFound(OmoideError):
    """The target calendar (or event) does not exist."""

    def __init__(self, message: str, *, calendar_id: str | None = None) -> None:
        super().__init__(message)
        self.calendar_id: str | None = calendar_id


class ExternalServiceError(OmoideError):
    """Transport or API failure that is neither an auth nor a not-found error."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int | None = status


__all__ = [
    "OmoideError",
    "ValidationError",
    "AuthExpired",
    "NotFound",
    "ExternalServiceError",
]
