from dataclasses import dataclass

from omoide.errors import AuthExpired


@dataclass(frozen=True)
class Credential:
    """Bearer credential handed over by the identity provider for one request.

    Attributes:
        token: OAuth access token
        expired: Set by the provider when the token could not be refreshed
    """

    token: str
    expired: bool = False

    def require_valid(self) -> "Credential":
        """Return self, or raise ``AuthExpired`` so the caller re-authenticates."""
        if self.expired or not self.token:
            raise AuthExpired("Credential expired; sign in again")
        return self

    def __repr__(self) -> str:
        return f"Credential(token='***', expired={self.expired})"
