"""Bearer-token verification against the hosted identity provider."""

from typing import Optional, Protocol

import requests

from tracker.logging import get_logger

from .exceptions import IdentityVerificationError

logger = get_logger(__name__, component="identity")

USER_AGENT = "JobTrackerIngestion/1.0"


class IdentityVerifier(Protocol):
    """Turns a bearer token into an actor id, or raises IdentityVerificationError."""

    def verify(self, token: str) -> str: ...


class SupabaseIdentityVerifier:
    """Verifies tokens with the Supabase auth ``/auth/v1/user`` endpoint.

    Attributes:
        base_url: Project URL without trailing slash
        timeout: Request timeout in seconds
    """

    USER_PATH = "/auth/v1/user"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})

    def verify(self, token: str) -> str:
        """Return the id of the user owning ``token``.

        Raises:
            IdentityVerificationError: On transport errors, non-200 responses
                or a payload without an ``id``
        """
        url = f"{self.base_url}{self.USER_PATH}"
        headers = {
            "Authorization": f"Bearer {token}",
            "apikey": self._api_key,
        }

        try:
            response = self._session.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise IdentityVerificationError(
                f"Token verification timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.RequestException as e:
            raise IdentityVerificationError(f"Token verification request failed: {e}") from e

        if response.status_code != 200:
            raise IdentityVerificationError(
                f"Token rejected by identity provider (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise IdentityVerificationError(
                "Identity provider returned invalid JSON", status_code=response.status_code
            ) from e

        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise IdentityVerificationError(
                "Identity provider response has no user id", status_code=response.status_code
            )

        logger.debug("Token verified", extra={"event": "identity.token.verified"})
        return str(user_id)
