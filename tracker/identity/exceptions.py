"""Identity resolution exceptions."""

from typing import Optional


class IdentityError(Exception):
    """Base exception for identity resolution errors."""


class IdentityVerificationError(IdentityError):
    """A bearer token could not be verified by the identity provider."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        """
        Args:
            message: Human-readable error message
            status_code: HTTP status returned by the provider, if any
        """
        super().__init__(message)
        self.status_code = status_code


class IdentityRequiredError(IdentityError):
    """No verified identity is available and the policy forbids a fallback."""
