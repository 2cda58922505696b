"""Actor identity resolution and bearer-token verification."""

from .exceptions import IdentityError, IdentityRequiredError, IdentityVerificationError
from .resolver import IdentityResolver, extract_bearer_token
from .verifier import IdentityVerifier, SupabaseIdentityVerifier

__all__ = [
    "IdentityResolver",
    "IdentityVerifier",
    "SupabaseIdentityVerifier",
    "extract_bearer_token",
    "IdentityError",
    "IdentityVerificationError",
    "IdentityRequiredError",
]
