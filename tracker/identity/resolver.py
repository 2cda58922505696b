"""Actor identity resolution for ingestion requests."""

import logging
from typing import Optional

from tracker.config.environment import EnvironmentConfig
from tracker.config.models import PLACEHOLDER_ACTOR_ID, IdentityConfig, IdentityPolicy
from tracker.domain.models import ActorIdentity, IdentitySource
from tracker.logging import get_logger

from .exceptions import IdentityRequiredError, IdentityVerificationError
from .verifier import IdentityVerifier, SupabaseIdentityVerifier

logger = get_logger(__name__, component="identity")


def extract_bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    """Pull the token out of an Authorization header value.

    Accepts ``Bearer <token>`` (any case) or a bare token.
    """
    if not authorization_header:
        return None

    value = authorization_header.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()

    return value or None


class IdentityResolver:
    """
    Decides whose behalf an ingestion run writes on.

    A verifiable bearer token wins. Otherwise the configured policy applies:
    ``require`` rejects the request and ``batch_actor`` uses the configured
    batch account. Verifier failures are logged and never raised.
    """

    def __init__(self, identity_config: IdentityConfig, verifier: Optional[IdentityVerifier] = None):
        self.identity_config = identity_config
        self.verifier = verifier

    @classmethod
    def from_config(cls, identity_config: IdentityConfig, env_config: EnvironmentConfig) -> "IdentityResolver":
        """Build a resolver, wiring the Supabase verifier when credentials exist."""
        verifier = None
        if env_config.identity_verification_enabled:
            verifier = SupabaseIdentityVerifier(
                env_config.supabase_url,
                env_config.supabase_service_role_key,
                timeout=identity_config.verification_timeout,
            )
        else:
            logger.info(
                "Identity provider not configured; bearer tokens cannot be verified",
                extra={"event": "identity.verifier.disabled"},
            )
        return cls(identity_config, verifier)

    def resolve(self, authorization_header: Optional[str]) -> ActorIdentity:
        """Resolve the actor for a request.

        Raises:
            IdentityRequiredError: If no identity could be verified and the
                policy is ``require``
        """
        token = extract_bearer_token(authorization_header)

        if token is None:
            return self._fallback("no bearer token")

        if self.verifier is None:
            return self._fallback("no identity verifier configured")

        try:
            actor_id = self.verifier.verify(token)
        except IdentityVerificationError as e:
            logger.warning(
                f"Token verification failed: {e}",
                extra={
                    "event": "identity.verification.failed",
                    "status_code": e.status_code,
                },
            )
            return self._fallback("token verification failed")
        except Exception as e:
            logger.error(
                f"Unexpected error verifying token: {e}",
                extra={
                    "event": "identity.verification.error",
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return self._fallback("token verification error")

        logger.info(
            "Resolved verified actor",
            extra={"event": "identity.resolved", "actor_id": actor_id, "source": "verified"},
        )
        return ActorIdentity(actor_id=actor_id, source=IdentitySource.VERIFIED)

    def batch_actor(self) -> ActorIdentity:
        """The configured batch identity, used by CLI and scheduled runs.

        Raises:
            IdentityRequiredError: If the policy is ``require`` and only the
                legacy placeholder is configured
        """
        if (
            self.identity_config.policy == IdentityPolicy.REQUIRE.value
            and self.identity_config.batch_actor_id == PLACEHOLDER_ACTOR_ID
        ):
            logger.error(
                "Refusing to run under the placeholder batch actor",
                extra={"event": "identity.batch_actor.unprovisioned"},
            )
            raise IdentityRequiredError(
                "identity.policy is require but no batch account is provisioned; "
                "set identity.batch_actor_id or BATCH_ACTOR_ID"
            )

        return ActorIdentity(
            actor_id=self.identity_config.batch_actor_id, source=IdentitySource.BATCH
        )

    def _fallback(self, reason: str) -> ActorIdentity:
        if self.identity_config.policy == IdentityPolicy.REQUIRE.value:
            logger.warning(
                f"Rejecting request without verified identity ({reason})",
                extra={"event": "identity.required", "reason": reason},
            )
            raise IdentityRequiredError(f"Authentication required: {reason}")

        actor = self.batch_actor()
        logger.log(
            logging.WARNING if actor.actor_id == PLACEHOLDER_ACTOR_ID else logging.INFO,
            f"Using batch actor ({reason})",
            extra={
                "event": "identity.fallback",
                "reason": reason,
                "actor_id": actor.actor_id,
                "placeholder": actor.actor_id == PLACEHOLDER_ACTOR_ID,
            },
        )
        return actor
