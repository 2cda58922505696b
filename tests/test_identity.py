"""Unit tests for actor identity resolution and token verification."""

from unittest.mock import MagicMock

import pytest
import requests

from tracker.config.environment import EnvironmentConfig
from tracker.config.models import PLACEHOLDER_ACTOR_ID, IdentityConfig
from tracker.identity import (
    IdentityRequiredError,
    IdentityResolver,
    IdentityVerificationError,
    SupabaseIdentityVerifier,
    extract_bearer_token,
)


def make_response(status_code=200, payload=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


class TestExtractBearerToken:
    """Tests for Authorization header parsing."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def", "abc.def"),
            ("bearer abc.def", "abc.def"),
            ("  Bearer   abc.def  ", "abc.def"),
            ("abc.def", "abc.def"),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected


class TestIdentityResolver:
    """Tests for IdentityResolver.resolve()."""

    def test_no_header_uses_placeholder_actor(self):
        """Without an Authorization header the default batch actor is the placeholder."""
        resolver = IdentityResolver(IdentityConfig())

        actor = resolver.resolve(None)

        assert actor.actor_id == PLACEHOLDER_ACTOR_ID == "b518c5d5-2139-413e-ba3d-2e0f9dcd30aa"
        assert actor.source == "batch"
        assert not actor.is_verified

    def test_configured_batch_actor(self):
        resolver = IdentityResolver(IdentityConfig(batch_actor_id="batch-account"))

        assert resolver.resolve(None).actor_id == "batch-account"

    def test_verified_token(self):
        verifier = MagicMock()
        verifier.verify.return_value = "user-42"
        resolver = IdentityResolver(IdentityConfig(), verifier)

        actor = resolver.resolve("Bearer good-token")

        verifier.verify.assert_called_once_with("good-token")
        assert actor.actor_id == "user-42"
        assert actor.is_verified

    def test_verification_error_falls_back(self):
        verifier = MagicMock()
        verifier.verify.side_effect = IdentityVerificationError("rejected", status_code=401)
        resolver = IdentityResolver(IdentityConfig(), verifier)

        actor = resolver.resolve("Bearer expired")

        assert actor.actor_id == PLACEHOLDER_ACTOR_ID

    def test_unexpected_verifier_error_is_not_propagated(self):
        verifier = MagicMock()
        verifier.verify.side_effect = RuntimeError("bug")
        resolver = IdentityResolver(IdentityConfig(), verifier)

        actor = resolver.resolve("Bearer token")

        assert actor.source == "batch"

    def test_token_without_verifier_falls_back(self):
        resolver = IdentityResolver(IdentityConfig())

        assert resolver.resolve("Bearer token").actor_id == PLACEHOLDER_ACTOR_ID

    def test_require_policy_rejects_missing_identity(self):
        resolver = IdentityResolver(IdentityConfig(policy="require"))

        with pytest.raises(IdentityRequiredError):
            resolver.resolve(None)

    def test_require_policy_rejects_failed_verification(self):
        verifier = MagicMock()
        verifier.verify.side_effect = IdentityVerificationError("rejected")
        resolver = IdentityResolver(IdentityConfig(policy="require"), verifier)

        with pytest.raises(IdentityRequiredError):
            resolver.resolve("Bearer bad")

    def test_require_policy_accepts_verified_token(self):
        verifier = MagicMock()
        verifier.verify.return_value = "user-1"
        resolver = IdentityResolver(IdentityConfig(policy="require"), verifier)

        assert resolver.resolve("Bearer ok").actor_id == "user-1"

    def test_batch_actor_provisioned_under_require(self):
        resolver = IdentityResolver(IdentityConfig(policy="require", batch_actor_id="cron"))

        assert resolver.batch_actor().actor_id == "cron"

    def test_batch_actor_refuses_placeholder_under_require(self):
        resolver = IdentityResolver(IdentityConfig(policy="require"))

        with pytest.raises(IdentityRequiredError, match="BATCH_ACTOR_ID"):
            resolver.batch_actor()


class TestResolverFromConfig:
    """Tests for IdentityResolver.from_config()."""

    def test_verifier_created_with_credentials(self):
        env = EnvironmentConfig(
            supabase_url="https://project.supabase.co/", supabase_service_role_key="key"
        )

        resolver = IdentityResolver.from_config(IdentityConfig(verification_timeout=5), env)

        assert isinstance(resolver.verifier, SupabaseIdentityVerifier)
        assert resolver.verifier.base_url == "https://project.supabase.co"
        assert resolver.verifier.timeout == 5

    def test_no_verifier_without_credentials(self):
        resolver = IdentityResolver.from_config(IdentityConfig(), EnvironmentConfig())

        assert resolver.verifier is None


class TestSupabaseIdentityVerifier:
    """Tests for SupabaseIdentityVerifier.verify()."""

    @pytest.fixture
    def session(self):
        session = MagicMock(spec=requests.Session)
        session.headers = {}
        return session

    @pytest.fixture
    def verifier(self, session):
        return SupabaseIdentityVerifier("https://project.supabase.co", "service-key", session=session)

    def test_success(self, verifier, session):
        session.get.return_value = make_response(200, {"id": "user-7", "email": "a@b.c"})

        assert verifier.verify("tok") == "user-7"

        session.get.assert_called_once_with(
            "https://project.supabase.co/auth/v1/user",
            headers={"Authorization": "Bearer tok", "apikey": "service-key"},
            timeout=10,
        )

    def test_user_agent_set(self, session, verifier):
        assert session.headers["User-Agent"].startswith("JobTrackerIngestion/")

    def test_rejected_token(self, verifier, session):
        session.get.return_value = make_response(401, {"msg": "invalid JWT"})

        with pytest.raises(IdentityVerificationError) as exc_info:
            verifier.verify("tok")

        assert exc_info.value.status_code == 401

    def test_missing_id(self, verifier, session):
        session.get.return_value = make_response(200, {"email": "a@b.c"})

        with pytest.raises(IdentityVerificationError, match="no user id"):
            verifier.verify("tok")

    def test_invalid_json(self, verifier, session):
        session.get.return_value = make_response(200, json_error=True)

        with pytest.raises(IdentityVerificationError, match="invalid JSON"):
            verifier.verify("tok")

    def test_timeout(self, verifier, session):
        session.get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(IdentityVerificationError, match="timed out"):
            verifier.verify("tok")

    def test_connection_error(self, verifier, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(IdentityVerificationError, match="request failed"):
            verifier.verify("tok")
