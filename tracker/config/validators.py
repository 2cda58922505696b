"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

from .models import PLACEHOLDER_ACTOR_ID


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect a raw configuration dictionary for risky but valid settings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    identity = config_dict.get("identity") or {}
    if isinstance(identity, dict):
        policy = identity.get("policy", "batch_actor")
        batch_actor = identity.get("batch_actor_id", PLACEHOLDER_ACTOR_ID)
        if batch_actor == PLACEHOLDER_ACTOR_ID:
            if policy == "require":
                warning_messages.append(
                    "identity.batch_actor_id is the legacy placeholder; --manual-run and "
                    "scheduled runs will refuse to start until a batch account is provisioned"
                )
            else:
                warning_messages.append(
                    "identity.batch_actor_id is the legacy placeholder; unauthenticated runs "
                    "will all be recorded under it. Provision a batch account or set policy: require"
                )

    extraction = config_dict.get("extraction") or {}
    if isinstance(extraction, dict):
        max_pages = extraction.get("max_pages", 3)
        if isinstance(max_pages, int) and max_pages > 5:
            warning_messages.append(
                f"Large max_pages ({max_pages}) increases the chance of being rate limited"
            )
        if extraction.get("headless") is False:
            warning_messages.append("extraction.headless is false; a display is required")

    api = config_dict.get("api") or {}
    if isinstance(api, dict) and api.get("include_stack_traces"):
        warning_messages.append("api.include_stack_traces exposes internal tracebacks to callers")

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
