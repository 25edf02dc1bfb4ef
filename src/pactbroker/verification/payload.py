"""
Verification results payload for the broker.

Shape::

    {
      "success": false,
      "providerApplicationVersion": "1.2.3",
      "buildUrl": "https://ci/build/42",          # only when given
      "testResults": [                             # only for a Failure with mismatches
        {
          "interactionId": "abc",
          "success": false,
          "mismatches": [{"attribute": "body", "identifier": "$.a", ...}],
          "exceptions": [{"message": "...", "exceptionClass": "..."}]
        }
      ]
    }
"""

from __future__ import annotations

from typing import Any

import structlog

from pactbroker.verification.models import (
    ExceptionMismatch,
    Failure,
    Mismatch,
    VerificationOutcome,
)

logger = structlog.get_logger()


def group_by_interaction(mismatches: tuple[Mismatch, ...]) -> dict[str | None, list[Mismatch]]:
    """Group mismatches by interaction id, keeping first-seen order."""
    groups: dict[str | None, list[Mismatch]] = {}
    for mismatch in mismatches:
        groups.setdefault(mismatch.interaction_id, []).append(mismatch)
    return groups


def build_interaction_result(interaction_id: str | None, mismatches: list[Mismatch]) -> dict[str, Any]:
    entries: list[dict[str, Any]] = []
    for mismatch in mismatches:
        entries.extend(mismatch.entries())

    result: dict[str, Any] = {
        "interactionId": interaction_id,
        "success": False,
        "mismatches": entries,
    }

    failed = next((m for m in mismatches if isinstance(m, ExceptionMismatch)), None)
    if failed is not None:
        result["exceptions"] = [failed.to_exception_json()]
    return result


def build_payload(
    outcome: VerificationOutcome,
    version: str,
    build_url: str | None = None,
) -> dict[str, Any]:
    """Build the verification results document to POST to the broker."""
    payload: dict[str, Any] = {
        "success": outcome.to_boolean(),
        "providerApplicationVersion": version,
    }
    if build_url is not None:
        payload["buildUrl"] = build_url

    logger.debug("verification_outcome", outcome=repr(outcome))
    if isinstance(outcome, Failure) and outcome.mismatches:
        payload["testResults"] = [
            build_interaction_result(interaction_id, group)
            for interaction_id, group in group_by_interaction(outcome.mismatches).items()
        ]
    return payload
