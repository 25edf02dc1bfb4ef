"""
Provider verification results.

Merges per-interaction verification outcomes into one result and renders it
as the broker's verification results payload.
"""

from .models import (
    BodyMismatch,
    ExceptionMismatch,
    Failure,
    HeaderMismatch,
    MetadataMismatch,
    Mismatch,
    MismatchType,
    OtherMismatch,
    StatusMismatch,
    Success,
    VerificationOutcome,
    combine,
    parse_mismatch,
)
from .payload import build_payload

__all__ = [
    "VerificationOutcome",
    "Success",
    "Failure",
    "Mismatch",
    "MismatchType",
    "BodyMismatch",
    "StatusMismatch",
    "HeaderMismatch",
    "MetadataMismatch",
    "OtherMismatch",
    "ExceptionMismatch",
    "parse_mismatch",
    "combine",
    "build_payload",
]
