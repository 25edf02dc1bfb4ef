"""
Models for provider verification outcomes.

A verification run produces one outcome per interaction; outcomes are merged
into a single overall result with :meth:`VerificationOutcome.merge`.
``Success`` is the identity of the merge and two ``Failure`` values
concatenate their mismatches in order. Descriptions are kept as parts so
that repeated descriptions collapse the same way however merges are grouped.

Raw mismatch records arrive as loosely typed dicts keyed by ``type``. They are
parsed once, at construction of a ``Failure``, into the closed set of
mismatch variants below.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from functools import reduce
from typing import Any, Iterable, Mapping, Union


class MismatchType(StrEnum):
    """Mismatch discriminators understood by the broker."""

    BODY = "body"
    STATUS = "status"
    HEADER = "header"
    METADATA = "metadata"


@dataclass(frozen=True)
class Mismatch(ABC):
    """Base of all mismatch variants."""

    interaction_id: str | None = None

    @abstractmethod
    def entries(self) -> list[dict[str, Any]]:
        """Broker ``mismatches`` entries contributed by this record."""


@dataclass(frozen=True)
class BodyMismatch(Mismatch):
    """Body comparison: ``{path: [{"mismatch": ..., "diff": ...}], "diff": ...}`` or a message."""

    comparison: Any = None

    def entries(self) -> list[dict[str, Any]]:
        if not isinstance(self.comparison, Mapping):
            return [{"attribute": "body", "description": str(self.comparison)}]
        result = []
        for path, items in self.comparison.items():
            if path == "diff":
                continue
            if items is None:
                continue
            if not isinstance(items, list):
                items = [items]
            for item in items:
                if not isinstance(item, Mapping):
                    result.append({"attribute": "body", "identifier": path, "description": str(item)})
                    continue
                result.append(
                    {
                        "attribute": "body",
                        "identifier": path,
                        "description": item.get("mismatch"),
                        "diff": item.get("diff"),
                    }
                )
        return result


@dataclass(frozen=True)
class StatusMismatch(Mismatch):
    description: Any = None

    def entries(self) -> list[dict[str, Any]]:
        return [{"attribute": "status", "description": self.description}]


@dataclass(frozen=True)
class HeaderMismatch(Mismatch):
    """Header mismatch; ``fields`` holds everything but ``type``/``interactionId``."""

    fields: dict[str, Any] = field(default_factory=dict)

    def entries(self) -> list[dict[str, Any]]:
        return [{"attribute": MismatchType.HEADER.value, **self.fields}]


@dataclass(frozen=True)
class MetadataMismatch(Mismatch):
    """Message metadata mismatch; one entry per metadata key."""

    fields: dict[str, Any] = field(default_factory=dict)

    def entries(self) -> list[dict[str, Any]]:
        if not self.fields:
            return [{"attribute": MismatchType.METADATA.value}]
        return [
            {"attribute": MismatchType.METADATA.value, "identifier": key, "description": value}
            for key, value in self.fields.items()
        ]


@dataclass(frozen=True)
class OtherMismatch(Mismatch):
    """Any other mismatch kind, passed through without its ``type``."""

    type: Any = None
    fields: dict[str, Any] = field(default_factory=dict)

    def entries(self) -> list[dict[str, Any]]:
        return [dict(self.fields)]


@dataclass(frozen=True)
class ExceptionMismatch(Mismatch):
    """Verification of the interaction raised instead of comparing.

    Reported under ``exceptions`` rather than ``mismatches``.
    """

    exception: Any = None

    def entries(self) -> list[dict[str, Any]]:
        return []

    def to_exception_json(self) -> dict[str, Any]:
        if isinstance(self.exception, BaseException):
            return {
                "message": str(self.exception),
                "exceptionClass": _qualified_name(type(self.exception)),
            }
        return {"message": str(self.exception)}


def _qualified_name(cls: type) -> str:
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def parse_mismatch(record: Mismatch | Mapping[str, Any]) -> Mismatch:
    """Convert a raw mismatch record into its variant."""
    if isinstance(record, Mismatch):
        return record

    interaction_id = record.get("interactionId")
    if "exception" in record:
        return ExceptionMismatch(interaction_id, record["exception"])

    kind = record.get("type")
    rest = {k: v for k, v in record.items() if k not in ("interactionId", "type")}
    if kind == MismatchType.BODY:
        return BodyMismatch(interaction_id, record.get("comparison"))
    if kind == MismatchType.STATUS:
        return StatusMismatch(interaction_id, record.get("description"))
    if kind == MismatchType.HEADER:
        return HeaderMismatch(interaction_id, rest)
    if kind == MismatchType.METADATA:
        return MetadataMismatch(interaction_id, rest)
    return OtherMismatch(interaction_id, kind, rest)


class VerificationOutcome(ABC):
    """Overall result of verifying a provider against its pacts."""

    @abstractmethod
    def to_boolean(self) -> bool:
        ...

    @abstractmethod
    def merge(self, other: VerificationOutcome) -> VerificationOutcome:
        ...

    def __bool__(self) -> bool:
        return self.to_boolean()

    @staticmethod
    def from_boolean(result: bool) -> VerificationOutcome:
        return Success() if result else Failure()


@dataclass(frozen=True)
class Success(VerificationOutcome):
    def to_boolean(self) -> bool:
        return True

    def merge(self, other: VerificationOutcome) -> VerificationOutcome:
        return other


MismatchRecord = Union[Mismatch, Mapping[str, Any]]


@dataclass(frozen=True, init=False)
class Failure(VerificationOutcome):
    """Failed verification; equal when mismatches and joined description match."""

    mismatches: tuple[Mismatch, ...]
    descriptions: tuple[str, ...] = field(compare=False)

    def __init__(
        self,
        mismatches: Iterable[MismatchRecord] = (),
        description: str | Iterable[str] = "",
    ) -> None:
        parts = (description,) if isinstance(description, str) else tuple(description)
        object.__setattr__(self, "mismatches", tuple(parse_mismatch(m) for m in mismatches))
        object.__setattr__(self, "descriptions", _collapse(parts))

    @property
    def description(self) -> str:
        return ", ".join(self.descriptions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Failure):
            return NotImplemented
        return (self.mismatches, self.description) == (other.mismatches, other.description)

    def to_boolean(self) -> bool:
        return False

    def merge(self, other: VerificationOutcome) -> VerificationOutcome:
        if not isinstance(other, Failure):
            return self
        return Failure(self.mismatches + other.mismatches, self.descriptions + other.descriptions)


def _collapse(parts: Iterable[str]) -> tuple[str, ...]:
    # drop empties and adjacent repeats
    result: list[str] = []
    for part in parts:
        if part and (not result or result[-1] != part):
            result.append(part)
    return tuple(result)


def combine_descriptions(first: str, second: str) -> str:
    return ", ".join(_collapse((first, second)))


def combine(outcomes: Iterable[VerificationOutcome]) -> VerificationOutcome:
    """Merge outcomes left to right, starting from ``Success``."""
    return reduce(lambda acc, outcome: acc.merge(outcome), outcomes, Success())
