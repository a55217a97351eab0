"""Status conditions attached to a resource record.

A condition reports one observation about a resource, keyed by its type. The
`Conditions` store holds at most one condition per type, in insertion order,
and only moves `last_transition_time` forward when the status of a condition
actually changes so that repeated reconciliation does not churn timestamps.
"""

from collections.abc import Callable, Iterable, Iterator
import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig
from mashumaro.types import SerializableType

__all__ = [
    "Clock",
    "utcnow",
    "ConditionStatus",
    "Condition",
    "Conditions",
]


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC time at the precision stored on a condition."""
    return datetime.now(timezone.utc).replace(microsecond=0)


class ConditionStatus(StrEnum):
    """Status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass
class Condition(DataClassDictMixin):
    """A single observation about the state of a resource."""

    type: str
    """The type of the condition, unique within a resource."""

    status: ConditionStatus
    """The status of the condition."""

    reason: str = ""
    """A machine readable reason for the last transition."""

    message: str = ""
    """A human readable message with details about the last transition."""

    last_transition_time: datetime | None = field(
        metadata=field_options(alias="lastTransitionTime"), default=None
    )
    """The last time the condition changed status."""

    @classmethod
    def __pre_deserialize__(cls, d: dict[Any, Any]) -> dict[Any, Any]:
        # YAML loaders resolve unquoted timestamps and booleans. Timestamps
        # without an offset are UTC.
        d = dict(d)
        if isinstance(status := d.get("status"), bool):
            d["status"] = str(status)
        if isinstance(ts := d.get("lastTransitionTime"), str):
            ts = datetime.fromisoformat(ts)
        if isinstance(ts, datetime):
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
            d["lastTransitionTime"] = ts.isoformat()
        return d

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


class Conditions(SerializableType):
    """An ordered set of conditions keyed by condition type."""

    def __init__(self, conditions: Iterable[Condition] = ()) -> None:
        """Initialize Conditions."""
        self._conditions: dict[str, Condition] = {}
        for condition in conditions:
            self._conditions[condition.type] = condition

    def get(self, condition_type: str) -> Condition | None:
        """Return the condition with the given type, if present."""
        return self._conditions.get(condition_type)

    def is_true(self, condition_type: str) -> bool:
        """Return True if the condition is present with status True."""
        return self._has_status(condition_type, ConditionStatus.TRUE)

    def is_false(self, condition_type: str) -> bool:
        """Return True if the condition is present with status False."""
        return self._has_status(condition_type, ConditionStatus.FALSE)

    def is_unknown(self, condition_type: str) -> bool:
        """Return True if the condition is present with status Unknown.

        An absent condition is not unknown, it carries no information at all.
        """
        return self._has_status(condition_type, ConditionStatus.UNKNOWN)

    def _has_status(self, condition_type: str, status: ConditionStatus) -> bool:
        if (condition := self._conditions.get(condition_type)) is None:
            return False
        return condition.status == status

    def set(self, condition: Condition, clock: Clock = utcnow) -> None:
        """Insert or update a condition by type.

        The transition time is set from the clock when the condition is new or
        its status differs from the stored condition. Otherwise the stored
        transition time is kept while reason and message are still updated.
        """
        condition = copy.copy(condition)
        existing = self._conditions.get(condition.type)
        if existing is None or existing.status != condition.status:
            condition.last_transition_time = clock()
        else:
            condition.last_transition_time = existing.last_transition_time
        self._conditions[condition.type] = condition

    def mark_true(self, condition_type: str, clock: Clock = utcnow) -> None:
        """Set the condition to True."""
        self.set(Condition(type=condition_type, status=ConditionStatus.TRUE), clock)

    def mark_false(
        self,
        condition_type: str,
        reason: str,
        message: str = "",
        clock: Clock = utcnow,
    ) -> None:
        """Set the condition to False with a reason."""
        self.set(
            Condition(
                type=condition_type,
                status=ConditionStatus.FALSE,
                reason=reason,
                message=message,
            ),
            clock,
        )

    def mark_unknown(
        self,
        condition_type: str,
        reason: str,
        message: str = "",
        clock: Clock = utcnow,
    ) -> None:
        """Set the condition to Unknown with a reason."""
        self.set(
            Condition(
                type=condition_type,
                status=ConditionStatus.UNKNOWN,
                reason=reason,
                message=message,
            ),
            clock,
        )

    def deep_copy(self) -> "Conditions":
        """Return an independent copy of all conditions."""
        return Conditions(copy.deepcopy(list(self._conditions.values())))

    def types(self) -> list[str]:
        """Return the condition types in order."""
        return list(self._conditions)

    def __iter__(self) -> Iterator[Condition]:
        return iter(list(self._conditions.values()))

    def __len__(self) -> int:
        return len(self._conditions)

    def __contains__(self, condition_type: object) -> bool:
        return condition_type in self._conditions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Conditions):
            return NotImplemented
        return list(self._conditions.values()) == list(other._conditions.values())

    def __repr__(self) -> str:
        return f"Conditions({list(self._conditions.values())!r})"

    def _serialize(self) -> list[dict[str, Any]]:
        return [condition.to_dict() for condition in self._conditions.values()]

    @classmethod
    def _deserialize(cls, value: list[dict[str, Any]] | None) -> "Conditions":
        return cls(Condition.from_dict(item) for item in value or [])
