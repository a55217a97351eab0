"""Tests for the conditions module."""

from datetime import datetime, timezone

import pytest

from provider_sync.conditions import Condition, Conditions, ConditionStatus

from .conftest import FakeClock, START_TIME


def test_absent_condition_has_no_status() -> None:
    """Test that a missing condition is neither true, false nor unknown."""
    conditions = Conditions()
    assert conditions.get("Ready") is None
    assert not conditions.is_true("Ready")
    assert not conditions.is_false("Ready")
    assert not conditions.is_unknown("Ready")


def test_status_helpers(clock: FakeClock) -> None:
    """Test the status predicates for each status."""
    conditions = Conditions()
    conditions.mark_true("A", clock=clock)
    conditions.mark_false("B", "Broken", clock=clock)
    conditions.mark_unknown("C", "Waiting", clock=clock)

    assert conditions.is_true("A")
    assert conditions.is_false("B")
    assert conditions.is_unknown("C")
    assert not conditions.is_true("B")
    assert not conditions.is_false("C")
    assert not conditions.is_unknown("A")
    assert conditions.types() == ["A", "B", "C"]


def test_set_same_status_keeps_transition_time(clock: FakeClock) -> None:
    """Test that re-applying an unchanged status does not move the timestamp."""
    conditions = Conditions()
    conditions.mark_true("Ready", clock=clock)
    first = conditions.get("Ready")
    assert first is not None
    assert first.last_transition_time == START_TIME

    clock.advance(minutes=5)
    conditions.mark_true("Ready", clock=clock)
    second = conditions.get("Ready")
    assert second is not None
    assert second.last_transition_time == START_TIME


def test_set_updates_reason_without_status_change(clock: FakeClock) -> None:
    """Test that reason and message update even when the status is unchanged."""
    conditions = Conditions()
    conditions.mark_false("Ready", "Pending", "first", clock=clock)
    clock.advance(seconds=30)
    conditions.mark_false("Ready", "StillPending", "second", clock=clock)

    condition = conditions.get("Ready")
    assert condition == Condition(
        type="Ready",
        status=ConditionStatus.FALSE,
        reason="StillPending",
        message="second",
        last_transition_time=START_TIME,
    )


def test_set_status_change_moves_transition_time(clock: FakeClock) -> None:
    """Test that a status flip records the current time."""
    conditions = Conditions()
    conditions.mark_unknown("Ready", "Waiting", clock=clock)
    clock.advance(seconds=10)
    conditions.mark_true("Ready", clock=clock)

    condition = conditions.get("Ready")
    assert condition is not None
    assert condition.status == ConditionStatus.TRUE
    assert condition.reason == ""
    assert condition.last_transition_time == clock.now


def test_set_keeps_position_and_does_not_alias(clock: FakeClock) -> None:
    """Test that an update keeps the insertion order and copies the input."""
    conditions = Conditions()
    conditions.mark_true("A", clock=clock)
    conditions.mark_true("B", clock=clock)

    update = Condition(type="A", status=ConditionStatus.FALSE, reason="Broken")
    conditions.set(update, clock)
    update.reason = "Changed"

    assert conditions.types() == ["A", "B"]
    condition = conditions.get("A")
    assert condition is not None
    assert condition.reason == "Broken"
    assert update.last_transition_time is None


def test_deep_copy(clock: FakeClock) -> None:
    """Test that a deep copy is independent from the original."""
    conditions = Conditions()
    conditions.mark_true("A", clock=clock)
    snapshot = conditions.deep_copy()
    assert snapshot == conditions

    conditions.mark_false("A", "Broken", clock=clock)
    conditions.mark_true("B", clock=clock)

    assert snapshot.is_true("A")
    assert "B" not in snapshot
    assert len(snapshot) == 1
    assert snapshot != conditions


def test_serialize() -> None:
    """Test conditions serialize as a list of kubernetes conditions."""
    conditions = Conditions(
        [
            Condition(
                type="ProviderInstalled",
                status=ConditionStatus.TRUE,
                last_transition_time=datetime(2024, 4, 30, 10, 0, tzinfo=timezone.utc),
            ),
            Condition(
                type="PreflightCheckPassed",
                status=ConditionStatus.FALSE,
                reason="IncorrectVersionFormat",
                message="bad version",
            ),
        ]
    )
    assert conditions._serialize() == [
        {
            "type": "ProviderInstalled",
            "status": "True",
            "reason": "",
            "message": "",
            "lastTransitionTime": "2024-04-30T10:00:00+00:00",
        },
        {
            "type": "PreflightCheckPassed",
            "status": "False",
            "reason": "IncorrectVersionFormat",
            "message": "bad version",
        },
    ]


def test_deserialize_yaml_scalars() -> None:
    """Test parsing conditions where YAML resolved booleans and timestamps."""
    conditions = Conditions._deserialize(
        [
            {
                "type": "PreflightCheckPassed",
                "status": False,
                "lastTransitionTime": datetime(2024, 4, 30, 10, 0),
            },
        ]
    )
    assert conditions.is_false("PreflightCheckPassed")
    condition = conditions.get("PreflightCheckPassed")
    assert condition is not None
    assert condition.last_transition_time == datetime(
        2024, 4, 30, 10, 0, tzinfo=timezone.utc
    )
    assert Conditions._deserialize(None) == Conditions()


@pytest.mark.parametrize(
    "value",
    ["2024-05-01T11:59:50", "2024-05-01T11:59:50Z", "2024-05-01T13:59:50+02:00"],
    ids=["naive", "zulu", "offset"],
)
def test_deserialize_timestamp_strings(value: str) -> None:
    """Test quoted timestamps are always timezone aware."""
    condition = Condition.from_dict(
        {"type": "Ready", "status": "True", "lastTransitionTime": value}
    )
    assert condition.last_transition_time == datetime(
        2024, 5, 1, 11, 59, 50, tzinfo=timezone.utc
    )
    assert condition.last_transition_time is not None
    assert condition.last_transition_time.tzinfo is not None
    assert condition.last_transition_time < START_TIME
