"""Mission lifecycle states.

A mission starts ``open`` (or ``locked`` when a prerequisite is not met) and
moves to ``done`` exactly once. ``done`` is terminal and ``locked`` never
transitions on its own; there is no prerequisite system that unlocks it.
"""

from __future__ import annotations

from enum import Enum

from mindos.errors import AlreadyCompleted, InvalidInput, MissionLocked


class MissionStatus(str, Enum):
    """Closed set of mission states."""

    OPEN = "open"
    DONE = "done"
    LOCKED = "locked"


# The only legal edges of the state machine.
ALLOWED_TRANSITIONS: dict[MissionStatus, frozenset[MissionStatus]] = {
    MissionStatus.OPEN: frozenset({MissionStatus.DONE}),
    MissionStatus.DONE: frozenset(),
    MissionStatus.LOCKED: frozenset(),
}

INITIAL_STATES = frozenset({MissionStatus.OPEN, MissionStatus.LOCKED})


def parse_status(value: str | MissionStatus) -> MissionStatus:
    """Coerce a stored or requested value into a MissionStatus."""
    try:
        return MissionStatus(value)
    except ValueError:
        msg = f"Unknown mission status: {value!r}"
        raise InvalidInput(msg) from None


def transition(current: MissionStatus, target: MissionStatus) -> MissionStatus:
    """Validate a state change and return the new state.

    Raises:
        AlreadyCompleted: the mission is already done.
        MissionLocked: the mission is locked.
        InvalidInput: any other edge that does not exist.
    """
    if target in ALLOWED_TRANSITIONS[current]:
        return target
    if current is MissionStatus.DONE:
        raise AlreadyCompleted("Mission already completed")
    if current is MissionStatus.LOCKED:
        raise MissionLocked("Mission is locked")
    msg = f"Illegal mission transition {current.value} -> {target.value}"
    raise InvalidInput(msg)
