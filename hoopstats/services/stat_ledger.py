"""
Stat ledger: per-(game, player) action log and the box score derived from it.

Each recorded action is a ``LedgerEntry`` appended to an ordered history.
The box score is the fold of that history, and undo pops the last entry and
applies its exact inverse. Shots touch two counters (attempted always, made
only when made), so undo has to know the logged outcome rather than guess.

    box, history = record_action(BoxScore(), (), make_entry(ActionType.THREE_POINT, made=True))
    box.points          # 3
    box, history, _ = undo_last_action(box, history)
    box.is_empty()      # True

Percentages here are full precision; API payloads round them.
"""
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from hoopstats.core.errors import InvalidActionError, NoActionToUndoError
from hoopstats.utils.timezone import utc_now


class ActionType(str, Enum):
    FREE_THROW = "freeThrow"
    TWO_POINT = "twoPoint"
    THREE_POINT = "threePoint"
    OFFENSIVE_REBOUND = "offensiveRebound"
    DEFENSIVE_REBOUND = "defensiveRebound"
    ASSIST = "assist"
    STEAL = "steal"
    BLOCK = "block"
    TURNOVER = "turnover"
    PERSONAL_FOUL = "personalFoul"

    @property
    def is_shot(self) -> bool:
        return self in SHOT_COUNTERS


# Shot type -> (made counter, attempted counter)
SHOT_COUNTERS = {
    ActionType.FREE_THROW: ("free_throws_made", "free_throws_attempted"),
    ActionType.TWO_POINT: ("two_points_made", "two_points_attempted"),
    ActionType.THREE_POINT: ("three_points_made", "three_points_attempted"),
}

SINGLE_COUNTERS = {
    ActionType.OFFENSIVE_REBOUND: "offensive_rebounds",
    ActionType.DEFENSIVE_REBOUND: "defensive_rebounds",
    ActionType.ASSIST: "assists",
    ActionType.STEAL: "steals",
    ActionType.BLOCK: "blocks",
    ActionType.TURNOVER: "turnovers",
    ActionType.PERSONAL_FOUL: "personal_fouls",
}


def shooting_percentage(made: int, attempted: int) -> float:
    """made / attempted * 100, or 0.0 when nothing was attempted."""
    if attempted == 0:
        return 0.0
    return made / attempted * 100


@dataclass(frozen=True)
class LedgerEntry:
    """One recorded action. ``made`` is only set for shots."""
    action_type: ActionType
    made: Optional[bool] = None
    quarter: Optional[int] = None
    recorded_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.action_type.value,
            "made": self.made,
            "quarter": self.quarter,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerEntry":
        recorded_at = data.get("recorded_at")
        return cls(
            action_type=ActionType(data["type"]),
            made=data.get("made"),
            quarter=data.get("quarter"),
            recorded_at=datetime.fromisoformat(recorded_at) if recorded_at else None,
        )


def make_entry(
    action_type: ActionType | str,
    made: Optional[bool] = None,
    quarter: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LedgerEntry:
    """
    Build a validated ledger entry.

    Raises:
        InvalidActionError: Unknown action type, or a shot without ``made``
    """
    try:
        action_type = ActionType(action_type)
    except ValueError:
        raise InvalidActionError(
            f"Invalid action type: {action_type}", {"action_type": str(action_type)}
        ) from None

    if action_type.is_shot:
        if made is None:
            raise InvalidActionError(
                f"'made' is required for {action_type.value}",
                {"action_type": action_type.value},
            )
        made = bool(made)
    else:
        made = None

    return LedgerEntry(action_type=action_type, made=made, quarter=quarter, recorded_at=now or utc_now())


@dataclass(frozen=True)
class BoxScore:
    """Counters of one player in one game (or a sum of several)."""
    free_throws_made: int = 0
    free_throws_attempted: int = 0
    two_points_made: int = 0
    two_points_attempted: int = 0
    three_points_made: int = 0
    three_points_attempted: int = 0
    offensive_rebounds: int = 0
    defensive_rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    personal_fouls: int = 0

    @classmethod
    def counter_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_row(cls, row: Any) -> "BoxScore":
        """Read the counters off any object carrying them as attributes."""
        return cls(**{name: getattr(row, name) or 0 for name in cls.counter_names()})

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in self.counter_names()}

    def is_empty(self) -> bool:
        return not any(self.counters().values())

    def __add__(self, other: "BoxScore") -> "BoxScore":
        if not isinstance(other, BoxScore):
            return NotImplemented
        return BoxScore(**{
            name: getattr(self, name) + getattr(other, name) for name in self.counter_names()
        })

    @property
    def points(self) -> int:
        return self.free_throws_made + 2 * self.two_points_made + 3 * self.three_points_made

    @property
    def total_rebounds(self) -> int:
        return self.offensive_rebounds + self.defensive_rebounds

    @property
    def field_goals_made(self) -> int:
        return self.two_points_made + self.three_points_made

    @property
    def field_goals_attempted(self) -> int:
        return self.two_points_attempted + self.three_points_attempted

    @property
    def field_goal_percentage(self) -> float:
        return shooting_percentage(self.field_goals_made, self.field_goals_attempted)

    @property
    def free_throw_percentage(self) -> float:
        return shooting_percentage(self.free_throws_made, self.free_throws_attempted)

    @property
    def two_point_percentage(self) -> float:
        return shooting_percentage(self.two_points_made, self.two_points_attempted)

    @property
    def three_point_percentage(self) -> float:
        return shooting_percentage(self.three_points_made, self.three_points_attempted)

    def to_dict(self, precision: Optional[int] = 1) -> Dict[str, Any]:
        """Counters plus derived values; percentages rounded unless precision is None."""
        def pct(value: float) -> float:
            return value if precision is None else round(value, precision)

        return {
            **self.counters(),
            "points": self.points,
            "total_rebounds": self.total_rebounds,
            "field_goals_made": self.field_goals_made,
            "field_goals_attempted": self.field_goals_attempted,
            "field_goal_percentage": pct(self.field_goal_percentage),
            "free_throw_percentage": pct(self.free_throw_percentage),
            "two_point_percentage": pct(self.two_point_percentage),
            "three_point_percentage": pct(self.three_point_percentage),
        }


def _shift(box: BoxScore, entry: LedgerEntry, step: int) -> BoxScore:
    """Apply an entry's counter effect with step=+1, or its inverse with step=-1."""
    if entry.action_type.is_shot:
        made_field, attempted_field = SHOT_COUNTERS[entry.action_type]
        changes = {attempted_field: getattr(box, attempted_field) + step}
        if entry.made:
            changes[made_field] = getattr(box, made_field) + step
        return replace(box, **changes)

    counter = SINGLE_COUNTERS[entry.action_type]
    return replace(box, **{counter: getattr(box, counter) + step})


def apply_entry(box: BoxScore, entry: LedgerEntry) -> BoxScore:
    return _shift(box, entry, 1)


def reverse_entry(box: BoxScore, entry: LedgerEntry) -> BoxScore:
    return _shift(box, entry, -1)


def fold(history: Iterable[LedgerEntry]) -> BoxScore:
    """Rebuild a box score from scratch out of its history."""
    box = BoxScore()
    for entry in history:
        box = apply_entry(box, entry)
    return box


def record_action(
    box: BoxScore,
    history: Sequence[LedgerEntry],
    entry: LedgerEntry,
) -> Tuple[BoxScore, Tuple[LedgerEntry, ...]]:
    """Append an entry and return the updated (box score, history)."""
    return apply_entry(box, entry), (*history, entry)


def undo_last_action(
    box: BoxScore,
    history: Sequence[LedgerEntry],
) -> Tuple[BoxScore, Tuple[LedgerEntry, ...], LedgerEntry]:
    """
    Remove the most recent entry and reverse exactly its effect.

    Returns:
        (box score, remaining history, removed entry)

    Raises:
        NoActionToUndoError: History is empty
    """
    if not history:
        raise NoActionToUndoError("No actions to undo")
    last = history[-1]
    return reverse_entry(box, last), tuple(history[:-1]), last
