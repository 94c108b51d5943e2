"""Constraints on single media properties and their fitness distances.

Every constraint answers two questions: how far an actual value is from what
is wanted (``compare`` returns ``(distance, satisfied)``), and which value it
would pick by itself (``preferred`` returns it, or ``None`` when it has no
single preferred value).

In the ranged constraints a bound or ideal that is ``None`` or zero counts as
unspecified.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Iterable

__all__ = [
    "Constraint",
    "BoolExact",
    "Bool",
    "Duration",
    "DurationExact",
    "DurationOneOf",
    "DurationRanged",
    "Float",
    "FloatExact",
    "FloatOneOf",
    "FloatRanged",
    "FrameFormat",
    "FrameFormatExact",
    "FrameFormatOneOf",
    "Int",
    "IntExact",
    "IntOneOf",
    "IntRanged",
    "String",
    "StringExact",
    "StringOneOf",
]


class Constraint(ABC):
    """A constraint on one media property."""

    @abstractmethod
    def compare(self, actual: Any) -> tuple[float, bool]:
        """Return the fitness distance of ``actual`` and whether it satisfies the constraint."""

    @abstractmethod
    def preferred(self) -> Any:
        """Return the value this constraint would choose, or ``None``."""


def _match_result(matched: bool) -> tuple[float, bool]:
    distance = 0.0 if matched else 1.0
    return distance, matched


def _exact(expected: Any, actual: Any) -> tuple[float, bool]:
    """Distance 0 and satisfied on equality, otherwise distance 1 and unsatisfied."""
    matched = bool(expected == actual)
    return _match_result(matched)


def _ideal_match(expected: Any, actual: Any) -> tuple[float, bool]:
    """Like ``_exact`` but any value satisfies the constraint."""
    distance, _ = _exact(expected, actual)
    return distance, True


def _one_of(values: Iterable[Any], actual: Any) -> tuple[float, bool]:
    """Satisfied with distance 0 when ``actual`` equals one of ``values``."""
    matched = any(value == actual for value in values)
    return _match_result(matched)


def _closeness(ideal: Any, actual: Any) -> tuple[float, bool]:
    diff = abs(actual - ideal)
    scale = max(abs(actual), abs(ideal))
    if not scale:
        # Both values are zero: the ratio is undefined.
        return math.nan, True
    return float(diff / scale), True


def _ranged(lo: Any, hi: Any, ideal: Any, actual: Any) -> tuple[float, bool]:
    if lo and lo > actual:
        return 1.0, False
    if hi and hi < actual:
        return 1.0, False
    if not ideal:
        # Inside the range with no ideal: every value is equally good.
        return 0.0, True
    if actual == ideal:
        return 0.0, True
    if actual < ideal:
        if not lo:
            return 0.0, True
        return float((ideal - actual) / (ideal - lo)), True
    if not hi:
        return 0.0, True
    return float((actual - ideal) / (hi - ideal)), True


def _as_tuple(instance: Any) -> None:
    object.__setattr__(instance, "values", tuple(instance.values))


# --- bool -----------------------------------------------------------------


@dataclass(frozen=True)
class BoolExact(Constraint):
    """Exactly this bool value."""

    value: bool

    def compare(self, actual: bool) -> tuple[float, bool]:
        return _exact(self.value, actual)

    def preferred(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return f"{str(self.value).lower()} (exact)"


@dataclass(frozen=True)
class Bool(BoolExact):
    """Ideally this bool value; any value is accepted."""

    def compare(self, actual: bool) -> tuple[float, bool]:
        distance, _ = _exact(self.value, actual)
        return distance, True

    def __str__(self) -> str:
        return f"{str(self.value).lower()} (ideal)"


# --- duration -------------------------------------------------------------


@dataclass(frozen=True)
class Duration(Constraint):
    """Ideally this duration; the closest value takes priority."""

    value: timedelta

    def compare(self, actual: timedelta) -> tuple[float, bool]:
        return _closeness(self.value, actual)

    def preferred(self) -> timedelta:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (ideal)"


@dataclass(frozen=True)
class DurationExact(Constraint):
    """Exactly this duration."""

    value: timedelta

    def compare(self, actual: timedelta) -> tuple[float, bool]:
        return _exact(self.value, actual)

    def preferred(self) -> timedelta:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (exact)"


@dataclass(frozen=True)
class DurationOneOf(Constraint):
    """One of the listed durations."""

    values: tuple[timedelta, ...]

    def __post_init__(self) -> None:
        _as_tuple(self)

    def compare(self, actual: timedelta) -> tuple[float, bool]:
        return _one_of(self.values, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return f"{','.join(str(v) for v in self.values)} (one of values)"


@dataclass(frozen=True)
class DurationRanged(Constraint):
    """A duration within a range; the value closest to ``ideal`` takes priority."""

    min: timedelta | None = None
    max: timedelta | None = None
    ideal: timedelta | None = None

    def compare(self, actual: timedelta) -> tuple[float, bool]:
        return _ranged(self.min, self.max, self.ideal, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        zero = timedelta(0)
        return (
            f"{self.min or zero} - {self.max or zero} (range), "
            f"{self.ideal or zero} (ideal)"
        )


# --- float ----------------------------------------------------------------


@dataclass(frozen=True)
class Float(Constraint):
    """Ideally this float; the closest value takes priority."""

    value: float

    def compare(self, actual: float) -> tuple[float, bool]:
        return _closeness(self.value, actual)

    def preferred(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.2f} (ideal)"


@dataclass(frozen=True)
class FloatExact(Constraint):
    """Exactly this float."""

    value: float

    def compare(self, actual: float) -> tuple[float, bool]:
        return _exact(self.value, actual)

    def preferred(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.2f} (exact)"


@dataclass(frozen=True)
class FloatOneOf(Constraint):
    """One of the listed floats."""

    values: tuple[float, ...]

    def __post_init__(self) -> None:
        _as_tuple(self)

    def compare(self, actual: float) -> tuple[float, bool]:
        return _one_of(self.values, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return f"{','.join(f'{v:.2f}' for v in self.values)} (one of values)"


@dataclass(frozen=True)
class FloatRanged(Constraint):
    """A float within a range; the value closest to ``ideal`` takes priority."""

    min: float | None = None
    max: float | None = None
    ideal: float | None = None

    def compare(self, actual: float) -> tuple[float, bool]:
        return _ranged(self.min, self.max, self.ideal, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return (
            f"{self.min or 0:.2f} - {self.max or 0:.2f} (range), "
            f"{self.ideal or 0:.2f} (ideal)"
        )


# --- frame format ---------------------------------------------------------


@dataclass(frozen=True)
class FrameFormat(Constraint):
    """Ideally this frame format; any format is accepted."""

    value: str

    def compare(self, actual: str) -> tuple[float, bool]:
        return _ideal_match(self.value, actual)

    def preferred(self) -> str:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (ideal)"


@dataclass(frozen=True)
class FrameFormatExact(Constraint):
    """Exactly this frame format."""

    value: str

    def compare(self, actual: str) -> tuple[float, bool]:
        return _exact(self.value, actual)

    def preferred(self) -> str:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (exact)"


@dataclass(frozen=True)
class FrameFormatOneOf(Constraint):
    """One of the listed frame formats."""

    values: tuple[str, ...]

    def __post_init__(self) -> None:
        _as_tuple(self)

    def compare(self, actual: str) -> tuple[float, bool]:
        return _one_of(self.values, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return f"{','.join(self.values)} (one of values)"


# --- int ------------------------------------------------------------------


@dataclass(frozen=True)
class Int(Constraint):
    """Ideally this integer; the closest value takes priority."""

    value: int

    def compare(self, actual: int) -> tuple[float, bool]:
        return _closeness(self.value, actual)

    def preferred(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (ideal)"


@dataclass(frozen=True)
class IntExact(Constraint):
    """Exactly this integer."""

    value: int

    def compare(self, actual: int) -> tuple[float, bool]:
        return _exact(self.value, actual)

    def preferred(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (exact)"


@dataclass(frozen=True)
class IntOneOf(Constraint):
    """One of the listed integers."""

    values: tuple[int, ...]

    def __post_init__(self) -> None:
        _as_tuple(self)

    def compare(self, actual: int) -> tuple[float, bool]:
        return _one_of(self.values, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return f"{','.join(str(v) for v in self.values)} (one of values)"


@dataclass(frozen=True)
class IntRanged(Constraint):
    """An integer within a range; the value closest to ``ideal`` takes priority."""

    min: int | None = None
    max: int | None = None
    ideal: int | None = None

    def compare(self, actual: int) -> tuple[float, bool]:
        return _ranged(self.min, self.max, self.ideal, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return f"{self.min or 0} - {self.max or 0} (range), {self.ideal or 0} (ideal)"


# --- string ---------------------------------------------------------------


@dataclass(frozen=True)
class String(Constraint):
    """Ideally this string; any string is accepted."""

    value: str

    def compare(self, actual: str) -> tuple[float, bool]:
        return _ideal_match(self.value, actual)

    def preferred(self) -> str:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (ideal)"


@dataclass(frozen=True)
class StringExact(Constraint):
    """Exactly this string."""

    value: str

    def compare(self, actual: str) -> tuple[float, bool]:
        return _exact(self.value, actual)

    def preferred(self) -> str:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} (exact)"


@dataclass(frozen=True)
class StringOneOf(Constraint):
    """One of the listed strings."""

    values: tuple[str, ...]

    def __post_init__(self) -> None:
        _as_tuple(self)

    def compare(self, actual: str) -> tuple[float, bool]:
        return _one_of(self.values, actual)

    def preferred(self) -> None:
        return None

    def __str__(self) -> str:
        return f"{','.join(self.values)} (one of values)"