"""Data types for FocusPie.

This module contains the core data structures shared by the task ledger,
the Pomodoro timer and the chart geometry helpers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TimerMode(Enum):
    """Pomodoro timer modes."""

    IDLE = "idle"
    WORKING = "working"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self in (TimerMode.SHORT_BREAK, TimerMode.LONG_BREAK)


class RingColorKind(Enum):
    """Which palette the inner timer ring is drawn with."""

    WORK = "work"
    BREAK = "break"


@dataclass
class Note:
    """A timestamped note attached to a task."""

    id: str
    text: str
    timestamp_utc: str  # ISO 8601


@dataclass
class Task:
    """A named slice of the workday budget."""

    id: str
    name: str
    goal_time_minutes: int
    progress_minutes: int = 0
    chart_index: int = 1
    is_priority: bool = False
    notes: List[Note] = field(default_factory=list)

    @property
    def remaining_minutes(self) -> int:
        return max(0, self.goal_time_minutes - self.progress_minutes)


@dataclass
class TimerSettings:
    """Timer configuration. Durations are in seconds."""

    pomodoro_duration: int = 25 * 60
    short_break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    cycles_until_long_break: int = 4
    auto_pause_enabled: bool = False

    def duration_for(self, mode: TimerMode) -> int:
        """Full countdown length of a mode; idle shows the next work session."""
        if mode is TimerMode.SHORT_BREAK:
            return self.short_break_duration
        if mode is TimerMode.LONG_BREAK:
            return self.long_break_duration
        return self.pomodoro_duration


@dataclass(frozen=True)
class ChartGeometry:
    """Placement of the donut chart on screen."""

    center_x: float
    center_y: float
    outer_radius: float
    inner_radius: float


@dataclass(frozen=True)
class Slice:
    """One angular segment of the radial layout.

    ``index`` is the position of the task in the ordered list, or ``None``
    for the trailing unallocated slice.
    """

    index: Optional[int]
    task_id: str
    start_angle: float
    sweep: float
    progress_sweep: float = 0.0
    chart_index: int = 0

    @property
    def end_angle(self) -> float:
        return self.start_angle + self.sweep

    @property
    def mid_angle(self) -> float:
        return self.start_angle + self.sweep / 2.0

    @property
    def is_unallocated(self) -> bool:
        return self.index is None

    @property
    def progress_end_angle(self) -> float:
        return self.start_angle + self.progress_sweep

    def contains_angle(self, angle: float) -> bool:
        return self.start_angle <= angle < self.end_angle


@dataclass(frozen=True)
class TimerSnapshot:
    """The parts of the timer state the ring composer needs."""

    mode: TimerMode
    mode_duration: int
    time_left_in_mode: int


@dataclass(frozen=True)
class TaskSnapshot:
    """Budget of the task shown on the timer face."""

    goal_time_minutes: int
    time_left_seconds: int

    @property
    def total_seconds(self) -> int:
        return self.goal_time_minutes * 60


@dataclass(frozen=True)
class RingExtents:
    """Fractions of a full circle covered by the two timer rings."""

    outer_fraction: float
    inner_fraction: float
    inner_color_kind: RingColorKind

    @property
    def outer_sweep(self) -> float:
        return 2.0 * math.pi * self.outer_fraction

    @property
    def inner_sweep(self) -> float:
        return 2.0 * math.pi * self.inner_fraction
