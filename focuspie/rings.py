"""Concentric progress rings drawn on the timer face.

The outer ring shows the remaining budget of the selected task. The inner
ring shows the current countdown. During work it is drawn at the same
angular rate as the task ring, so a whole session spans at most
``mode_duration / task_total_seconds`` of the circle and sits nested inside
the remaining task budget. During breaks it is a plain fraction of the
break length.
"""

from __future__ import annotations

from .types import RingColorKind, RingExtents, TaskSnapshot, TimerSnapshot


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def task_ring_fraction(task: TaskSnapshot) -> float:
    """Remaining task budget as a fraction of its goal."""
    total = task.total_seconds
    if total <= 0:
        return 0.0
    return _clamp_unit(task.time_left_seconds / total)


def mode_fraction(timer: TimerSnapshot) -> float:
    """Remaining countdown as a fraction of the mode duration."""
    if timer.mode_duration <= 0:
        return 0.0
    return _clamp_unit(timer.time_left_in_mode / timer.mode_duration)


def compose_rings(timer: TimerSnapshot, task: TaskSnapshot) -> RingExtents:
    """Return the angular extents of both rings as fractions of a circle."""
    outer = task_ring_fraction(task)
    fraction = mode_fraction(timer)

    if timer.mode.is_break:
        return RingExtents(
            outer_fraction=outer,
            inner_fraction=fraction,
            inner_color_kind=RingColorKind.BREAK,
        )

    # Idle previews the next work session with the same scaling.
    total = task.total_seconds
    scale = min(1.0, timer.mode_duration / total) if total > 0 else 1.0
    return RingExtents(
        outer_fraction=outer,
        inner_fraction=_clamp_unit(fraction * scale),
        inner_color_kind=RingColorKind.WORK,
    )

