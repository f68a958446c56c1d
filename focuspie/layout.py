"""Radial layout and hit-testing for the workday pie chart.

The full circle represents the workday. Tasks are laid out clockwise from
12 o'clock in list order, each taking a share of the circle proportional to
its goal time. Everything here is a pure function of its inputs so the
rendering layer can redraw from the returned geometry at will.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple, Union

from .constants import (
    FULL_CIRCLE,
    HOVER_PULL_DISTANCE,
    INNER_RADIUS_RATIO,
    LARGE_CHART_PADDING,
    LARGE_CHART_WIDTH,
    SMALL_CHART_PADDING,
    START_ANGLE,
)
from .types import ChartGeometry, Slice, Task

CENTER = "center"

HitResult = Union[int, None, str]


def chart_geometry(width: float, height: float) -> ChartGeometry:
    """Return the donut placement for a chart of the given pixel size."""
    center_x = width / 2.0
    center_y = height / 2.0
    padding = LARGE_CHART_PADDING if width > LARGE_CHART_WIDTH else SMALL_CHART_PADDING
    outer_radius = max(0.0, min(center_x, center_y) - padding)
    return ChartGeometry(
        center_x=center_x,
        center_y=center_y,
        outer_radius=outer_radius,
        inner_radius=outer_radius * INNER_RADIUS_RATIO,
    )


def layout_slices(tasks: Sequence[Task], workday_minutes: int) -> List[Slice]:
    """Compute one slice per task plus an unallocated remainder slice.

    Args:
        tasks: Tasks in display order.
        workday_minutes: Total budget represented by the full circle.

    Raises:
        ValueError: If ``workday_minutes`` is not positive.
    """
    if workday_minutes <= 0:
        raise ValueError(f"workday_minutes must be positive, got {workday_minutes}")

    slices: List[Slice] = []
    start = START_ANGLE
    allocated = 0
    for i, task in enumerate(tasks):
        sweep = FULL_CIRCLE * task.goal_time_minutes / workday_minutes
        if task.goal_time_minutes > 0:
            ratio = min(1.0, task.progress_minutes / task.goal_time_minutes)
        else:
            ratio = 0.0
        slices.append(
            Slice(
                index=i,
                task_id=task.id,
                start_angle=start,
                sweep=sweep,
                progress_sweep=sweep * max(0.0, ratio),
                chart_index=task.chart_index,
            )
        )
        start += sweep
        allocated += task.goal_time_minutes

    if allocated < workday_minutes:
        remainder = FULL_CIRCLE * (workday_minutes - allocated) / workday_minutes
        slices.append(Slice(index=None, task_id="", start_angle=start, sweep=remainder))
    return slices


def normalize_angle(angle: float) -> float:
    """Map an angle into ``[START_ANGLE, START_ANGLE + 2*pi)``."""
    normalized = (angle - START_ANGLE) % FULL_CIRCLE
    return START_ANGLE + normalized


def hit_test(
    point: Tuple[float, float],
    slices: Sequence[Slice],
    geometry: ChartGeometry,
) -> HitResult:
    """Resolve a point to a task index, ``CENTER`` or ``None``.

    Points inside the inner radius belong to the center control. Points
    outside the donut band, or on the unallocated slice, hit nothing.
    Hover offsets are ignored; hit-testing always uses the resting layout.
    """
    dx = point[0] - geometry.center_x
    dy = point[1] - geometry.center_y
    distance = math.hypot(dx, dy)
    if distance < geometry.inner_radius:
        return CENTER
    if distance > geometry.outer_radius:
        return None

    angle = normalize_angle(math.atan2(dy, dx))
    for slice_ in slices:
        if slice_.contains_angle(angle):
            return slice_.index
    return None


def hover_offset(slice_: Slice, distance: float = HOVER_PULL_DISTANCE) -> Tuple[float, float]:
    """Translation that pulls a hovered slice outward along its bisector."""
    return (math.cos(slice_.mid_angle) * distance, math.sin(slice_.mid_angle) * distance)


def slice_anchor(slice_: Slice, geometry: ChartGeometry) -> Tuple[float, float]:
    """Point at the angular midpoint and mid-radius of a slice."""
    radius = (geometry.inner_radius + geometry.outer_radius) / 2.0
    return (
        geometry.center_x + math.cos(slice_.mid_angle) * radius,
        geometry.center_y + math.sin(slice_.mid_angle) * radius,
    )


def format_budget(minutes: int) -> str:
    """Format a minute count as ``"2h 15m"``."""
    minutes = max(0, int(minutes))
    return f"{minutes // 60}h {minutes % 60}m"


def center_label(
    tasks: Sequence[Task],
    workday_minutes: int,
    hovered_index: Optional[int] = None,
) -> Tuple[str, str]:
    """Title and detail line drawn inside the center control."""
    if not tasks:
        return "No tasks yet", "Click to add tasks"
    if hovered_index is not None and 0 <= hovered_index < len(tasks):
        task = tasks[hovered_index]
        return task.name, format_budget(task.goal_time_minutes)
    total = sum(task.goal_time_minutes for task in tasks)
    workday_hours = workday_minutes // 60
    return "Today", f"{format_budget(total)} / {workday_hours}h day"
