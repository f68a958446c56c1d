"""Constants and presets for FocusPie."""

import math
from typing import Any, Dict, List, Tuple


# Task colors, picked by ``Task.chart_index`` (1-based).
CHART_PALETTE: Tuple[str, ...] = (
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#14b8a6",
    "#3b82f6",
    "#6366f1",
    "#a855f7",
    "#ec4899",
    "#64748b",
)
TOTAL_PALETTE_SIZE = len(CHART_PALETTE)

UNALLOCATED_COLOR = "#f1f5f9"
WORK_RING_COLOR = "#3b82f6"
BREAK_RING_COLOR = "#22c55e"
TASK_RING_COLOR = "#ef4444"


# Demo tasks installed on first launch.
SEED_TASKS: List[Dict[str, Any]] = [
    {"id": "seed-deep-work", "name": "Deep work", "goal_time_minutes": 180, "is_priority": True},
    {"id": "seed-email", "name": "Email & admin", "goal_time_minutes": 60, "is_priority": False},
    {"id": "seed-learning", "name": "Learning", "goal_time_minutes": 90, "is_priority": False},
    {"id": "seed-exercise", "name": "Exercise", "goal_time_minutes": 45, "is_priority": False},
]


# Radial layout
START_ANGLE = -math.pi / 2  # 12 o'clock, clockwise in screen coordinates
FULL_CIRCLE = 2.0 * math.pi
INNER_RADIUS_RATIO = 0.6
HOVER_PULL_DISTANCE = 10.0
LARGE_CHART_WIDTH = 350.0
LARGE_CHART_PADDING = 25.0
SMALL_CHART_PADDING = 15.0


# Settings: key -> (default, minimum, maximum)
TIMER_SETTING_BOUNDS: Dict[str, Tuple[int, int, int]] = {
    "workDuration": (25, 1, 60),
    "shortBreakDuration": (5, 1, 20),
    "longBreakDuration": (15, 5, 30),
    "cyclesBeforeLongBreak": (4, 1, 10),
}
WORKDAY_HOURS_BOUNDS: Tuple[int, int, int] = (8, 1, 24)
DEFAULT_AUTO_PAUSE = False
DEFAULT_ENABLE_NOTIFICATIONS = True


# Persistence
SETTINGS_ORGANIZATION = "FocusPie"
SETTINGS_APPLICATION = "FocusPie"
TASKS_KEY = "tasks"
CURRENT_TASK_KEY = "currentTaskId"
TASK_TIME_LEFT_KEY = "taskTimeLeft"
COMMIT_DEBOUNCE_MS = 500

TICK_INTERVAL_MS = 1000
