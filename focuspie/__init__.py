"""FocusPie: a workday pie chart of task budgets driven by a Pomodoro timer.

Built with PySide6 and QML. Tasks split the workday into slices; working on
a task with the timer fills its slice minute by minute.
"""

from .chart import PieChartModel
from .errors import TaskValidationError
from .layout import CENTER, center_label, chart_geometry, hit_test, layout_slices
from .ledger import TaskLedger
from .qml import FOCUSPIE_QML
from .rings import compose_rings
from .session import DisplayClock, FocusSession
from .settings import AppSettings
from .storage import TaskStore
from .timer import AutoPauseGuard, PomodoroTimer, format_clock, format_task_left
from .types import (
    ChartGeometry,
    Note,
    RingColorKind,
    RingExtents,
    Slice,
    Task,
    TaskSnapshot,
    TimerMode,
    TimerSettings,
    TimerSnapshot,
)
from .ui import create_focuspie_window, main

__all__ = [
    "AppSettings",
    "AutoPauseGuard",
    "CENTER",
    "ChartGeometry",
    "DisplayClock",
    "FOCUSPIE_QML",
    "FocusSession",
    "Note",
    "PieChartModel",
    "PomodoroTimer",
    "RingColorKind",
    "RingExtents",
    "Slice",
    "Task",
    "TaskLedger",
    "TaskSnapshot",
    "TaskStore",
    "TaskValidationError",
    "TimerMode",
    "TimerSettings",
    "TimerSnapshot",
    "center_label",
    "chart_geometry",
    "compose_rings",
    "create_focuspie_window",
    "format_clock",
    "format_task_left",
    "hit_test",
    "layout_slices",
    "main",
]
