"""Pointer bridge between the pie chart canvas and the ledger/timer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from PySide6.QtCore import Property, QObject, Signal, Slot

from .constants import UNALLOCATED_COLOR
from .layout import CENTER, center_label, chart_geometry, hit_test, hover_offset, layout_slices
from .ledger import TaskLedger, chart_color
from .timer import PomodoroTimer
from .types import ChartGeometry, Slice


class PieChartModel(QObject):
    """Expose slice geometry to QML and turn clicks into task selection."""

    slicesChanged = Signal()
    hoverChanged = Signal()
    geometryChanged = Signal()
    centerActivated = Signal()
    taskActivated = Signal(str, arguments=["taskId"])

    def __init__(self, ledger: TaskLedger, timer: PomodoroTimer, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._ledger = ledger
        self._timer = timer
        self._geometry: ChartGeometry = chart_geometry(0.0, 0.0)
        self._slices: List[Slice] = []
        self._hovered_index: Optional[int] = None
        self._center_hovered = False

        self._ledger.tasksChanged.connect(self._relayout)
        self._ledger.workdayChanged.connect(self._relayout)
        self._relayout()

    def _relayout(self) -> None:
        self._slices = layout_slices(self._ledger.tasks(), self._ledger.workdayMinutes)
        if self._hovered_index is not None and self._hovered_index >= self._ledger.taskCount:
            self._hovered_index = None
        self.slicesChanged.emit()
        self.hoverChanged.emit()

    @property
    def geometry(self) -> ChartGeometry:
        return self._geometry

    def layout(self) -> List[Slice]:
        return list(self._slices)

    # --- Geometry -----------------------------------------------------------
    @Slot(float, float)
    def setSize(self, width: float, height: float) -> None:
        geometry = chart_geometry(width, height)
        if geometry == self._geometry:
            return
        self._geometry = geometry
        self.geometryChanged.emit()
        self.slicesChanged.emit()

    @Property(float, notify=geometryChanged)
    def centerX(self) -> float:
        return self._geometry.center_x

    @Property(float, notify=geometryChanged)
    def centerY(self) -> float:
        return self._geometry.center_y

    @Property(float, notify=geometryChanged)
    def outerRadius(self) -> float:
        return self._geometry.outer_radius

    @Property(float, notify=geometryChanged)
    def innerRadius(self) -> float:
        return self._geometry.inner_radius

    @Property("QVariantList", notify=slicesChanged)
    def slices(self) -> List[Dict[str, Any]]:
        """Slices as plain dicts for the canvas; the hovered one carries its pull-out offset."""
        result = []
        for slice_ in self._slices:
            hovered = slice_.index is not None and slice_.index == self._hovered_index
            offset_x, offset_y = hover_offset(slice_) if hovered else (0.0, 0.0)
            result.append(
                {
                    "index": -1 if slice_.index is None else slice_.index,
                    "taskId": slice_.task_id,
                    "startAngle": slice_.start_angle,
                    "sweep": slice_.sweep,
                    "progressSweep": slice_.progress_sweep,
                    "color": UNALLOCATED_COLOR if slice_.is_unallocated else chart_color(slice_.chart_index),
                    "hovered": hovered,
                    "offsetX": offset_x,
                    "offsetY": offset_y,
                }
            )
        return result

    # --- Hover --------------------------------------------------------------
    @Property(int, notify=hoverChanged)
    def hoveredIndex(self) -> int:
        return -1 if self._hovered_index is None else self._hovered_index

    @Property(bool, notify=hoverChanged)
    def centerHovered(self) -> bool:
        return self._center_hovered

    @Property(str, notify=hoverChanged)
    def centerTitle(self) -> str:
        return center_label(self._ledger.tasks(), self._ledger.workdayMinutes, self._hovered_index)[0]

    @Property(str, notify=hoverChanged)
    def centerDetail(self) -> str:
        return center_label(self._ledger.tasks(), self._ledger.workdayMinutes, self._hovered_index)[1]

    @Slot(float, float)
    def hoverAt(self, x: float, y: float) -> None:
        hit = hit_test((x, y), self._slices, self._geometry)
        index = hit if isinstance(hit, int) else None
        center = hit == CENTER
        if index == self._hovered_index and center == self._center_hovered:
            return
        self._hovered_index = index
        self._center_hovered = center
        self.hoverChanged.emit()
        self.slicesChanged.emit()

    @Slot()
    def clearHover(self) -> None:
        if self._hovered_index is None and not self._center_hovered:
            return
        self._hovered_index = None
        self._center_hovered = False
        self.hoverChanged.emit()
        self.slicesChanged.emit()

    # --- Click --------------------------------------------------------------
    @Slot(float, float, result=bool)
    def clickAt(self, x: float, y: float) -> bool:
        """Handle a click: the center opens task management, a slice starts work on its task."""
        hit = hit_test((x, y), self._slices, self._geometry)
        if hit == CENTER:
            self.centerActivated.emit()
            return True
        if not isinstance(hit, int):
            return False

        tasks = self._ledger.tasks()
        # The layout may be stale if the list changed since the last relayout.
        if not 0 <= hit < len(tasks) or tasks[hit].id != self._slices[hit].task_id:
            return False

        task_id = tasks[hit].id
        self._ledger.selectTask(task_id)
        self._timer.startWork()
        self.taskActivated.emit(task_id)
        return True
