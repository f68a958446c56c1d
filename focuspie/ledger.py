"""Task ledger: the workday's tasks, their budgets, progress and notes.

The ledger is a Qt list model so QML views can bind to it directly. It has
no timing concerns; the Pomodoro timer credits progress through
``creditProgress`` and reads the selection through ``currentTaskId``.
"""

from __future__ import annotations

import math
import uuid
from typing import Any, Callable, Dict, List, Optional, Sequence

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    Property,
    Qt,
    Signal,
    Slot,
)

from .constants import CHART_PALETTE, SEED_TASKS, TOTAL_PALETTE_SIZE
from .errors import TaskValidationError
from .notes import NotesMixin, note_from_dict, note_to_dict
from .types import Task


def stable_partition(tasks: Sequence[Task]) -> List[Task]:
    """Priority tasks first, relative order kept within each group."""
    return [t for t in tasks if t.is_priority] + [t for t in tasks if not t.is_priority]


def chart_color(chart_index: int) -> str:
    return CHART_PALETTE[(chart_index - 1) % TOTAL_PALETTE_SIZE]


def whole_minutes(value: Any) -> Optional[int]:
    """Saved minute count as an int, or None when it is not a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


class TaskLedger(NotesMixin, QAbstractListModel):
    """Qt model owning the task list, the selection and the seed-data flag."""

    IdRole = Qt.UserRole + 1
    NameRole = Qt.UserRole + 2
    GoalTimeRole = Qt.UserRole + 3
    ProgressRole = Qt.UserRole + 4
    ChartIndexRole = Qt.UserRole + 5
    ColorRole = Qt.UserRole + 6
    PriorityRole = Qt.UserRole + 7
    NoteCountRole = Qt.UserRole + 8
    TimeLeftRole = Qt.UserRole + 9
    CurrentRole = Qt.UserRole + 10
    GoalAchievedRole = Qt.UserRole + 11

    tasksChanged = Signal()
    taskCountChanged = Signal()
    currentTaskChanged = Signal()
    seedStateChanged = Signal()
    workdayChanged = Signal()
    notesChanged = Signal(str, arguments=["taskId"])
    progressCredited = Signal(str, int, arguments=["taskId", "minutes"])
    taskDeleted = Signal(str, arguments=["taskId"])
    progressReset = Signal()
    errorOccurred = Signal(str)

    def __init__(
        self,
        workday_minutes: int = 8 * 60,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        super().__init__()
        self._tasks: List[Task] = []
        self._current_task_id: Optional[str] = None
        self._is_seed_data = False
        self._next_chart_index = 1
        self._workday_minutes = workday_minutes
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    # --- Qt model overrides -------------------------------------------------
    def rowCount(self, parent: Optional[QModelIndex] = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._tasks)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._tasks)):
            return None

        task = self._tasks[index.row()]
        if role == self.IdRole:
            return task.id
        if role == self.NameRole:
            return task.name
        if role == self.GoalTimeRole:
            return task.goal_time_minutes
        if role == self.ProgressRole:
            return task.progress_minutes
        if role == self.ChartIndexRole:
            return task.chart_index
        if role == self.ColorRole:
            return chart_color(task.chart_index)
        if role == self.PriorityRole:
            return task.is_priority
        if role == self.NoteCountRole:
            return len(task.notes)
        if role == self.TimeLeftRole:
            return task.remaining_minutes
        if role == self.CurrentRole:
            return task.id == self._current_task_id
        if role == self.GoalAchievedRole:
            return task.progress_minutes >= task.goal_time_minutes
        return None

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return {
            self.IdRole: b"taskId",
            self.NameRole: b"name",
            self.GoalTimeRole: b"goalTimeMinutes",
            self.ProgressRole: b"progressMinutes",
            self.ChartIndexRole: b"chartIndex",
            self.ColorRole: b"color",
            self.PriorityRole: b"isPriority",
            self.NoteCountRole: b"noteCount",
            self.TimeLeftRole: b"timeLeftMinutes",
            self.CurrentRole: b"isCurrent",
            self.GoalAchievedRole: b"goalAchieved",
        }

    # --- Properties exposed to QML -----------------------------------------
    @Property(int, notify=taskCountChanged)
    def taskCount(self) -> int:
        return len(self._tasks)

    @Property(str, notify=currentTaskChanged)
    def currentTaskId(self) -> str:
        return self._current_task_id or ""

    @Property(bool, notify=seedStateChanged)
    def isSeedData(self) -> bool:
        return self._is_seed_data

    @Property(bool, notify=seedStateChanged)
    def hasNonSeedTasks(self) -> bool:
        return bool(self._tasks) and not self._is_seed_data

    @Property(int, notify=workdayChanged)
    def workdayMinutes(self) -> int:
        return self._workday_minutes

    @workdayMinutes.setter  # type: ignore[no-redef]
    def workdayMinutes(self, value: int) -> None:
        self.setWorkdayMinutes(value)

    @Slot(int)
    def setWorkdayMinutes(self, minutes: int) -> None:
        """Change the budget used by future validations; existing tasks are not re-checked."""
        if minutes <= 0 or minutes == self._workday_minutes:
            return
        self._workday_minutes = minutes
        self.workdayChanged.emit()

    @Property(int, notify=tasksChanged)
    def totalGoalMinutes(self) -> int:
        return sum(task.goal_time_minutes for task in self._tasks)

    # --- Lookup -------------------------------------------------------------
    def tasks(self) -> List[Task]:
        """Return the ordered task list (a shallow copy)."""
        return list(self._tasks)

    def _find_task(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _row_of(self, task_id: str) -> int:
        for row, task in enumerate(self._tasks):
            if task.id == task_id:
                return row
        return -1

    def getTask(self, task_id: str) -> Optional[Task]:
        return self._find_task(task_id)

    def currentTask(self) -> Optional[Task]:
        if self._current_task_id is None:
            return None
        return self._find_task(self._current_task_id)

    @Slot(str, result=int)
    def remainingMinutes(self, task_id: str) -> int:
        """Unspent budget of a task, or 0 for unknown ids."""
        task = self._find_task(task_id)
        return task.remaining_minutes if task is not None else 0

    # --- Change notification helpers ---------------------------------------
    def _emit_row_changed(self, task_id: str, roles: Optional[List[int]] = None) -> None:
        row = self._row_of(task_id)
        if row < 0:
            return
        idx = self.index(row, 0)
        if roles:
            self.dataChanged.emit(idx, idx, roles)
        else:
            self.dataChanged.emit(idx, idx)

    def _mark_dirty(self) -> None:
        self.tasksChanged.emit()

    def _set_seed_data(self, value: bool) -> None:
        if self._is_seed_data != value:
            self._is_seed_data = value
            self.seedStateChanged.emit()

    def _repartition(self) -> None:
        ordered = stable_partition(self._tasks)
        if all(a is b for a, b in zip(ordered, self._tasks)):
            return
        self.layoutAboutToBeChanged.emit()
        self._tasks = ordered
        self.layoutChanged.emit()

    def _take_chart_index(self) -> int:
        chart_index = self._next_chart_index
        self._next_chart_index = chart_index % TOTAL_PALETTE_SIZE + 1
        return chart_index

    # --- Validation ---------------------------------------------------------
    def _check_task_fields(self, name: str, goal_minutes: int, exclude_id: str = "") -> None:
        """Raise TaskValidationError if the fields cannot be saved."""
        if not name.strip():
            raise TaskValidationError("Task name cannot be empty")

        # Seed tasks are about to be discarded by an add, so they do not count.
        others = [] if (self._is_seed_data and not exclude_id) else [
            task for task in self._tasks if task.id != exclude_id
        ]

        lowered = name.strip().lower()
        if any(task.name.strip().lower() == lowered for task in others):
            raise TaskValidationError("A task with this name already exists")

        if goal_minutes <= 0:
            raise TaskValidationError("Task time must be greater than 0")

        new_total = sum(task.goal_time_minutes for task in others) + goal_minutes
        if new_total > self._workday_minutes:
            over = new_total - self._workday_minutes
            hours = f"{self._workday_minutes / 60:g}"
            raise TaskValidationError(
                f"This would exceed your {hours}-hour workday by {over // 60}h {over % 60}m"
            )

    @Slot(str, int, str, result=str)
    def validateTask(self, name: str, goal_minutes: int, exclude_id: str = "") -> str:
        """Return the validation message for the fields, or "" if they are valid."""
        try:
            self._check_task_fields(name, goal_minutes, exclude_id)
        except TaskValidationError as e:
            return str(e)
        return ""

    # --- Mutations ----------------------------------------------------------
    @Slot()
    def installSeedTasks(self) -> None:
        """Replace the task list with the demo set."""
        self.beginResetModel()
        self._tasks = [
            Task(
                id=seed["id"],
                name=seed["name"],
                goal_time_minutes=seed["goal_time_minutes"],
                chart_index=position,
                is_priority=seed["is_priority"],
            )
            for position, seed in enumerate(SEED_TASKS, start=1)
        ]
        self._tasks = stable_partition(self._tasks)
        self.endResetModel()
        self._next_chart_index = len(SEED_TASKS) % TOTAL_PALETTE_SIZE + 1
        self._set_seed_data(True)
        self._set_current(None)
        self.taskCountChanged.emit()
        self._mark_dirty()

    @Slot(str, int, bool, result=str)
    def addTask(self, name: str, goal_minutes: int, is_priority: bool = False) -> str:
        """Add a task and return its id, or "" when validation fails.

        Adding to the untouched demo set replaces the whole set with the new
        task instead of appending to it.
        """
        try:
            self._check_task_fields(name, goal_minutes)
        except TaskValidationError as e:
            self.errorOccurred.emit(str(e))
            return ""

        task = Task(
            id=self._id_factory(),
            name=name.strip(),
            goal_time_minutes=int(goal_minutes),
            chart_index=self._take_chart_index(),
            is_priority=bool(is_priority),
        )

        if self._is_seed_data:
            discarded = [seed.id for seed in self._tasks]
            self.beginResetModel()
            self._tasks = [task]
            self.endResetModel()
            self._set_seed_data(False)
            self._set_current(None)
            for seed_id in discarded:
                self.taskDeleted.emit(seed_id)
        else:
            row = len(self._tasks)
            self.beginInsertRows(QModelIndex(), row, row)
            self._tasks.append(task)
            self.endInsertRows()
            self._repartition()
            self.seedStateChanged.emit()

        self.taskCountChanged.emit()
        self._mark_dirty()
        return task.id

    @Slot(str, str, int, bool, result=bool)
    def updateTask(self, task_id: str, name: str, goal_minutes: int, is_priority: bool) -> bool:
        """Replace a task's name, budget and priority. Progress and chart index are kept."""
        task = self._find_task(task_id)
        if task is None:
            return False

        try:
            self._check_task_fields(name, goal_minutes, exclude_id=task_id)
        except TaskValidationError as e:
            self.errorOccurred.emit(str(e))
            return False

        task.name = name.strip()
        task.goal_time_minutes = int(goal_minutes)
        task.is_priority = bool(is_priority)
        self._emit_row_changed(task_id)
        self._repartition()
        self._set_seed_data(False)
        self._mark_dirty()
        return True

    @Slot(str, result=bool)
    def deleteTask(self, task_id: str) -> bool:
        row = self._row_of(task_id)
        if row < 0:
            return False

        self.beginRemoveRows(QModelIndex(), row, row)
        self._tasks.pop(row)
        self.endRemoveRows()

        if self._current_task_id == task_id:
            self._set_current(None)
        self._set_seed_data(False)
        self.taskCountChanged.emit()
        self.taskDeleted.emit(task_id)
        self._mark_dirty()
        return True

    @Slot(str, int, result=bool)
    def creditProgress(self, task_id: str, minutes: int) -> bool:
        """Add minutes to a task's progress. Unknown ids are ignored.

        Progress is applied as a delta and is never clamped to the goal.
        """
        task = self._find_task(task_id)
        if task is None:
            return False

        task.progress_minutes = max(0, task.progress_minutes + int(minutes))
        self._emit_row_changed(task_id, [self.ProgressRole, self.TimeLeftRole, self.GoalAchievedRole])
        self.progressCredited.emit(task_id, int(minutes))
        self._mark_dirty()
        return True

    @Slot()
    def resetProgress(self) -> None:
        """Zero the progress of every task."""
        if not self._tasks:
            return
        for task in self._tasks:
            task.progress_minutes = 0
        first = self.index(0, 0)
        last = self.index(len(self._tasks) - 1, 0)
        self.dataChanged.emit(first, last, [self.ProgressRole, self.TimeLeftRole, self.GoalAchievedRole])
        self.progressReset.emit()
        self._mark_dirty()

    @Slot(str)
    def selectTask(self, task_id: str) -> None:
        """Select the task receiving timer credit; "" clears the selection."""
        if not task_id:
            self._set_current(None)
            return
        if self._find_task(task_id) is None:
            return
        self._set_current(task_id)

    def _set_current(self, task_id: Optional[str]) -> None:
        if self._current_task_id == task_id:
            return
        previous = self._current_task_id
        self._current_task_id = task_id
        for changed in (previous, task_id):
            if changed:
                self._emit_row_changed(changed, [self.CurrentRole])
        self.currentTaskChanged.emit()

    # --- Serialization ------------------------------------------------------
    def _task_to_dict(self, task: Task) -> Dict[str, Any]:
        return {
            "id": task.id,
            "name": task.name,
            "goalTimeMinutes": task.goal_time_minutes,
            "progressMinutes": task.progress_minutes,
            "chartIndex": task.chart_index,
            "isPriority": task.is_priority,
            "notes": [note_to_dict(note) for note in task.notes],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the task collection for saving."""
        return {
            "tasks": [self._task_to_dict(task) for task in self._tasks],
            "isSeedData": self._is_seed_data,
            "nextChartIndex": self._next_chart_index,
        }

    def _task_from_dict(self, data: Any, seen_ids: set) -> Optional[Task]:
        if not isinstance(data, dict):
            return None

        name = data.get("name")
        goal = data.get("goalTimeMinutes")
        if not isinstance(name, str) or not name.strip():
            return None
        goal = whole_minutes(goal)
        if goal is None or goal <= 0:
            return None

        task_id = data.get("id")
        if not isinstance(task_id, str) or not task_id or task_id in seen_ids:
            task_id = self._id_factory()
        seen_ids.add(task_id)

        progress = whole_minutes(data.get("progressMinutes", 0)) or 0

        chart_index = data.get("chartIndex")
        if (
            isinstance(chart_index, bool)
            or not isinstance(chart_index, int)
            or not 1 <= chart_index <= TOTAL_PALETTE_SIZE
        ):
            chart_index = self._take_chart_index()

        notes_data = data.get("notes", [])
        notes = []
        if isinstance(notes_data, list):
            notes = [note for note in (note_from_dict(n) for n in notes_data) if note is not None]

        return Task(
            id=task_id,
            name=name.strip(),
            goal_time_minutes=goal,
            progress_minutes=max(0, progress),
            chart_index=chart_index,
            is_priority=data.get("isPriority") is True,
            notes=notes,
        )

    def from_dict(self, data: Any) -> None:
        """Load tasks from saved data, dropping malformed entries.

        Accepts either the ``to_dict`` payload or a bare list of tasks.

        Raises:
            ValueError: If the payload is not a task collection at all.
        """
        if isinstance(data, list):
            data = {"tasks": data}
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            raise ValueError("task data is not a task collection")

        seen_ids: set = set()
        loaded = [
            task
            for task in (self._task_from_dict(entry, seen_ids) for entry in data["tasks"])
            if task is not None
        ]

        next_index = data.get("nextChartIndex")
        if isinstance(next_index, bool) or not isinstance(next_index, int) or not (
            1 <= next_index <= TOTAL_PALETTE_SIZE
        ):
            next_index = len(loaded) % TOTAL_PALETTE_SIZE + 1

        self.beginResetModel()
        self._tasks = stable_partition(loaded)
        self.endResetModel()
        self._next_chart_index = next_index
        self._set_seed_data(data.get("isSeedData") is True and bool(loaded))
        self.seedStateChanged.emit()
        if self._current_task_id is not None and self._find_task(self._current_task_id) is None:
            self._set_current(None)
        self.taskCountChanged.emit()
        self.tasksChanged.emit()
