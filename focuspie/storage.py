"""Persistence of the task ledger and per-task countdowns.

Three records are stored under separate QSettings keys, each as a JSON
string: the task collection, the selected task id and the remaining
countdown of every task. Writes are batched: callers schedule a commit and
a single-shot timer flushes everything once the burst of changes settles.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, TYPE_CHECKING

from PySide6.QtCore import Property, QObject, QSettings, QTimer, Signal, Slot

from .constants import (
    COMMIT_DEBOUNCE_MS,
    CURRENT_TASK_KEY,
    SETTINGS_APPLICATION,
    SETTINGS_ORGANIZATION,
    TASK_TIME_LEFT_KEY,
    TASKS_KEY,
)

if TYPE_CHECKING:
    from .ledger import TaskLedger


class TaskStore(QObject):
    """Load and save ledger state through QSettings."""

    committed = Signal()
    pendingChanged = Signal()

    def __init__(self, settings: Optional[QSettings] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._settings = settings if settings is not None else QSettings(
            SETTINGS_ORGANIZATION, SETTINGS_APPLICATION
        )
        self._ledger: Optional["TaskLedger"] = None
        self._task_time_left: Dict[str, int] = {}

        self._commit_timer = QTimer(self)
        self._commit_timer.setSingleShot(True)
        self._commit_timer.setInterval(COMMIT_DEBOUNCE_MS)
        self._commit_timer.timeout.connect(self.commit)

    @Property(bool, notify=pendingChanged)
    def isPending(self) -> bool:
        return self._commit_timer.isActive()

    def _decode(self, key: str) -> Any:
        """Return the JSON value stored under key, or None if absent or unreadable."""
        raw = self._settings.value(key)
        if raw is None:
            return None
        if not isinstance(raw, str):
            print(f"Ignoring saved {key}: expected a JSON string")
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            print(f"Ignoring saved {key}: {e}")
            return None

    def load(self, ledger: "TaskLedger") -> None:
        """Restore the ledger, falling back to the demo set when nothing usable is saved."""
        self._ledger = ledger

        data = self._decode(TASKS_KEY)
        restored = False
        if data is not None:
            try:
                ledger.from_dict(data)
                restored = True
            except ValueError as e:
                print(f"Ignoring saved tasks: {e}")
        if not restored:
            ledger.installSeedTasks()

        current = self._decode(CURRENT_TASK_KEY)
        if isinstance(current, str) and current:
            # Unknown ids are ignored by the ledger.
            ledger.selectTask(current)

        self._task_time_left = {}
        times = self._decode(TASK_TIME_LEFT_KEY)
        if isinstance(times, dict):
            for task_id, seconds in times.items():
                if isinstance(seconds, int) and not isinstance(seconds, bool):
                    self._task_time_left[task_id] = seconds
        elif times is not None:
            print(f"Ignoring saved {TASK_TIME_LEFT_KEY}: expected an object")

    # --- Task countdowns ----------------------------------------------------
    def saved_task_time_left(self, task_id: str) -> Optional[int]:
        return self._task_time_left.get(task_id)

    def remember_task_time_left(self, task_id: str, seconds: int) -> None:
        if task_id:
            self._task_time_left[task_id] = int(seconds)

    @Slot(str)
    def forget_task_time_left(self, task_id: str) -> None:
        self._task_time_left.pop(task_id, None)

    @Slot()
    def forget_all_task_time_left(self) -> None:
        self._task_time_left.clear()

    # --- Writing ------------------------------------------------------------
    @Slot()
    def scheduleCommit(self) -> None:
        """(Re)start the debounce timer; the write happens when it fires."""
        was_pending = self._commit_timer.isActive()
        self._commit_timer.start()
        if not was_pending:
            self.pendingChanged.emit()

    @Slot()
    def commit(self) -> None:
        """Write all records now."""
        was_pending = self._commit_timer.isActive()
        self._commit_timer.stop()
        if was_pending:
            self.pendingChanged.emit()
        if self._ledger is None:
            return

        self._settings.setValue(TASKS_KEY, json.dumps(self._ledger.to_dict()))
        current = self._ledger.currentTaskId
        if current:
            self._settings.setValue(CURRENT_TASK_KEY, json.dumps(current))
        else:
            self._settings.remove(CURRENT_TASK_KEY)
        self._settings.setValue(TASK_TIME_LEFT_KEY, json.dumps(self._task_time_left))
        self._settings.sync()
        self.committed.emit()
