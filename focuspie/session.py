"""Application session: wires the ledger, timer, settings and storage together."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from PySide6.QtCore import Property, QObject, QSettings, QTimer, Signal, Slot

from .chart import PieChartModel
from .constants import SETTINGS_APPLICATION, SETTINGS_ORGANIZATION, TICK_INTERVAL_MS
from .ledger import TaskLedger
from .rings import compose_rings
from .settings import AppSettings
from .storage import TaskStore
from .timer import AutoPauseGuard, PomodoroTimer, resolve_task_time_left
from .types import RingExtents, TaskSnapshot, TimerMode


class DisplayClock(QObject):
    """Wall-clock ``HH:MM`` label refreshed by its own timer."""

    timeChanged = Signal()

    def __init__(self, now: Optional[Callable[[], datetime]] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._now = now or datetime.now
        self._text = ""
        self._timer = QTimer(self)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.timeout.connect(self.refresh)
        self.refresh()

    @Property(str, notify=timeChanged)
    def currentTime(self) -> str:
        return self._text

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @Slot()
    def refresh(self) -> None:
        text = self._now().strftime("%H:%M")
        if text != self._text:
            self._text = text
            self.timeChanged.emit()

    def start(self) -> None:
        self.refresh()
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()


class FocusSession(QObject):
    """Owns every collaborator of one app window.

    The timer and clock only tick between ``activate()`` and
    ``deactivate()``; deactivating also flushes pending writes.
    """

    ringsChanged = Signal()
    activeChanged = Signal()
    notificationRequested = Signal(str, str, arguments=["title", "message"])

    def __init__(
        self,
        qsettings: Optional[QSettings] = None,
        app: Optional[QObject] = None,
        now: Optional[Callable[[], datetime]] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        if qsettings is None:
            qsettings = QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)
        self._qsettings = qsettings
        self._active = False
        self._bound_task_id: Optional[str] = None

        self._app_settings = AppSettings(qsettings, self)
        self._ledger = TaskLedger(workday_minutes=self._app_settings.workdayMinutes)
        self._store = TaskStore(qsettings, self)
        self._timer = PomodoroTimer(
            self._app_settings.timer_settings(),
            credit_progress=self._ledger.creditProgress,
            current_task_id=self._current_task_id,
            parent=self,
        )
        self._auto_pause = AutoPauseGuard(self._timer, app)
        self._chart = PieChartModel(self._ledger, self._timer, self)
        self._clock = DisplayClock(now, self)

        self._store.load(self._ledger)
        self._bind_current_task()
        self._rings = self._compose()

        self._ledger.tasksChanged.connect(self._on_tasks_changed)
        self._ledger.currentTaskChanged.connect(self._on_current_task_changed)
        self._ledger.taskDeleted.connect(self._store.forget_task_time_left)
        self._ledger.progressReset.connect(self._on_progress_reset)
        self._timer.modeChanged.connect(self._schedule_commit)
        self._timer.runningChanged.connect(self._schedule_commit)
        self._timer.modeChanged.connect(self._update_rings)
        self._timer.timeLeftChanged.connect(self._update_rings)
        self._timer.taskTimeLeftChanged.connect(self._update_rings)
        self._timer.settingsChanged.connect(self._on_timer_settings_changed)
        self._timer.sessionFinished.connect(self._on_session_finished)
        self._app_settings.settingsChanged.connect(self._on_settings_changed)

    # --- Collaborators ------------------------------------------------------
    @Property(QObject, constant=True)
    def ledger(self) -> TaskLedger:
        return self._ledger

    @Property(QObject, constant=True)
    def timer(self) -> PomodoroTimer:
        return self._timer

    @Property(QObject, constant=True)
    def appSettings(self) -> AppSettings:
        return self._app_settings

    @Property(QObject, constant=True)
    def chart(self) -> PieChartModel:
        return self._chart

    @Property(QObject, constant=True)
    def clock(self) -> DisplayClock:
        return self._clock

    @property
    def store(self) -> TaskStore:
        return self._store

    # --- Lifetime -----------------------------------------------------------
    @Property(bool, notify=activeChanged)
    def isActive(self) -> bool:
        return self._active

    @Slot()
    def activate(self) -> None:
        if self._active:
            return
        self._active = True
        self._timer.activate()
        self._clock.start()
        self.activeChanged.emit()

    @Slot()
    def deactivate(self) -> None:
        """Stop ticking and write everything out."""
        if not self._active:
            return
        self._active = False
        self._timer.deactivate()
        self._clock.stop()
        self.commit()
        self.activeChanged.emit()

    @Slot()
    def commit(self) -> None:
        self._remember_countdown()
        self._store.commit()

    def _schedule_commit(self) -> None:
        self._remember_countdown()
        self._store.scheduleCommit()

    def _remember_countdown(self) -> None:
        if self._bound_task_id is not None:
            self._store.remember_task_time_left(self._bound_task_id, self._timer.taskTimeLeft)

    # --- Rings --------------------------------------------------------------
    @Property(float, notify=ringsChanged)
    def outerRingFraction(self) -> float:
        return self._rings.outer_fraction

    @Property(float, notify=ringsChanged)
    def innerRingFraction(self) -> float:
        return self._rings.inner_fraction

    @Property(str, notify=ringsChanged)
    def innerRingColorKind(self) -> str:
        return self._rings.inner_color_kind.value

    def rings(self) -> RingExtents:
        return self._rings

    def _compose(self) -> RingExtents:
        task = self._ledger.currentTask()
        if task is None:
            snapshot = TaskSnapshot(goal_time_minutes=0, time_left_seconds=0)
        else:
            snapshot = TaskSnapshot(
                goal_time_minutes=task.goal_time_minutes,
                time_left_seconds=self._timer.taskTimeLeft,
            )
        return compose_rings(self._timer.snapshot(), snapshot)

    def _update_rings(self) -> None:
        rings = self._compose()
        if rings != self._rings:
            self._rings = rings
            self.ringsChanged.emit()

    # --- Task binding -------------------------------------------------------
    def _current_task_id(self) -> Optional[str]:
        return self._ledger.currentTaskId or None

    def _bind_current_task(self) -> None:
        task = self._ledger.currentTask()
        if task is None:
            self._bound_task_id = None
            self._timer.setTaskTimeLeft(0)
            return
        self._bound_task_id = task.id
        self._timer.setTaskTimeLeft(
            resolve_task_time_left(
                task.goal_time_minutes,
                task.progress_minutes,
                self._store.saved_task_time_left(task.id),
            )
        )

    def _on_current_task_changed(self) -> None:
        self._remember_countdown()
        self._bind_current_task()
        self._update_rings()
        self._store.scheduleCommit()

    def _on_tasks_changed(self) -> None:
        task = self._ledger.currentTask()
        if task is not None and task.id == self._bound_task_id:
            # Budget edits and credits can invalidate the running countdown.
            self._timer.setTaskTimeLeft(
                resolve_task_time_left(
                    task.goal_time_minutes, task.progress_minutes, self._timer.taskTimeLeft
                )
            )
        self._update_rings()
        self._schedule_commit()

    def _on_progress_reset(self) -> None:
        self._store.forget_all_task_time_left()
        task = self._ledger.currentTask()
        if task is not None:
            self._timer.setTaskTimeLeft(resolve_task_time_left(task.goal_time_minutes, 0))

    @Slot()
    def resetProgress(self) -> None:
        self._ledger.resetProgress()

    # --- Settings -----------------------------------------------------------
    def _on_settings_changed(self) -> None:
        self._timer.applySettings(self._app_settings.timer_settings())
        self._ledger.setWorkdayMinutes(self._app_settings.workdayMinutes)
        self._update_rings()

    def _on_timer_settings_changed(self) -> None:
        if self._timer.autoPauseEnabled != self._app_settings.autoPause:
            self._app_settings.updateSettings({"autoPause": self._timer.autoPauseEnabled})

    def _on_session_finished(self, mode: str) -> None:
        if not self._app_settings.enableNotifications:
            return
        if mode == TimerMode.WORKING.value:
            self.notificationRequested.emit("Work session complete!", "Time for a break.")
        else:
            self.notificationRequested.emit("Break is over!", "Ready to focus?")
