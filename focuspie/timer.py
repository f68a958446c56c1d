"""Pomodoro timer state machine.

Modes cycle ``idle -> working -> shortBreak|longBreak -> idle``. A single
one-second tick advances both the mode countdown and the selected task's
remaining budget, and credits the task with a minute of progress for every
60 seconds spent working. Operations outside their valid source mode are
no-ops.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from PySide6.QtCore import Property, QObject, Qt, QTimer, Signal, Slot

from .constants import TICK_INTERVAL_MS
from .types import TimerMode, TimerSettings, TimerSnapshot

SECONDS_PER_CREDIT = 60


def format_clock(seconds: int) -> str:
    """Format a countdown as ``MM:SS``."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_task_left(seconds: int) -> str:
    """Format a task budget as ``H:MM``."""
    seconds = max(0, int(seconds))
    return f"{seconds // 3600}:{(seconds % 3600) // 60:02d}"


def resolve_task_time_left(goal_minutes: int, progress_minutes: int, saved: Any = None) -> int:
    """Seconds left on a task's budget.

    A saved countdown is only trusted when it is an integer no larger than
    what the recorded progress allows; anything else is recomputed.
    """
    calculated = max(0, (goal_minutes - progress_minutes) * 60)
    if isinstance(saved, int) and not isinstance(saved, bool) and 0 <= saved <= calculated:
        return saved
    return calculated


class PomodoroTimer(QObject):
    """Work/break cycling with per-minute progress credit."""

    modeChanged = Signal()
    timeLeftChanged = Signal()
    runningChanged = Signal()
    pomodorosCompletedChanged = Signal()
    settingsChanged = Signal()
    taskTimeLeftChanged = Signal()
    activeChanged = Signal()
    sessionFinished = Signal(str, arguments=["mode"])

    def __init__(
        self,
        settings: Optional[TimerSettings] = None,
        credit_progress: Optional[Callable[[str, int], Any]] = None,
        current_task_id: Optional[Callable[[], Optional[str]]] = None,
        parent: Optional[QObject] = None,
    ):
        """Initialize the timer.

        Args:
            settings: Durations and cycle length; defaults to 25/5/15 x4.
            credit_progress: Called as ``credit_progress(task_id, 1)`` per
                completed work minute. Must tolerate unknown ids.
            current_task_id: Returns the selected task id, or a falsy value.
            parent: Optional Qt parent.
        """
        super().__init__(parent)
        self._settings = settings or TimerSettings()
        self._credit_progress = credit_progress
        self._current_task_id = current_task_id
        self._mode = TimerMode.IDLE
        self._time_left = self._settings.pomodoro_duration
        self._running = False
        self._pomodoros_completed = 0
        self._minute_accumulator = 0
        self._task_time_left = 0

        self._scheduler = QTimer(self)
        self._scheduler.setInterval(TICK_INTERVAL_MS)
        self._scheduler.timeout.connect(self.tick)

    # --- Read access --------------------------------------------------------
    @property
    def settings(self) -> TimerSettings:
        return self._settings

    @property
    def timer_mode(self) -> TimerMode:
        return self._mode

    @property
    def minute_accumulator(self) -> int:
        return self._minute_accumulator

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            mode_duration=self._settings.duration_for(self._mode),
            time_left_in_mode=self._time_left,
        )

    @Property(str, notify=modeChanged)
    def mode(self) -> str:
        return self._mode.value

    @Property(int, notify=timeLeftChanged)
    def timeLeftInMode(self) -> int:
        return self._time_left

    @Property(str, notify=timeLeftChanged)
    def timeDisplay(self) -> str:
        return format_clock(self._time_left)

    @Property(int, notify=modeChanged)
    def modeDuration(self) -> int:
        return self._settings.duration_for(self._mode)

    @Property(bool, notify=runningChanged)
    def isRunning(self) -> bool:
        return self._running

    @Property(int, notify=pomodorosCompletedChanged)
    def pomodorosCompletedInCycle(self) -> int:
        return self._pomodoros_completed

    @Property(bool, notify=settingsChanged)
    def autoPauseEnabled(self) -> bool:
        return self._settings.auto_pause_enabled

    @Property(int, notify=taskTimeLeftChanged)
    def taskTimeLeft(self) -> int:
        return self._task_time_left

    @Property(str, notify=taskTimeLeftChanged)
    def taskTimeDisplay(self) -> str:
        return format_task_left(self._task_time_left)

    @Property(bool, notify=activeChanged)
    def isActive(self) -> bool:
        return self._scheduler.isActive()

    # --- Scheduler lifetime -------------------------------------------------
    @Slot()
    def activate(self) -> None:
        """Start delivering one tick per second."""
        if not self._scheduler.isActive():
            self._scheduler.start()
            self.activeChanged.emit()

    @Slot()
    def deactivate(self) -> None:
        """Stop the tick source; state is kept for the next activation."""
        if self._scheduler.isActive():
            self._scheduler.stop()
            self.activeChanged.emit()

    # --- Controls -----------------------------------------------------------
    @Slot()
    def startWork(self) -> None:
        """Begin a work session. Only valid from idle."""
        if self._mode is not TimerMode.IDLE:
            return
        self._mode = TimerMode.WORKING
        self._time_left = self._settings.pomodoro_duration
        self._running = True
        self.modeChanged.emit()
        self.timeLeftChanged.emit()
        self.runningChanged.emit()

    @Slot()
    def pauseTimer(self) -> None:
        """Toggle running. Resuming needs time left; idle ignores the call."""
        if self._mode is TimerMode.IDLE:
            return
        if self._running:
            self._running = False
        elif self._time_left > 0:
            self._running = True
        else:
            return
        self.runningChanged.emit()

    @Slot()
    def skipBreak(self) -> None:
        """End a break early and return to idle."""
        if not self._mode.is_break:
            return
        if self._mode is TimerMode.LONG_BREAK:
            self._set_pomodoros_completed(0)
        self._mode = TimerMode.IDLE
        self._time_left = self._settings.pomodoro_duration
        self._running = False
        self._minute_accumulator = 0
        self.modeChanged.emit()
        self.timeLeftChanged.emit()
        self.runningChanged.emit()

    @Slot()
    def toggleAutoPause(self) -> None:
        self._settings.auto_pause_enabled = not self._settings.auto_pause_enabled
        self.settingsChanged.emit()

    @Slot()
    def resetTimer(self) -> None:
        """Abandon the current cycle and return to a fresh idle state."""
        self._mode = TimerMode.IDLE
        self._time_left = self._settings.pomodoro_duration
        self._running = False
        self._minute_accumulator = 0
        self._set_pomodoros_completed(0)
        self.modeChanged.emit()
        self.timeLeftChanged.emit()
        self.runningChanged.emit()

    def applySettings(self, settings: TimerSettings) -> None:
        """Adopt new durations.

        Idle resets the countdown to the new work length; other modes keep
        their remaining time, clamped to the new mode duration.
        """
        self._settings = settings
        if self._mode is TimerMode.IDLE:
            self._time_left = settings.pomodoro_duration
        else:
            self._time_left = min(self._time_left, settings.duration_for(self._mode))
        self.settingsChanged.emit()
        self.modeChanged.emit()
        self.timeLeftChanged.emit()

    @Slot(int)
    def setTaskTimeLeft(self, seconds: int) -> None:
        seconds = max(0, int(seconds))
        if seconds != self._task_time_left:
            self._task_time_left = seconds
            self.taskTimeLeftChanged.emit()

    # --- Tick ---------------------------------------------------------------
    @Slot()
    def tick(self) -> None:
        """Advance one second.

        The minute credit is evaluated before any mode transition in the
        same tick, so it is always attributed to the mode that was running.
        """
        if not self._running or self._mode is TimerMode.IDLE:
            return

        mode = self._mode
        if self._time_left > 0:
            self._time_left -= 1
            if mode is TimerMode.WORKING:
                self._minute_accumulator += 1
                if self._task_time_left > 0:
                    self._task_time_left -= 1
                    self.taskTimeLeftChanged.emit()
            self.timeLeftChanged.emit()
            self._apply_minute_credit(mode)

        if self._time_left == 0:
            self._finish_mode(mode)

    def _apply_minute_credit(self, mode: TimerMode) -> None:
        if mode is not TimerMode.WORKING or self._minute_accumulator < SECONDS_PER_CREDIT:
            return
        task_id = self._current_task_id() if self._current_task_id is not None else None
        if task_id and self._credit_progress is not None:
            self._credit_progress(task_id, 1)
        self._minute_accumulator = 0

    def _finish_mode(self, mode: TimerMode) -> None:
        self._running = False
        self._minute_accumulator = 0

        if mode is TimerMode.WORKING:
            self._set_pomodoros_completed(self._pomodoros_completed + 1)
            if self._pomodoros_completed % self._settings.cycles_until_long_break == 0:
                self._mode = TimerMode.LONG_BREAK
            else:
                self._mode = TimerMode.SHORT_BREAK
            self._time_left = self._settings.duration_for(self._mode)
            # Breaks start on their own.
            self._running = True
        else:
            if mode is TimerMode.LONG_BREAK:
                self._set_pomodoros_completed(0)
            self._mode = TimerMode.IDLE
            self._time_left = self._settings.pomodoro_duration

        self.modeChanged.emit()
        self.timeLeftChanged.emit()
        self.runningChanged.emit()
        self.sessionFinished.emit(mode.value)

    def _set_pomodoros_completed(self, value: int) -> None:
        if value != self._pomodoros_completed:
            self._pomodoros_completed = value
            self.pomodorosCompletedChanged.emit()


class AutoPauseGuard(QObject):
    """Pause the timer when the application loses focus, if enabled."""

    def __init__(self, timer: PomodoroTimer, app: Optional[QObject] = None):
        super().__init__(timer)
        self._timer = timer
        if app is not None:
            app.applicationStateChanged.connect(self.onApplicationStateChanged)

    def onApplicationStateChanged(self, state) -> None:
        if state == Qt.ApplicationActive:
            return
        if self._timer.autoPauseEnabled and self._timer.isRunning:
            self._timer.pauseTimer()
