"""Tests for the Pomodoro timer state machine."""

import pytest
from PySide6.QtCore import Qt

from focuspie.timer import (
    AutoPauseGuard,
    PomodoroTimer,
    format_clock,
    format_task_left,
    resolve_task_time_left,
)
from focuspie.types import TimerMode, TimerSettings


def _settings(**overrides):
    values = dict(
        pomodoro_duration=120,
        short_break_duration=30,
        long_break_duration=60,
        cycles_until_long_break=2,
    )
    values.update(overrides)
    return TimerSettings(**values)


class Harness:
    """Timer wired to a recording credit callback."""

    def __init__(self, settings=None, task_id="task-1"):
        self.credits = []
        self.task_id = task_id
        self.timer = PomodoroTimer(
            settings or _settings(),
            credit_progress=lambda tid, minutes: self.credits.append((tid, minutes)),
            current_task_id=lambda: self.task_id,
        )

    def ticks(self, count):
        for _ in range(count):
            self.timer.tick()


@pytest.fixture
def harness(app):
    return Harness()


class TestInitialState:
    """Tests for a freshly created timer."""

    def test_starts_idle(self, harness):
        timer = harness.timer
        assert timer.mode == "idle"
        assert timer.timer_mode is TimerMode.IDLE
        assert timer.timeLeftInMode == 120
        assert timer.isRunning is False
        assert timer.pomodorosCompletedInCycle == 0

    def test_tick_while_idle_is_noop(self, harness):
        harness.ticks(5)
        assert harness.timer.timeLeftInMode == 120
        assert harness.credits == []

    def test_default_settings(self, app):
        timer = PomodoroTimer()
        assert timer.timeLeftInMode == 25 * 60
        assert timer.timeDisplay == "25:00"


class TestControls:
    """Tests for start, pause and skip."""

    def test_start_work(self, harness):
        harness.timer.startWork()
        assert harness.timer.mode == "working"
        assert harness.timer.isRunning is True
        assert harness.timer.timeLeftInMode == 120

    def test_start_work_only_from_idle(self, harness):
        harness.timer.startWork()
        harness.ticks(10)
        harness.timer.startWork()
        assert harness.timer.timeLeftInMode == 110

    def test_pause_toggles(self, harness):
        harness.timer.startWork()
        harness.timer.pauseTimer()
        assert harness.timer.isRunning is False
        harness.ticks(5)
        assert harness.timer.timeLeftInMode == 120
        harness.timer.pauseTimer()
        assert harness.timer.isRunning is True

    def test_pause_in_idle_is_noop(self, harness):
        harness.timer.pauseTimer()
        assert harness.timer.isRunning is False
        assert harness.timer.mode == "idle"

    def test_skip_break_outside_break_is_noop(self, harness):
        harness.timer.startWork()
        harness.timer.skipBreak()
        assert harness.timer.mode == "working"

    def test_skip_short_break_keeps_cycle_count(self, harness):
        harness.timer.startWork()
        harness.ticks(120)
        assert harness.timer.mode == "shortBreak"
        harness.timer.skipBreak()
        assert harness.timer.mode == "idle"
        assert harness.timer.isRunning is False
        assert harness.timer.timeLeftInMode == 120
        assert harness.timer.pomodorosCompletedInCycle == 1

    def test_skip_long_break_resets_cycle(self, harness):
        for _ in range(2):
            harness.timer.startWork()
            harness.ticks(120)
            if harness.timer.mode == "shortBreak":
                harness.timer.skipBreak()
        assert harness.timer.mode == "longBreak"
        harness.timer.skipBreak()
        assert harness.timer.pomodorosCompletedInCycle == 0

    def test_toggle_auto_pause(self, harness, qtbot):
        with qtbot.waitSignal(harness.timer.settingsChanged, timeout=1000):
            harness.timer.toggleAutoPause()
        assert harness.timer.autoPauseEnabled is True

    def test_reset_timer(self, harness):
        harness.timer.startWork()
        harness.ticks(120)
        harness.timer.resetTimer()
        assert harness.timer.mode == "idle"
        assert harness.timer.pomodorosCompletedInCycle == 0
        assert harness.timer.minute_accumulator == 0


class TestMinuteCredit:
    """Tests for progress credited while working."""

    def test_sixty_ticks_credit_one_minute(self, harness):
        harness.timer.startWork()
        harness.ticks(59)
        assert harness.credits == []
        harness.ticks(1)
        assert harness.credits == [("task-1", 1)]
        assert harness.timer.minute_accumulator == 0

    def test_pause_does_not_lose_seconds(self, harness):
        harness.timer.startWork()
        harness.ticks(59)
        harness.timer.pauseTimer()
        harness.ticks(30)
        harness.timer.pauseTimer()
        harness.ticks(1)
        assert harness.credits == [("task-1", 1)]

    def test_no_credit_without_selected_task(self, app):
        harness = Harness(task_id=None)
        harness.timer.startWork()
        harness.ticks(60)
        assert harness.credits == []
        assert harness.timer.minute_accumulator == 0

    def test_breaks_do_not_credit(self, harness):
        harness.timer.startWork()
        harness.ticks(120)
        credited = len(harness.credits)
        harness.ticks(30)
        assert len(harness.credits) == credited

    def test_final_minute_credited_before_transition(self, harness):
        harness.timer.startWork()
        harness.ticks(120)
        assert harness.credits == [("task-1", 1), ("task-1", 1)]
        assert harness.timer.mode == "shortBreak"


class TestTransitions:
    """Tests for work and break cycling."""

    def test_work_ends_on_last_second(self, harness):
        harness.timer.startWork()
        harness.ticks(119)
        assert harness.timer.mode == "working"
        assert harness.timer.timeLeftInMode == 1
        harness.ticks(1)
        assert harness.timer.mode == "shortBreak"
        assert harness.timer.timeLeftInMode == 30
        assert harness.timer.isRunning is True
        assert harness.timer.pomodorosCompletedInCycle == 1

    def test_short_break_returns_to_idle(self, harness):
        harness.timer.startWork()
        harness.ticks(120 + 30)
        assert harness.timer.mode == "idle"
        assert harness.timer.isRunning is False
        assert harness.timer.timeLeftInMode == 120
        assert harness.timer.pomodorosCompletedInCycle == 1

    def test_cycle_reaches_long_break(self, harness):
        harness.timer.startWork()
        harness.ticks(150)
        harness.timer.startWork()
        harness.ticks(120)
        assert harness.timer.mode == "longBreak"
        assert harness.timer.timeLeftInMode == 60
        assert harness.timer.pomodorosCompletedInCycle == 2

    def test_long_break_resets_cycle(self, harness):
        harness.timer.startWork()
        harness.ticks(150)
        harness.timer.startWork()
        harness.ticks(120 + 60)
        assert harness.timer.mode == "idle"
        assert harness.timer.pomodorosCompletedInCycle == 0

    def test_session_finished_signal(self, harness, qtbot):
        harness.timer.startWork()
        with qtbot.waitSignal(harness.timer.sessionFinished, timeout=1000) as blocker:
            harness.ticks(120)
        assert blocker.args == ["working"]

    def test_countdown_never_negative(self, harness):
        harness.timer.startWork()
        for _ in range(400):
            harness.timer.tick()
            assert harness.timer.timeLeftInMode >= 0


class TestTaskCountdown:
    """Tests for the selected task's remaining budget."""

    def test_counts_down_only_while_working(self, harness):
        harness.timer.setTaskTimeLeft(500)
        harness.timer.startWork()
        harness.ticks(10)
        assert harness.timer.taskTimeLeft == 490
        harness.ticks(110)
        assert harness.timer.mode == "shortBreak"
        harness.ticks(10)
        assert harness.timer.taskTimeLeft == 380

    def test_stops_at_zero(self, harness):
        harness.timer.setTaskTimeLeft(5)
        harness.timer.startWork()
        harness.ticks(10)
        assert harness.timer.taskTimeLeft == 0
        assert harness.timer.timeLeftInMode == 110

    def test_display(self, harness):
        harness.timer.setTaskTimeLeft(3 * 3600 + 5 * 60 + 59)
        assert harness.timer.taskTimeDisplay == "3:05"


class TestSettings:
    """Tests for adopting new durations."""

    def test_idle_resets_to_new_length(self, harness):
        harness.timer.applySettings(_settings(pomodoro_duration=600))
        assert harness.timer.timeLeftInMode == 600

    def test_running_mode_is_clamped(self, harness):
        harness.timer.startWork()
        harness.ticks(10)
        harness.timer.applySettings(_settings(pomodoro_duration=60))
        assert harness.timer.timeLeftInMode == 60
        assert harness.timer.modeDuration == 60

    def test_running_mode_keeps_shorter_remaining(self, harness):
        harness.timer.startWork()
        harness.ticks(100)
        harness.timer.applySettings(_settings(pomodoro_duration=600))
        assert harness.timer.timeLeftInMode == 20


class TestScheduler:
    """Tests for the tick source lifetime."""

    def test_activate_and_deactivate(self, harness):
        assert harness.timer.isActive is False
        harness.timer.activate()
        assert harness.timer.isActive is True
        harness.timer.deactivate()
        assert harness.timer.isActive is False

    def test_scheduler_ticks(self, harness, qtbot):
        harness.timer.startWork()
        harness.timer.activate()
        qtbot.waitUntil(lambda: harness.timer.timeLeftInMode < 120, timeout=3000)
        harness.timer.deactivate()


class TestAutoPauseGuard:
    """Tests for pausing when the app loses focus."""

    def test_pauses_when_enabled(self, app):
        timer = PomodoroTimer(_settings(auto_pause_enabled=True))
        guard = AutoPauseGuard(timer)
        timer.startWork()
        guard.onApplicationStateChanged(Qt.ApplicationInactive)
        assert timer.isRunning is False

    def test_ignores_activation(self, app):
        timer = PomodoroTimer(_settings(auto_pause_enabled=True))
        guard = AutoPauseGuard(timer)
        timer.startWork()
        guard.onApplicationStateChanged(Qt.ApplicationActive)
        assert timer.isRunning is True

    def test_disabled_does_nothing(self, app):
        timer = PomodoroTimer(_settings())
        guard = AutoPauseGuard(timer)
        timer.startWork()
        guard.onApplicationStateChanged(Qt.ApplicationHidden)
        assert timer.isRunning is True

    def test_already_paused_stays_paused(self, app):
        timer = PomodoroTimer(_settings(auto_pause_enabled=True))
        guard = AutoPauseGuard(timer)
        timer.startWork()
        timer.pauseTimer()
        guard.onApplicationStateChanged(Qt.ApplicationInactive)
        assert timer.isRunning is False


class TestHelpers:
    """Tests for formatting and countdown restore."""

    def test_format_clock(self):
        assert format_clock(1500) == "25:00"
        assert format_clock(65) == "01:05"
        assert format_clock(-3) == "00:00"

    def test_format_task_left(self):
        assert format_task_left(0) == "0:00"
        assert format_task_left(90 * 60) == "1:30"

    def test_resolve_uses_valid_saved_value(self):
        assert resolve_task_time_left(60, 10, 1200) == 1200

    @pytest.mark.parametrize("saved", [None, -1, 3001, "100", 12.5, True])
    def test_resolve_recomputes_invalid_saved_value(self, saved):
        assert resolve_task_time_left(60, 10, saved) == 3000

    def test_resolve_never_negative(self):
        assert resolve_task_time_left(10, 30) == 0


class TestFullCycle:
    """Tests for a complete cycle at default durations."""

    def test_four_sessions_return_to_idle(self, app):
        harness = Harness(settings=TimerSettings())
        for session in range(4):
            harness.timer.startWork()
            harness.ticks(1500)
            expected = "longBreak" if session == 3 else "shortBreak"
            assert harness.timer.mode == expected
            harness.ticks(harness.timer.timeLeftInMode)
        assert harness.timer.mode == "idle"
        assert harness.timer.pomodorosCompletedInCycle == 0
        assert len(harness.credits) == 4 * 25

    def test_clearing_selection_stops_credit(self, harness):
        harness.timer.startWork()
        harness.ticks(30)
        harness.task_id = None
        harness.ticks(30)
        assert harness.credits == []
