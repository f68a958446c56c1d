"""Tests for the wired application session, the chart bridge and the UI."""

from datetime import datetime

import pytest
from PySide6.QtQml import QQmlApplicationEngine

from focuspie.constants import TASKS_KEY
from focuspie.session import DisplayClock, FocusSession
from focuspie.ui import create_focuspie_window


@pytest.fixture
def session(qsettings):
    return FocusSession(qsettings, now=lambda: datetime(2024, 5, 1, 9, 5))


def _select_and_start(session, task_id):
    session.ledger.selectTask(task_id)
    session.timer.startWork()


class TestStartup:
    """Tests for a fresh session."""

    def test_seed_tasks_loaded(self, session):
        assert session.ledger.isSeedData is True
        assert session.ledger.currentTaskId == ""
        assert len(session.chart.layout()) == 5

    def test_inactive_until_activated(self, session):
        assert session.isActive is False
        assert session.timer.isActive is False
        assert session.clock.is_running is False

    def test_idle_rings_without_task(self, session):
        assert session.outerRingFraction == 0.0
        assert session.innerRingFraction == 1.0
        assert session.innerRingColorKind == "work"


class TestLifetime:
    """Tests for activate/deactivate."""

    def test_activate_starts_scheduler_and_clock(self, session):
        session.activate()
        assert session.timer.isActive is True
        assert session.clock.is_running is True
        session.deactivate()
        assert session.timer.isActive is False
        assert session.clock.is_running is False

    def test_deactivate_commits(self, qsettings, session):
        session.activate()
        session.deactivate()
        assert qsettings.value(TASKS_KEY) is not None


class TestWorkFlow:
    """Tests for selecting a task and working on it."""

    def test_select_binds_task_countdown(self, session):
        session.ledger.selectTask("seed-deep-work")
        assert session.timer.taskTimeLeft == 180 * 60
        assert session.outerRingFraction == pytest.approx(1.0)

    def test_work_credits_selected_task(self, session):
        _select_and_start(session, "seed-email")
        for _ in range(60):
            session.timer.tick()
        task = session.ledger.getTask("seed-email")
        assert task.progress_minutes == 1
        assert session.timer.taskTimeLeft == 59 * 60

    def test_credit_keeps_seed_flag(self, session):
        _select_and_start(session, "seed-email")
        for _ in range(60):
            session.timer.tick()
        assert session.ledger.isSeedData is True

    def test_inner_ring_scaled_to_task(self, session):
        _select_and_start(session, "seed-deep-work")
        assert session.innerRingFraction == pytest.approx(1500 / (180 * 60))
        assert session.innerRingColorKind == "work"

    def test_rings_change_on_tick(self, session, qtbot):
        _select_and_start(session, "seed-deep-work")
        with qtbot.waitSignal(session.ringsChanged, timeout=1000):
            session.timer.tick()

    def test_countdown_survives_restart(self, qsettings, session):
        _select_and_start(session, "seed-learning")
        for _ in range(30):
            session.timer.tick()
        session.commit()

        restarted = FocusSession(qsettings)
        assert restarted.ledger.currentTaskId == "seed-learning"
        assert restarted.timer.taskTimeLeft == 90 * 60 - 30

    def test_switching_tasks_remembers_countdown(self, session):
        _select_and_start(session, "seed-learning")
        for _ in range(10):
            session.timer.tick()
        session.ledger.selectTask("seed-email")
        assert session.timer.taskTimeLeft == 60 * 60
        session.ledger.selectTask("seed-learning")
        assert session.timer.taskTimeLeft == 90 * 60 - 10

    def test_delete_forgets_countdown(self, session):
        _select_and_start(session, "seed-learning")
        for _ in range(10):
            session.timer.tick()
        session.ledger.deleteTask("seed-learning")
        assert session.store.saved_task_time_left("seed-learning") is None
        assert session.timer.taskTimeLeft == 0

    def test_replacing_seed_set_forgets_seed_countdowns(self, qsettings, session):
        _select_and_start(session, "seed-learning")
        for _ in range(10):
            session.timer.tick()
        session.ledger.addTask("Real work", 60, False)
        assert session.store.saved_task_time_left("seed-learning") is None
        session.commit()

        qsettings.setValue(TASKS_KEY, "{corrupt")
        restarted = FocusSession(qsettings)
        assert restarted.ledger.isSeedData is True
        restarted.ledger.selectTask("seed-learning")
        assert restarted.timer.taskTimeLeft == 90 * 60

    def test_reset_progress_recomputes_countdown(self, session):
        _select_and_start(session, "seed-email")
        for _ in range(120):
            session.timer.tick()
        session.resetProgress()
        assert session.ledger.getTask("seed-email").progress_minutes == 0
        assert session.timer.taskTimeLeft == 60 * 60

    def test_notification_after_work_session(self, session, qtbot):
        session.appSettings.updateSettings({"workDuration": 1})
        session.timer.startWork()
        with qtbot.waitSignal(session.notificationRequested, timeout=1000) as blocker:
            for _ in range(60):
                session.timer.tick()
        assert blocker.args[0] == "Work session complete!"
        assert session.timer.mode == "shortBreak"

    def test_no_notification_when_disabled(self, session, qtbot):
        session.appSettings.updateSettings({"workDuration": 1, "enableNotifications": False})
        session.timer.startWork()
        with qtbot.assertNotEmitted(session.notificationRequested):
            for _ in range(60):
                session.timer.tick()


class TestSettingsWiring:
    """Tests for settings flowing into the timer and ledger."""

    def test_work_duration_applies_in_idle(self, session):
        session.appSettings.updateSettings({"workDuration": 10})
        assert session.timer.timeLeftInMode == 600

    def test_workday_hours_apply_to_ledger(self, session):
        session.appSettings.updateSettings({"workdayHours": 10})
        assert session.ledger.workdayMinutes == 600
        assert session.chart.layout()[-1].is_unallocated

    def test_auto_pause_toggle_is_persisted(self, qsettings, session):
        session.timer.toggleAutoPause()
        assert session.appSettings.autoPause is True
        assert FocusSession(qsettings).timer.autoPauseEnabled is True


class TestPieChart:
    """Tests for pointer handling on the chart."""

    def test_click_slice_selects_and_starts(self, session, qtbot):
        session.chart.setSize(400, 400)
        with qtbot.waitSignal(session.chart.taskActivated, timeout=1000) as blocker:
            assert session.chart.clickAt(201, 60) is True
        assert blocker.args == ["seed-deep-work"]
        assert session.ledger.currentTaskId == "seed-deep-work"
        assert session.timer.mode == "working"

    def test_click_center_emits_activation(self, session, qtbot):
        session.chart.setSize(400, 400)
        with qtbot.waitSignal(session.chart.centerActivated, timeout=1000):
            assert session.chart.clickAt(200, 200) is True
        assert session.timer.mode == "idle"

    def test_click_outside_does_nothing(self, session):
        session.chart.setSize(400, 400)
        assert session.chart.clickAt(5, 5) is False
        assert session.ledger.currentTaskId == ""

    def test_click_unallocated_does_nothing(self, session):
        session.chart.setSize(400, 400)
        # Seed tasks use 375 of 480 minutes; the gap sits just before noon.
        assert session.chart.clickAt(190, 60) is False

    def test_hover_updates_center_label(self, session):
        session.chart.setSize(400, 400)
        assert session.chart.centerTitle == "Today"
        session.chart.hoverAt(201, 60)
        assert session.chart.hoveredIndex == 0
        assert session.chart.centerTitle == "Deep work"
        assert session.chart.centerDetail == "3h 0m"
        session.chart.clearHover()
        assert session.chart.hoveredIndex == -1

    def test_hovered_slice_is_pulled_out(self, session):
        session.chart.setSize(400, 400)
        session.chart.hoverAt(201, 60)
        slices = session.chart.slices
        assert slices[0]["hovered"] is True
        assert slices[0]["offsetX"] != 0.0
        assert slices[1]["offsetX"] == 0.0
        assert slices[-1]["index"] == -1

    def test_hover_center(self, session):
        session.chart.setSize(400, 400)
        session.chart.hoverAt(200, 200)
        assert session.chart.centerHovered is True


class TestDisplayClock:
    """Tests for the wall clock label."""

    def test_formats_hours_and_minutes(self, app):
        clock = DisplayClock(now=lambda: datetime(2024, 5, 1, 7, 3))
        assert clock.currentTime == "07:03"

    def test_refresh_emits_on_change(self, app, qtbot):
        moments = iter([datetime(2024, 5, 1, 7, 3), datetime(2024, 5, 1, 7, 4)])
        clock = DisplayClock(now=lambda: next(moments))
        with qtbot.waitSignal(clock.timeChanged, timeout=1000):
            clock.refresh()
        assert clock.currentTime == "07:04"


class TestWindow:
    """Tests for loading the QML UI."""

    def test_create_window(self, session):
        engine = create_focuspie_window(session)
        assert isinstance(engine, QQmlApplicationEngine)
        assert engine.rootObjects()
