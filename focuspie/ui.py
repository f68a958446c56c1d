"""UI creation functions for FocusPie."""

from __future__ import annotations

import os
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtQml import QQmlApplicationEngine

from .qml import FOCUSPIE_QML
from .session import FocusSession


def create_focuspie_window(session: FocusSession) -> QQmlApplicationEngine:
    """Create and return a QQmlApplicationEngine hosting the FocusPie UI."""
    engine = QQmlApplicationEngine()
    engine.rootContext().setContextProperty("session", session)
    engine.rootContext().setContextProperty("taskLedger", session.ledger)
    engine.rootContext().setContextProperty("pomodoroTimer", session.timer)
    engine.rootContext().setContextProperty("pieChart", session.chart)
    engine.rootContext().setContextProperty("appSettings", session.appSettings)
    engine.rootContext().setContextProperty("displayClock", session.clock)
    engine.loadData(FOCUSPIE_QML.encode("utf-8"))
    return engine


def main() -> int:
    """Main entry point for FocusPie."""
    smoke_mode = "--smoke" in sys.argv or os.environ.get("FOCUSPIE_SMOKE") == "1"

    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv)

    session = FocusSession(app=app)
    engine = create_focuspie_window(session)
    if not engine.rootObjects():
        return 1

    if smoke_mode:
        session.commit()
        return 0

    session.activate()
    app.aboutToQuit.connect(session.deactivate)
    return app.exec()
