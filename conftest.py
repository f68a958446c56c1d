"""Shared pytest fixtures for Qt application lifecycle."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtGui import QGuiApplication


@pytest.fixture(scope="session")
def app():
    """Provide a single QGuiApplication for all tests."""
    instance = QGuiApplication.instance()
    if instance is None:
        instance = QGuiApplication(sys.argv)

    yield instance

    QCoreApplication.processEvents()


@pytest.fixture
def qsettings(app, tmp_path):
    """QSettings backed by a throwaway INI file."""
    return QSettings(str(tmp_path / "focuspie.ini"), QSettings.IniFormat)
