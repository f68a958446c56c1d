"""User preferences persisted through QSettings."""

from __future__ import annotations

from typing import Any, Dict, Optional

from PySide6.QtCore import Property, QObject, QSettings, Signal, Slot

from .constants import (
    DEFAULT_AUTO_PAUSE,
    DEFAULT_ENABLE_NOTIFICATIONS,
    SETTINGS_APPLICATION,
    SETTINGS_ORGANIZATION,
    TIMER_SETTING_BOUNDS,
    WORKDAY_HOURS_BOUNDS,
)
from .types import TimerSettings

_INT_KEYS = {
    "workDuration": "timer/workDuration",
    "shortBreakDuration": "timer/shortBreakDuration",
    "longBreakDuration": "timer/longBreakDuration",
    "cyclesBeforeLongBreak": "timer/cyclesBeforeLongBreak",
    "workdayHours": "general/workdayHours",
}
_BOOL_KEYS = {
    "autoPause": ("timer/autoPause", DEFAULT_AUTO_PAUSE),
    "enableNotifications": ("general/enableNotifications", DEFAULT_ENABLE_NOTIFICATIONS),
}


def _int_bounds(name: str):
    if name == "workdayHours":
        return WORKDAY_HOURS_BOUNDS
    return TIMER_SETTING_BOUNDS[name]


def coerce_int(raw: Any, default: int, minimum: int, maximum: int) -> int:
    """Parse a stored integer, clamping to bounds. Unparsable values give the default."""
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        print(f"Ignoring invalid setting value {raw!r}, using {default}")
        return default
    return max(minimum, min(maximum, value))


def coerce_bool(raw: Any, default: bool) -> bool:
    # INI-backed QSettings hands booleans back as strings.
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw != 0
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return default


class AppSettings(QObject):
    """Timer durations, workday length and notification preferences."""

    settingsChanged = Signal()

    def __init__(self, settings: Optional[QSettings] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._settings = settings if settings is not None else QSettings(
            SETTINGS_ORGANIZATION, SETTINGS_APPLICATION
        )
        self._values: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        for name, key in _INT_KEYS.items():
            default, minimum, maximum = _int_bounds(name)
            self._values[name] = coerce_int(self._settings.value(key), default, minimum, maximum)
        for name, (key, default) in _BOOL_KEYS.items():
            self._values[name] = coerce_bool(self._settings.value(key), default)

    def _write(self) -> None:
        for name, key in _INT_KEYS.items():
            self._settings.setValue(key, self._values[name])
        for name, (key, _default) in _BOOL_KEYS.items():
            self._settings.setValue(key, self._values[name])
        self._settings.sync()

    # --- Properties ---------------------------------------------------------
    @Property(int, notify=settingsChanged)
    def workDuration(self) -> int:
        return self._values["workDuration"]

    @Property(int, notify=settingsChanged)
    def shortBreakDuration(self) -> int:
        return self._values["shortBreakDuration"]

    @Property(int, notify=settingsChanged)
    def longBreakDuration(self) -> int:
        return self._values["longBreakDuration"]

    @Property(int, notify=settingsChanged)
    def cyclesBeforeLongBreak(self) -> int:
        return self._values["cyclesBeforeLongBreak"]

    @Property(bool, notify=settingsChanged)
    def autoPause(self) -> bool:
        return self._values["autoPause"]

    @Property(int, notify=settingsChanged)
    def workdayHours(self) -> int:
        return self._values["workdayHours"]

    @Property(int, notify=settingsChanged)
    def workdayMinutes(self) -> int:
        return self._values["workdayHours"] * 60

    @Property(bool, notify=settingsChanged)
    def enableNotifications(self) -> bool:
        return self._values["enableNotifications"]

    def timer_settings(self) -> TimerSettings:
        """Timer configuration in seconds."""
        return TimerSettings(
            pomodoro_duration=self._values["workDuration"] * 60,
            short_break_duration=self._values["shortBreakDuration"] * 60,
            long_break_duration=self._values["longBreakDuration"] * 60,
            cycles_until_long_break=self._values["cyclesBeforeLongBreak"],
            auto_pause_enabled=self._values["autoPause"],
        )

    # --- Mutation -----------------------------------------------------------
    @Slot(result="QVariantMap")
    def getSettings(self) -> Dict[str, Any]:
        return dict(self._values)

    @Slot("QVariantMap")
    def updateSettings(self, values: Dict[str, Any]) -> None:
        """Apply a partial update. Unknown keys are ignored, numbers are clamped."""
        updated = dict(self._values)
        for name, raw in values.items():
            if name in _INT_KEYS:
                default, minimum, maximum = _int_bounds(name)
                updated[name] = coerce_int(raw, self._values[name], minimum, maximum)
            elif name in _BOOL_KEYS:
                updated[name] = coerce_bool(raw, self._values[name])

        if updated == self._values:
            return
        self._values = updated
        self._write()
        self.settingsChanged.emit()

    @Slot()
    def resetSettings(self) -> None:
        """Restore every preference to its default."""
        for name in _INT_KEYS:
            self._values[name] = _int_bounds(name)[0]
        for name, (_key, default) in _BOOL_KEYS.items():
            self._values[name] = default
        self._write()
        print("Settings restored to defaults")
        self.settingsChanged.emit()
