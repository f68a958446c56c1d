"""Exceptions raised by FocusPie models."""


class TaskValidationError(Exception):
    """Raised when task fields fail validation; the message is user-facing."""
