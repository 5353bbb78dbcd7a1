"""Exception types shared across TrueName."""


class TrueNameError(Exception):
    """Base error for TrueName."""


class StoreError(TrueNameError):
    """The name store could not answer (connection loss, timeout, bad row)."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class ValidationError(TrueNameError, ValueError):
    """Caller supplied an invalid argument."""
