"""Errors raised by the targets module."""


class InvalidPeriodKey(ValueError):
    """A period key does not match the format expected for its target type."""

    def __init__(self, period_key, target_type, reason=""):
        self.period_key = period_key
        self.target_type = target_type
        message = f"Periode invalide '{period_key}' pour le type {target_type}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DataAccessError(RuntimeError):
    """The invoice or target store could not be queried."""
