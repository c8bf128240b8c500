"""Custom exception classes for solar advice components.

Calculation problems are reported through result fields (see ``ErrorKind``);
exceptions are reserved for malformed input that cannot be represented at all.
"""


class SolarAdviceException(Exception):
    """Base exception for all solar advice components."""
    pass


class InvalidTimeFormatError(SolarAdviceException, ValueError):
    """Raised when a time string is not a valid 24-hour ``HH:MM`` value."""

    def __init__(self, value=None, message=None):
        if message is None:
            if value is not None:
                message = f"Invalid time format: {value!r} (expected HH:MM)"
            else:
                message = "Invalid time format (expected HH:MM)"
        super().__init__(message)
        self.value = value


class SystemConfigurationError(SolarAdviceException):
    """Raised when configuration data is structurally invalid."""

    def __init__(self, component=None, message=None):
        if message is None:
            if component:
                message = f"Configuration error in {component}"
            else:
                message = "System configuration error"
        super().__init__(message)
        self.component = component
