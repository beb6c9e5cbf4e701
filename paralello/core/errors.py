"""Error taxonomy for the automation layer."""

from typing import Optional


class ParalelloError(Exception):
    """Base class for automation errors."""


class ValidationError(ParalelloError, ValueError):
    """Invalid cadence, time-of-day or weekday input. Raised before any write."""


class ConfigurationError(ParalelloError):
    """Missing credentials or endpoints. Aborts a whole batch."""


class ExternalServiceError(ParalelloError):
    """Data store, LLM or webhook call failed for one work item."""

    def __init__(self, message: str, client_name: Optional[str] = None):
        super().__init__(message)
        self.client_name = client_name


class ParseError(ParalelloError):
    """LLM response did not match the expected JSON array shape."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class StateError(ParalelloError):
    """Operation not allowed in the row's current lifecycle state."""
