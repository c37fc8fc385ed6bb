class AnalyticsError(Exception):
    """Base class for errors raised by the visit and conversation services."""


class ValidationError(AnalyticsError):
    """A required identifier was missing. Nothing was persisted."""


class PersistenceError(AnalyticsError):
    """The database was unavailable or rejected the operation."""
