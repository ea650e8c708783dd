"""
Concord Exceptions

Root exception classes for the Concord governance engine.
"""


class ConcordException(Exception):
    """Base exception for Concord."""
    pass


class ConfigurationError(ConcordException):
    """Configuration error."""
    pass
