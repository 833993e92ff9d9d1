"""
Exceptions for commentguard.

None of these are fatal to the engine: capability errors are caught at
item granularity and mapped to a Suspicious verdict.
"""


class CommentGuardError(Exception):
    """Base class for commentguard errors."""
    pass


class CapabilityUnavailable(CommentGuardError):
    """Raised when the external classifier cannot serve requests."""
    pass


class CapabilityError(CommentGuardError):
    """Raised when a single external classification fails or times out."""
    pass


class ConfigError(CommentGuardError, ValueError):
    """Raised when a configuration file is missing fields or malformed."""
    pass
