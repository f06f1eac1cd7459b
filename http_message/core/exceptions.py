"""Exception hierarchy for http-message."""


class HttpMessageError(Exception):
    """Base exception for all http-message errors."""


class InvalidInputError(HttpMessageError, ValueError):
    """Argument violates the contract of the called operation."""


class RuntimeIOError(HttpMessageError, RuntimeError):
    """Stream, uploaded file or filesystem misuse at runtime."""


class CacheError(RuntimeIOError):
    """Cache directory or cache entry cannot be accessed."""


def type_name(value: object) -> str:
    """Name of the value's type for error messages."""
    return type(value).__name__
