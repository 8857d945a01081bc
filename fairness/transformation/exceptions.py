class TransformationError(Exception):
    """Raised when the remote text transformation capability fails."""


class TransformationTransientError(TransformationError):
    """Raised for retryable failures: network errors, timeouts, rate limits, 5xx."""


class TransformationFatalError(TransformationError):
    """Raised for failures that must not be retried; callers fall back immediately."""
