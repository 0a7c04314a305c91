"""Custom exceptions for the account health engine."""


class AccountHealthError(Exception):
    """Base exception for all account health engine errors."""

    pass


class ConfigurationError(AccountHealthError):
    """Raised when configuration is invalid."""

    pass


class DataError(AccountHealthError):
    """Raised when input data cannot be used at all."""

    pass


class EvaluationError(AccountHealthError):
    """Raised when a category evaluator produces an unusable result."""

    def __init__(self, category: str, message: str):
        """Initialize evaluation error.

        Args:
            category: Health category whose evaluator failed
            message: Description of the failure
        """
        self.category = category
        super().__init__(f"{category}: {message}")


class RateLimitError(AccountHealthError):
    """Raised when a caller exceeds its request allowance."""

    def __init__(self, key: str, retry_after: float):
        """Initialize rate limit error.

        Args:
            key: Rate limit key that was exhausted
            retry_after: Seconds until the current window resets
        """
        self.key = key
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for '{key}', retry after {retry_after:.0f}s"
        )
