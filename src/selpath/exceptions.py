"""Custom exceptions for selpath."""

from typing import Any


class SelpathError(Exception):
    """Base class for all selpath exceptions.

    Attributes:
        message: Human-readable error message
        details: Additional structured context about the failure

    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize the error.

        Args:
            message: Human-readable error message
            details: Optional structured context. Defaults to an empty dict.

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidSelectorError(SelpathError):
    """Raised when a selector is empty or cannot be compiled into valid XPath."""

    def __init__(self, selector: str, reason: str):
        """Initialize invalid selector error.

        Args:
            selector: The offending selector text
            reason: Why the selector was rejected

        """
        self.selector = selector
        self.reason = reason
        super().__init__(f'Invalid selector "{selector}": {reason}', {'selector': selector, 'reason': reason})


class UnsupportedSelectorTypeError(SelpathError):
    """Raised when a selector type is neither css, xpath nor regex."""

    def __init__(self, selector_type: object):
        """Initialize unsupported type error.

        Args:
            selector_type: The type value that was passed in

        """
        self.selector_type = selector_type
        super().__init__(f'Unsupported selector type "{selector_type}"', {'type': str(selector_type)})


class InvalidRegexError(SelpathError):
    """Raised at the point of use when a regular expression does not compile."""

    def __init__(self, pattern: str, reason: str):
        """Initialize invalid regex error.

        Args:
            pattern: The pattern as supplied by the caller
            reason: Error reported by the regex engine

        """
        self.pattern = pattern
        self.reason = reason
        super().__init__(f'Invalid regular expression "{pattern}": {reason}', {'pattern': pattern})


class EvaluationError(SelpathError):
    """Raised by a tree evaluator when a well-formed query still fails to evaluate."""

    def __init__(self, expression: str, reason: str):
        """Initialize evaluation error.

        Args:
            expression: The XPath expression that failed
            reason: Error reported by the evaluator

        """
        self.expression = expression
        self.reason = reason
        super().__init__(f'Failed to evaluate "{expression}": {reason}', {'expression': expression})
