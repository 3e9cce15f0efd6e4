"""
Errors raised by the mcerrors library.

Every fatal condition derives from McErrorsError, and also from the
closest builtin, so `except ValueError` / `except OSError` keep working
for callers that do not know about this package.
"""


class McErrorsError(Exception):
    """Base class of all fatal mcerrors errors."""


class UsageError(McErrorsError, ValueError):
    """Invalid or missing invocation parameter (columns, skip, block, ...)."""


class SourceUnavailableError(McErrorsError, OSError):
    """The data file could not be opened for reading."""


class InsufficientDataError(McErrorsError, ValueError):
    """Too few measurements (or blocks) left for the requested analysis."""


class MalformedRowError(McErrorsError, ValueError):
    """A data row is missing a required field or a field is not a number."""

    def __init__(self, line_number: int, expected_field_count: int):
        self.line_number = line_number
        self.expected_field_count = expected_field_count
        super().__init__(f"Line {line_number}: not {expected_field_count} columns")


class UnresolvedAutocorrelationWarning(UserWarning):
    """tau_int summation window reached N/2 before the 6*tau_int cut."""
