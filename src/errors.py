"""Exception hierarchy for planner-press.

Provides structured error handling with specific exception types
for the different ways a booklet build can fail.
"""


class PlannerPressError(Exception):
    """Base exception for all planner-press errors.

    All custom exceptions inherit from this base class for easy catching.
    """

    pass


class NetworkError(PlannerPressError):
    """Network-related errors (fragment downloads, API calls, timeouts)."""

    def __init__(
        self, message: str, *, status_code: int | None = None, detail: str = ""
    ):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ValidationError(PlannerPressError):
    """Validation errors (invalid input, malformed job files)."""

    pass


class FragmentError(ValidationError):
    """Fragment selection errors (missing or duplicate cover fragment)."""

    pass


class PageCountError(FragmentError):
    """A cover or planner fragment has the wrong number of pages."""

    def __init__(self, module_type: str, expected: int, actual: int):
        self.module_type = module_type
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{module_type} fragment must have exactly {expected} pages (got {actual})"
        )


class PDFError(PlannerPressError):
    """PDF assembly errors (loading, copying, writing)."""

    pass


class GrayscaleConversionError(PDFError):
    """Remote grayscale conversion failed. Never downgraded to a warning."""

    pass


class ConfigurationError(PlannerPressError):
    """Configuration errors (invalid settings, missing API keys)."""

    pass
