"""Result type for CLI handlers.

Handlers report expected build failures (bad job files, wrong fragment page
counts, conversion errors) as a Result instead of raising, so the CLI can
print them without a traceback. Programming errors still propagate.
"""

from typing import Any, Callable, Optional, TypedDict, TypeVar

from errors import PlannerPressError

T = TypeVar("T")


class Result(TypedDict):
    """Outcome of an operation.

    Attributes:
        ok: True if operation succeeded, False if it failed
        value: The successful result value (None if failed)
        error: Error message (None if succeeded)
    """

    ok: bool
    value: Optional[Any]
    error: Optional[str]


def success(value: T) -> Result:
    return Result(ok=True, value=value, error=None)


def failure(error: str) -> Result:
    return Result(ok=False, value=None, error=error)


def from_exception(exc: Exception) -> Result:
    """Failed result named after the exception class.

    Examples:
        >>> from_exception(PlannerPressError("boom"))["error"]
        'PlannerPressError: boom'
    """
    return failure(f"{type(exc).__name__}: {exc}")


def try_operation(operation: Callable[[], T]) -> Result:
    """Run ``operation``, turning planner-press errors into a failed Result."""
    try:
        return success(operation())
    except PlannerPressError as exc:
        return from_exception(exc)


def unwrap(result: Result) -> Any:
    """Extract the value or raise.

    Raises:
        ValueError: If the result is a failure
    """
    if result["ok"]:
        return result["value"]
    raise ValueError(result["error"])
