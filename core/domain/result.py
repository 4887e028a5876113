"""
Success-or-failure wrapper for operations whose failure is an expected outcome.

HistoryStore.load returns one: a corrupt or unreadable history file is
something the caller reports to the user, not a crash.
"""

from typing import Generic, TypeVar, cast

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """Holds either a value or the exception that prevented producing it."""

    __slots__ = ("_value", "_error")

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value = value
        self._error = error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.err({self._error!r})"
        return f"Result.ok({self._value!r})"

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        """The value, or re-raise the stored error."""
        if self._error is not None:
            raise self._error
        return cast(ValueT, self._value)

    def unwrap_or(self, default: ValueT) -> ValueT:
        if self._error is not None:
            return default
        return cast(ValueT, self._value)

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error
