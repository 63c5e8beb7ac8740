"""
Result: the two-track value every crlset stage returns.

A stage hands back Success(value) or Failure(FailureDescription) rather than
raising. Chaining with flat_map keeps only the success path in view; the
first Failure rides through the remaining stages untouched:

    check_update ──ok──▶ download ──ok──▶ extract_entry ──▶ Result[bytes]
         └── Failure ──────┴── Failure ───────┴───────────▶ Result[bytes]

Success and Failure each implement the operations for their own track, so
there is no branching on the variant inside this module.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from crlset.railway.failure import ErrorCode, FailureDescription, RailwayError

T = TypeVar("T")
U = TypeVar("U")


class Result(Generic[T]):
    """
    Base of Success and Failure.

        >>> Result.success(21).map(lambda x: x * 2).value()
        42
        >>> Result.failure(ErrorCode.TRUNCATED, "short").map(lambda x: x * 2).is_failure()
        True
    """

    __slots__ = ()

    def is_success(self) -> bool:
        raise NotImplementedError

    def is_failure(self) -> bool:
        return not self.is_success()

    def value(self) -> T:
        """The success value. Raises ValueError on a Failure."""
        raise NotImplementedError

    def error(self) -> FailureDescription:
        """The failure description. Raises ValueError on a Success."""
        raise NotImplementedError

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        raise NotImplementedError

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        raise NotImplementedError

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Run `action` on a success value and return self."""
        raise NotImplementedError

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        """Run `action` on a failure description and return self."""
        raise NotImplementedError

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure_from(error: FailureDescription) -> Result[T]:
        return Failure(error)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: BaseException | None = None,
        stage: str | None = None,
    ) -> Result[T]:
        """
        Build a Failure from its parts.

            Result.failure(ErrorCode.TRUNCATED, "CRLSet truncated at serial", stage="serial")
        """
        return Failure(FailureDescription(code, message, exception=exception, stage=stage))

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        error_code: ErrorCode,
        error_message: str,
    ) -> Result[T]:
        """
        Call `computation` and put whatever it returns or raises on a track.

        A RailwayError keeps its own code, message and stage; any other
        exception becomes `error_code` with "`error_message`: <exception>".
        """
        try:
            value = computation()
        except RailwayError as e:
            return Failure(e.describe())
        except Exception as e:
            return Result.failure(error_code, f"{error_message}: {e}", e)
        return Success(value)

    @staticmethod
    def all_of(results: Iterable[Result[T]]) -> Result[list[T]]:
        """
        Gather a stream of Results into one Result of list.

        The stream is pulled lazily and abandoned at its first Failure.
        """
        values: list[T] = []
        for result in results:
            if result.is_failure():
                return Failure(result.error())
            values.append(result.value())
        return Success(values)


@dataclass(frozen=True, slots=True)
class Success(Result[T]):
    """Success track. None is not a value."""

    _value: T

    def __post_init__(self) -> None:
        if self._value is None:
            raise TypeError("Success value must not be None")

    def is_success(self) -> bool:
        return True

    def value(self) -> T:
        return self._value

    def error(self) -> FailureDescription:
        raise ValueError(f"Cannot get error from a Success: {self._value!r}")

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Success(mapper(self._value))

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return mapper(self._value)

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        action(self._value)
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        return self

    def __repr__(self) -> str:
        return f"Success({self._value!r})"


@dataclass(frozen=True, slots=True)
class Failure(Result[T]):
    """Failure track. Two failures are equal when code and message match."""

    _error: FailureDescription

    def is_success(self) -> bool:
        return False

    def value(self) -> T:
        raise ValueError(f"Cannot get value from a Failure: {self._error.message}")

    def error(self) -> FailureDescription:
        return self._error

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Failure(self._error)

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return Failure(self._error)

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        action(self._error)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Failure):
            return NotImplemented
        return (self._error.code, self._error.message) == (other._error.code, other._error.message)

    def __hash__(self) -> int:
        return hash((self._error.code, self._error.message))

    def __repr__(self) -> str:
        stage = f" @ {self._error.stage}" if self._error.stage else ""
        return f"Failure({self._error.code.value}{stage}: {self._error.message!r})"
