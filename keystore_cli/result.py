"""Result type for the application layer.

The keytool layer raises exceptions; everything the CLI calls returns a
``Result`` instead, so that command functions can report errors uniformly
without try/except blocks of their own.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

# T represents the success value type
T = TypeVar("T")
# E represents the error value type (a message string in practice)
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    """An operation that produced a value."""

    value: T

    def map(self: "Success[T]", f: Callable[[T], Any]) -> "Success[Any]":
        """Apply function to the value and return new Success."""
        return Success(f(self.value))

    def unwrap(self: "Success[T]") -> T:
        """Get the value."""
        return self.value


@dataclass(frozen=True)
class Failure(Generic[E]):
    """An operation that failed with an error."""

    error: E

    def map(self: "Failure[E]", _f: Callable[[Any], Any]) -> "Failure[E]":
        """No-op for failures."""
        return self

    def unwrap(self: "Failure[E]") -> None:
        """Raise, there is no value to return."""
        raise ValueError(f"Cannot unwrap Failure: {self.error}")


Result = Success[T] | Failure[E]
