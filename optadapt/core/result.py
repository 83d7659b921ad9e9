"""Ok / Err result values for optadapt.

Adapter operations never raise on domain failure. They hand back either
Ok(value) or Err(error) and the caller branches with ``match``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, NoReturn, final


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def and_then[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
        """Chain a further fallible step onto the value."""
        return f(self.value)

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:  # noqa: ARG002
        return self

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:  # noqa: ARG002
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def map(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        return self

    def and_then(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        """Short-circuit: the chained step is never run."""
        return self

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))

    def unwrap(self) -> NoReturn:
        raise RuntimeError(f"unwrap called on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default


type Result[T, E] = Ok[T] | Err[E]


def unwrap[T](result: Ok[T] | Err[Any]) -> T:
    """Return the Ok value or raise RuntimeError. Tests and boundaries only."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise RuntimeError(f"unwrap called on Err: {error}")
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")


def sequence[T, E](results: Iterable[Ok[T] | Err[E]]) -> Ok[list[T]] | Err[E]:
    """Gather Ok values into a list, stopping at the first Err."""
    collected: list[T] = []
    for r in results:
        match r:
            case Err():
                return r
            case Ok(value):
                collected.append(value)
    return Ok(collected)
