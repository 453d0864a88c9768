from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union


T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Ok[T], Err[E]]


def is_ok(result: Ok[Any] | Err[Any]) -> bool:
    return isinstance(result, Ok)


def is_err(result: Ok[Any] | Err[Any]) -> bool:
    return isinstance(result, Err)
