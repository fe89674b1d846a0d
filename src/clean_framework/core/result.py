"""Two-variant result type used at every success/failure fold point.

``Left`` carries the failure payload, ``Right`` the success payload.
Both are frozen dataclasses, so they compare structurally and work with
``match`` statements::

    match result:
        case Left(failure):
            ...
        case Right(response):
            ...
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

L = TypeVar("L")
R = TypeVar("R")
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Left(Generic[L]):
    """Failure branch."""

    value: L

    @property
    def is_left(self) -> bool:
        return True

    @property
    def is_right(self) -> bool:
        return False

    def fold(self, on_left: Callable[[L], T], on_right: Callable[[object], T]) -> T:
        return on_left(self.value)


@dataclass(frozen=True, slots=True)
class Right(Generic[R]):
    """Success branch."""

    value: R

    @property
    def is_left(self) -> bool:
        return False

    @property
    def is_right(self) -> bool:
        return True

    def fold(self, on_left: Callable[[object], T], on_right: Callable[[R], T]) -> T:
        return on_right(self.value)


Result = Union[Left[L], Right[R]]


def fold(
    result: Result[L, R],
    on_left: Callable[[L], T],
    on_right: Callable[[R], T],
) -> T:
    """Apply ``on_left`` or ``on_right`` depending on the variant."""
    match result:
        case Left(value):
            return on_left(value)
        case Right(value):
            return on_right(value)
    raise TypeError(f"Expected Left or Right, got {type(result).__name__}")
