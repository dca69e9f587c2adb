"""Minimal success/failure result pair for structural outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]


class DependencyErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    CIRCULAR_DEPENDENCY = "CIRCULAR_DEPENDENCY"


@dataclass(frozen=True)
class DependencyError:
    code: DependencyErrorCode
    message: str
    segment_ids: tuple[str, ...] = ()
    details: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.message


__all__ = ["DependencyError", "DependencyErrorCode", "Err", "Ok", "Result"]
