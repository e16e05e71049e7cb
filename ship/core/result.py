"""Ok/Err return values for the pipeline.

Steps that can fail in an expected way (a missing tool, a partial staging
area, an unknown machine) return ``Ok(value)`` or ``Err(error)``. Only the
CLI turns an ``Err`` into console output and an exit code:

    match area.stage(target, binary):
        case Ok(staged):
            console.success(str(staged.path))
        case Err(error):
            print_staging_error(error, console)

Callers that only need to bail out narrow with ``isinstance(r, Err)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")

__all__ = ["Ok", "Err", "Result"]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
