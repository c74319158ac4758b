"""
Execution edges and the keys they are indexed under.

An edge records that ``from_class.from_function`` may call or construct
``exec_class.exec_function``. Any of the four parts may be absent (``None``):
a free function has no class, a construction has no function.

Keys are composed only here. An absent part is written as ``ABSENT_KEY``,
which cannot occur inside a TypeScript identifier.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

ABSENT_KEY = "~"


class Index(Enum):
    """The closed set of indices kept by an ExecutionGraph."""

    FROM_FUNCTION = "from_function"
    FROM_CLASS = "from_class"
    EXEC_FUNCTION = "exec_function"
    EXEC_CLASS = "exec_class"
    ORIGIN = "origin"


def compose_key(class_name: Optional[str], function_name: Optional[str]) -> str:
    return f"{_part(class_name)}.{_part(function_name)}"


def _part(value: Optional[str]) -> str:
    return ABSENT_KEY if value is None else value


def _render(class_name: Optional[str], function_name: Optional[str]) -> str:
    # Drop an absent part together with its dot; keep one marker if both are absent.
    parts = [p for p in (class_name, function_name) if p is not None]
    if not parts:
        return ABSENT_KEY
    return ".".join(parts)


@dataclass(frozen=True)
class ExecutionEdge:
    from_class: Optional[str] = None
    from_function: Optional[str] = None
    exec_class: Optional[str] = None
    exec_function: Optional[str] = None

    @property
    def origin_key(self) -> str:
        return compose_key(self.from_class, self.from_function)

    @property
    def destination_key(self) -> str:
        return compose_key(self.exec_class, self.exec_function)

    @property
    def is_leaf(self) -> bool:
        """True for constructions and naming-convention events (no function called)."""
        return self.exec_function is None

    def key(self, index: Index) -> str:
        if index is Index.ORIGIN:
            return self.origin_key
        if index is Index.FROM_CLASS:
            return _part(self.from_class)
        if index is Index.FROM_FUNCTION:
            return _part(self.from_function)
        if index is Index.EXEC_CLASS:
            return _part(self.exec_class)
        if index is Index.EXEC_FUNCTION:
            return _part(self.exec_function)
        raise ValueError(f"unknown index: {index!r}")

    def execution_name(self) -> str:
        """Short form: ``exec_class.exec_function``."""
        return _render(self.exec_class, self.exec_function)

    def full_execution_name(self) -> str:
        """Long form: ``from_class.from_function >> exec_class.exec_function``."""
        return f"{_render(self.from_class, self.from_function)} >> {self.execution_name()}"

    def to_dict(self) -> dict:
        return {
            "from_class": self.from_class,
            "from_function": self.from_function,
            "exec_class": self.exec_class,
            "exec_function": self.exec_function,
        }
