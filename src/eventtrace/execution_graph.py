"""
Append-only, multi-indexed store of execution edges for one service.

Every edge is filed under all five indices of ``Index``. Lists per key keep
insertion order and are never deduplicated; dict ordering keeps key
iteration deterministic.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from .edges import ExecutionEdge, Index


class ExecutionGraph:
    """Edges seen while analyzing one service."""

    def __init__(self) -> None:
        self._edges: List[ExecutionEdge] = []
        self._indices: Dict[Index, Dict[str, List[ExecutionEdge]]] = {index: {} for index in Index}

    def __len__(self) -> int:
        return len(self._edges)

    @property
    def edges(self) -> List[ExecutionEdge]:
        return list(self._edges)

    def insert(self, edge: ExecutionEdge) -> None:
        self._edges.append(edge)
        for index, collection in self._indices.items():
            collection.setdefault(edge.key(index), []).append(edge)

    def extend(self, edges: Iterable[ExecutionEdge]) -> None:
        for edge in edges:
            self.insert(edge)

    def lookup(self, index: Index, key: str) -> List[ExecutionEdge]:
        return list(self._indices[index].get(key, []))

    def keys(self, index: Index) -> List[str]:
        return list(self._indices[index])

    def for_each_matching_key(
        self,
        index: Index,
        predicate: Callable[[str], bool],
        visit: Callable[[str, List[ExecutionEdge]], None],
    ) -> None:
        # snapshot so a visitor may not observe its own inserts
        for key, edges in list(self._indices[index].items()):
            if predicate(key):
                visit(key, list(edges))

    def successors(self, edge: ExecutionEdge) -> List[ExecutionEdge]:
        """Edges leaving the function ``edge`` points at."""
        return self.lookup(Index.ORIGIN, edge.destination_key)

    def group_by(self, index: Index) -> Dict[str, List[ExecutionEdge]]:
        return {key: list(edges) for key, edges in self._indices[index].items()}

    def pretty_lines(self, index: Index = Index.ORIGIN, full_names: bool = False) -> List[str]:
        """One ``[key]: dest, dest`` line per key of ``index``."""
        lines: List[str] = []
        for key, edges in self._indices[index].items():
            names = [e.full_execution_name() if full_names else e.execution_name() for e in edges]
            lines.append(f"[{key}]: {', '.join(names)}")
        return lines

    def pretty_print(self, index: Index = Index.ORIGIN, full_names: bool = False) -> None:
        for line in self.pretty_lines(index, full_names=full_names):
            print(line)
