"""
Dependency tree: for each root class, the event classes it may trigger.

The walk starts from every edge whose ``from_class`` is the root and follows
destination keys through the origin index. An edge without ``exec_function``
(a construction or a naming-convention event) is a leaf and its class is
recorded. A ``(exec_class, exec_function)`` pair is expanded at most once per
root, which is what makes cyclic call graphs terminate.

``integration_events`` is part of the output shape but is never filled:
naming-convention events are classified together with constructed classes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Set, Tuple, Union

from .edges import ABSENT_KEY, ExecutionEdge, Index
from .execution_graph import ExecutionGraph


@dataclass
class EventSets:
    domain_events: Set[str] = field(default_factory=set)
    integration_events: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "domain_events": sorted(self.domain_events),
            "integration_events": sorted(self.integration_events),
        }


DependencyTree = Dict[str, EventSets]


def collect_events(
    graph: ExecutionGraph,
    seeds: List[ExecutionEdge],
    visited: Optional[Set[Tuple[Optional[str], Optional[str]]]] = None,
) -> EventSets:
    """Walk from ``seeds`` and return the event classes reached.

    ``visited`` is threaded through the walk and updated in place; pass a
    fresh set (or None) per root.
    """
    events = EventSets()
    if visited is None:
        visited = set()
    stack: List[ExecutionEdge] = list(reversed(seeds))
    while stack:
        edge = stack.pop()
        if edge.is_leaf:
            if edge.exec_class is not None:
                events.domain_events.add(edge.exec_class)
            continue
        target = (edge.exec_class, edge.exec_function)
        if target in visited:
            continue
        visited.add(target)
        # reversed keeps the successors in insertion order when popped
        stack.extend(reversed(graph.successors(edge)))
    return events


def build_dependency_tree(
    graph: ExecutionGraph, root_regex: Union[str, Pattern[str]]
) -> DependencyTree:
    """Build the tree for every class of ``graph`` matching ``root_regex``.

    The regex is applied with ``re.search`` semantics, so ``Handler`` matches
    anywhere in the name and ``^Handler`` only at the start.
    """
    regex = re.compile(root_regex) if isinstance(root_regex, str) else root_regex
    tree: DependencyTree = {}

    def is_root(class_name: str) -> bool:
        return class_name != ABSENT_KEY and regex.search(class_name) is not None

    def visit(class_name: str, seeds: List[ExecutionEdge]) -> None:
        tree[class_name] = collect_events(graph, seeds, visited=set())

    graph.for_each_matching_key(Index.FROM_CLASS, is_root, visit)
    return tree


def tree_to_dict(tree: DependencyTree) -> Dict[str, Dict[str, List[str]]]:
    return {name: events.to_dict() for name, events in tree.items()}
