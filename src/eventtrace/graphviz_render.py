from __future__ import annotations

from typing import Tuple

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from .dependency_tree import DependencyTree

ROOT_COLOR = "#90CAF9"
DOMAIN_EVENT_COLOR = "#A5D6A7"
INTEGRATION_EVENT_COLOR = "#FFCC80"


def _node_id(kind: str, name: str) -> str:
    # ":" would be read as a port by graphviz; a class can be both a root and an event
    return f"{kind}.{name}"


def render_dependency_tree(
    tree: DependencyTree,
    output_base: str,
    fmt: str = "svg",
    title: str = "",
) -> Tuple[str, str]:
    """Render root classes and the events they trigger.

    Always writes ``<output_base>.dot``; returns ``(dot_path, image_path)``
    where image_path is empty if the Graphviz executable is not installed.
    """
    graph_attr = {"rankdir": "LR", "splines": "spline"}
    if title:
        graph_attr.update({"label": title, "labelloc": "t"})
    dot = Digraph(
        "eventtrace",
        graph_attr=graph_attr,
        node_attr={"shape": "box", "style": "rounded,filled", "fontname": "Helvetica"},
        edge_attr={"arrowhead": "vee"},
    )

    events_seen = set()
    for root in sorted(tree):
        events = tree[root]
        dot.node(_node_id("root", root), label=root, fillcolor=ROOT_COLOR)
        for kind, names, color in (
            ("domain", events.domain_events, DOMAIN_EVENT_COLOR),
            ("integration", events.integration_events, INTEGRATION_EVENT_COLOR),
        ):
            for name in sorted(names):
                event_id = _node_id(kind, name)
                if event_id not in events_seen:
                    dot.node(event_id, label=name, fillcolor=color)
                    events_seen.add(event_id)
                dot.edge(_node_id("root", root), event_id, color="black", style="solid")

    dot_path = f"{output_base}.dot"
    image_path = f"{output_base}.{fmt}"
    dot.save(dot_path)

    try:
        dot.render(output_base, format=fmt, cleanup=True)
    except ExecutableNotFound:
        # Only DOT written; caller should inform user
        image_path = ""
    return dot_path, image_path
