"""
Call-site resolution: turn function and method bodies into execution edges.

Recognized shapes, checked on every node of a body in pre-order:

- ``f(...)``            -> exec_function=f, no class
- ``this.m(...)``       -> exec_class=<current class>, exec_function=m
- ``this.p.m(...)``     -> exec_class=<declared type of constructor param p>, exec_function=m
- ``p.m(...)``          -> same, for a bound parameter p of a free function
- ``new X(...)``        -> exec_class=X, no function
- identifiers ending in ``IntegrationEvent`` / ``Command`` -> exec_class=name, no function

Anything else produces no edge. The identifier rule fires on every occurrence
(type references, property names, parameter declarations), so the same class
can be reported several times from one body.
"""
from __future__ import annotations

from typing import Callable, List, Optional

from tree_sitter import Node, Tree

from .edges import ExecutionEdge
from .execution_graph import ExecutionGraph
from .param_binding import (
    ParameterTypeMap,
    TypeAliasMap,
    build_class_parameter_map,
    build_parameter_map,
    declared_type_aliases,
    import_renames,
    program_type_aliases,
)
from .ts_frontend import (
    CLASS_NODE_TYPES,
    DEFAULT_OPTIONS,
    FUNCTION_NODE_TYPES,
    FrontEndOptions,
    SourceProgram,
    is_this_keyword,
    node_name,
    node_text,
    parse_text,
    top_level_declarations,
    walk_preorder,
)

EVENT_SUFFIXES = ("IntegrationEvent", "Command")

IDENTIFIER_NODE_TYPES = {
    "identifier",
    "type_identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
}


def is_event_name(name: str) -> bool:
    return name.endswith(EVENT_SUFFIXES)


class CallSiteResolver:
    """Resolves the call sites of one body for a given origin."""

    def __init__(
        self,
        emit: Callable[[ExecutionEdge], None],
        from_class: Optional[str],
        from_function: Optional[str],
        parameters: ParameterTypeMap,
        bind_bare_receivers: bool = False,
    ) -> None:
        self._emit = emit
        self.from_class = from_class
        self.from_function = from_function
        self.parameters = parameters
        # p.m(...) through a parameter; enabled for free functions only
        self.bind_bare_receivers = bind_bare_receivers

    def _edge(self, exec_class: Optional[str] = None, exec_function: Optional[str] = None) -> None:
        self._emit(
            ExecutionEdge(
                from_class=self.from_class,
                from_function=self.from_function,
                exec_class=exec_class,
                exec_function=exec_function,
            )
        )

    def resolve_body(self, body: Optional[Node]) -> None:
        if body is None:
            return
        for node in walk_preorder(body):
            self.find_executions(node)
            self.find_events(node)

    def scan_parameters(self, parameters: Optional[Node]) -> None:
        """Apply the identifier rule to everything inside a parameter list."""
        if parameters is None:
            return
        for node in walk_preorder(parameters):
            if node.type in IDENTIFIER_NODE_TYPES:
                self.find_events(node)

    def find_executions(self, node: Node) -> None:
        if node.type != "call_expression":
            return
        callee = node.child_by_field_name("function")
        if callee is None:
            return

        # doSomething()
        if callee.type == "identifier":
            self._edge(exec_function=node_text(callee))
            return

        if callee.type != "member_expression":
            return
        receiver = callee.child_by_field_name("object")
        member = callee.child_by_field_name("property")
        if member is None or member.type != "property_identifier":
            return
        method = node_text(member)

        # this.callMe()
        if is_this_keyword(receiver):
            self._edge(exec_class=self.from_class, exec_function=method)
            return

        # this.service.whatAmI()
        if receiver is not None and receiver.type == "member_expression":
            owner = receiver.child_by_field_name("object")
            field = receiver.child_by_field_name("property")
            if is_this_keyword(owner) and field is not None and field.type == "property_identifier":
                self._edge(exec_class=self.parameters.get(node_text(field)), exec_function=method)
            return

        # service.whatAmI() inside a free function, only for typed parameters
        if self.bind_bare_receivers and receiver is not None and receiver.type == "identifier":
            bound = self.parameters.get(node_text(receiver))
            if bound is not None:
                self._edge(exec_class=bound, exec_function=method)

    def find_events(self, node: Node) -> None:
        # new DomainEvent()
        if node.type == "new_expression":
            ctor = node.child_by_field_name("constructor")
            if ctor is not None and ctor.type == "identifier":
                self._edge(exec_class=node_text(ctor))
            return
        if node.type in IDENTIFIER_NODE_TYPES:
            name = node_text(node)
            if is_event_name(name):
                self._edge(exec_class=name)


class FileExecutionsAnalyzer:
    """Walks top-level classes and functions of files into one ExecutionGraph.

    The graph is shared across every file analyzed with this instance.
    """

    def __init__(self, graph: ExecutionGraph, options: FrontEndOptions = DEFAULT_OPTIONS) -> None:
        self.graph = graph
        self.options = options
        self.file_name: Optional[str] = None
        self.program: Optional[SourceProgram] = None

    def init(self, file_name: str, dependencies: Optional[List[str]] = None) -> SourceProgram:
        """Parse ``file_name`` (and its auxiliary files) into a fresh program."""
        self.file_name = file_name
        self.program = SourceProgram(file_name, dependencies or [], options=self.options)
        return self.program

    def analyze(self, file_name: str, dependencies: Optional[List[str]] = None) -> None:
        program = self.init(file_name, dependencies)
        print(f"Traversing [{file_name}]")
        for dep in program.skipped_dependencies:
            print(f"  Could not read dependency [{dep}]")
        self.analyze_tree(program.entry_tree, program_type_aliases(program))

    def analyze_tree(self, tree: Tree, aliases: Optional[TypeAliasMap] = None) -> None:
        for node in top_level_declarations(tree):
            if node.type in CLASS_NODE_TYPES:
                self.analyze_class(node, aliases)
            elif node.type in FUNCTION_NODE_TYPES:
                self.analyze_function(node, aliases)

    def analyze_function(self, function_node: Node, aliases: Optional[TypeAliasMap] = None) -> None:
        name = node_name(function_node)
        if name is None:
            return
        params = function_node.child_by_field_name("parameters")
        resolver = CallSiteResolver(
            self.graph.insert,
            from_class=None,
            from_function=name,
            parameters=build_parameter_map(params, aliases),
            bind_bare_receivers=True,
        )
        resolver.scan_parameters(params)
        resolver.resolve_body(function_node.child_by_field_name("body"))

    def analyze_class(self, class_node: Node, aliases: Optional[TypeAliasMap] = None) -> None:
        class_name = node_name(class_node)
        body = class_node.child_by_field_name("body")
        if class_name is None or body is None:
            return
        bindings = build_class_parameter_map(class_node, aliases)
        for member in body.named_children:
            if member.type != "method_definition":
                continue
            method_name = node_name(member)
            if method_name is None or method_name == "constructor":
                continue
            self.analyze_method(class_name, method_name, member, bindings)

    def analyze_method(
        self,
        class_name: str,
        method_name: str,
        method_node: Node,
        bindings: ParameterTypeMap,
    ) -> None:
        resolver = CallSiteResolver(
            self.graph.insert,
            from_class=class_name,
            from_function=method_name,
            parameters=bindings,
        )
        resolver.scan_parameters(method_node.child_by_field_name("parameters"))
        resolver.resolve_body(method_node.child_by_field_name("body"))


def analyze_source(text: str, graph: Optional[ExecutionGraph] = None, tsx: bool = False) -> ExecutionGraph:
    """Analyze in-memory TypeScript source into ``graph`` (a new one by default)."""
    graph = graph if graph is not None else ExecutionGraph()
    tree = parse_text(text, tsx=tsx)
    aliases = declared_type_aliases(tree)
    aliases.update(import_renames(tree))
    FileExecutionsAnalyzer(graph).analyze_tree(tree, aliases)
    return graph
