"""
Parameter name -> declared type name, for one parameter list.

Only plain identifier parameters are bound. Destructured (``{a, b}: T``),
rest (``...xs``) and ``this`` parameters are left out, so calls through them
stay unresolved.

Type names go through an alias map when one is given, so a parameter typed
with ``type Repo = OrderRepository`` (declared in the file or one of its
imports) or with an ``import { OrderService as Svc }`` rename binds to the class
name.
"""
from __future__ import annotations

from typing import Dict, Optional

from tree_sitter import Node, Tree

from .ts_frontend import SourceProgram, node_name, node_text, top_level_declarations, walk_preorder

ParameterTypeMap = Dict[str, Optional[str]]
TypeAliasMap = Dict[str, str]

PARAMETER_NODE_TYPES = {"required_parameter", "optional_parameter"}


def fallback_token(type_node: Node) -> str:
    # angle brackets never appear in a class name
    return f"<{type_node.type}>"


def type_name(type_node: Optional[Node]) -> Optional[str]:
    """Name of a referenced named type, or a fallback token for anything else.

    ``Repo`` and ``Repo<Order>`` give ``"Repo"``; ``ns.Repo`` gives ``"Repo"``;
    ``string``, ``Repo[]``, unions and literal types give e.g. ``"<array_type>"``.
    """
    if type_node is None:
        return None
    if type_node.type == "type_annotation":
        inner = type_node.named_children
        if not inner:
            return None
        type_node = inner[0]
    if type_node.type == "type_identifier":
        return node_text(type_node)
    if type_node.type == "generic_type":
        return type_name(type_node.child_by_field_name("name"))
    if type_node.type == "nested_type_identifier":
        name = type_node.child_by_field_name("name")
        if name is not None:
            return node_text(name)
    return fallback_token(type_node)


def build_parameter_map(parameters: Optional[Node], aliases: Optional[TypeAliasMap] = None) -> ParameterTypeMap:
    """Bind every plain identifier parameter of a ``formal_parameters`` node."""
    bindings: ParameterTypeMap = {}
    if parameters is None:
        return bindings
    for param in parameters.named_children:
        if param.type not in PARAMETER_NODE_TYPES:
            continue
        pattern = param.child_by_field_name("pattern")
        # ignore destructured params (for now)
        if pattern is None or pattern.type != "identifier":
            continue
        bound = type_name(param.child_by_field_name("type"))
        bindings[node_text(pattern)] = resolve_alias(aliases, bound) if aliases else bound
    return bindings


def first_constructor(class_body: Optional[Node]) -> Optional[Node]:
    """The first constructor implementation of a class body, if any."""
    if class_body is None:
        return None
    for member in class_body.named_children:
        if member.type == "method_definition" and node_name(member) == "constructor":
            return member
    return None


def build_class_parameter_map(class_node: Node, aliases: Optional[TypeAliasMap] = None) -> ParameterTypeMap:
    """Bindings from the class's first constructor; empty without one."""
    ctor = first_constructor(class_node.child_by_field_name("body"))
    if ctor is None:
        return {}
    return build_parameter_map(ctor.child_by_field_name("parameters"), aliases)


# ---- type aliases ----

def declared_type_aliases(tree: Tree) -> TypeAliasMap:
    """Top-level ``type A = B`` declarations whose value names a type."""
    aliases: TypeAliasMap = {}
    for node in top_level_declarations(tree):
        if node.type != "type_alias_declaration":
            continue
        alias = node_name(node)
        target = type_name(node.child_by_field_name("value"))
        # only named targets; "<union_type>" and friends would never match a class
        if alias and target and not target.startswith("<"):
            aliases[alias] = target
    return aliases


def import_renames(tree: Tree) -> TypeAliasMap:
    """``import { B as A }`` renames: local name -> imported name."""
    renames: TypeAliasMap = {}
    for node in tree.root_node.named_children:
        if node.type != "import_statement":
            continue
        for spec in walk_preorder(node):
            if spec.type != "import_specifier":
                continue
            local = spec.child_by_field_name("alias")
            imported = spec.child_by_field_name("name")
            if local is not None and imported is not None:
                renames[node_text(local)] = node_text(imported)
    return renames


def program_type_aliases(program: SourceProgram) -> TypeAliasMap:
    """Aliases visible from the entry file of ``program``.

    Type aliases declared in any parsed file, then the entry file's import
    renames. The entry's own declarations win over those of its dependencies.
    """
    aliases: TypeAliasMap = {}
    for name in reversed(program.root_names):
        tree = program.get_source_file(name)
        if tree is not None:
            aliases.update(declared_type_aliases(tree))
    aliases.update(import_renames(program.entry_tree))
    return aliases


def resolve_alias(aliases: TypeAliasMap, name: Optional[str]) -> Optional[str]:
    """Follow alias chains to the final name; stops on cycles."""
    seen = set()
    while name is not None and name in aliases and name not in seen:
        seen.add(name)
        name = aliases[name]
    return name
