"""
First-level import discovery for a TypeScript file.

Collects the local modules a file imports directly so they can be parsed as
auxiliary files next to it. Only relative specifiers (``./x``, ``../x``) are
resolved; package imports live under node_modules and are ignored.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from .errors import SourceParseError
from .ts_frontend import node_text, parse_source, walk_preorder

RESOLVE_SUFFIXES = (".ts", ".tsx", ".d.ts", ".js", ".jsx")

SOURCE_FIELD_NODE_TYPES = {"import_statement", "export_statement", "import_require_clause"}


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "'\"`":
        return literal[1:-1]
    return literal


def import_specifiers(path: str) -> List[str]:
    """Module specifiers imported by ``path``, in source order, without duplicates."""
    tree = parse_source(path)
    found: List[str] = []
    for node in walk_preorder(tree.root_node):
        source = None
        if node.type in SOURCE_FIELD_NODE_TYPES:
            source = node.child_by_field_name("source")
        elif node.type == "call_expression":
            callee = node.child_by_field_name("function")
            args = node.child_by_field_name("arguments")
            # require("x") / import("x")
            if callee is not None and args is not None and (
                callee.type == "import" or (callee.type == "identifier" and node_text(callee) == "require")
            ):
                first = args.named_children[0] if args.named_children else None
                if first is not None and first.type == "string":
                    source = first
        if source is None:
            continue
        spec = _unquote(node_text(source))
        if spec and spec not in found:
            found.append(spec)
    return found


def resolve_specifier(importer: str, specifier: str) -> Optional[Path]:
    """Resolve a relative specifier against the importing file, or None."""
    if not specifier.startswith("."):
        return None
    base = Path(importer).parent / specifier
    if base.is_file():
        return base
    for suffix in RESOLVE_SUFFIXES:
        candidate = base.parent / (base.name + suffix)
        if candidate.is_file():
            return candidate
    for suffix in RESOLVE_SUFFIXES:
        candidate = base / f"index{suffix}"
        if candidate.is_file():
            return candidate
    return None


def first_level_dependencies(path: str, root: str = ".") -> List[str]:
    """Paths (relative to ``root``) of the local files ``path`` imports directly.

    Never raises: on any failure the file is analyzed without dependencies.
    """
    try:
        specifiers = import_specifiers(path)
    except (SourceParseError, OSError, ValueError) as e:
        print(f"Could not read imports of [{path}]: {e}")
        return []
    deps: List[str] = []
    for spec in specifiers:
        try:
            resolved = resolve_specifier(path, spec)
        except OSError:
            continue
        if resolved is None or "node_modules" in resolved.parts:
            continue
        rel = os.path.relpath(resolved, root)
        if rel not in deps:
            deps.append(rel)
    return deps
