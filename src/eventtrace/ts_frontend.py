"""
TypeScript front end built on tree-sitter.

Produces syntax trees for entry files and their auxiliary dependencies, and
small node helpers shared by the binder and the resolver.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from .errors import SourceParseError

TYPESCRIPT = Language(tstypescript.language_typescript())
TSX = Language(tstypescript.language_tsx())

# "class" / "function_expression" only reach the analyzer as ``export default`` values
CLASS_NODE_TYPES = {"class_declaration", "abstract_class_declaration", "class"}
FUNCTION_NODE_TYPES = {"function_declaration", "generator_function_declaration", "function_expression", "function"}

# what directory expansion hands to the parser
SOURCE_SUFFIXES = (".ts", ".tsx", ".mts", ".cts", ".js", ".jsx")


@dataclass(frozen=True)
class FrontEndOptions:
    """How source files are decoded and which grammar reads them."""

    encoding: str = "utf-8"
    tsx_suffixes: Sequence[str] = field(default_factory=lambda: (".tsx", ".jsx"))

    def language_for(self, path: str) -> Language:
        return TSX if Path(path).suffix.lower() in self.tsx_suffixes else TYPESCRIPT


DEFAULT_OPTIONS = FrontEndOptions()

_parsers: Dict[int, Parser] = {}


def _parser_for(language: Language) -> Parser:
    key = id(language)
    if key not in _parsers:
        _parsers[key] = Parser(language)
    return _parsers[key]


def parse_text(text: str, tsx: bool = False) -> Tree:
    """Parse in-memory source (used by tests and callers that already hold the text)."""
    return _parser_for(TSX if tsx else TYPESCRIPT).parse(text.encode("utf-8"))


def parse_source(path: str, options: FrontEndOptions = DEFAULT_OPTIONS) -> Tree:
    """Parse one file. Raises SourceParseError when no tree can be produced."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise SourceParseError(path, e.strerror or str(e)) from e
    try:
        data.decode(options.encoding)
    except UnicodeDecodeError as e:
        raise SourceParseError(path, f"not valid {options.encoding}") from e
    return _parser_for(options.language_for(path)).parse(data)


def _norm(path: str) -> str:
    return os.path.normpath(path)


class SourceProgram:
    """An entry file plus auxiliary files parsed alongside it.

    Only the entry is walked for edges. Dependencies are parsed best-effort
    and kept available through ``get_source_file``; a dependency that cannot
    be read is left out.
    """

    def __init__(
        self,
        entry: str,
        dependencies: Optional[List[str]] = None,
        options: FrontEndOptions = DEFAULT_OPTIONS,
    ) -> None:
        self.entry = entry
        self.options = options
        self._trees: Dict[str, Tree] = {_norm(entry): parse_source(entry, options)}
        self.skipped_dependencies: List[str] = []
        for dep in dependencies or []:
            if _norm(dep) in self._trees:
                continue
            try:
                self._trees[_norm(dep)] = parse_source(dep, options)
            except SourceParseError:
                self.skipped_dependencies.append(dep)

    @property
    def root_names(self) -> List[str]:
        return list(self._trees)

    @property
    def entry_tree(self) -> Tree:
        return self._trees[_norm(self.entry)]

    def get_source_file(self, path: str) -> Optional[Tree]:
        return self._trees.get(_norm(path))


# ---- node helpers ----

def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_name(node: Node) -> Optional[str]:
    """Declared name of a class, function or method, or None when anonymous."""
    name = node.child_by_field_name("name")
    if name is None:
        return None
    return node_text(name) or None


def is_this_keyword(node: Optional[Node]) -> bool:
    return node is not None and node.type == "this"


def top_level_declarations(tree: Tree) -> Iterator[Node]:
    """Direct children of the program, with ``export`` wrappers removed."""
    for child in tree.root_node.named_children:
        if child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            if declaration is None:
                # export default class Foo {} may parse as a class expression
                declaration = child.child_by_field_name("value")
            if declaration is not None:
                yield declaration
            continue
        yield child


def walk_preorder(root: Node, include_root: bool = False) -> Iterator[Node]:
    """Depth-first pre-order over named nodes, without recursion."""
    stack: List[Node] = [root] if include_root else list(reversed(root.named_children))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))
