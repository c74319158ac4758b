"""
Per-service orchestration.

Each service gets its own ExecutionGraph, filled by three passes in a fixed
order (write models, utils, handlers), after which the dependency tree is
built from the handler root regex. Later passes resolve collaborator calls
against classes recorded by earlier ones, so the order matters.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .call_sites import FileExecutionsAnalyzer
from .config_loader import AnalyzerConfig, PathGroupConfig, ServiceConfig
from .dependency_tree import DependencyTree, build_dependency_tree
from .edges import Index
from .errors import SourceParseError
from .execution_graph import ExecutionGraph
from .import_scanner import first_level_dependencies
from .ts_frontend import SOURCE_SUFFIXES

DependencyFinder = Callable[[str], List[str]]


@dataclass
class ServiceResult:
    name: str
    graph: ExecutionGraph
    tree: DependencyTree
    failures: List[SourceParseError] = field(default_factory=list)
    providers: List[str] = field(default_factory=list)


def normalize_paths(paths: List[str]) -> List[str]:
    """Expand directories one level (non-recursive); drop paths that do not exist.

    Only source files are taken from a directory; a file named explicitly is
    kept whatever its suffix.
    """
    out: List[str] = []
    for path in paths:
        p = Path(path)
        if not p.exists():
            continue
        if p.is_dir():
            for name in sorted(os.listdir(p)):
                if not name.endswith(SOURCE_SUFFIXES) or not (p / name).is_file():
                    continue
                out.append(f"{path.rstrip('/')}/{name}")
        elif p.is_file():
            out.append(path)
    return out


def _analyze_files(analyzer: FileExecutionsAnalyzer, paths: List[str], failures: List[SourceParseError]) -> None:
    for path in paths:
        if not Path(path).is_file():
            continue
        try:
            analyzer.analyze(path)
        except SourceParseError as e:
            print(f"Skipping [{path}]: {e.reason}")
            failures.append(e)


def analyze_write_models(
    service: str,
    config: PathGroupConfig,
    graph: ExecutionGraph,
    failures: Optional[List[SourceParseError]] = None,
) -> None:
    print(f"Analyzing {service} write models")
    _analyze_files(FileExecutionsAnalyzer(graph), normalize_paths(config.paths), failures if failures is not None else [])


def analyze_utils(
    service: str,
    config: PathGroupConfig,
    graph: ExecutionGraph,
    failures: Optional[List[SourceParseError]] = None,
) -> None:
    print(f"Analyzing {service} utils")
    _analyze_files(FileExecutionsAnalyzer(graph), normalize_paths(config.paths), failures if failures is not None else [])


def analyze_handlers(
    service: str,
    config: PathGroupConfig,
    graph: ExecutionGraph,
    failures: Optional[List[SourceParseError]] = None,
    find_dependencies: DependencyFinder = first_level_dependencies,
) -> None:
    """Handler pass: each handler is parsed together with its first-level imports."""
    print(f"Analyzing {service} handlers")
    failures = failures if failures is not None else []
    analyzer = FileExecutionsAnalyzer(graph)
    for path in normalize_paths(config.paths):
        if ".spec" in Path(path).name or not Path(path).is_file():
            continue
        deps = find_dependencies(path)
        try:
            analyzer.analyze(path, deps)
        except SourceParseError as e:
            print(f"Skipping [{path}]: {e.reason}")
            failures.append(e)


def run_service(
    service: ServiceConfig,
    show_executions: bool = False,
    full_names: bool = False,
    find_dependencies: DependencyFinder = first_level_dependencies,
) -> ServiceResult:
    graph = ExecutionGraph()
    failures: List[SourceParseError] = []

    analyze_write_models(service.name, service.write_models, graph, failures)
    analyze_utils(service.name, service.utils, graph, failures)
    analyze_handlers(service.name, service.handlers, graph, failures, find_dependencies=find_dependencies)

    if show_executions:
        graph.pretty_print(Index.ORIGIN, full_names=full_names)

    tree = build_dependency_tree(graph, service.root_regex)
    print(f"{service.name}: {len(graph)} executions, {len(tree)} root classes")
    return ServiceResult(
        name=service.name,
        graph=graph,
        tree=tree,
        failures=failures,
        providers=normalize_paths(service.providers.paths),
    )


def run(config: AnalyzerConfig, show_executions: bool = False, full_names: bool = False) -> List[ServiceResult]:
    """Analyze every configured service with a fresh graph each."""
    return [
        run_service(service, show_executions=show_executions, full_names=full_names)
        for service in config.services
    ]
