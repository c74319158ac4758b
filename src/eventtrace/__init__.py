"""
eventtrace - map TypeScript handler classes to the events they may trigger

Simple API:

    from eventtrace import analyze_service, load_config

    config = load_config()
    for service in config.services:
        result = analyze_service(service)
        for handler, events in result.tree.items():
            print(handler, sorted(events.domain_events))
"""

from .config_loader import AnalyzerConfig, ServiceConfig, load_config
from .dependency_tree import EventSets, build_dependency_tree
from .edges import ExecutionEdge, Index
from .errors import ConfigError, EventTraceError, SourceParseError
from .execution_graph import ExecutionGraph


def analyze_service(*args, **kwargs):
    """Lazy import wrapper for run_service to avoid loading the parser at package import time."""
    from .service_runner import run_service

    return run_service(*args, **kwargs)


from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("eventtrace")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = [
    "AnalyzerConfig",
    "ConfigError",
    "EventSets",
    "EventTraceError",
    "ExecutionEdge",
    "ExecutionGraph",
    "Index",
    "ServiceConfig",
    "SourceParseError",
    "analyze_service",
    "build_dependency_tree",
    "load_config",
    "__version__",
]
