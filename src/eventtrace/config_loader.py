"""
Configuration loader - YAML files or ``[tool.eventtrace]`` in pyproject.toml
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config_schema import ConfigModel, PathGroupModel, validate_config_data
from .errors import ConfigError

CONFIG_CANDIDATES = (
    "eventtrace.yaml",
    "eventtrace.yml",
    ".eventtrace.yaml",
    ".eventtrace.yml",
    "pyproject.toml",  # only if it has [tool.eventtrace]
)


@dataclass
class PathGroupConfig:
    """One role grouping of a service (handlers, write models, ...)."""
    paths: List[str] = field(default_factory=list)
    class_regex: Optional[str] = None


@dataclass
class ServiceConfig:
    name: str
    write_models: PathGroupConfig = field(default_factory=PathGroupConfig)
    utils: PathGroupConfig = field(default_factory=PathGroupConfig)
    providers: PathGroupConfig = field(default_factory=PathGroupConfig)
    handlers: PathGroupConfig = field(default_factory=PathGroupConfig)

    @property
    def root_regex(self) -> str:
        # no handler regex selects nothing
        return self.handlers.class_regex if self.handlers.class_regex is not None else r"(?!)"


@dataclass
class AnalyzerConfig:
    services: List[ServiceConfig] = field(default_factory=list)
    output: str = "eventtrace_results"
    format: str = "svg"
    include_executions: bool = False


def load_config(config_path: Optional[Path] = None) -> AnalyzerConfig:
    """
    Load configuration.

    Args:
        config_path: explicit config file; searched for in the cwd when None

    Returns:
        AnalyzerConfig: the loaded configuration (defaults when nothing is found)

    Raises:
        ConfigError: the file is missing, unreadable or invalid
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found_config = find_config_file()
    if found_config:
        print(f"Using configuration: {found_config}")
        return _load_config_file(found_config)

    print("No eventtrace configuration found; nothing to analyze.")
    print("  • Generate one: 'eventtrace --init'")
    return AnalyzerConfig()


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """Return the first configuration candidate present in ``cwd``."""
    base = Path(cwd) if cwd is not None else Path(".")
    for name in CONFIG_CANDIDATES:
        candidate = base / name
        if not candidate.exists():
            continue
        if candidate.name == "pyproject.toml":
            if _has_eventtrace_config(candidate):
                return candidate
            continue
        return candidate
    return None


def _load_config_file(config_path: Path) -> AnalyzerConfig:
    if not config_path.exists():
        raise ConfigError(f"configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(config_path)
    elif suffix == ".toml":
        data = _read_toml(config_path)
    else:
        raise ConfigError(f"unsupported configuration format: {suffix}")
    return parse_config_data(data)


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")
    return data


def _read_toml(config_path: Path) -> Dict[str, Any]:
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}") from e
    # pyproject.toml keeps it under [tool.eventtrace]
    if "tool" in data and "eventtrace" in data["tool"]:
        return data["tool"]["eventtrace"]
    return data


def _has_eventtrace_config(pyproject_path: Path) -> bool:
    try:
        with pyproject_path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "tool" in data and "eventtrace" in data["tool"]


def _group(model: PathGroupModel) -> PathGroupConfig:
    return PathGroupConfig(paths=list(model.paths), class_regex=model.class_regex)


def parse_config_data(data: Dict[str, Any]) -> AnalyzerConfig:
    """Validate raw config data and convert it to an AnalyzerConfig."""
    model: ConfigModel = validate_config_data(data or {})
    config = AnalyzerConfig()
    if model.output is not None:
        config.output = model.output
    if model.format is not None:
        config.format = model.format
    if model.include_executions is not None:
        config.include_executions = model.include_executions
    config.services = [
        ServiceConfig(
            name=svc.name,
            write_models=_group(svc.write_models),
            utils=_group(svc.utils),
            providers=_group(svc.providers),
            handlers=_group(svc.handlers),
        )
        for svc in model.services
    ]
    return config


def create_example_config() -> str:
    """Example configuration file content."""
    return """# eventtrace configuration
version: "1.0"

# where dependency_tree.json (and the rendered graph) are written
output: "eventtrace_results"
# svg | png | none
format: "svg"
# also write every execution edge into the report
include_executions: false

services:
  - name: "orders"
    # analyzed first: aggregates / write models
    write_models:
      paths:
        - "services/orders/src/domain"
    # analyzed second: shared helpers
    utils:
      paths:
        - "services/orders/src/utils"
    # recorded, not walked
    providers:
      paths:
        - "services/orders/src/providers"
    # analyzed last; class_regex selects the dependency tree roots
    handlers:
      paths:
        - "services/orders/src/handlers"
      class_regex: "Handler$"
"""


def save_example_config(output_path: Optional[Path] = None, force: bool = False) -> Path:
    """Write the example configuration; refuses to overwrite unless ``force``."""
    if output_path is None:
        output_path = Path("eventtrace.yaml")
    if output_path.exists() and not force:
        raise ConfigError(f"{output_path} already exists (use --force to overwrite)")
    output_path.write_text(create_example_config(), encoding="utf-8")
    return output_path
