import re
from pathlib import Path

import pytest

from eventtrace.config_loader import (
    create_example_config,
    find_config_file,
    load_config,
    parse_config_data,
    save_example_config,
)
from eventtrace.errors import ConfigError


def test_yaml_config_is_loaded(tmp_path):
    cfg = tmp_path / "eventtrace.yaml"
    cfg.write_text(
        """
output: out
include_executions: true
services:
  - name: orders
    write_models:
      paths: [domain]
    handlers:
      paths: [handlers]
      class_regex: "Handler$"
""",
        encoding="utf-8",
    )
    config = load_config(cfg)
    assert config.output == "out"
    assert config.include_executions is True
    assert config.format == "svg"
    [svc] = config.services
    assert svc.name == "orders"
    assert svc.write_models.paths == ["domain"]
    assert svc.utils.paths == []
    assert svc.root_regex == "Handler$"


def test_camel_case_keys_are_accepted():
    config = parse_config_data(
        {"services": [{"name": "s", "writeModels": {"paths": ["a"]}, "handlers": {"classRegex": "^H"}}]}
    )
    assert config.services[0].write_models.paths == ["a"]
    assert config.services[0].handlers.class_regex == "^H"


def test_missing_handler_regex_matches_nothing():
    config = parse_config_data({"services": [{"name": "s"}]})
    assert re.search(config.services[0].root_regex, "AnyHandler") is None


@pytest.mark.parametrize(
    "data",
    [
        {"services": [{"name": "s", "handlers": {"class_regex": "(unclosed"}}]},
        {"services": [{"name": "s", "handler": {}}]},
        {"unknown_key": 1},
        {"services": [{"write_models": {}}]},
        {"format": "jpeg2"},
    ],
)
def test_invalid_config_raises_config_error(data):
    with pytest.raises(ConfigError):
        parse_config_data(data)


def test_malformed_yaml_raises_config_error(tmp_path):
    cfg = tmp_path / "eventtrace.yaml"
    cfg.write_text("services: [\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(cfg)


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_pyproject_is_used_only_with_tool_section(tmp_path):
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "x"\n', encoding="utf-8")
    assert find_config_file(tmp_path) is None

    pyproject.write_text(
        '[tool.eventtrace]\noutput = "res"\n\n[[tool.eventtrace.services]]\nname = "billing"\n',
        encoding="utf-8",
    )
    assert find_config_file(tmp_path) == pyproject
    config = load_config(pyproject)
    assert config.output == "res"
    assert [s.name for s in config.services] == ["billing"]


def test_yaml_wins_over_pyproject(tmp_path):
    (tmp_path / "pyproject.toml").write_text("[tool.eventtrace]\n", encoding="utf-8")
    (tmp_path / ".eventtrace.yml").write_text("services: []\n", encoding="utf-8")
    assert find_config_file(tmp_path) == tmp_path / ".eventtrace.yml"


def test_no_config_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = load_config()
    assert config.services == []
    assert config.output == "eventtrace_results"


def test_example_config_is_valid_and_not_overwritten(tmp_path):
    target = tmp_path / "eventtrace.yaml"
    assert save_example_config(target) == target
    config = load_config(target)
    assert config.services[0].name == "orders"
    assert config.services[0].root_regex == "Handler$"

    with pytest.raises(ConfigError):
        save_example_config(target)
    target.write_text("", encoding="utf-8")
    save_example_config(target, force=True)
    assert target.read_text(encoding="utf-8") == create_example_config()


def test_empty_yaml_gives_defaults(tmp_path):
    cfg = Path(tmp_path) / "eventtrace.yml"
    cfg.write_text("", encoding="utf-8")
    assert load_config(cfg).services == []


@pytest.mark.parametrize("fmt", ["svg", "png", "pdf", "none"])
def test_supported_graph_formats(fmt):
    assert parse_config_data({"format": fmt}).format == fmt


def test_unreadable_config_path_raises_config_error(tmp_path):
    # exists, but is a directory
    cfg = tmp_path / "eventtrace.yaml"
    cfg.mkdir()
    with pytest.raises(ConfigError):
        load_config(cfg)

    toml_dir = tmp_path / "settings.toml"
    toml_dir.mkdir()
    with pytest.raises(ConfigError):
        load_config(toml_dir)
