import json

import pytest

from eventtrace.cli import main
from eventtrace.dependency_tree import EventSets
from eventtrace.edges import ExecutionEdge
from eventtrace.errors import SourceParseError
from eventtrace.execution_graph import ExecutionGraph
from eventtrace.graphviz_render import render_dependency_tree
from eventtrace.report import build_report, save_report
from eventtrace.service_runner import ServiceResult


def _result() -> ServiceResult:
    graph = ExecutionGraph()
    graph.insert(ExecutionEdge("H", "handle", "Done"))
    return ServiceResult(
        name="orders",
        graph=graph,
        tree={"H": EventSets(domain_events={"Done", "Audited"})},
        failures=[SourceParseError("bad.ts", "not valid utf-8")],
        providers=["providers/mailer.ts"],
    )


def test_report_shape():
    report = build_report([_result()], include_executions=True)
    assert report["version"] == "1.0"
    [svc] = report["services"]
    assert svc["summary"] == {
        "executions": 1,
        "roots": 1,
        "failed_files": ["bad.ts"],
        "providers": ["providers/mailer.ts"],
    }
    assert svc["dependency_tree"] == {"H": {"domain_events": ["Audited", "Done"], "integration_events": []}}
    assert svc["executions"] == [
        {"from_class": "H", "from_function": "handle", "exec_class": "Done", "exec_function": None}
    ]


def test_save_report_writes_json(tmp_path):
    out = save_report([_result()], tmp_path / "results")
    data = json.loads(out.read_text(encoding="utf-8"))
    assert out.name == "dependency_tree.json"
    assert "executions" not in data["services"][0]


def test_render_writes_dot_file(tmp_path):
    tree = {"PlaceOrderHandler": EventSets(domain_events={"OrderPlaced"})}
    dot_path, _ = render_dependency_tree(tree, str(tmp_path / "orders_events"), title="orders")
    source = (tmp_path / "orders_events.dot").read_text(encoding="utf-8")
    assert dot_path.endswith("orders_events.dot")
    assert '"root.PlaceOrderHandler" -> "domain.OrderPlaced"' in source


def test_cli_init_writes_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    main(["--init"])
    assert (tmp_path / "eventtrace.yaml").exists()

    with pytest.raises(SystemExit) as exc:
        main(["--init"])
    assert exc.value.code == 2


def test_cli_bad_config_exits_with_2(tmp_path):
    cfg = tmp_path / "eventtrace.yaml"
    cfg.write_text("bogus: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(cfg)])
    assert exc.value.code == 2


def _project(tmp_path, broken=False):
    handlers = tmp_path / "handlers"
    handlers.mkdir()
    (handlers / "h.ts").write_text(
        "export class PingHandler { handle() { new Pinged(); } }\n", encoding="utf-8"
    )
    if broken:
        (handlers / "broken.ts").write_bytes(b"\xff\xfe")
    cfg = tmp_path / "eventtrace.yaml"
    cfg.write_text(
        f"""
services:
  - name: ping
    handlers:
      paths: ["{handlers.as_posix()}"]
      class_regex: "Handler$"
""",
        encoding="utf-8",
    )
    return cfg


def test_cli_run_writes_report(tmp_path):
    cfg = _project(tmp_path)
    out = tmp_path / "out"
    main(["--config", str(cfg), "--output", str(out), "--format", "none"])
    data = json.loads((out / "dependency_tree.json").read_text(encoding="utf-8"))
    assert data["services"][0]["dependency_tree"] == {
        "PingHandler": {"domain_events": ["Pinged"], "integration_events": []}
    }


def test_cli_parse_failure_exits_with_1(tmp_path):
    cfg = _project(tmp_path, broken=True)
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(cfg), "--output", str(tmp_path / "out"), "--format", "none"])
    assert exc.value.code == 1
    assert (tmp_path / "out" / "dependency_tree.json").exists()


def test_cli_unknown_graph_format_in_config_exits_with_2(tmp_path):
    cfg = _project(tmp_path)
    cfg.write_text(cfg.read_text(encoding="utf-8") + 'format: "jpeg2"\n', encoding="utf-8")
    out = tmp_path / "out"
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(cfg), "--output", str(out)])
    assert exc.value.code == 2
    assert not (out / "dependency_tree.json").exists()


def test_cli_config_path_that_is_a_directory_exits_with_2(tmp_path):
    cfg = tmp_path / "x.yaml"
    cfg.mkdir()
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(cfg)])
    assert exc.value.code == 2
