"""
JSON report for analyzed services.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .dependency_tree import tree_to_dict
from .service_runner import ServiceResult


def service_report(result: ServiceResult, include_executions: bool = False) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "name": result.name,
        "summary": {
            "executions": len(result.graph),
            "roots": len(result.tree),
            "failed_files": [e.path for e in result.failures],
            "providers": list(result.providers),
        },
        "dependency_tree": tree_to_dict(result.tree),
    }
    if include_executions:
        report["executions"] = [e.to_dict() for e in result.graph.edges]
    return report


def build_report(results: List[ServiceResult], include_executions: bool = False) -> Dict[str, Any]:
    return {
        "version": "1.0",
        "services": [service_report(r, include_executions=include_executions) for r in results],
    }


def save_report(results: List[ServiceResult], output_dir: Path, include_executions: bool = False) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    out = output_dir / "dependency_tree.json"
    out.write_text(
        json.dumps(build_report(results, include_executions=include_executions), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return out
