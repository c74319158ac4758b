#!/usr/bin/env python3
"""
CLI entrypoint for eventtrace

  eventtrace                     analyze the services of the discovered config
  eventtrace --config x.yaml     analyze with an explicit config
  eventtrace --init [--force]    write an example eventtrace.yaml
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import get_args

from .config_loader import load_config, save_example_config
from .config_schema import GraphFormat
from .errors import ConfigError


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="eventtrace", description="Map handler classes to the events they may trigger"
    )
    parser.add_argument("--config", default=None, help="Path to config (YAML or pyproject.toml)")
    parser.add_argument("--output", default=None, help="Override output directory (default from config)")
    parser.add_argument(
        "--format", default=None, choices=list(get_args(GraphFormat)), help="Graph format; 'none' skips rendering"
    )
    parser.add_argument("--show-executions", action="store_true", help="Print the execution index of each service")
    parser.add_argument("--full-names", action="store_true", help="With --show-executions, print origin >> destination")
    parser.add_argument("--init", action="store_true", help="Generate an example eventtrace.yaml")
    parser.add_argument("--force", action="store_true", help="With --init, overwrite an existing file")

    args = parser.parse_args(argv)

    if args.init:
        try:
            path = save_example_config(force=args.force)
        except ConfigError as e:
            print(f"❌ {e}")
            sys.exit(2)
        print(f"✅ Configuration written: {path}")
        return

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(2)

    # Lazy import to keep --init/--help free of tree-sitter startup
    from .report import save_report
    from .service_runner import run

    results = run(config, show_executions=args.show_executions, full_names=args.full_names)

    out_dir = Path(args.output or config.output)
    report_path = save_report(results, out_dir, include_executions=config.include_executions)
    print(f"\n📄 Dependency tree written: {report_path}")

    fmt = args.format or config.format
    if fmt != "none":
        from .graphviz_render import render_dependency_tree

        for result in results:
            dot_path, image_path = render_dependency_tree(
                result.tree, str(out_dir / f"{result.name}_events"), fmt=fmt, title=result.name
            )
            if image_path:
                print(f"🖼  {result.name}: {image_path}")
            else:
                print(f"⚠  Graphviz 'dot' not found; only DOT written: {dot_path}")

    failures = sum(len(r.failures) for r in results)
    if failures:
        print(f"⚠  {failures} file(s) could not be parsed")
        sys.exit(1)


if __name__ == "__main__":
    main()
