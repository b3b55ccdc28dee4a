from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from codeflow.config import EngineConfig, get_config
from codeflow.errors import ConfigurationError
from codeflow.llm import MockModelClient
from codeflow.logging import configure_logging
from codeflow.workflow import (
    GraphExecutionResult,
    Workflow,
    WorkflowEngine,
    get_node_registry,
    get_template,
    list_templates,
    register_all_nodes,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codeflow", description="Run coding-assistant workflow graphs")
    parser.add_argument("--log-level", default=None, help="DEBUG | INFO | WARNING | ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Execute a workflow")
    run.add_argument("workflow", nargs="?", help="Path to a workflow JSON file")
    run.add_argument("--template", "-t", help="Run a pre-built workflow by id instead of a file")
    run.add_argument("--message", "-m", action="append", default=[], help="User message (repeatable)")
    run.add_argument("--project", help="Project root path")
    run.add_argument("--file", dest="current_file", help="Current file, relative to --project")
    run.add_argument("--mock", action="store_true", help="Use the offline mock model backend")
    run.add_argument(
        "--legacy-routing",
        action="store_true",
        help="Always follow the first declared edge, ignoring conditional outcomes",
    )

    sub.add_parser("templates", help="List pre-built workflows")
    sub.add_parser("nodes", help="List registered node types")
    sub.add_parser("config", help="Show the effective configuration (secrets masked)")

    validate = sub.add_parser("validate", help="Check a workflow JSON file for structural problems")
    validate.add_argument("workflow", help="Path to a workflow JSON file")
    return parser


def _load_workflow(console: Console, path: Optional[str], template_id: Optional[str]) -> Optional[Workflow]:
    if template_id:
        workflow = get_template(template_id)
        if workflow is None:
            console.print(f"[bold red]Unknown template[/bold red]: {template_id}")
        return workflow
    if not path:
        console.print("[bold red]Give a workflow file or --template ID[/bold red]")
        return None
    try:
        return Workflow.from_file(path)
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[bold red]Could not load workflow[/bold red] {path}: {e}")
        return None


def _print_result(console: Console, result: GraphExecutionResult) -> None:
    table = Table(title=f"Steps (session {result.session_id})")
    table.add_column("#", justify="right")
    table.add_column("node")
    table.add_column("type")
    table.add_column("ms", justify="right")
    for i, step in enumerate(result.steps, start=1):
        table.add_row(str(i), step.node_name or step.node_id, step.node_type.value, f"{step.duration_ms:.0f}")
    console.print(table)

    if not result.success:
        console.print(f"[bold red]{result.error_type}[/bold red]: {result.error}")
        return

    console.rule("Transcript")
    for message in result.output.messages if result.output else ():
        label = message.role if not message.name else f"{message.role}:{message.name}"
        console.print(f"[bold]{label}[/bold]")
        console.print(message.content, markup=False)


def _cmd_run(console: Console, args: argparse.Namespace) -> int:
    workflow = _load_workflow(console, args.workflow, args.template)
    if workflow is None:
        return 1

    initial: Dict[str, Any] = {
        "messages": [{"role": "user", "content": m} for m in args.message],
        "projectPath": args.project,
        "currentFile": args.current_file,
    }
    try:
        engine = WorkflowEngine(
            model_client=MockModelClient() if args.mock else None,
            legacy_routing=True if args.legacy_routing else None,
        )
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error[/bold red]: {e}")
        return 1

    result = engine.run_workflow(workflow, initial)
    _print_result(console, result)
    return 0 if result.success else 1


def _cmd_templates(console: Console) -> int:
    table = Table(title="Templates")
    table.add_column("id")
    table.add_column("name")
    table.add_column("nodes", justify="right")
    table.add_column("description")
    for workflow in list_templates():
        table.add_row(workflow.id, workflow.name, str(len(workflow.nodes)), workflow.description)
    console.print(table)
    return 0


def _cmd_nodes(console: Console) -> int:
    table = Table(title="Node types")
    table.add_column("type")
    table.add_column("label")
    table.add_column("category")
    table.add_column("outcomes")
    for node in get_node_registry().list_all():
        ports = ", ".join(p.id for p in node.output_ports)
        table.add_row(node.node_type.value, node.label, node.category, ports)
    console.print(table)
    return 0


def _cmd_validate(console: Console, path: str) -> int:
    workflow = _load_workflow(console, path, None)
    if workflow is None:
        return 1
    engine_config: EngineConfig = get_config("engine")  # type: ignore[assignment]
    errors: List[str] = workflow.validate_graph(engine_config.terminal_marker)
    if not errors:
        console.print(f"[bold green]OK[/bold green] {workflow.name}: "
                      f"{len(workflow.nodes)} nodes, {len(workflow.edges)} edges")
        return 0
    for error in errors:
        console.print(f"[red]-[/red] {error}")
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    console = Console()

    engine_config: EngineConfig = get_config("engine")  # type: ignore[assignment]
    configure_logging(args.log_level or engine_config.log_level)
    register_all_nodes()

    if args.command == "run":
        return _cmd_run(console, args)
    if args.command == "templates":
        return _cmd_templates(console)
    if args.command == "nodes":
        return _cmd_nodes(console)
    if args.command == "validate":
        return _cmd_validate(console, args.workflow)
    if args.command == "config":
        console.print_json(describe_config())
        return 0
    return 1


def describe_config() -> str:
    """Current config sections as JSON, secrets masked."""
    sections = {name: get_config(name).to_dict() for name in ("api", "engine")}
    return json.dumps(sections, indent=2)


if __name__ == "__main__":
    raise SystemExit(main())
