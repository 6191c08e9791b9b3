"""CLI entrypoint for workflow studio."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_studio import __version__
from workflow_studio.core.config import StudioSettings
from workflow_studio.core.logging import configure_logging
from workflow_studio.engine.events import ExecutionEvent, LogAppended
from workflow_studio.graph.models import NodeStatus
from workflow_studio.studio import Studio

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-studio",
        description="Simulate workflow graphs and serve the studio API",
    )
    parser.add_argument("--version", action="version", version=f"workflow-studio {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Execute a workflow graph and print the run log")
    run.add_argument(
        "--graph",
        default=None,
        help="Graph JSON file (defaults to STUDIO_GRAPH_PATH; the starter graph if missing)",
    )
    run.add_argument(
        "--save",
        action="store_true",
        help="Write node statuses and results back to the graph file after the run",
    )
    run.add_argument(
        "--delay-scale",
        type=float,
        default=None,
        help="Multiplier for simulated delays (0 runs instantly)",
    )

    validate = subparsers.add_parser(
        "validate", help="Check a graph file and report start nodes, cycles and dangling edges"
    )
    validate.add_argument("--graph", default=None, help="Graph JSON file")

    serve = subparsers.add_parser("serve", help="Start the REST API")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")

    return parser


def _print_event(event: ExecutionEvent) -> None:
    if isinstance(event, LogAppended):
        entry = event.entry
        print(
            f"{entry.timestamp.strftime('%H:%M:%S')} [{entry.severity.value:<7}] "
            f"{entry.node_label}: {entry.message}"
        )


def _cmd_run(studio: Studio, save: bool) -> int:
    async def _run() -> None:
        async for event in studio.engine.stream():
            _print_event(event)

    asyncio.run(_run())

    if save:
        studio.save()
        logger.info("Graph saved", extra={"path": str(studio.store.path)})

    failed = [n for n in studio.graph.nodes if n.data.status == NodeStatus.ERROR]
    return 4 if failed else 0


def _cmd_validate(studio: Studio) -> int:
    graph = studio.graph
    known = {n.id for n in graph.nodes}
    targets = graph.incoming_targets()
    starts = [n.id for n in graph.nodes if n.id not in targets]
    dangling = [e.id for e in graph.edges if e.source not in known or e.target not in known]
    cyclic = graph.has_cycle()

    print(f"Nodes: {len(graph)}  Edges: {len(graph.edges)}")
    print(f"Start nodes: {', '.join(starts) or 'none'}")
    print(f"Cycle: {'yes' if cyclic else 'no'}")
    print(f"Dangling edges: {', '.join(dangling) or 'none'}")
    return 4 if cyclic or dangling else 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = StudioSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    graph_arg = getattr(args, "graph", None)
    if graph_arg:
        settings = settings.model_copy(update={"graph_path": Path(graph_arg)})
    delay_scale = getattr(args, "delay_scale", None)
    if delay_scale is not None:
        settings = settings.model_copy(
            update={"engine": settings.engine.model_copy(update={"delay_scale": delay_scale})}
        )

    try:
        if args.command == "serve":
            import uvicorn

            from workflow_studio.server.app import create_app

            uvicorn.run(create_app(settings), host=args.host, port=args.port)
            return 0

        studio = Studio.from_settings(settings)

        if args.command == "run":
            return _cmd_run(studio, save=args.save)

        if args.command == "validate":
            return _cmd_validate(studio)

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except ValueError as e:
        logger.error("Invalid graph", extra={"error": str(e)})
        print(f"Invalid graph: {e}", file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
