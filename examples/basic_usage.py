#!/usr/bin/env python3
"""Programmatic run example.

This demonstrates using the studio components directly:

* load settings from `.env`
* build a small branching workflow with the editor
* run it and print the console log

Nothing is persisted unless `--save` is given.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from workflow_studio.core.config import StudioSettings
from workflow_studio.core.logging import configure_logging
from workflow_studio.studio import Studio


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a small workflow (programmatic example).")
    parser.add_argument("--prompt", default="Write a product announcement.", help="AI node prompt")
    parser.add_argument("--save", action="store_true", help="Persist the graph after the run")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = StudioSettings()
    configure_logging(settings.log_level)

    studio = Studio.from_settings(settings)
    editor = studio.editor

    # Start from an empty canvas: Manual -> If -> (Gemini | Slack)
    editor.load([], [])
    start = editor.drop_node({"type": "trigger_manual", "label": "Start"})
    check = editor.drop_node(
        {"type": "logic_if", "label": "Has budget?", "config": {"logicMode": "random"}}
    )
    write = editor.drop_node(
        {"type": "ai_gemini", "label": "Draft", "config": {"prompt": args.prompt}}
    )
    notify = editor.drop_node({"type": "action_slack", "label": "Notify", "config": {"channel": "ops"}})
    if not (start and check and write and notify):
        print("Failed to build the example graph")
        return 1

    editor.connect(start.id, check.id)
    editor.connect(check.id, write.id)
    editor.connect(check.id, notify.id, "false")

    asyncio.run(studio.engine.run())

    for entry in studio.log.entries:
        print(f"[{entry.severity.value:<7}] {entry.node_label}: {entry.message}")

    if args.save:
        studio.save()
        print(f"Persisted to: {studio.store.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
