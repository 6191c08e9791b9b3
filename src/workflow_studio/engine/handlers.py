"""Per-type node actions.

Every integration node is simulated: it waits a fixed (or config-derived)
delay and returns a canned result. Only the AI node reaches a real service,
through `TextGenerator`.

Adding a node type means registering a handler; the engine never changes.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import ChainMap
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from workflow_studio.engine.branching import SwitchBranch
from workflow_studio.errors import HandlerFailure
from workflow_studio.graph.models import NodeType, Severity
from workflow_studio.llm.text_generation import TextGenerator

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "Success"
DEFAULT_PROMPT = "Analyze the previous step and suggest an improvement."
CONDITION_MARKER = "CONDITION_EVALUATED"

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HandlerLog:
    message: str
    severity: Severity = Severity.SUCCESS


@dataclass(frozen=True, slots=True)
class HandlerResult:
    output: str
    logs: tuple[HandlerLog, ...] = ()


class NodeHandler(Protocol):
    """A node's action. May raise; the engine treats any exception as failure."""

    async def execute(self, config: Mapping[str, Any]) -> HandlerResult: ...


@dataclass(frozen=True, slots=True)
class Pacer:
    """Waits simulated delays, scaled so tests and demos can run fast."""

    sleep: Sleep = asyncio.sleep
    scale: float = 1.0

    async def wait_ms(self, delay_ms: float) -> None:
        await self.sleep(max(delay_ms, 0) / 1000.0 * self.scale)


def _render(template: str, *layers: Mapping[str, Any]) -> str:
    """Format `template`; earlier layers win."""
    return template.format_map(ChainMap(*(dict(layer) for layer in layers)))


@dataclass(frozen=True, slots=True)
class SimulatedHandler:
    """Canned action: wait, then return a templated output and one log line.

    Templates use `str.format` fields filled from the node config, falling back
    to `defaults`.
    """

    delay_ms: int
    pacer: Pacer
    output: str = DEFAULT_OUTPUT
    message: str = "Step completed successfully."
    severity: Severity = Severity.SUCCESS
    defaults: Mapping[str, Any] = field(default_factory=dict)

    async def execute(self, config: Mapping[str, Any]) -> HandlerResult:
        await self.pacer.wait_ms(self.delay_ms)
        output = _render(self.output, config, self.defaults)
        message = _render(self.message, {"output": output}, config, self.defaults)
        return HandlerResult(output=output, logs=(HandlerLog(message, self.severity),))


def _number(config: Mapping[str, Any], key: str, default: float) -> float:
    raw = config.get(key, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise HandlerFailure(f"'{key}' must be a number, got {raw!r}") from e


def _format_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


@dataclass(frozen=True, slots=True)
class ArithmeticHandler:
    pacer: Pacer
    delay_ms: int = 300

    async def execute(self, config: Mapping[str, Any]) -> HandlerResult:
        await self.pacer.wait_ms(self.delay_ms)
        a = _number(config, "a", 40)
        b = _number(config, "b", 2)
        operation = str(config.get("operation", "add")).lower()

        if operation == "add":
            value = a + b
        elif operation == "subtract":
            value = a - b
        elif operation == "multiply":
            value = a * b
        elif operation == "divide":
            if b == 0:
                raise HandlerFailure("Division by zero")
            value = a / b
        else:
            raise HandlerFailure(f"Unsupported operation: {operation}")

        output = _format_number(value)
        return HandlerResult(output=output, logs=(HandlerLog(f"Calculated result: {output}"),))


@dataclass(frozen=True, slots=True)
class DelayHandler:
    pacer: Pacer

    async def execute(self, config: Mapping[str, Any]) -> HandlerResult:
        seconds = _number(config, "seconds", 2)
        if seconds < 0:
            raise HandlerFailure("Delay must not be negative")
        await self.pacer.wait_ms(seconds * 1000)
        return HandlerResult(
            output=DEFAULT_OUTPUT,
            logs=(HandlerLog(f"Waiting {_format_number(seconds)} seconds...", Severity.WARNING),),
        )


@dataclass(frozen=True, slots=True)
class SwitchHandler:
    """Pick one of the switch's three outputs at random."""

    pacer: Pacer
    rng: random.Random
    delay_ms: int = 200

    async def execute(self, config: Mapping[str, Any]) -> HandlerResult:
        await self.pacer.wait_ms(self.delay_ms)
        label = self.rng.choice(list(SwitchBranch)).value
        return HandlerResult(
            output=label, logs=(HandlerLog(f"Switch selected branch: {label}", Severity.INFO),)
        )


@dataclass(frozen=True, slots=True)
class TextGenerationHandler:
    generator: TextGenerator
    default_credential: str | None = None

    async def execute(self, config: Mapping[str, Any]) -> HandlerResult:
        prompt = str(config.get("prompt") or DEFAULT_PROMPT)
        credential = config.get("apiKey") or self.default_credential
        text = await self.generator.generate(prompt, credential)
        return HandlerResult(
            output=text,
            logs=(
                HandlerLog("Processing with Gemini...", Severity.INFO),
                HandlerLog("Gemini generated content."),
            ),
        )


def _key(node_type: str | NodeType) -> str:
    return node_type.value if isinstance(node_type, NodeType) else str(node_type)


class NodeHandlerRegistry:
    """Type tag -> handler table with a fallback for unregistered types."""

    def __init__(self, default: NodeHandler) -> None:
        self._handlers: dict[str, NodeHandler] = {}
        self._default = default

    def register(self, node_type: str | NodeType, handler: NodeHandler) -> None:
        key = _key(node_type)
        if key in self._handlers:
            logger.debug("Replacing node handler", extra={"node_type": key})
        self._handlers[key] = handler

    def unregister(self, node_type: str | NodeType) -> None:
        self._handlers.pop(_key(node_type), None)

    def get(self, node_type: str | NodeType) -> NodeHandler:
        return self._handlers.get(_key(node_type), self._default)

    def __contains__(self, node_type: object) -> bool:
        if not isinstance(node_type, (str, NodeType)):
            return False
        return _key(node_type) in self._handlers

    @classmethod
    def with_builtins(
        cls,
        *,
        text_generator: TextGenerator,
        pacer: Pacer | None = None,
        rng: random.Random | None = None,
        default_credential: str | None = None,
    ) -> NodeHandlerRegistry:
        pacer = pacer or Pacer()
        rng = rng or random.Random()

        registry = cls(default=SimulatedHandler(500, pacer))
        for node_type, handler in _builtin_handlers(pacer, rng):
            registry.register(node_type, handler)
        registry.register(
            NodeType.AI_GEMINI,
            TextGenerationHandler(text_generator, default_credential=default_credential),
        )
        return registry


def _builtin_handlers(
    pacer: Pacer, rng: random.Random
) -> Iterable[tuple[NodeType, NodeHandler]]:
    def sim(delay_ms: int, **kwargs: Any) -> SimulatedHandler:
        return SimulatedHandler(delay_ms, pacer, **kwargs)

    return [
        (NodeType.TRIGGER_MANUAL, sim(500, message="Manual trigger activated.")),
        (
            NodeType.TRIGGER_SCHEDULE,
            sim(
                300,
                output="{cron}",
                message="Schedule fired (cron: {cron}).",
                defaults={"cron": "0 9 * * *"},
            ),
        ),
        (
            NodeType.TRIGGER_WEBHOOK,
            sim(
                200,
                output='{{ "event": "user_signup", "id": 123 }}',
                message="Webhook received payload: {output}",
            ),
        ),
        (
            NodeType.ACTION_G_DOCS,
            sim(
                1000,
                output="https://docs.google.com/document/d/{docId}",
                message="Document created: {output}",
                defaults={"docId": "mock-id"},
            ),
        ),
        (
            NodeType.ACTION_G_SHEETS_CREATE,
            sim(
                1000,
                output="https://docs.google.com/spreadsheets/d/{sheetId}",
                message="Spreadsheet created: {output}",
                defaults={"sheetId": "mock-sheet-id"},
            ),
        ),
        (NodeType.ACTION_G_SHEETS, sim(800, message="Row appended to sheet.")),
        (
            NodeType.ACTION_G_CALENDAR_EVENT,
            sim(
                1000,
                output="https://calendar.google.com/event?id={eventId}",
                message="Event created: '{title}' {output}",
                defaults={"eventId": "mock-event-id", "title": "Sync Meeting"},
            ),
        ),
        (
            NodeType.ACTION_G_FORMS_RESPONSE,
            sim(
                900,
                output=(
                    '[{{"respondent": "alice@example.com", "answer": "Yes"}}, '
                    '{{"respondent": "bob@example.com", "answer": "No"}}]'
                ),
                message="Retrieved 2 responses from form {formId}.",
                defaults={"formId": "mock-form-id"},
            ),
        ),
        (
            NodeType.ACTION_EMAIL,
            sim(
                700,
                output="Email sent to {to}",
                message="Email '{subject}' sent to {to}.",
                defaults={"to": "user@example.com", "subject": "Workflow notification"},
            ),
        ),
        (
            NodeType.ACTION_SLACK,
            sim(
                600,
                output="Message posted to {channel}",
                message="Message posted to {channel}.",
                defaults={"channel": "#general"},
            ),
        ),
        (
            NodeType.ACTION_WHATSAPP,
            sim(800, message="Message sent to {phone}", defaults={"phone": "+123456789"}),
        ),
        (
            NodeType.ACTION_WHATSAPP_TEMPLATE,
            sim(
                800,
                output="Template: '{template}' sent to {phone}",
                message="{output}",
                defaults={"template": "order_update", "phone": "+123456789"},
            ),
        ),
        (
            NodeType.ACTION_GITHUB_ISSUE,
            sim(
                1000,
                output="Issue #{issueNumber}",
                message="GitHub Issue #{issueNumber} created successfully.",
                defaults={"issueNumber": 101},
            ),
        ),
        (
            NodeType.ACTION_GITHUB_ACTION,
            sim(1200, message="GitHub Action workflow dispatched successfully."),
        ),
        (
            NodeType.ACTION_SCRAPE,
            sim(
                1500,
                output="<html><body>Mock Scraped Data</body></html>",
                message="Scraped 45kb from URL",
            ),
        ),
        (
            NodeType.ACTION_HTTP_REQUEST,
            sim(
                600,
                output='{{"status": 200, "method": "{method}", "url": "{url}"}}',
                message="{method} {url} -> 200",
                defaults={"method": "GET", "url": "https://api.example.com/data"},
            ),
        ),
        (NodeType.MATH_ADD, ArithmeticHandler(pacer)),
        (NodeType.LOGIC_DELAY, DelayHandler(pacer)),
        (
            NodeType.LOGIC_IF,
            sim(
                200,
                output=CONDITION_MARKER,
                message="Condition evaluated.",
                severity=Severity.INFO,
            ),
        ),
        (NodeType.LOGIC_SWITCH, SwitchHandler(pacer, rng)),
        (
            NodeType.UTILITY_TEXT_INPUT,
            sim(100, output="{text}", message="Text input provided.", defaults={"text": ""}),
        ),
        (
            NodeType.UTILITY_FILE_UPLOAD,
            sim(
                400,
                output="Uploaded {filename}",
                message="File '{filename}' uploaded.",
                defaults={"filename": "document.pdf"},
            ),
        ),
    ]
