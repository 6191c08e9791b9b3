"""Branch selection for fan-out after a node succeeds.

Branch labels live on edges as `sourceHandle`. An edge without a label is the
primary output: it matches a switch's `default` case and an if-node's true
side, and nothing else.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from workflow_studio.graph.models import Edge, NodeType

logger = logging.getLogger(__name__)


class SwitchBranch(str, Enum):
    DEFAULT = "default"
    CASE1 = "case1"
    CASE2 = "case2"


class IfBranch(str, Enum):
    TRUE = "true"
    FALSE = "false"


class LogicMode(str, Enum):
    TRUE = "true"
    FALSE = "false"
    RANDOM = "random"


# Handle label an if-node's false output carries; the true output is unlabeled.
IF_FALSE_HANDLE = IfBranch.FALSE.value


def parse_logic_mode(value: object) -> LogicMode:
    if isinstance(value, bool):
        return LogicMode.TRUE if value else LogicMode.FALSE
    if value is None:
        return LogicMode.TRUE
    try:
        return LogicMode(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown logicMode; defaulting to true", extra={"logic_mode": str(value)})
        return LogicMode.TRUE


class BranchResolver:
    """Decide which outgoing edges a just-executed node activates."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def select(
        self,
        node_type: str,
        output: str,
        candidates: Sequence[Edge],
        config: Mapping[str, Any] | None = None,
    ) -> list[Edge]:
        if node_type == NodeType.LOGIC_SWITCH.value:
            return self._select_switch(output, candidates)
        if node_type == NodeType.LOGIC_IF.value:
            branch = self.decide_if(config or {})
            logger.debug("If branch decided", extra={"branch": branch.value})
            return self._select_if(branch, candidates)
        return list(candidates)

    def decide_if(self, config: Mapping[str, Any]) -> IfBranch:
        mode = parse_logic_mode(config.get("logicMode"))
        if mode is LogicMode.RANDOM:
            return IfBranch.TRUE if self._rng.random() < 0.5 else IfBranch.FALSE
        return IfBranch.TRUE if mode is LogicMode.TRUE else IfBranch.FALSE

    @staticmethod
    def _select_switch(output: str, candidates: Sequence[Edge]) -> list[Edge]:
        is_default = output == SwitchBranch.DEFAULT.value
        return [
            e
            for e in candidates
            if e.source_handle == output or (e.source_handle is None and is_default)
        ]

    @staticmethod
    def _select_if(branch: IfBranch, candidates: Sequence[Edge]) -> list[Edge]:
        if branch is IfBranch.TRUE:
            return [e for e in candidates if e.source_handle is None]
        return [e for e in candidates if e.source_handle == IF_FALSE_HANDLE]
