"""Exception types shared across the studio."""

from __future__ import annotations


class StudioError(Exception):
    """Base class for workflow studio errors."""


class HandlerFailure(StudioError):
    """A node's action failed.

    Raised by node handlers; the engine records it on the node and halts only
    that node's branch.
    """


class InvalidDropPayload(StudioError):
    """A node drop request carried no usable node type."""


class MissingGraphContext(StudioError):
    """An editor mutation arrived before a graph was attached."""
