"""Pydantic models for unwrap-core.

This module provides the data models shared by the resolver, the
logging helpers and the event bridge: relation kinds, structured log
context and the resolution trace.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ResolutionCycleError


class RelationKind(str, Enum):
    """Kinds of wrapping relation the resolver can follow."""

    PROTOCOL_UNWRAP = "protocol-unwrap"
    """Handle produced the capability through the wrapper protocol."""

    DELEGATE = "delegate"
    """Handle forwards to a single inner target of the same base type."""

    PROXY_TARGET = "proxy-target"
    """Handle is a dynamic proxy standing in for a singleton target."""


class LogContext(BaseModel):
    """Context fields for structured logging.

    Example:
        >>> context = LogContext(
        ...     handle_type="PoolWrapper",
        ...     capability="DataSource",
        ...     strategy="delegation",
        ... )
        >>> log_debug("Following delegate", context)
    """

    handle_type: str | None = Field(
        default=None,
        description="Type name of the handle being inspected.",
    )
    capability: str | None = Field(
        default=None,
        description="Name of the requested target capability.",
    )
    strategy: str | None = Field(
        default=None,
        description="Strategy that produced the log line.",
    )
    relation: str | None = Field(
        default=None,
        description="Relation kind being followed.",
    )
    depth: int | None = Field(
        default=None,
        description="Hop index within the current resolution.",
    )
    operation: str | None = Field(
        default=None,
        description="Collaborator operation being attempted.",
    )


class ResolutionHop(BaseModel):
    """One handle visited during a resolution.

    Attributes:
        depth: Hop index, 0 for the handle passed by the caller.
        handle_type: Qualified type name of the visited handle.
        relation: Relation followed away from this handle, if any.
        strategy: Name of the strategy that discovered the relation.
    """

    depth: int = Field(ge=0)
    handle_type: str
    relation: RelationKind | None = None
    strategy: str | None = None


class StrategyFailure(BaseModel):
    """A collaborator failure recovered during resolution."""

    depth: int = Field(ge=0)
    strategy: str
    handle_type: str
    error_type: str
    message: str


class ResolutionTrace(BaseModel):
    """Record of a single resolution, returned by ``CapabilityResolver.trace``.

    Example:
        >>> trace = resolver.trace(handle, DATA_SOURCE)
        >>> [hop.relation for hop in trace.hops]
        [<RelationKind.DELEGATE: 'delegate'>, <RelationKind.PROXY_TARGET: 'proxy-target'>, None]
        >>> trace.resolved
        True
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    unwrap_capability: str
    target_capability: str
    hops: list[ResolutionHop] = Field(default_factory=list)
    failures: list[StrategyFailure] = Field(default_factory=list)
    result: Any = None
    cycle_error: ResolutionCycleError | None = None
    depth_exceeded: bool = False

    @property
    def resolved(self) -> bool:
        """Whether a handle satisfying the target capability was found."""
        return self.result is not None

    @property
    def cycle_detected(self) -> bool:
        """Whether resolution stopped on a handle reached twice."""
        return self.cycle_error is not None

    @property
    def relations(self) -> list[RelationKind]:
        """Relations followed, in order."""
        return [hop.relation for hop in self.hops if hop.relation is not None]


__all__ = [
    "RelationKind",
    "LogContext",
    "ResolutionHop",
    "StrategyFailure",
    "ResolutionTrace",
]
