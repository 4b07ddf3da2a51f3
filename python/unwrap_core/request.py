"""Capability request type for the resolver.

This module defines the CapabilityRequest dataclass that carries the
capability asked of the wrapper protocol and the capability the caller
ultimately wants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .capabilities import Capability


@dataclass(frozen=True)
class CapabilityRequest:
    """What a resolution is looking for.

    Attributes:
        unwrap_capability: Capability asked of the wrapper protocol.
        target_capability: Capability the returned handle must exhibit.

    Example:
        >>> request = CapabilityRequest(DATA_SOURCE, POOLED)
        >>> request.is_compatible()
        True
        >>> CapabilityRequest.for_target(DATA_SOURCE).is_simple()
        True
    """

    unwrap_capability: Capability
    target_capability: Capability

    def __post_init__(self) -> None:
        for label, value in (
            ("unwrap_capability", self.unwrap_capability),
            ("target_capability", self.target_capability),
        ):
            if not isinstance(value, Capability):
                raise TypeError(f"{label} must be a Capability, got {type(value).__name__}")

    @classmethod
    def for_target(cls, target: Capability) -> CapabilityRequest:
        """Create a request where both capabilities are the same.

        Protocol unwrap is only attempted when ``target.interface`` is true.
        """
        return cls(target, target)

    @classmethod
    def of(
        cls, unwrap_capability: Capability, target_capability: Capability | None = None
    ) -> CapabilityRequest:
        """Create a request from the two- or three-argument ``unwrap`` form."""
        if target_capability is None:
            return cls.for_target(unwrap_capability)
        return cls(unwrap_capability, target_capability)

    def is_simple(self) -> bool:
        """Check whether unwrap and target capabilities coincide."""
        return self.unwrap_capability == self.target_capability

    def is_compatible(self) -> bool:
        """Check whether protocol-unwrap results can be used as the target.

        True when the target capability is the unwrap capability or extends it.
        """
        return self.unwrap_capability.is_assignable_from(self.target_capability)

    def protocol_eligible(self) -> bool:
        """Check whether the wrapper protocol may be asked for this request."""
        return self.unwrap_capability.interface and self.is_compatible()

    def describe(self) -> dict[str, Any]:
        """Return a loggable description of the request."""
        return {
            "unwrap_capability": self.unwrap_capability.name,
            "target_capability": self.target_capability.name,
        }
