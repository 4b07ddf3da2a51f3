"""Custom exceptions for unwrap-core.

This module provides the exception hierarchy used by the resolver.
None of these escape ``unwrap()``: collaborator failures and cycles are
recorded on attempts and traces, and only configuration problems are
raised to the caller.
"""

from __future__ import annotations

from typing import Any


class UnwrapError(Exception):
    """Base exception for all unwrap-core errors.

    Attributes:
        message: Human-readable error message
        metadata: Additional error context

    Example:
        >>> try:
        ...     config = ResolverConfig.from_yaml("missing.yaml")
        ... except UnwrapError as e:
        ...     print(f"unwrap-core error: {e}")
    """

    def __init__(self, message: str, *, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for traces and event payloads.

        Returns:
            Dictionary with error details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "metadata": self.metadata,
        }


class CollaboratorError(UnwrapError):
    """A wrapper, delegation link or proxy introspector raised.

    Collaborators are untrusted. Their failures are converted into an
    absent relation and kept here for diagnostics.

    Example:
        >>> error = CollaboratorError.from_exception(exc, operation="supports")
        >>> error.cause is exc
        True
    """

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        operation: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, metadata=metadata)
        self.cause = cause
        self.operation = operation

    @classmethod
    def from_exception(
        cls, exc: BaseException, *, operation: str | None = None
    ) -> CollaboratorError:
        """Wrap an exception raised by a collaborator call."""
        label = operation or "collaborator call"
        return cls(
            f"{label} failed: {type(exc).__name__}: {exc}",
            cause=exc,
            operation=operation,
            metadata={"cause_type": type(exc).__name__},
        )


class ConfigurationError(UnwrapError):
    """Resolver configuration is invalid or could not be loaded.

    Example:
        >>> raise ConfigurationError("max_depth must be >= 1")
    """

    pass


class ResolutionCycleError(UnwrapError):
    """A handle was reached twice during one resolution.

    Only recorded in traces and events; ``unwrap()`` returns None instead.
    """

    pass


__all__ = [
    "UnwrapError",
    "CollaboratorError",
    "ConfigurationError",
    "ResolutionCycleError",
]
