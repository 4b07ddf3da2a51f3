"""Scoped best-effort calls into untrusted collaborators.

Every call the resolver makes into a wrapper, delegation link or proxy
introspector goes through ``attempt()``. A raised exception never leaves
the attempt: it becomes an ``Absent`` outcome carrying a
``CollaboratorError``, logged at debug level.

Example:
    >>> outcome = attempt(handle.inner_target, description="inner_target")
    >>> if outcome.is_present:
    ...     follow(outcome.value)
    >>> elif outcome.error is not None:
    ...     print(outcome.error.message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .exceptions import CollaboratorError
from .logging import log_debug
from .protocols import own_method

if TYPE_CHECKING:
    from .capabilities import Capability

T = TypeVar("T")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """Outcome of a best-effort collaborator call.

    Attributes:
        value: The produced value when present, otherwise None.
        error: The recovered failure, if the call raised.
    """

    value: T | None = None
    error: CollaboratorError | None = None

    @classmethod
    def present(cls, value: T) -> Attempt[T]:
        return cls(value=value)

    @classmethod
    def absent(cls, error: CollaboratorError | None = None) -> Attempt[T]:
        return cls(error=error)

    @property
    def is_present(self) -> bool:
        return self.value is not None

    @property
    def failed(self) -> bool:
        return self.error is not None


ABSENT: Attempt[Any] = Attempt()


def attempt(
    fn: Callable[..., T | None],
    *args: Any,
    description: str | None = None,
    **kwargs: Any,
) -> Attempt[T]:
    """Call ``fn`` and convert any failure into an absent outcome.

    A None return is also absent, without an error.

    Args:
        fn: Collaborator callable.
        *args: Positional arguments for ``fn``.
        description: Operation label used in the error and log line.
        **kwargs: Keyword arguments for ``fn``.

    Returns:
        Attempt holding the value, or the recovered error.
    """
    label = description or getattr(fn, "__name__", "collaborator call")
    try:
        value = fn(*args, **kwargs)
    except Exception as e:
        error = CollaboratorError.from_exception(e, operation=label)
        log_debug(
            f"Collaborator call '{label}' failed, treating relation as absent",
            {"operation": label, "error_type": type(e).__name__, "error": str(e)},
        )
        return Attempt.absent(error)

    if value is None:
        return ABSENT
    return Attempt.present(value)


def safe_produce(handle: Any, capability: Capability) -> Attempt[Any]:
    """Ask a handle to produce a capability through the wrapper protocol.

    Absent when the capability is not an interface capability, when the
    handle does not implement the protocol, when ``supports`` returns a
    falsy value, or when either call raises.

    Args:
        handle: Possibly a WrapperProtocol implementation.
        capability: Capability to produce.

    Returns:
        Attempt holding the produced object.
    """
    if not capability.interface:
        return ABSENT

    methods = attempt(_wrapper_methods, handle, description="wrapper lookup")
    if not methods.is_present:
        return Attempt.absent(methods.error)
    supports, produce = methods.value

    supported = attempt(supports, capability, description="supports")
    if supported.failed:
        return Attempt.absent(supported.error)
    if not supported.value:
        return ABSENT

    return attempt(produce, capability, description="produce")


def _wrapper_methods(handle: Any) -> tuple[Callable[..., Any], Callable[..., Any]] | None:
    # Forwarded attributes do not count, see own_method()
    supports = own_method(handle, "supports")
    produce = own_method(handle, "produce")
    if supports is None or produce is None:
        return None
    return supports, produce


__all__ = [
    "Attempt",
    "attempt",
    "safe_produce",
]
