"""Explicit capability model.

Handles do not satisfy a capability because of their Python type; they
satisfy it because they declare it. Capabilities are declared in one of
three ways:

- ``@provides(...)`` on a class you own
- ``CapabilityRegistry.declare(SomeType, ...)`` for types you don't own
- an instance-level ``__capabilities__`` attribute

Example:
    >>> DATA_SOURCE = Capability("DataSource")
    >>> POOLED = Capability("PooledDataSource", extends=frozenset({DATA_SOURCE}))
    >>>
    >>> @provides(POOLED)
    ... class Pool:
    ...     pass
    >>>
    >>> registry = CapabilityRegistry()
    >>> registry.exhibits(Pool(), DATA_SOURCE)
    True
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

CAPABILITIES_ATTR = "__capabilities__"

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class Capability:
    """A named capability a handle may exhibit.

    Attributes:
        name: Capability identifier (e.g. "DataSource").
        extends: Parent capabilities. Exhibiting a capability implies
            exhibiting every capability it extends, transitively.
        interface: Whether this capability can be asked of the wrapper
            protocol. Concrete capabilities (interface=False) can still be
            matched directly, through delegation and through proxies.
    """

    name: str
    extends: frozenset[Capability] = field(default_factory=frozenset)
    interface: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Capability name must not be empty")
        if not isinstance(self.extends, frozenset):
            object.__setattr__(self, "extends", frozenset(self.extends))

    @classmethod
    def concrete(cls, name: str, *extends: Capability) -> Capability:
        """Create a capability that is not a wrapper-protocol subject."""
        return cls(name, frozenset(extends), interface=False)

    def ancestors(self) -> frozenset[Capability]:
        """Return every capability this one extends, transitively."""
        seen: set[Capability] = set()
        pending = list(self.extends)
        while pending:
            parent = pending.pop()
            if parent in seen:
                continue
            seen.add(parent)
            pending.extend(parent.extends)
        return frozenset(seen)

    def closure(self) -> frozenset[Capability]:
        """Return this capability together with its ancestors."""
        return self.ancestors() | {self}

    def is_assignable_from(self, other: Capability) -> bool:
        """Check whether ``other`` is this capability or extends it.

        Example:
            >>> DATA_SOURCE.is_assignable_from(POOLED)
            True
            >>> POOLED.is_assignable_from(DATA_SOURCE)
            False
        """
        return other == self or self in other.ancestors()

    def __str__(self) -> str:
        return self.name


def provides(*capabilities: Capability) -> Callable[[T], T]:
    """Class decorator declaring the capabilities instances of a class exhibit.

    Declarations are merged with those inherited from base classes.

    Example:
        >>> @provides(DATA_SOURCE)
        ... class InMemoryDataSource:
        ...     pass
    """
    for capability in capabilities:
        if not isinstance(capability, Capability):
            raise TypeError(f"Expected Capability, got {type(capability).__name__}")

    def decorator(cls: T) -> T:
        inherited: frozenset[Capability] = frozenset()
        for base in cls.__mro__[1:]:
            inherited |= vars(base).get(CAPABILITIES_ATTR, frozenset())
        setattr(cls, CAPABILITIES_ATTR, inherited | frozenset(capabilities))
        return cls

    return decorator


class CapabilityRegistry:
    """Thread-safe registry of capabilities declared for types.

    Use this for types you cannot decorate. Lookups walk the handle's MRO,
    so declaring a capability on a base class covers its subclasses.

    Class-level declarations are read from class ``__dict__`` entries and
    instance-level declarations from the instance ``__dict__``. Attribute
    forwarding proxies therefore never appear to exhibit their target's
    capabilities.
    """

    _instance: CapabilityRegistry | None = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._declarations: dict[type, frozenset[Capability]] = {}
        self._lock = threading.RLock()

    @classmethod
    def instance(cls) -> CapabilityRegistry:
        """Get the process-wide registry.

        Returns:
            The shared CapabilityRegistry instance.
        """
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Discard the process-wide registry (primarily for tests)."""
        with cls._instance_lock:
            cls._instance = None

    def declare(self, handle_type: type, *capabilities: Capability) -> CapabilityRegistry:
        """Declare capabilities for a type.

        Args:
            handle_type: The type whose instances exhibit the capabilities.
            *capabilities: Capabilities to add.

        Returns:
            Self for method chaining.
        """
        if not isinstance(handle_type, type):
            raise TypeError(f"Expected a type, got {type(handle_type).__name__}")
        for capability in capabilities:
            if not isinstance(capability, Capability):
                raise TypeError(f"Expected Capability, got {type(capability).__name__}")
        with self._lock:
            current = self._declarations.get(handle_type, frozenset())
            self._declarations[handle_type] = current | frozenset(capabilities)
        return self

    def undeclare(self, handle_type: type) -> bool:
        """Remove every declaration for a type.

        Returns:
            True if the type had declarations, False otherwise.
        """
        with self._lock:
            return self._declarations.pop(handle_type, None) is not None

    def declared_types(self) -> list[type]:
        """Return the types with registry declarations."""
        with self._lock:
            return list(self._declarations.keys())

    def clear(self) -> None:
        """Remove all declarations."""
        with self._lock:
            self._declarations.clear()

    def capabilities_of(self, handle: Any) -> frozenset[Capability]:
        """Return the capabilities declared for a handle (without ancestors).

        Args:
            handle: Any object.

        Returns:
            The union of registry, class-level and instance-level declarations.
        """
        declared: set[Capability] = set()
        for klass in type(handle).__mro__:
            declared |= self._declarations.get(klass, frozenset())
            declared |= _as_capabilities(vars(klass).get(CAPABILITIES_ATTR))

        instance_dict = _instance_dict(handle)
        if instance_dict is not None:
            declared |= _as_capabilities(instance_dict.get(CAPABILITIES_ATTR))
        return frozenset(declared)

    def exhibits(self, handle: Any, capability: Capability) -> bool:
        """Check whether a handle exhibits a capability.

        Args:
            handle: Any object. None never exhibits anything.
            capability: The capability to check.

        Returns:
            True if the capability is declared for the handle, directly or
            through a capability that extends it.
        """
        if handle is None:
            return False
        for declared in self.capabilities_of(handle):
            if capability in declared.closure():
                return True
        return False


def _instance_dict(handle: Any) -> dict[str, Any] | None:
    # object.__getattribute__ bypasses proxy __getattr__ forwarding
    try:
        instance_dict = object.__getattribute__(handle, "__dict__")
    except AttributeError:
        return None
    return instance_dict if isinstance(instance_dict, dict) else None


def _as_capabilities(value: Any) -> frozenset[Capability]:
    if value is None:
        return frozenset()
    if isinstance(value, Capability):
        return frozenset({value})
    if isinstance(value, Iterable):
        return frozenset(item for item in value if isinstance(item, Capability))
    return frozenset()


__all__ = [
    "Capability",
    "CapabilityRegistry",
    "provides",
]
