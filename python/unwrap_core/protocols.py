"""Collaborator interfaces consumed by the resolver.

unwrap-core never creates wrappers, delegation layers or proxies. It only
queries them through these narrow interfaces:

- WrapperProtocol: a handle that can report and produce an inner object
  exhibiting a requested capability.
- DelegationLink: a handle forwarding to a single inner target.
- ProxyIntrospector: an external introspector recognizing proxies and
  returning the singleton target they stand in for.

WrapperProtocol and DelegationLink are structural: any object with the
right methods qualifies, no inheritance required. The methods must be the
handle's own (defined on its type or stored on the instance). A proxy that
forwards attribute access through ``__getattr__`` does not acquire its
target's protocols, see ``own_method()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .capabilities import Capability


@runtime_checkable
class WrapperProtocol(Protocol):
    """A handle able to expose an inner object for a capability.

    Implementations are untrusted: either method may raise, and the
    resolver treats that as "cannot produce".
    """

    def supports(self, capability: Capability) -> bool: ...

    def produce(self, capability: Capability) -> Any: ...


@runtime_checkable
class DelegationLink(Protocol):
    """A handle forwarding to a single inner target of the same base type."""

    def inner_target(self) -> Any | None: ...


class ProxyIntrospector(ABC):
    """Recognizes dynamic proxies and reports the target they stand in for.

    Example Implementation:
        class LazyProxyIntrospector(ProxyIntrospector):
            @property
            def name(self) -> str:
                return "lazy_proxy"

            def is_proxy(self, handle: Any) -> bool:
                return isinstance(handle, LazyProxy)

            def singleton_target(self, handle: Any) -> Any | None:
                return handle._proxy_target()
    """

    @property
    def name(self) -> str:
        """Human-readable name for this introspector (for logging/debugging)."""
        return type(self).__name__

    @abstractmethod
    def is_proxy(self, handle: Any) -> bool:
        """Check whether the handle is a proxy this introspector understands.

        Args:
            handle: Any object.

        Returns:
            True if the handle is a recognized proxy.
        """
        ...

    @abstractmethod
    def singleton_target(self, handle: Any) -> Any | None:
        """Return the single target the proxy stands in for.

        Args:
            handle: A handle for which ``is_proxy`` returned True.

        Returns:
            The target object, or None if the proxy has no fixed target.
        """
        ...


class WrappedAttributeIntrospector(ProxyIntrospector):
    """Introspector for the ``__wrapped__`` convention.

    ``functools.wraps`` and transparent object proxies expose the object
    they stand in for as ``__wrapped__``. The attribute is looked up on the
    type and the instance ``__dict__`` only, so forwarding ``__getattr__``
    implementations are not mistaken for proxies.
    """

    ATTRIBUTE = "__wrapped__"

    @property
    def name(self) -> str:
        return "wrapped_attribute"

    def is_proxy(self, handle: Any) -> bool:
        return own_attribute(handle, self.ATTRIBUTE, _MISSING) is not _MISSING

    def singleton_target(self, handle: Any) -> Any | None:
        target = own_attribute(handle, self.ATTRIBUTE, _MISSING)
        return None if target is _MISSING else target


_MISSING = object()


def own_attribute(handle: Any, name: str, default: Any = None) -> Any:
    """Look up an attribute without consulting ``__getattr__``.

    Only the instance ``__dict__`` and the attributes defined along the
    type's MRO are searched.

    Args:
        handle: Any object.
        name: Attribute name.
        default: Returned when the handle has no such attribute of its own.

    Returns:
        The attribute value, or ``default``.
    """
    try:
        instance_dict = object.__getattribute__(handle, "__dict__")
    except AttributeError:
        instance_dict = None
    if isinstance(instance_dict, dict) and name in instance_dict:
        return instance_dict[name]

    for klass in type(handle).__mro__:
        if name in vars(klass):
            # Descriptors (methods, properties, slots) bind against the handle
            try:
                return object.__getattribute__(handle, name)
            except AttributeError:
                return default
    return default


def own_method(handle: Any, name: str) -> Callable[..., Any] | None:
    """Return the handle's own callable ``name``, or None.

    Example:
        >>> accessor = own_method(handle, "inner_target")
        >>> inner = accessor() if accessor is not None else None
    """
    method = own_attribute(handle, name)
    return method if callable(method) else None


__all__ = [
    "WrapperProtocol",
    "DelegationLink",
    "ProxyIntrospector",
    "WrappedAttributeIntrospector",
    "own_attribute",
    "own_method",
]
