"""pytest configuration and fixtures for unwrap_core tests.

This module provides shared fixtures for testing the resolver, including
a fresh CapabilityRegistry, default resolvers and the event bridge.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from unwrap_core import CapabilityRegistry, CapabilityResolver, ResolutionEventBridge


@pytest.fixture(scope="session")
def unwrap_core_module():
    """Provide the unwrap_core module as a fixture."""
    import unwrap_core

    return unwrap_core


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep UNWRAP_CORE_* variables and the default resolver out of each test."""
    import os

    from unwrap_core import reset_default_resolver

    for key in list(os.environ):
        if key.startswith("UNWRAP_CORE_"):
            monkeypatch.delenv(key, raising=False)
    reset_default_resolver()
    yield
    reset_default_resolver()


@pytest.fixture
def registry() -> CapabilityRegistry:
    """Provide a fresh, empty CapabilityRegistry for each test."""
    from unwrap_core import CapabilityRegistry

    return CapabilityRegistry()


@pytest.fixture
def resolver(registry: CapabilityRegistry) -> CapabilityResolver:
    """Provide a default resolver bound to the fresh registry."""
    from unwrap_core import CapabilityResolver

    return CapabilityResolver.default(registry=registry)


@pytest.fixture
def event_bridge() -> Generator[ResolutionEventBridge, None, None]:
    """Provide a started ResolutionEventBridge, stopped after the test."""
    from unwrap_core import ResolutionEventBridge

    ResolutionEventBridge.reset_instance()
    bridge = ResolutionEventBridge.instance()
    bridge.start()
    yield bridge
    bridge.stop()
    ResolutionEventBridge.reset_instance()
