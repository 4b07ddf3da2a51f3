"""Built-in unwrap strategies.

This module provides the strategies of the default chain:
- ProtocolUnwrapStrategy (priority 10): wrapper protocol produce()
- DelegationStrategy (priority 20): DelegationLink inner target
- ProxyTargetStrategy (priority 30): proxy singleton target
"""

from __future__ import annotations

from .base_strategy import BaseStrategy, Relation, StrategyContext
from .delegation import DelegationStrategy
from .protocol_unwrap import ProtocolUnwrapStrategy
from .proxy_target import ProxyTargetStrategy

__all__ = [
    "BaseStrategy",
    "Relation",
    "StrategyContext",
    "ProtocolUnwrapStrategy",
    "DelegationStrategy",
    "ProxyTargetStrategy",
]
