"""Example handles for resolver tests.

Data-source flavoured handles exercising each wrapping relation: plain
capability holders, wrapper-protocol implementations, delegation layers
and proxies.
"""

from __future__ import annotations

from .data_sources import (
    CLOSEABLE,
    CONNECTION_POOL,
    DATA_SOURCE,
    POOLED_DATA_SOURCE,
    BrokenWrapper,
    ConnectionPool,
    DataSourceProxy,
    DelegatingDataSource,
    ExplodingDelegate,
    ForwardingProxy,
    PropertyProxy,
    SimpleDataSource,
    UndeclaredConnection,
    WrappingDataSource,
)

__all__ = [
    "DATA_SOURCE",
    "POOLED_DATA_SOURCE",
    "CLOSEABLE",
    "CONNECTION_POOL",
    "SimpleDataSource",
    "ConnectionPool",
    "UndeclaredConnection",
    "WrappingDataSource",
    "BrokenWrapper",
    "DelegatingDataSource",
    "ExplodingDelegate",
    "DataSourceProxy",
    "PropertyProxy",
    "ForwardingProxy",
]
