"""Resolver configuration.

Optional strategies are switched on or off here once, when a resolver is
built, rather than checked on every call.

The configuration source follows this priority order:
1. Explicit path passed to ``ResolverConfig.load()``
2. UNWRAP_CORE_CONFIG_PATH environment variable (YAML file)
3. UNWRAP_CORE_* environment variables
4. Defaults

Example:
    >>> config = ResolverConfig.load()
    >>> resolver = CapabilityResolver.default(config)
    >>>
    >>> # resolver.yaml
    >>> # resolver:
    >>> #   delegation_enabled: false
    >>> #   max_depth: 16
    >>> config = ResolverConfig.from_yaml("resolver.yaml")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError
from .logging import log_debug, log_info

ENV_PREFIX = "UNWRAP_CORE_"
CONFIG_PATH_ENV = "UNWRAP_CORE_CONFIG_PATH"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ResolverConfig(BaseModel):
    """Configuration for building a CapabilityResolver.

    Example:
        >>> config = ResolverConfig(delegation_enabled=False, max_depth=8)
        >>> resolver = CapabilityResolver.default(config)
    """

    delegation_enabled: bool = Field(
        default=True,
        description="Register the delegation strategy.",
    )
    proxy_enabled: bool = Field(
        default=True,
        description="Register the proxy target strategy.",
    )
    cycle_guard: bool = Field(
        default=True,
        description="Stop resolution when a handle is visited twice.",
    )
    max_depth: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of relations followed per resolution.",
    )
    log_level: str = Field(
        default="info",
        pattern="^(trace|debug|info|warn|error)$",
        description="Log level for the unwrap_core logger.",
    )

    model_config = {"extra": "forbid"}

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> ResolverConfig:
        """Build a config from a plain mapping.

        A top-level ``resolver`` key is unwrapped if present.

        Raises:
            ConfigurationError: If the mapping contains invalid values.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Resolver configuration must be a mapping, got {type(data).__name__}"
            )
        if isinstance(data.get("resolver"), dict):
            data = data["resolver"]

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid resolver configuration: {e}",
                metadata={"errors": e.errors(include_url=False)},
            ) from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> ResolverConfig:
        """Load configuration from a YAML file.

        Raises:
            ConfigurationError: If the file is missing or not valid YAML.
        """
        config_path = Path(path)
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {config_path}: {e}") from e

        log_debug(f"Loaded resolver configuration from {config_path}")
        return cls.from_mapping(data)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ResolverConfig:
        """Build configuration from UNWRAP_CORE_* environment variables.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        environ = dict(os.environ) if environ is None else environ
        data: dict[str, Any] = {}

        for field_name in ("delegation_enabled", "proxy_enabled", "cycle_guard"):
            raw = environ.get(ENV_PREFIX + field_name.upper())
            if raw is not None:
                data[field_name] = _parse_bool(field_name, raw)

        raw_depth = environ.get(ENV_PREFIX + "MAX_DEPTH")
        if raw_depth is not None and raw_depth.strip():
            try:
                data["max_depth"] = int(raw_depth)
            except ValueError:
                raise ConfigurationError(
                    f"UNWRAP_CORE_MAX_DEPTH must be an integer, got {raw_depth!r}"
                ) from None

        raw_level = environ.get(ENV_PREFIX + "LOG_LEVEL")
        if raw_level:
            data["log_level"] = raw_level.strip().lower()

        return cls.from_mapping(data)

    @classmethod
    def load(cls, path: str | Path | None = None) -> ResolverConfig:
        """Load configuration from the highest-priority available source."""
        if path is not None:
            return cls.from_yaml(path)

        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            log_info(f"Using resolver configuration from {CONFIG_PATH_ENV}: {env_path}")
            return cls.from_yaml(env_path)

        return cls.from_env()


def _parse_bool(field_name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{ENV_PREFIX}{field_name.upper()} must be a boolean, got {raw!r}"
    )


__all__ = ["ResolverConfig", "ENV_PREFIX", "CONFIG_PATH_ENV"]
