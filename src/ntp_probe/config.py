#!/usr/bin/env python3
"""
NTP probe configuration

Defaults live on the ClientConfig dataclass. A YAML file may override them
from its ``ntp`` section:

    ntp:
      server: time.google.com
      port: 123
      timeout_seconds: 2.0
      max_offset_ms: 10000
      resolve_reference_dns: true
      dns_timeout_seconds: 1.0
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "pool.ntp.org"


class ConfigError(ValueError):
    """Configuration file is missing or invalid."""


@dataclass(frozen=True)
class ClientConfig:
    """NTP probe configuration"""
    server: str = DEFAULT_SERVER
    port: int = 123
    timeout_seconds: float = 2.0
    max_offset_ms: float = 10000
    resolve_reference_dns: bool = True
    dns_timeout_seconds: float = 1.0

    def __post_init__(self):
        if not isinstance(self.server, str) or not self.server.strip():
            raise ConfigError(f"server must be a non-empty host name, got {self.server!r}")
        if not isinstance(self.resolve_reference_dns, bool):
            raise ConfigError(
                f"resolve_reference_dns must be true or false, got {self.resolve_reference_dns!r}"
            )
        for name in ("port", "timeout_seconds", "max_offset_ms", "dns_timeout_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}")
        if not isinstance(self.port, int):
            raise ConfigError(f"port must be an integer, got {self.port!r}")
        if self.dns_timeout_seconds <= 0:
            raise ConfigError(f"dns_timeout_seconds must be positive, got {self.dns_timeout_seconds}")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
        if self.max_offset_ms < 0:
            raise ConfigError(f"max_offset_ms must not be negative, got {self.max_offset_ms}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")

    def override(self, **changes: Any) -> "ClientConfig":
        """Copy with the non-None values of ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def config_from_dict(section: Dict[str, Any]) -> ClientConfig:
    known = {f.name for f in fields(ClientConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning(f"Ignoring unknown ntp config keys: {unknown}")
    try:
        return ClientConfig(**{k: v for k, v in section.items() if k in known})
    except TypeError as e:
        raise ConfigError(f"Invalid ntp configuration: {e}") from e


def load_config(config_path: Union[str, Path]) -> ClientConfig:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config {config_path} must be a mapping")

    section = config.get('ntp') or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'ntp' section of {config_path} must be a mapping")

    logger.debug(f"Loaded NTP config from {config_path}: {section}")
    return config_from_dict(section)
