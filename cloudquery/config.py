"""
Client configuration.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from .constants import DEFAULT_CONFIG, DEFAULT_PORTS
from .exceptions import ConfigurationError

ENV_PREFIX = "CLOUDQUERY_"

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings shared by every request a client builds.

    Attributes:
        host: Service host name
        path: Base path all API paths are built under
        secure: Use https when True, http otherwise
        port: TCP port, None for the scheme default
        timeout: HTTP timeout in seconds
    """

    host: str = DEFAULT_CONFIG['host']
    path: str = DEFAULT_CONFIG['path']
    secure: bool = DEFAULT_CONFIG['secure']
    port: Optional[int] = DEFAULT_CONFIG['port']
    timeout: float = DEFAULT_CONFIG['timeout']

    def __post_init__(self):
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not self.host:
            raise ConfigurationError("host cannot be empty")

        if not self.path.startswith('/'):
            raise ConfigurationError("path must start with '/'")

        if self.port is not None and not 0 < self.port < 65536:
            raise ConfigurationError("port must be between 1 and 65535")

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    @property
    def scheme(self) -> str:
        return 'https' if self.secure else 'http'

    @property
    def effective_port(self) -> int:
        return self.port if self.port is not None else DEFAULT_PORTS[self.scheme]

    def merge(self, **overrides) -> "ClientConfig":
        """Return a copy with ``overrides`` applied."""
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build configuration from ``CLOUDQUERY_*`` environment variables.

        Recognized: CLOUDQUERY_HOST, CLOUDQUERY_PATH, CLOUDQUERY_SECURE,
        CLOUDQUERY_PORT, CLOUDQUERY_TIMEOUT. Unset variables keep defaults.
        """
        if environ is None:
            environ = os.environ

        values = {}
        for field in fields(cls):
            raw = environ.get(ENV_PREFIX + field.name.upper())
            if raw is None or raw == '':
                continue
            values[field.name] = _parse_env_value(field.name, raw)
        return cls(**values)


def _parse_env_value(name: str, raw: str):
    if name == 'secure':
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{ENV_PREFIX}SECURE must be a boolean, got {raw!r}")

    if name in ('port', 'timeout'):
        try:
            return int(raw) if name == 'port' else float(raw)
        except ValueError:
            raise ConfigurationError(f"{ENV_PREFIX}{name.upper()} must be a number, got {raw!r}")

    return raw
