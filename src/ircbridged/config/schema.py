"""Config schema and accessor."""

from __future__ import annotations

import os
import re
from typing import Any

from loguru import logger

from ircbridged.core.constants import (
    DEFAULT_IRC_PORT,
    DEFAULT_LISTEN_PORT,
    DEFAULT_NICK,
    DEFAULT_REALNAME,
    DEFAULT_RECONNECT_INTERVAL,
    DEFAULT_SERVER,
)
from ircbridged.core.errors import BridgeConfigurationError
from ircbridged.session.base import SecurityMode, ServerAddress

# Config key -> env var that overrides it (loaded once per reload)
_ENV_OVERRIDE_KEYS = {
    "server": "IRCBRIDGED_SERVER",
    "ssl": "IRCBRIDGED_SSL",
    "ssl_insecure": "IRCBRIDGED_SSL_INSECURE",
    "nick": "IRCBRIDGED_NICK",
    "realname": "IRCBRIDGED_REALNAME",
    "listen": "IRCBRIDGED_LISTEN",
    "debug": "IRCBRIDGED_DEBUG",
    "reconnect": "IRCBRIDGED_RECONNECT",
}

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def _load_env_overrides() -> dict[str, str]:
    """Load env overrides once per reload; unset and empty vars are skipped."""
    env: dict[str, str] = {}
    for key, var in _ENV_OVERRIDE_KEYS.items():
        val = os.environ.get(var, "")
        if val:
            env[key] = val
    return env


def _parse_bool_env(val: str) -> bool | None:
    """Parse env string to bool; None if not a recognized bool."""
    v = val.lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    return None


def parse_duration(value: Any) -> float:
    """Seconds from a number or a duration string like '10s', '1m30s', '500ms'."""
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass
    pos = 0
    total = 0.0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def parse_server_address(value: str) -> ServerAddress:
    """Parse 'host:port', 'host' or '[v6addr]:port'."""
    text = value.strip()
    if text.startswith("["):
        host, sep, rest = text[1:].partition("]")
        if not sep:
            raise ValueError(f"unterminated IPv6 address: {value!r}")
        port_text = rest[1:] if rest.startswith(":") else rest
    elif text.count(":") == 1:
        host, _, port_text = text.partition(":")
    else:
        host, port_text = text, ""
    if not host:
        raise ValueError(f"missing host: {value!r}")
    port = int(port_text) if port_text else DEFAULT_IRC_PORT
    if not 0 < port < 65536:
        raise ValueError(f"port out of range: {port}")
    return ServerAddress(host=host, port=port)


class Config:
    """Config accessor.

    Lookup order: command-line flags, then IRCBRIDGED_* env vars, then the
    YAML file, then built-in defaults.
    """

    def __init__(self, data: dict[str, Any] | None = None, flags: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._flags = flags or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(
        self,
        data: dict[str, Any],
        *,
        flags: dict[str, Any] | None = None,
        validate: bool = True,
    ) -> None:
        """Replace config data and flag overrides."""
        self._data = data or {}
        self._flags = flags or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug("Config reloaded: server={} listen={}", self.get("server"), self.get("listen"))

    def _validate(self) -> None:
        """Validate every accessor; raise BridgeConfigurationError on failure."""
        try:
            self.server_address
        except ValueError as exc:
            raise BridgeConfigurationError(
                f"invalid server: {exc}",
                code="invalid_server",
                details={"server": self.get("server")},
                original_error=exc,
            ) from exc
        try:
            port = self.listen_port
        except ValueError as exc:
            raise BridgeConfigurationError(
                "listen must be an integer port",
                code="invalid_listen",
                details={"listen": self.get("listen")},
                original_error=exc,
            ) from exc
        if not 0 < port < 65536:
            raise BridgeConfigurationError(
                f"listen port out of range: {port}",
                code="invalid_listen",
                details={"listen": port},
            )
        if not self.nick:
            raise BridgeConfigurationError("nick must not be empty", code="invalid_nick")
        try:
            interval = self.reconnect_interval
        except ValueError as exc:
            raise BridgeConfigurationError(
                str(exc),
                code="invalid_reconnect",
                details={"reconnect": self.get("reconnect")},
                original_error=exc,
            ) from exc
        if interval <= 0:
            raise BridgeConfigurationError(
                "reconnect interval must be positive",
                code="invalid_reconnect",
                details={"reconnect": interval},
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by key: flags, env, file, default."""
        if key in self._flags:
            return self._flags[key]
        if key in self._env:
            return self._env[key]
        return self._data.get(key, default)

    def _bool(self, key: str, default: bool) -> bool:
        if key in self._flags:
            return bool(self._flags[key])
        env_val = self._env.get(key)
        if env_val is not None:
            parsed = _parse_bool_env(env_val)
            if parsed is not None:
                return parsed
        return bool(self._data.get(key, default))

    @property
    def server(self) -> str:
        return str(self.get("server", DEFAULT_SERVER))

    @property
    def server_address(self) -> ServerAddress:
        return parse_server_address(self.server)

    @property
    def ssl(self) -> bool:
        return self._bool("ssl", False)

    @property
    def ssl_insecure(self) -> bool:
        return self._bool("ssl_insecure", False)

    @property
    def security_mode(self) -> SecurityMode:
        return SecurityMode.from_flags(self.ssl, self.ssl_insecure)

    @property
    def nick(self) -> str:
        return str(self.get("nick", DEFAULT_NICK)).strip()

    @property
    def realname(self) -> str:
        return str(self.get("realname", DEFAULT_REALNAME))

    @property
    def listen_port(self) -> int:
        return int(self.get("listen", DEFAULT_LISTEN_PORT))

    @property
    def debug(self) -> bool:
        return self._bool("debug", False)

    @property
    def reconnect_interval(self) -> float:
        """Seconds between reconnect attempts."""
        return parse_duration(self.get("reconnect", DEFAULT_RECONNECT_INTERVAL))
