"""Shared configuration loader for the device bridge."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG_PATH = Path.home() / ".cardano-hw.yaml"
DEFAULT_BRIDGE_HOST = "127.0.0.1"
DEFAULT_BRIDGE_PORT = 21325
DEFAULT_TIMEOUT_SECONDS = 30.0
_CONFIG_PATH_OVERRIDE: Path | None = None


@dataclass
class BridgeConfig:
    """Connection details for the local bridge that relays device messages."""

    session: str
    host: str = DEFAULT_BRIDGE_HOST
    port: int = DEFAULT_BRIDGE_PORT
    use_https: bool = False
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def base_url(self) -> str:
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.host}:{self.port}"


def set_default_config_path(path: str | Path | None) -> None:
    """Remember a user-supplied config path for future loads."""

    global _CONFIG_PATH_OVERRIDE
    _CONFIG_PATH_OVERRIDE = Path(path).expanduser() if path else None


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with a 'bridge' section")
    return loaded


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off"}:
            return False
    return None


def _coerce_port(raw: Any, *, source: str) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid port in {source}: {raw}") from exc


def _coerce_timeout(raw: Any, *, source: str) -> float | None:
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout in {source}: {raw}") from exc
    if timeout <= 0:
        raise ConfigurationError(f"Timeout in {source} must be positive: {raw}")
    return timeout


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _parse_endpoint(raw: str | None) -> tuple[str | None, int | None, bool | None]:
    if not raw:
        return None, None, None
    parsed = urlparse(raw)
    if not parsed.scheme or not parsed.hostname:
        raise ConfigurationError(f"Invalid bridge URL: {raw}")
    if parsed.scheme.lower() not in {"http", "https"}:
        raise ConfigurationError(f"Bridge URL must use http or https: {raw}")
    try:
        port = parsed.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port in bridge URL: {raw}") from exc
    return parsed.hostname, port, parsed.scheme.lower() == "https"


def load_bridge_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> BridgeConfig:
    """Load bridge configuration from overrides, environment, and optional YAML."""

    env_map = os.environ if env is None else env
    explicit_path = config_path is not None or _CONFIG_PATH_OVERRIDE is not None
    path = (
        Path(config_path).expanduser()
        if config_path is not None
        else _CONFIG_PATH_OVERRIDE or DEFAULT_CONFIG_PATH
    )

    file_config = _load_config_file(path, required=explicit_path)
    bridge_section = file_config.get("bridge") or {}
    if not isinstance(bridge_section, dict):
        raise ConfigurationError(f"Expected 'bridge' to be a mapping in {path}")

    override_map = dict(overrides or {})

    endpoint_host, endpoint_port, endpoint_use_https = _parse_endpoint(
        _first_value(
            override_map.get("url"),
            env_map.get("CARDANO_HW_BRIDGE_URL"),
            bridge_section.get("url"),
        )
    )

    resolved_session = _first_value(
        override_map.get("session"),
        env_map.get("CARDANO_HW_BRIDGE_SESSION"),
        bridge_section.get("session"),
    )
    if not resolved_session:
        raise ConfigurationError(
            "A bridge session must be provided via --session, CARDANO_HW_BRIDGE_SESSION, or a config file"
        )

    resolved_host = _first_value(
        override_map.get("host"),
        endpoint_host,
        env_map.get("CARDANO_HW_BRIDGE_HOST"),
        bridge_section.get("host"),
        DEFAULT_BRIDGE_HOST,
    )
    resolved_port = _first_value(
        _coerce_port(override_map.get("port"), source="overrides"),
        endpoint_port,
        _coerce_port(env_map.get("CARDANO_HW_BRIDGE_PORT"), source="environment"),
        _coerce_port(bridge_section.get("port"), source=f"{path} bridge.port"),
        DEFAULT_BRIDGE_PORT,
    )
    resolved_use_https = _first_value(
        _coerce_bool(override_map.get("use_https")),
        endpoint_use_https,
        _coerce_bool(env_map.get("CARDANO_HW_BRIDGE_USE_HTTPS")),
        _coerce_bool(bridge_section.get("use_https")),
        False,
    )
    resolved_timeout = _first_value(
        _coerce_timeout(override_map.get("timeout"), source="overrides"),
        _coerce_timeout(env_map.get("CARDANO_HW_BRIDGE_TIMEOUT"), source="environment"),
        _coerce_timeout(bridge_section.get("timeout"), source=f"{path} bridge.timeout"),
        DEFAULT_TIMEOUT_SECONDS,
    )

    return BridgeConfig(
        session=str(resolved_session),
        host=resolved_host,
        port=resolved_port,
        use_https=bool(resolved_use_https),
        timeout=resolved_timeout,
    )
