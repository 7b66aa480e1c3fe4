"""Client configuration, option functions, environment overrides and server profiles."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from portainer_client.errors import ConfigurationError

DEFAULT_BASE_PATH = "/api"
DEFAULT_SCHEME = "https"

_VALID_SCHEMES = {"http", "https"}
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared by the typed API handle and the proxy handle."""

    host: str
    api_key: str = field(repr=False)
    base_path: str = DEFAULT_BASE_PATH
    scheme: str = DEFAULT_SCHEME
    skip_tls_verify: bool = False
    timeout: float | None = None

    @property
    def base_url(self) -> str:
        """Root URL of the management API, e.g. ``https://portainer:9443/api``."""
        return f"{self.scheme}://{self.host}{self.base_path}"


ClientOption = Callable[[ClientConfig], ClientConfig]


def with_base_path(base_path: str) -> ClientOption:
    """Override the API base path (e.g. ``/portainer/api`` behind a path-based ingress)."""
    return lambda config: replace(config, base_path=base_path)


def with_scheme(scheme: str) -> ClientOption:
    """Override the URL scheme (``http`` or ``https``)."""
    return lambda config: replace(config, scheme=scheme)


def with_skip_tls_verify(skip: bool) -> ClientOption:
    """Enable or disable server certificate verification."""
    return lambda config: replace(config, skip_tls_verify=skip)


def with_timeout(timeout: float | None) -> ClientOption:
    """Set a per-request timeout in seconds. None (the default) means no deadline."""
    return lambda config: replace(config, timeout=timeout)


def build_config(host: str, api_key: str, *options: ClientOption) -> ClientConfig:
    """Apply options in order on top of the defaults. Later options win."""
    config = ClientConfig(host=host, api_key=api_key)
    for option in options:
        config = option(config)
    return config


def _validate_scheme(scheme: str, source: str) -> str:
    if scheme not in _VALID_SCHEMES:
        valid = ", ".join(sorted(_VALID_SCHEMES))
        msg = f"Invalid scheme {scheme!r} in {source}. Must be one of: {valid}"
        raise ConfigurationError(msg)
    return scheme


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _parse_timeout(value: Any, source: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid timeout {value!r} in {source}. Must be a number of seconds."
        raise ConfigurationError(msg) from exc


def config_from_env(environ: Mapping[str, str] | None = None) -> ClientConfig:
    """Build a ClientConfig from ``PORTAINER_*`` environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        The resulting ClientConfig.

    Raises:
        ConfigurationError: If PORTAINER_HOST or PORTAINER_API_KEY is unset, or a
            value cannot be parsed.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in ("PORTAINER_HOST", "PORTAINER_API_KEY") if not env.get(name)]
    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}."
        raise ConfigurationError(msg)

    return ClientConfig(
        host=env["PORTAINER_HOST"],
        api_key=env["PORTAINER_API_KEY"],
        base_path=env.get("PORTAINER_BASE_PATH", DEFAULT_BASE_PATH),
        scheme=_validate_scheme(env.get("PORTAINER_SCHEME", DEFAULT_SCHEME), "PORTAINER_SCHEME"),
        skip_tls_verify=_parse_bool(env.get("PORTAINER_SKIP_TLS_VERIFY", "false")),
        timeout=_parse_timeout(env.get("PORTAINER_TIMEOUT"), "PORTAINER_TIMEOUT"),
    )


def _load_server_profiles(path: Path) -> dict[str, ClientConfig]:
    """Parse a YAML server profile file and return a mapping of profile name to ClientConfig.

    Args:
        path: Path to the YAML file.

    Returns:
        A dict mapping profile names to ClientConfig objects.

    Raises:
        ConfigurationError: If the file is missing, malformed, or a profile lacks
            a host or an API key.
    """
    if not path.exists():
        msg = (
            f"Server profile file not found: {path}. "
            "Create it or set PORTAINER_SERVERS to point to your profile file."
        )
        raise ConfigurationError(msg)

    raw = yaml.safe_load(path.read_text())

    if not isinstance(raw, dict) or "servers" not in raw:
        msg = f"Server profile file {path} must contain a top-level 'servers' key."
        raise ConfigurationError(msg)

    servers_raw: Any = raw["servers"]
    if not isinstance(servers_raw, dict) or len(servers_raw) == 0:
        msg = f"Server profile file {path} has an empty or invalid 'servers' section."
        raise ConfigurationError(msg)

    profiles: dict[str, ClientConfig] = {}
    for name, entry in servers_raw.items():
        if not isinstance(entry, dict):
            msg = f"Server '{name}' must be a mapping, got {type(entry).__name__}."
            raise ConfigurationError(msg)

        if not entry.get("host"):
            msg = f"Server '{name}' is missing required field: host."
            raise ConfigurationError(msg)

        if entry.get("api_key"):
            api_key = str(entry["api_key"])
        elif entry.get("api_key_env"):
            api_key = os.environ.get(str(entry["api_key_env"]), "")
            if not api_key:
                msg = f"Server '{name}': environment variable {entry['api_key_env']} is not set."
                raise ConfigurationError(msg)
        else:
            msg = f"Server '{name}' needs either 'api_key' or 'api_key_env'."
            raise ConfigurationError(msg)

        source = f"server '{name}'"
        profiles[str(name)] = ClientConfig(
            host=str(entry["host"]),
            api_key=api_key,
            base_path=str(entry.get("base_path", DEFAULT_BASE_PATH)),
            scheme=_validate_scheme(str(entry.get("scheme", DEFAULT_SCHEME)), source),
            skip_tls_verify=_parse_bool(entry.get("skip_tls_verify", False)),
            timeout=_parse_timeout(entry.get("timeout"), source),
        )

    return profiles


SERVER_PROFILES: dict[str, ClientConfig] = {}


def load_server_profiles(path: Path | str | None = None) -> dict[str, ClientConfig]:
    """Load server profiles from YAML and populate SERVER_PROFILES.

    Reads the file path from the ``PORTAINER_SERVERS`` environment variable when
    ``path`` is not given, defaulting to ``servers.yaml`` in the current working
    directory.

    Returns:
        The loaded profile map.
    """
    if path is None:
        path = os.environ.get("PORTAINER_SERVERS", "servers.yaml")
    loaded = _load_server_profiles(Path(path))
    SERVER_PROFILES.clear()
    SERVER_PROFILES.update(loaded)
    return SERVER_PROFILES


def resolve_server(name: str) -> ClientConfig:
    """Resolve a profile name to its ClientConfig.

    Raises:
        ConfigurationError: If no profile with that name has been loaded.
    """
    if name not in SERVER_PROFILES:
        valid = ", ".join(sorted(SERVER_PROFILES)) or "<none loaded>"
        msg = f"Unknown server '{name}'. Valid servers: {valid}"
        raise ConfigurationError(msg)
    return SERVER_PROFILES[name]
