"""API-key authenticated client for the Portainer management API and its Docker/Kubernetes proxy."""

from __future__ import annotations

from portainer_client.client import PortainerClient, new_portainer_client
from portainer_client.config import (
    ClientConfig,
    ClientOption,
    config_from_env,
    load_server_profiles,
    resolve_server,
    with_base_path,
    with_scheme,
    with_skip_tls_verify,
    with_timeout,
)
from portainer_client.errors import (
    APIResponseError,
    ConfigurationError,
    PortainerClientError,
    RequestConstructionError,
    RequestExecutionError,
)
from portainer_client.models import Environment, ProxyRequestOptions, Stack, SystemStatus

__all__ = [
    "APIResponseError",
    "ClientConfig",
    "ClientOption",
    "ConfigurationError",
    "Environment",
    "PortainerClient",
    "PortainerClientError",
    "ProxyRequestOptions",
    "RequestConstructionError",
    "RequestExecutionError",
    "Stack",
    "SystemStatus",
    "config_from_env",
    "load_server_profiles",
    "new_portainer_client",
    "resolve_server",
    "with_base_path",
    "with_scheme",
    "with_skip_tls_verify",
    "with_timeout",
]
