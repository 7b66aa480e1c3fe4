"""Portainer client factory: one configuration, a typed API handle and a proxy handle."""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType

import httpx
import structlog
from kubernetes import client as k8s_client

from portainer_client.clients.api import PortainerAPI
from portainer_client.clients.proxy import ProxyClient
from portainer_client.config import ClientConfig, ClientOption, build_config, config_from_env, resolve_server
from portainer_client.models import ProxyRequestOptions

log = structlog.get_logger()


class PortainerClient:
    """Client authenticated with a static API key.

    ``api`` calls the management server's own endpoints; ``proxy`` relays raw
    requests to the Docker or Kubernetes API of a managed environment. Both are
    built from the same immutable ClientConfig.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self.api = PortainerAPI(config)
        self.proxy = ProxyClient(config)
        log.debug(
            "portainer_client_created",
            host=config.host,
            base_path=config.base_path,
            scheme=config.scheme,
            skip_tls_verify=config.skip_tls_verify,
        )

    @classmethod
    def from_config(cls, config: ClientConfig) -> PortainerClient:
        return cls(config)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PortainerClient:
        """Build a client from ``PORTAINER_*`` environment variables."""
        return cls(config_from_env(environ))

    @classmethod
    def from_profile(cls, name: str) -> PortainerClient:
        """Build a client from a loaded server profile (see ``load_server_profiles``)."""
        return cls(resolve_server(name))

    @property
    def config(self) -> ClientConfig:
        return self._config

    def proxy_docker_request(self, environment_id: int, opts: ProxyRequestOptions) -> httpx.Response:
        return self.proxy.docker_request(environment_id, opts)

    def proxy_kubernetes_request(self, environment_id: int, opts: ProxyRequestOptions) -> httpx.Response:
        return self.proxy.kubernetes_request(environment_id, opts)

    def kubernetes_api_client(self, environment_id: int) -> k8s_client.ApiClient:
        return self.proxy.kubernetes_api_client(environment_id)

    def close(self) -> None:
        """Release the connection pools of both handles."""
        self.api.close()
        self.proxy.close()

    def __enter__(self) -> PortainerClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PortainerClient(base_url={self._config.base_url!r})"


def new_portainer_client(host: str, api_key: str, *options: ClientOption) -> PortainerClient:
    """Create a Portainer client.

    Host and api_key are required; base path, scheme, TLS verification and timeout
    are set through options such as ``with_scheme("http")``. Options apply in order
    and later ones win. No network I/O happens here.

    Args:
        host: Server host, optionally with port (e.g. "portainer.local:9443").
        api_key: Portainer access token sent as ``x-api-key``.
        *options: ClientOption callables.
    """
    return PortainerClient(build_config(host, api_key, *options))
