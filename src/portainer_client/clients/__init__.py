"""Transport factories shared by the typed API handle and the proxy handle."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import httpx
from kubernetes import client as k8s_client

from portainer_client.config import ClientConfig

API_KEY_HEADER = "x-api-key"


class APIKeyAuth(httpx.Auth):
    """Sets the ``x-api-key`` header on every outgoing request."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers[API_KEY_HEADER] = self._api_key
        yield request


def _transport_kwargs(config: ClientConfig) -> dict[str, Any]:
    # Timeout(None) disables every deadline; httpx would otherwise impose 5s
    return {
        "verify": not config.skip_tls_verify,
        "timeout": httpx.Timeout(config.timeout),
    }


def build_api_http_client(config: ClientConfig) -> httpx.Client:
    """Create the authenticated client used for the management server's own endpoints."""
    return httpx.Client(
        base_url=config.base_url,
        auth=APIKeyAuth(config.api_key),
        **_transport_kwargs(config),
    )


def build_proxy_http_client(config: ClientConfig) -> httpx.Client:
    """Create the raw client used for proxied requests.

    Carries no auth or base URL; the proxy forwarder sets both per request.
    Redirects are not followed: a 3xx from the proxied API is returned as is.
    """
    return httpx.Client(**_transport_kwargs(config))


def kubernetes_proxy_url(config: ClientConfig, environment_id: int) -> str:
    return f"{config.base_url}/endpoints/{environment_id}/kubernetes"


def load_k8s_api_client(config: ClientConfig, environment_id: int) -> k8s_client.ApiClient:
    """Create an isolated Kubernetes API client that talks through the management server proxy.

    Uses its own Configuration instance so the global Kubernetes SDK defaults are
    never touched.
    """
    configuration = k8s_client.Configuration()
    configuration.host = kubernetes_proxy_url(config, environment_id)
    configuration.verify_ssl = not config.skip_tls_verify
    return k8s_client.ApiClient(
        configuration=configuration,
        header_name=API_KEY_HEADER,
        header_value=config.api_key,
    )
