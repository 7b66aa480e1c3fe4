"""Forward arbitrary requests to Docker and Kubernetes APIs through the management server."""

from __future__ import annotations

import threading

import httpx
import structlog
from kubernetes import client as k8s_client

from portainer_client.clients import API_KEY_HEADER, build_proxy_http_client, load_k8s_api_client
from portainer_client.config import ClientConfig
from portainer_client.errors import RequestConstructionError, RequestExecutionError
from portainer_client.models import ProxyRequestOptions
from portainer_client.validation import validate_api_path, validate_environment_id, validate_method

log = structlog.get_logger()

# Sub-API mount points below /endpoints/{id}
DOCKER_API = "docker"
KUBERNETES_API = "kubernetes"


class ProxyClient:
    """Raw HTTP client that relays requests via the management server's reverse proxy."""

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._http: httpx.Client | None = None
        self._lock = threading.Lock()

    def _get_http(self) -> httpx.Client:
        with self._lock:
            if self._http is None:
                self._http = build_proxy_http_client(self._config)
            return self._http

    def close(self) -> None:
        with self._lock:
            if self._http is not None:
                self._http.close()
                self._http = None

    def docker_request(self, environment_id: int, opts: ProxyRequestOptions) -> httpx.Response:
        """Proxy a request to the Docker API of an environment.

        Args:
            environment_id: ID of the target Docker environment.
            opts: Method, API path, query params, headers and body of the request.

        Returns:
            The Docker API response, opened in streaming mode with the body unread.
            The caller must close it.

        Raises:
            RequestConstructionError: If the request parameters are invalid.
            RequestExecutionError: If the request could not be sent.
        """
        return self._proxy_request(environment_id, DOCKER_API, opts)

    def kubernetes_request(self, environment_id: int, opts: ProxyRequestOptions) -> httpx.Response:
        """Proxy a request to the Kubernetes API of an environment.

        Same contract as :meth:`docker_request`.
        """
        return self._proxy_request(environment_id, KUBERNETES_API, opts)

    def kubernetes_api_client(self, environment_id: int) -> k8s_client.ApiClient:
        """Return an official Kubernetes ApiClient routed through the proxy."""
        try:
            validate_environment_id(environment_id)
        except ValueError as exc:
            raise RequestConstructionError(str(exc)) from exc
        return load_k8s_api_client(self._config, environment_id)

    def _proxy_request(self, environment_id: int, api: str, opts: ProxyRequestOptions) -> httpx.Response:
        try:
            validate_environment_id(environment_id)
            validate_method(opts.method)
            validate_api_path(opts.api_path)
        except ValueError as exc:
            raise RequestConstructionError(str(exc)) from exc

        url = f"{self._config.base_url}/endpoints/{environment_id}/{api}{opts.api_path}"
        http = self._get_http()

        try:
            headers = httpx.Headers({API_KEY_HEADER: self._config.api_key})
            # Caller headers replace same-named ones, x-api-key included
            for name, value in (opts.headers or {}).items():
                headers[name] = value
            request = http.build_request(
                opts.method,
                url,
                params=opts.query_params,
                headers=headers,
                content=opts.body,
            )
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            msg = f"failed to create proxy request for {opts.method} {url}: {exc}"
            raise RequestConstructionError(msg) from exc

        try:
            response = http.send(request, stream=True)
        except httpx.RequestError as exc:
            log.error(
                "failed_to_send_proxy_request",
                api=api,
                environment_id=environment_id,
                method=opts.method,
                url=url,
                error=str(exc),
            )
            raise RequestExecutionError("send proxy request", url, exc) from exc

        log.debug(
            "proxy_request_sent",
            api=api,
            environment_id=environment_id,
            method=opts.method,
            status_code=response.status_code,
        )
        return response
