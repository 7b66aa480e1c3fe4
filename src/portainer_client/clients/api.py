"""Typed wrapper around the management server's own REST endpoints."""

from __future__ import annotations

import json
import threading
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from portainer_client.clients import build_api_http_client
from portainer_client.config import ClientConfig
from portainer_client.errors import APIResponseError, RequestConstructionError, RequestExecutionError
from portainer_client.models import Environment, Stack, SystemStatus
from portainer_client.validation import validate_environment_id

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _error_message(response: httpx.Response) -> str | None:
    """Extract Portainer's ``message``/``details`` field from an error body, if any."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or None
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("details")
    return None


class PortainerAPI:
    """Authenticated client for management-server endpoints."""

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._http: httpx.Client | None = None
        self._lock = threading.Lock()

    def _get_http(self) -> httpx.Client:
        with self._lock:
            if self._http is None:
                try:
                    self._http = build_api_http_client(self._config)
                except httpx.InvalidURL as exc:
                    msg = f"Invalid management API URL {self._config.base_url!r}: {exc}"
                    raise RequestConstructionError(msg) from exc
            return self._http

    def close(self) -> None:
        with self._lock:
            if self._http is not None:
                self._http.close()
                self._http = None

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated request relative to the API base URL.

        The response status is not checked.

        Args:
            method: HTTP method.
            path: Path below the base path, e.g. "/endpoints".
            **kwargs: Passed through to ``httpx.Client.request``.

        Raises:
            RequestExecutionError: If the transport fails.
        """
        http = self._get_http()
        try:
            return http.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            url = f"{self._config.base_url}{path}"
            log.error("failed_to_send_api_request", method=method, url=url, error=str(exc))
            raise RequestExecutionError("send API request", url, exc) from exc

    def _get(self, path: str, params: dict[str, Any] | None = None) -> tuple[httpx.Response, Any]:
        response = self.request("GET", path, params=params)
        url = str(response.request.url)
        if response.is_error:
            message = _error_message(response)
            log.error("api_error_response", method="GET", url=url, status_code=response.status_code)
            raise APIResponseError(response.status_code, "GET", url, message)
        try:
            return response, response.json()
        except ValueError as exc:
            raise APIResponseError(response.status_code, "GET", url, "response body is not valid JSON") from exc

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, response: httpx.Response) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            url = str(response.request.url)
            log.error("unexpected_api_payload", url=url, model=model.__name__)
            raise APIResponseError(response.status_code, "GET", url, f"unexpected {model.__name__} payload") from exc

    def _fetch(self, model: type[ModelT], path: str) -> ModelT:
        response, payload = self._get(path)
        return self._parse(model, payload, response)

    def _fetch_list(self, model: type[ModelT], path: str, params: dict[str, Any] | None = None) -> list[ModelT]:
        response, payload = self._get(path, params)
        if not isinstance(payload, list):
            url = str(response.request.url)
            raise APIResponseError(response.status_code, "GET", url, f"expected a list of {model.__name__}")
        return [self._parse(model, item, response) for item in payload]

    def get_system_status(self) -> SystemStatus:
        """Return the server version and instance id."""
        return self._fetch(SystemStatus, "/system/status")

    def list_environments(
        self,
        *,
        search: str | None = None,
        start: int | None = None,
        limit: int | None = None,
    ) -> list[Environment]:
        """List environments visible to the API key.

        Args:
            search: Free-text filter on environment name.
            start: Pagination offset.
            limit: Maximum number of environments to return.
        """
        params: dict[str, Any] = {}
        if search:
            params["search"] = search
        if start is not None:
            params["start"] = start
        if limit is not None:
            params["limit"] = limit
        return self._fetch_list(Environment, "/endpoints", params or None)

    def get_environment(self, environment_id: int) -> Environment:
        try:
            validate_environment_id(environment_id)
        except ValueError as exc:
            raise RequestConstructionError(str(exc)) from exc
        return self._fetch(Environment, f"/endpoints/{environment_id}")

    def list_stacks(self, *, environment_id: int | None = None) -> list[Stack]:
        """List stacks, optionally restricted to one environment."""
        params: dict[str, Any] | None = None
        if environment_id is not None:
            try:
                validate_environment_id(environment_id)
            except ValueError as exc:
                raise RequestConstructionError(str(exc)) from exc
            params = {"filters": json.dumps({"EndpointID": environment_id})}
        return self._fetch_list(Stack, "/stacks", params)
