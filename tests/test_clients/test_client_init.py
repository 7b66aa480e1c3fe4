"""Tests for transport factories and lazy HTTP client creation."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock, patch

import httpx
import pytest

from portainer_client.clients import APIKeyAuth, build_api_http_client, build_proxy_http_client, load_k8s_api_client
from portainer_client.clients.api import PortainerAPI
from portainer_client.clients.proxy import ProxyClient
from portainer_client.config import ClientConfig, build_config, with_base_path, with_scheme, with_skip_tls_verify
from portainer_client.errors import RequestConstructionError


class TestAPIKeyAuth:
    def test_sets_header(self) -> None:
        request = httpx.Request("GET", "https://h/api/endpoints")
        flow = APIKeyAuth("secret").auth_flow(request)
        sent = next(flow)
        assert sent.headers["x-api-key"] == "secret"

    def test_replaces_existing_header(self) -> None:
        request = httpx.Request("GET", "https://h/api/endpoints", headers={"X-API-Key": "stale"})
        sent = next(APIKeyAuth("fresh").auth_flow(request))
        assert sent.headers.get_list("x-api-key") == ["fresh"]


class TestTransportFactories:
    def test_api_client_base_url(self, config: ClientConfig) -> None:
        with build_api_http_client(config) as http:
            assert str(http.base_url) == "https://portainer.test/api/"
            assert isinstance(http.auth, APIKeyAuth)

    def test_proxy_client_has_no_auth(self, config: ClientConfig) -> None:
        with build_proxy_http_client(config) as http:
            assert http.auth is None

    def test_timeout_applied(self) -> None:
        config = ClientConfig(host="h", api_key="k", timeout=3.0)
        with build_proxy_http_client(config) as http:
            assert http.timeout == httpx.Timeout(3.0)

    @pytest.mark.parametrize("factory", [build_api_http_client, build_proxy_http_client])
    def test_default_has_no_deadline(self, factory: Callable[[ClientConfig], httpx.Client]) -> None:
        with factory(ClientConfig(host="h", api_key="k")) as http:
            assert http.timeout == httpx.Timeout(None)

    @pytest.mark.parametrize("factory", [build_api_http_client, build_proxy_http_client])
    def test_redirects_not_followed(self, factory: Callable[[ClientConfig], httpx.Client]) -> None:
        with factory(ClientConfig(host="h", api_key="k")) as http:
            assert http.follow_redirects is False

    @pytest.mark.parametrize("skip", [True, False])
    def test_verify_mirrors_skip_flag(self, skip: bool) -> None:
        config = ClientConfig(host="h", api_key="k", skip_tls_verify=skip)
        with patch("portainer_client.clients.httpx.Client") as mock_client:
            build_api_http_client(config)
            build_proxy_http_client(config)
        assert mock_client.call_count == 2
        for call in mock_client.call_args_list:
            assert call.kwargs["verify"] is (not skip)


class TestPortainerAPIInit:
    def test_lazy_http_creation(self, config: ClientConfig) -> None:
        api = PortainerAPI(config)
        assert api._http is None

    def test_get_http_creates_once(self, config: ClientConfig) -> None:
        api = PortainerAPI(config)
        with patch("portainer_client.clients.api.build_api_http_client") as mock_build:
            mock_build.return_value = MagicMock()
            http1 = api._get_http()
            http2 = api._get_http()
        assert http1 is http2
        mock_build.assert_called_once_with(config)

    def test_close_releases_client(self, config: ClientConfig) -> None:
        api = PortainerAPI(config)
        with patch("portainer_client.clients.api.build_api_http_client") as mock_build:
            http = MagicMock()
            mock_build.return_value = http
            api._get_http()
            api.close()
        http.close.assert_called_once()
        assert api._http is None

    def test_close_without_use_is_noop(self, config: ClientConfig) -> None:
        PortainerAPI(config).close()

    def test_invalid_base_url(self) -> None:
        api = PortainerAPI(ClientConfig(host="bad\x00host", api_key="k"))
        with pytest.raises(RequestConstructionError, match="Invalid management API URL"):
            api._get_http()


class TestProxyClientInit:
    def test_lazy_http_creation(self, config: ClientConfig) -> None:
        proxy = ProxyClient(config)
        assert proxy._http is None

    def test_get_http_creates_once(self, config: ClientConfig) -> None:
        proxy = ProxyClient(config)
        with patch("portainer_client.clients.proxy.build_proxy_http_client") as mock_build:
            mock_build.return_value = MagicMock()
            http1 = proxy._get_http()
            http2 = proxy._get_http()
        assert http1 is http2
        mock_build.assert_called_once_with(config)


class TestKubernetesApiClient:
    def test_host_points_at_proxy(self) -> None:
        config = build_config("portainer:9443", "ptr_k8s", with_base_path("/portainer/api"))
        api_client = load_k8s_api_client(config, 7)
        assert api_client.configuration.host == "https://portainer:9443/portainer/api/endpoints/7/kubernetes"

    def test_api_key_is_default_header(self, config: ClientConfig) -> None:
        api_client = load_k8s_api_client(config, 1)
        assert api_client.default_headers["x-api-key"] == "ptr_test_key"

    @pytest.mark.parametrize("skip", [True, False])
    def test_verify_ssl_mirrors_skip_flag(self, skip: bool) -> None:
        config = build_config("h", "k", with_scheme("https"), with_skip_tls_verify(skip))
        assert load_k8s_api_client(config, 1).configuration.verify_ssl is (not skip)

    def test_proxy_client_helper_validates_id(self, config: ClientConfig) -> None:
        with pytest.raises(RequestConstructionError):
            ProxyClient(config).kubernetes_api_client("2")

    def test_proxy_client_helper(self, config: ClientConfig) -> None:
        api_client = ProxyClient(config).kubernetes_api_client(2)
        assert api_client.configuration.host.endswith("/endpoints/2/kubernetes")
