"""Shared test fixtures for all test modules."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import respx

from portainer_client import PortainerClient, new_portainer_client
from portainer_client.config import SERVER_PROFILES, ClientConfig

TEST_HOST = "portainer.test"
TEST_API_KEY = "ptr_test_key"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "PORTAINER_HOST",
        "PORTAINER_API_KEY",
        "PORTAINER_BASE_PATH",
        "PORTAINER_SCHEME",
        "PORTAINER_SKIP_TLS_VERIFY",
        "PORTAINER_TIMEOUT",
        "PORTAINER_SERVERS",
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "ALL_PROXY",
        "http_proxy",
        "https_proxy",
        "all_proxy",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    SERVER_PROFILES.clear()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(host=TEST_HOST, api_key=TEST_API_KEY)


@pytest.fixture
def client() -> Iterator[PortainerClient]:
    with new_portainer_client(TEST_HOST, TEST_API_KEY) as c:
        yield c


@pytest.fixture
def router() -> Iterator[respx.MockRouter]:
    with respx.mock(assert_all_called=False) as mock_router:
        yield mock_router
