"""Pydantic v2 models for proxy request descriptors and management API responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Portainer endpoint (environment) types
DOCKER_ENVIRONMENT_TYPES = frozenset({1, 2, 4})
KUBERNETES_ENVIRONMENT_TYPES = frozenset({5, 6, 7})

ENVIRONMENT_STATUS_UP = 1
ENVIRONMENT_STATUS_DOWN = 2


# --- Proxy request descriptor ---


class ProxyRequestOptions(BaseModel):
    """Parameters for a request proxied to a Docker or Kubernetes API.

    ``body`` is handed to the transport untouched: bytes, str, an iterator of
    bytes or a binary file-like object. It is never read before sending.
    ``method`` is sent upper-cased, so "get" goes out as "GET".
    """

    method: str
    # Sub-API path including the leading slash, e.g. "/containers/json"
    api_path: str
    query_params: dict[str, str] | None = None
    headers: dict[str, str] | None = None
    body: Any = None


# --- Management API models ---


class _PortainerModel(BaseModel):
    """Base for models parsed from Portainer's PascalCase JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SystemStatus(_PortainerModel):
    """Response of GET /system/status."""

    version: str = Field(alias="Version")
    instance_id: str | None = Field(default=None, alias="InstanceID")


class Environment(_PortainerModel):
    """A managed Docker host or Kubernetes cluster (Portainer "endpoint")."""

    id: int = Field(alias="Id")
    name: str = Field(alias="Name")
    type: int = Field(alias="Type")
    url: str | None = Field(default=None, alias="URL")
    public_url: str | None = Field(default=None, alias="PublicURL")
    group_id: int | None = Field(default=None, alias="GroupId")
    status: int | None = Field(default=None, alias="Status")

    @property
    def is_docker(self) -> bool:
        return self.type in DOCKER_ENVIRONMENT_TYPES

    @property
    def is_kubernetes(self) -> bool:
        return self.type in KUBERNETES_ENVIRONMENT_TYPES

    @property
    def is_up(self) -> bool:
        return self.status == ENVIRONMENT_STATUS_UP


class Stack(_PortainerModel):
    """A compose, swarm or Kubernetes stack deployed through the management server."""

    id: int = Field(alias="Id")
    name: str = Field(alias="Name")
    type: int = Field(alias="Type")
    environment_id: int = Field(alias="EndpointId")
    status: int | None = Field(default=None, alias="Status")
