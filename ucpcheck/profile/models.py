"""Typed Business Profile models.

A ``Profile`` is only ever built from a candidate that already passed the
structural checker; the models are frozen and allow unknown sibling keys so
vendor extensions survive narrowing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _ProfileModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class RestTransport(_ProfileModel):
    """REST binding: OpenAPI schema plus base endpoint."""

    schema_url: str = Field(alias="schema")
    endpoint: str


class McpTransport(_ProfileModel):
    """MCP binding."""

    schema_url: str = Field(alias="schema")
    endpoint: str


class A2aTransport(_ProfileModel):
    """Agent-to-agent binding published through an agent card."""

    agent_card: str | None = Field(default=None, alias="agentCard")


class EmbeddedTransport(_ProfileModel):
    schema_url: str | None = Field(default=None, alias="schema")


class Service(_ProfileModel):
    """One named service entry and its transport bindings."""

    version: str
    spec: str
    rest: RestTransport | None = None
    mcp: McpTransport | None = None
    a2a: A2aTransport | None = None
    embedded: EmbeddedTransport | None = None

    @property
    def has_transport(self) -> bool:
        return any(binding is not None for binding in (self.rest, self.mcp, self.a2a, self.embedded))

    def endpoints(self) -> list[tuple[str, str]]:
        """Return ``(relative_path, url)`` pairs for every reachable endpoint."""
        found: list[tuple[str, str]] = []
        if self.rest is not None and self.rest.endpoint:
            found.append(("rest.endpoint", self.rest.endpoint))
        if self.mcp is not None and self.mcp.endpoint:
            found.append(("mcp.endpoint", self.mcp.endpoint))
        if self.a2a is not None and self.a2a.agent_card:
            found.append(("a2a.agentCard", self.a2a.agent_card))
        return found


class Capability(_ProfileModel):
    """A named, versioned unit of protocol functionality."""

    name: str
    version: str
    spec: str
    schema_url: str = Field(alias="schema")
    extends: str | None = None
    config: Any = None

    @property
    def final_segment(self) -> str:
        return self.name.rsplit(".", 1)[-1]


class SigningKey(_ProfileModel):
    """JWK public key used to verify webhook signatures."""

    kty: str
    kid: str
    use: Any = None
    alg: Any = None
    crv: Any = None
    x: Any = None
    y: Any = None
    n: Any = None
    e: Any = None


class UcpObject(_ProfileModel):
    version: str
    services: dict[str, Service] = Field(default_factory=dict)
    capabilities: list[Capability] = Field(default_factory=list)


class Profile(_ProfileModel):
    """Root Business Profile document served at ``/.well-known/ucp``."""

    ucp: UcpObject
    signing_keys: list[SigningKey] | None = None

    @property
    def capability_names(self) -> set[str]:
        return {capability.name for capability in self.ucp.capabilities}

    def has_capability(self, name: str) -> bool:
        return any(capability.name == name for capability in self.ucp.capabilities)
