"""Business Profile data model and protocol constants."""

from ucpcheck.profile.constants import (
    CANONICAL_DOMAIN,
    OFFICIAL_NAMESPACE,
    ORDER_CAPABILITY,
    VENDOR_PREFIX,
    WELL_KNOWN_PATHS,
)
from ucpcheck.profile.models import (
    A2aTransport,
    Capability,
    EmbeddedTransport,
    McpTransport,
    Profile,
    RestTransport,
    Service,
    SigningKey,
    UcpObject,
)

__all__ = [
    "A2aTransport",
    "CANONICAL_DOMAIN",
    "Capability",
    "EmbeddedTransport",
    "McpTransport",
    "OFFICIAL_NAMESPACE",
    "ORDER_CAPABILITY",
    "Profile",
    "RestTransport",
    "Service",
    "SigningKey",
    "UcpObject",
    "VENDOR_PREFIX",
    "WELL_KNOWN_PATHS",
]
