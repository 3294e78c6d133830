"""Protocol constants for Business Profile documents."""

from __future__ import annotations

WELL_KNOWN_PATHS = ("/.well-known/ucp", "/.well-known/ucp.json")

OFFICIAL_NAMESPACE = "dev.ucp."
VENDOR_PREFIX = "com."
CANONICAL_DOMAIN = "ucp.dev"
ORDER_CAPABILITY = "dev.ucp.shopping.order"

TRANSPORT_KEYS = ("rest", "mcp", "a2a", "embedded")
