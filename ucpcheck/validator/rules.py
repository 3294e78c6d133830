"""Rules checker: protocol semantics on a structurally valid profile."""

from __future__ import annotations

import ipaddress
import logging
from urllib.parse import urlparse

from ucpcheck.config.models import ProtocolConfig
from ucpcheck.profile.models import Profile
from ucpcheck.validator.exceptions import ProfileContractError
from ucpcheck.validator.issues import IssueCode, ValidationIssue

logger = logging.getLogger(__name__)

_LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1"})
_PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
)


def _hostname(url: str) -> str | None:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def host_matches_domain(url: str, domain: str) -> bool:
    """Return True when the URL host is ``domain`` or one of its subdomains."""
    host = _hostname(url)
    if not host:
        return False
    return host == domain or host.endswith(f".{domain}")


def vendor_domain(name: str, vendor_prefix: str = "com.") -> str | None:
    """Derive ``example.com`` from ``com.example.feature``.

    Only the ``com.<vendor>.<feature>`` shape is recognised; anything else
    yields ``None`` and no origin check applies.
    """
    if not name.startswith(vendor_prefix):
        return None
    parts = name.split(".")
    if len(parts) < 3 or not parts[1]:
        return None
    tld = vendor_prefix.rstrip(".")
    return f"{parts[1].lower()}.{tld}"


def is_private_endpoint(url: str) -> bool:
    """Static loopback / RFC 1918 check on the URL host. No DNS resolution."""
    host = _hostname(url)
    if not host:
        return False
    if host in _LOOPBACK_HOSTS:
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    if address.version != 4:
        return False
    return any(address in network for network in _PRIVATE_NETWORKS)


class RulesChecker:
    """Enforce namespace binding, extension integrity, endpoint policy and key requirements."""

    def __init__(self, protocol: ProtocolConfig | None = None) -> None:
        self._protocol = protocol or ProtocolConfig()

    def check(self, profile: Profile) -> list[ValidationIssue]:
        if not isinstance(profile, Profile):
            raise ProfileContractError(type(self).__name__, profile)
        issues: list[ValidationIssue] = []
        issues.extend(self._check_namespace_origins(profile))
        issues.extend(self._check_extensions(profile))
        issues.extend(self._check_endpoints(profile))
        issues.extend(self._check_signing_keys(profile))
        logger.debug("Rules phase produced %d issues", len(issues))
        return issues

    def _check_namespace_origins(self, profile: Profile) -> list[ValidationIssue]:
        protocol = self._protocol
        issues: list[ValidationIssue] = []
        for index, capability in enumerate(profile.ucp.capabilities):
            path = f"$.ucp.capabilities[{index}]"
            targets = (("spec", capability.spec), ("schema", capability.schema_url))

            if capability.name.startswith(protocol.official_namespace):
                namespace = f"{protocol.official_namespace}*"
                for field_name, url in targets:
                    if not host_matches_domain(url, protocol.canonical_domain):
                        issues.append(
                            ValidationIssue.error(
                                IssueCode.NS_ORIGIN_MISMATCH,
                                f"{path}.{field_name}",
                                f"{namespace} capability {field_name} must be hosted on {protocol.canonical_domain}",
                                f'Use https://{protocol.canonical_domain}/... instead of "{url}"',
                            )
                        )
                continue

            domain = vendor_domain(capability.name, protocol.vendor_prefix)
            if domain is None:
                continue
            for field_name, url in targets:
                if not host_matches_domain(url, domain):
                    issues.append(
                        ValidationIssue.warn(
                            IssueCode.NS_ORIGIN_MISMATCH,
                            f"{path}.{field_name}",
                            f"Vendor capability {field_name} should be hosted on vendor's domain ({domain})",
                            f"Consider hosting {field_name} at https://{domain}/...",
                        )
                    )
        return issues

    def _check_extensions(self, profile: Profile) -> list[ValidationIssue]:
        names = profile.capability_names
        issues: list[ValidationIssue] = []
        for index, capability in enumerate(profile.ucp.capabilities):
            if not capability.extends or capability.extends in names:
                continue
            issues.append(
                ValidationIssue.error(
                    IssueCode.ORPHANED_EXTENSION,
                    f"$.ucp.capabilities[{index}].extends",
                    f'Extension "{capability.name}" references non-existent parent capability "{capability.extends}"',
                    f'Add "{capability.extends}" to capabilities or remove the extends field',
                )
            )
        return issues

    def _check_endpoints(self, profile: Profile) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for service_name, service in profile.ucp.services.items():
            base = f'$.ucp.services["{service_name}"]'
            for relative, url in service.endpoints():
                issues.extend(_check_endpoint(url, f"{base}.{relative}"))
        return issues

    def _check_signing_keys(self, profile: Profile) -> list[ValidationIssue]:
        order = self._protocol.order_capability
        if not profile.has_capability(order) or profile.signing_keys:
            return []
        return [
            ValidationIssue.error(
                IssueCode.MISSING_SIGNING_KEYS,
                "$.signing_keys",
                "Order capability requires signing_keys for webhook verification",
                "Add signing_keys array with at least one JWK public key",
            )
        ]


def _check_endpoint(url: str, path: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not url.startswith("https://"):
        issues.append(
            ValidationIssue.error(
                IssueCode.ENDPOINT_NOT_HTTPS, path, "Endpoint must use HTTPS", f'Change "{url}" to use https://'
            )
        )
    if url.endswith("/"):
        issues.append(
            ValidationIssue.warn(
                IssueCode.ENDPOINT_TRAILING_SLASH,
                path,
                "Endpoint should not have a trailing slash",
                f'Remove trailing slash from "{url}"',
            )
        )
    if is_private_endpoint(url):
        issues.append(
            ValidationIssue.warn(
                IssueCode.PRIVATE_IP_ENDPOINT,
                path,
                "Endpoint appears to use a private IP address",
                "Use a public domain name for production profiles",
            )
        )
    return issues
