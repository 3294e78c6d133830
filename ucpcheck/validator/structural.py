"""Structural checker: minimum document shape, no network, no cross-references."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ucpcheck.profile.constants import TRANSPORT_KEYS
from ucpcheck.profile.models import Profile
from ucpcheck.validator.issues import IssueCode, ValidationIssue, has_errors

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_VERSION_HINT = 'Use format "YYYY-MM-DD" (e.g., "2026-01-11")'


def is_valid_version(value: Any) -> bool:
    """Return True when value is a ``YYYY-MM-DD`` date string."""
    return isinstance(value, str) and _VERSION_RE.fullmatch(value) is not None


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _service_path(name: str) -> str:
    return f'$.ucp.services["{name}"]'


@dataclass(frozen=True)
class StructuralResult:
    """Narrowing outcome: a typed ``Profile`` only when no error was found."""

    issues: list[ValidationIssue] = field(default_factory=list)
    profile: Profile | None = None

    @property
    def ok(self) -> bool:
        return self.profile is not None


class StructuralChecker:
    """Validate that a candidate document has the minimum Business Profile shape."""

    def check(self, candidate: Any) -> list[ValidationIssue]:
        """Return every structural issue; root failures short-circuit."""
        if not isinstance(candidate, dict):
            return [
                ValidationIssue.error(
                    IssueCode.MISSING_ROOT,
                    "$",
                    "Profile must be a JSON object",
                    "Ensure your profile is valid JSON and contains a root object",
                )
            ]
        ucp = candidate.get("ucp")
        if not isinstance(ucp, dict):
            return [
                ValidationIssue.error(
                    IssueCode.MISSING_ROOT,
                    "$.ucp",
                    'Missing required "ucp" object at root level',
                    'Add a "ucp" object containing version, services, and capabilities',
                )
            ]

        issues: list[ValidationIssue] = []
        issues.extend(self._check_version(ucp))
        issues.extend(self._check_services(ucp))
        issues.extend(self._check_capabilities(ucp))
        if candidate.get("signing_keys") is not None:
            issues.extend(self._check_signing_keys(candidate["signing_keys"]))
        return issues

    def narrow(self, candidate: Any) -> StructuralResult:
        """Check the candidate and, when it has no errors, build the typed ``Profile``."""
        issues = self.check(candidate)
        if has_errors(issues):
            return StructuralResult(issues=issues)
        try:
            profile = Profile.model_validate(candidate)
        except ValidationError as exc:
            logger.debug("Profile narrowing rejected candidate with %d pydantic errors", exc.error_count())
            issues.extend(_pydantic_issues(exc))
            return StructuralResult(issues=issues)
        return StructuralResult(issues=issues, profile=profile)

    def _check_version(self, ucp: dict[str, Any]) -> list[ValidationIssue]:
        version = ucp.get("version")
        if version is None:
            return [
                ValidationIssue.error(
                    IssueCode.MISSING_VERSION,
                    "$.ucp.version",
                    'Missing required "version" field in ucp object',
                    _VERSION_HINT,
                )
            ]
        if not isinstance(version, str):
            return [
                ValidationIssue.error(
                    IssueCode.INVALID_VERSION_FORMAT, "$.ucp.version", "Version must be a string", _VERSION_HINT
                )
            ]
        if not is_valid_version(version):
            return [
                ValidationIssue.error(
                    IssueCode.INVALID_VERSION_FORMAT,
                    "$.ucp.version",
                    f'Invalid version format: "{version}"',
                    _VERSION_HINT,
                )
            ]
        return []

    def _check_services(self, ucp: dict[str, Any]) -> list[ValidationIssue]:
        services = ucp.get("services")
        if services is None:
            return [
                ValidationIssue.error(
                    IssueCode.MISSING_SERVICES,
                    "$.ucp.services",
                    'Missing required "services" field in ucp object',
                    "Add a services object with at least one service definition",
                )
            ]
        if not isinstance(services, dict):
            return [
                ValidationIssue.error(
                    IssueCode.INVALID_SERVICE,
                    "$.ucp.services",
                    "Services must be an object (not an array)",
                    'Use format: { "dev.ucp.shopping": { ... } }',
                )
            ]
        issues: list[ValidationIssue] = []
        for name, service in services.items():
            issues.extend(self._check_service(str(name), service))
        return issues

    def _check_service(self, name: str, service: Any) -> list[ValidationIssue]:
        path = _service_path(name)
        if not isinstance(service, dict):
            return [ValidationIssue.error(IssueCode.INVALID_SERVICE, path, f'Service "{name}" must be an object')]

        issues: list[ValidationIssue] = []
        version = service.get("version")
        if version is None:
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_SERVICE, f"{path}.version", f'Service "{name}" missing required "version" field'
                )
            )
        elif not is_valid_version(version):
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_VERSION_FORMAT,
                    f"{path}.version",
                    f'Invalid version format in service "{name}"',
                    _VERSION_HINT,
                )
            )

        spec = service.get("spec")
        if _is_blank(spec):
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_SERVICE, f"{path}.spec", f'Service "{name}" missing required "spec" field'
                )
            )
        elif not isinstance(spec, str):
            issues.append(
                ValidationIssue.error(IssueCode.INVALID_SERVICE, f"{path}.spec", f'Service "{name}" spec must be a string')
            )

        if not any(service.get(key) is not None for key in TRANSPORT_KEYS):
            issues.append(
                ValidationIssue.warn(
                    IssueCode.INVALID_SERVICE,
                    path,
                    f'Service "{name}" has no transport bindings',
                    "Add at least one transport: rest, mcp, a2a, or embedded",
                )
            )

        if service.get("rest") is not None:
            issues.extend(_check_endpoint_transport(service["rest"], f"{path}.rest", "REST"))
        if service.get("mcp") is not None:
            issues.extend(_check_endpoint_transport(service["mcp"], f"{path}.mcp", "MCP"))
        if service.get("a2a") is not None:
            issues.extend(_check_optional_transport(service["a2a"], f"{path}.a2a", "A2A", "agentCard"))
        if service.get("embedded") is not None:
            issues.extend(_check_optional_transport(service["embedded"], f"{path}.embedded", "Embedded", "schema"))
        return issues

    def _check_capabilities(self, ucp: dict[str, Any]) -> list[ValidationIssue]:
        capabilities = ucp.get("capabilities")
        if capabilities is None:
            return [
                ValidationIssue.error(
                    IssueCode.MISSING_CAPABILITIES,
                    "$.ucp.capabilities",
                    'Missing required "capabilities" field in ucp object',
                    "Add a capabilities array with at least one capability",
                )
            ]
        if not isinstance(capabilities, list):
            return [
                ValidationIssue.error(IssueCode.INVALID_CAPABILITY, "$.ucp.capabilities", "Capabilities must be an array")
            ]

        issues: list[ValidationIssue] = []
        if not capabilities:
            issues.append(
                ValidationIssue.warn(
                    IssueCode.MISSING_CAPABILITIES,
                    "$.ucp.capabilities",
                    "Capabilities array is empty",
                    "Add at least one capability (e.g., dev.ucp.shopping.checkout)",
                )
            )
        for index, capability in enumerate(capabilities):
            issues.extend(self._check_capability(capability, index))
        return issues

    def _check_capability(self, capability: Any, index: int) -> list[ValidationIssue]:
        path = f"$.ucp.capabilities[{index}]"
        if not isinstance(capability, dict):
            return [
                ValidationIssue.error(IssueCode.INVALID_CAPABILITY, path, f"Capability at index {index} must be an object")
            ]

        issues: list[ValidationIssue] = []
        for field_name in ("name", "spec", "schema"):
            value = capability.get(field_name)
            if _is_blank(value):
                issues.append(
                    ValidationIssue.error(
                        IssueCode.INVALID_CAPABILITY,
                        f"{path}.{field_name}",
                        f'Capability missing required "{field_name}" field',
                    )
                )
            elif not isinstance(value, str):
                issues.append(
                    ValidationIssue.error(
                        IssueCode.INVALID_CAPABILITY, f"{path}.{field_name}", f'Capability "{field_name}" must be a string'
                    )
                )

        version = capability.get("version")
        if version is None:
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_CAPABILITY, f"{path}.version", 'Capability missing required "version" field'
                )
            )
        elif not is_valid_version(version):
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_VERSION_FORMAT,
                    f"{path}.version",
                    f'Invalid version format: "{version}"',
                    _VERSION_HINT,
                )
            )

        extends = capability.get("extends")
        if extends is not None and not isinstance(extends, str):
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_CAPABILITY,
                    f"{path}.extends",
                    'Capability "extends" must be the name of another capability',
                )
            )
        return issues

    def _check_signing_keys(self, signing_keys: Any) -> list[ValidationIssue]:
        if not isinstance(signing_keys, list):
            return [
                ValidationIssue.error(
                    IssueCode.INVALID_SIGNING_KEY,
                    "$.signing_keys",
                    "signing_keys must be an array of JWK objects",
                    "Use format: [{ \"kty\": \"EC\", \"kid\": \"key-1\", ... }]",
                )
            ]
        issues: list[ValidationIssue] = []
        for index, key in enumerate(signing_keys):
            path = f"$.signing_keys[{index}]"
            if not isinstance(key, dict):
                issues.append(ValidationIssue.error(IssueCode.INVALID_SIGNING_KEY, path, "JWK must be an object"))
                continue
            for field_name in ("kty", "kid"):
                value = key.get(field_name)
                if _is_blank(value) or not isinstance(value, str):
                    issues.append(
                        ValidationIssue.error(
                            IssueCode.INVALID_SIGNING_KEY,
                            f"{path}.{field_name}",
                            f'JWK missing required "{field_name}" field',
                        )
                    )
        return issues


def _check_endpoint_transport(transport: Any, path: str, label: str) -> list[ValidationIssue]:
    if not isinstance(transport, dict):
        return [ValidationIssue.error(IssueCode.INVALID_SERVICE, path, f"{label} transport must be an object")]
    issues: list[ValidationIssue] = []
    for field_name in ("schema", "endpoint"):
        value = transport.get(field_name)
        if _is_blank(value):
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_SERVICE,
                    f"{path}.{field_name}",
                    f'{label} transport missing required "{field_name}" field',
                )
            )
        elif not isinstance(value, str):
            issues.append(
                ValidationIssue.error(
                    IssueCode.INVALID_SERVICE, f"{path}.{field_name}", f'{label} transport "{field_name}" must be a string'
                )
            )
    return issues


def _check_optional_transport(transport: Any, path: str, label: str, url_field: str) -> list[ValidationIssue]:
    if not isinstance(transport, dict):
        return [ValidationIssue.error(IssueCode.INVALID_SERVICE, path, f"{label} transport must be an object")]
    value = transport.get(url_field)
    if value is not None and not isinstance(value, str):
        return [
            ValidationIssue.error(
                IssueCode.INVALID_SERVICE, f"{path}.{url_field}", f'{label} transport "{url_field}" must be a string'
            )
        ]
    return []


def _json_path(location: tuple[int | str, ...]) -> str:
    path = "$"
    for segment in location:
        if isinstance(segment, int):
            path += f"[{segment}]"
        elif re.search(r'[.\[\]"]', segment):
            path += f'["{segment}"]'
        else:
            path += f".{segment}"
    return path


def _pydantic_issues(exc: ValidationError) -> list[ValidationIssue]:
    """Map residual pydantic errors onto the issue taxonomy."""
    issues: list[ValidationIssue] = []
    for error in exc.errors():
        location = tuple(error.get("loc", ()))
        if "signing_keys" in location:
            code = IssueCode.INVALID_SIGNING_KEY
        elif "capabilities" in location:
            code = IssueCode.INVALID_CAPABILITY
        elif "services" in location:
            code = IssueCode.INVALID_SERVICE
        else:
            code = IssueCode.MISSING_ROOT
        issues.append(ValidationIssue.error(code, _json_path(location), str(error.get("msg", "Invalid value"))))
    return issues
