"""Issue and report vocabulary shared by every checker.

Issues are plain values: checkers return lists of them and never raise for
document defects. Codes are a public contract; add new members, never rename.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Issue severity. Only ``ERROR`` affects ``ValidationReport.ok``."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class IssueCode(str, Enum):
    """Stable identifiers callers branch on."""

    # structural
    MISSING_ROOT = "UCP_MISSING_ROOT"
    MISSING_VERSION = "UCP_MISSING_VERSION"
    INVALID_VERSION_FORMAT = "UCP_INVALID_VERSION_FORMAT"
    MISSING_SERVICES = "UCP_MISSING_SERVICES"
    INVALID_SERVICE = "UCP_INVALID_SERVICE"
    MISSING_CAPABILITIES = "UCP_MISSING_CAPABILITIES"
    INVALID_CAPABILITY = "UCP_INVALID_CAPABILITY"
    INVALID_SIGNING_KEY = "UCP_INVALID_SIGNING_KEY"

    # rules
    NS_ORIGIN_MISMATCH = "UCP_NS_ORIGIN_MISMATCH"
    ORPHANED_EXTENSION = "UCP_ORPHANED_EXTENSION"
    ENDPOINT_NOT_HTTPS = "UCP_ENDPOINT_NOT_HTTPS"
    ENDPOINT_TRAILING_SLASH = "UCP_ENDPOINT_TRAILING_SLASH"
    PRIVATE_IP_ENDPOINT = "UCP_PRIVATE_IP_ENDPOINT"
    MISSING_SIGNING_KEYS = "UCP_MISSING_SIGNING_KEYS"

    # network
    PROFILE_FETCH_FAILED = "UCP_PROFILE_FETCH_FAILED"
    SCHEMA_FETCH_FAILED = "UCP_SCHEMA_FETCH_FAILED"
    SCHEMA_NOT_SELF_DESCRIBING = "UCP_SCHEMA_NOT_SELF_DESCRIBING"
    SCHEMA_NAME_MISMATCH = "UCP_SCHEMA_NAME_MISMATCH"
    SCHEMA_VERSION_MISMATCH = "UCP_SCHEMA_VERSION_MISMATCH"


class ValidationMode(str, Enum):
    """Which checker phases run. Each mode runs a superset of the previous."""

    STRUCTURAL = "structural"
    RULES = "rules"
    NETWORK = "network"
    FULL = "full"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One validation finding."""

    severity: Severity
    code: IssueCode
    path: str
    message: str
    hint: str | None = None

    @classmethod
    def error(cls, code: IssueCode, path: str, message: str, hint: str | None = None) -> ValidationIssue:
        return cls(Severity.ERROR, code, path, message, hint)

    @classmethod
    def warn(cls, code: IssueCode, path: str, message: str, hint: str | None = None) -> ValidationIssue:
        return cls(Severity.WARN, code, path, message, hint)

    @classmethod
    def info(cls, code: IssueCode, path: str, message: str, hint: str | None = None) -> ValidationIssue:
        return cls(Severity.INFO, code, path, message, hint)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code.value,
            "path": self.path,
            "message": self.message,
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.code.value} at {self.path}: {self.message}"


def has_errors(issues: Iterable[ValidationIssue]) -> bool:
    """Return True when any issue has error severity."""
    return any(issue.is_error for issue in issues)


def format_timestamp(value: datetime) -> str:
    """Render a UTC timestamp as ISO-8601 with millisecond precision and ``Z``."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of one validation call. Built once, never mutated."""

    ok: bool
    validation_mode: ValidationMode
    validated_at: datetime
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)
    profile_url: str | None = None
    ucp_version: str | None = None

    @classmethod
    def build(
        cls,
        issues: Iterable[ValidationIssue],
        mode: ValidationMode,
        *,
        validated_at: datetime | None = None,
        profile_url: str | None = None,
        candidate: Any = None,
    ) -> ValidationReport:
        """Assemble a report; ``ok`` is derived from error-severity issues only."""
        collected = tuple(issues)
        return cls(
            ok=not has_errors(collected),
            validation_mode=mode,
            validated_at=validated_at or datetime.now(UTC),
            issues=collected,
            profile_url=profile_url,
            ucp_version=extract_ucp_version(candidate),
        )

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.WARN]

    @property
    def infos(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is Severity.INFO]

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity is severity)

    def codes(self) -> list[str]:
        """Issue codes in report order."""
        return [issue.code.value for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary; absent optionals are omitted."""
        payload: dict[str, Any] = {"ok": self.ok}
        if self.profile_url is not None:
            payload["profile_url"] = self.profile_url
        if self.ucp_version is not None:
            payload["ucp_version"] = self.ucp_version
        payload["issues"] = [issue.to_dict() for issue in self.issues]
        payload["validated_at"] = format_timestamp(self.validated_at)
        payload["validation_mode"] = self.validation_mode.value
        return payload

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def extract_ucp_version(candidate: Any) -> str | None:
    """Return ``candidate['ucp']['version']`` when it is a string."""
    if hasattr(candidate, "ucp") and hasattr(candidate.ucp, "version"):
        version = candidate.ucp.version
        return version if isinstance(version, str) else None
    if not isinstance(candidate, dict):
        return None
    ucp = candidate.get("ucp")
    if not isinstance(ucp, dict):
        return None
    version = ucp.get("version")
    return version if isinstance(version, str) else None
