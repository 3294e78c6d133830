"""Compose the checkers into validation modes and assemble reports."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

from ucpcheck.config.models import DEFAULT_CACHE_TTL_MS, DEFAULT_TIMEOUT_MS, UcpCheckConfig
from ucpcheck.validator.cache import Clock, SchemaCache, get_default_schema_cache, utc_now
from ucpcheck.validator.fetch import HttpFetcher
from ucpcheck.validator.issues import (
    IssueCode,
    ValidationIssue,
    ValidationMode,
    ValidationReport,
)
from ucpcheck.validator.network import NetworkChecker, NetworkCheckOptions, ProfileAcquirer, well_known_urls
from ucpcheck.validator.rules import RulesChecker
from ucpcheck.validator.structural import StructuralChecker

logger = logging.getLogger(__name__)

_RULES_MODES = frozenset({ValidationMode.RULES, ValidationMode.FULL})
_NETWORK_MODES = frozenset({ValidationMode.NETWORK, ValidationMode.FULL})


@dataclass(frozen=True)
class ValidationOptions:
    """Per-call validation options."""

    mode: ValidationMode = ValidationMode.FULL
    skip_network_checks: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS
    max_concurrency: int = 8
    cancel_event: asyncio.Event | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.mode, ValidationMode):
            object.__setattr__(self, "mode", ValidationMode(self.mode))

    @classmethod
    def from_config(cls, config: UcpCheckConfig, **overrides: Any) -> ValidationOptions:
        values: dict[str, Any] = {
            "timeout_ms": config.network.timeout_ms,
            "cache_ttl_ms": config.network.cache_ttl_ms,
            "max_concurrency": config.network.max_concurrency,
        }
        values.update(overrides)
        return cls(**values)

    def network_options(self) -> NetworkCheckOptions:
        return NetworkCheckOptions(
            timeout_ms=self.timeout_ms,
            cache_ttl_ms=self.cache_ttl_ms,
            max_concurrency=self.max_concurrency,
            cancel_event=self.cancel_event,
        )


class ProfileValidator:
    """Run structural, rules and network phases under a selected mode.

    Structural always runs. Any structural error ends the run before rules
    or network, since both assume a narrowed ``Profile``.
    """

    def __init__(
        self,
        config: UcpCheckConfig | None = None,
        *,
        fetcher: HttpFetcher | None = None,
        schema_cache: SchemaCache | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or UcpCheckConfig()
        self._clock = clock or utc_now
        fetcher = fetcher or HttpFetcher(user_agent=self.config.network.user_agent)
        self.structural = StructuralChecker()
        self.rules = RulesChecker(self.config.protocol)
        self.network = NetworkChecker(
            fetcher, schema_cache if schema_cache is not None else get_default_schema_cache()
        )
        self.acquirer = ProfileAcquirer(fetcher)

    def default_options(self, **overrides: Any) -> ValidationOptions:
        return ValidationOptions.from_config(self.config, **overrides)

    async def validate(self, candidate: Any, options: ValidationOptions | None = None) -> ValidationReport:
        """Validate an in-memory candidate document."""
        opts = options or self.default_options()
        mode = opts.mode

        structural = self.structural.narrow(candidate)
        issues: list[ValidationIssue] = list(structural.issues)
        if mode is ValidationMode.STRUCTURAL:
            return self._report(issues, mode, candidate=candidate)
        if structural.profile is None:
            logger.debug("Structural errors found, skipping later phases for mode=%s", mode.value)
            return self._report(issues, mode, candidate=candidate)

        profile = structural.profile
        if mode in _RULES_MODES:
            issues.extend(self.rules.check(profile))
        if mode in _NETWORK_MODES and not opts.skip_network_checks:
            issues.extend(await self.network.check(profile, opts.network_options()))

        return self._report(issues, mode, candidate=candidate)

    def validate_quick(self, candidate: Any) -> ValidationReport:
        """Structural plus rules, never network, whatever the configured mode."""
        structural = self.structural.narrow(candidate)
        issues: list[ValidationIssue] = list(structural.issues)
        if structural.profile is not None:
            issues.extend(self.rules.check(structural.profile))
        return self._report(issues, ValidationMode.RULES, candidate=candidate)

    async def validate_remote(self, domain: str, options: ValidationOptions | None = None) -> ValidationReport:
        """Acquire a profile from ``domain`` and run the pipeline on it."""
        opts = options or self.default_options()
        acquired = await self.acquirer.acquire(domain, timeout_ms=opts.timeout_ms, cancel_event=opts.cancel_event)
        if acquired.profile is None:
            return self._report(
                acquired.issues,
                ValidationMode.NETWORK,
                profile_url=well_known_urls(domain)[0],
            )

        report = await self.validate(acquired.profile, opts)
        return self._report(
            [*acquired.issues, *report.issues],
            opts.mode,
            profile_url=acquired.profile_url,
            candidate=acquired.profile,
        )

    async def validate_json_string(self, text: str, options: ValidationOptions | None = None) -> ValidationReport:
        """Parse ``text`` as JSON and validate it; parse failures become a root issue."""
        opts = options or self.default_options()
        try:
            candidate = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as exc:
            issue = ValidationIssue.error(
                IssueCode.MISSING_ROOT,
                "$",
                f"Failed to parse JSON: {exc}",
                "Ensure the input is valid JSON",
            )
            return self._report([issue], opts.mode)
        return await self.validate(candidate, opts)

    def _report(
        self,
        issues: list[ValidationIssue],
        mode: ValidationMode,
        *,
        profile_url: str | None = None,
        candidate: Any = None,
    ) -> ValidationReport:
        report = ValidationReport.build(
            issues,
            mode,
            validated_at=self._clock(),
            profile_url=profile_url,
            candidate=candidate,
        )
        logger.info(
            "Validation finished mode=%s ok=%s errors=%d warnings=%d",
            mode.value,
            report.ok,
            len(report.errors),
            len(report.warnings),
        )
        return report


_default_validator: ProfileValidator | None = None


def get_default_validator() -> ProfileValidator:
    """Lazily build the validator behind the module-level helpers."""
    global _default_validator
    if _default_validator is None:
        _default_validator = ProfileValidator()
    return _default_validator


async def validate_profile(candidate: Any, options: ValidationOptions | None = None) -> ValidationReport:
    return await get_default_validator().validate(candidate, options)


def validate_quick(candidate: Any) -> ValidationReport:
    return get_default_validator().validate_quick(candidate)


async def validate_remote(domain: str, options: ValidationOptions | None = None) -> ValidationReport:
    return await get_default_validator().validate_remote(domain, options)


async def validate_json_string(text: str, options: ValidationOptions | None = None) -> ValidationReport:
    return await get_default_validator().validate_json_string(text, options)
