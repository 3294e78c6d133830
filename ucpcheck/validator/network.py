"""Network checks: capability schema verification and remote profile acquisition."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from ucpcheck.config.models import DEFAULT_CACHE_TTL_MS, DEFAULT_TIMEOUT_MS
from ucpcheck.profile.constants import WELL_KNOWN_PATHS
from ucpcheck.profile.models import Capability, Profile
from ucpcheck.validator.cache import SchemaCache, get_default_schema_cache
from ucpcheck.validator.exceptions import ProfileContractError
from ucpcheck.validator.fetch import HttpFetcher
from ucpcheck.validator.issues import IssueCode, ValidationIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkCheckOptions:
    """Knobs for one network phase."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS
    skip_schema_fetch: bool = False
    max_concurrency: int = 8
    cancel_event: asyncio.Event | None = None


@dataclass(frozen=True)
class AcquisitionResult:
    """Remote profile acquisition outcome."""

    profile: dict[str, Any] | None
    profile_url: str | None = None
    issues: list[ValidationIssue] = field(default_factory=list)


def schema_name_from_id(schema_id: str) -> str:
    """Return the last path segment of a ``$id`` URL without ``.json``; non-URLs pass through."""
    parsed = urlparse(schema_id)
    if not (parsed.scheme and (parsed.netloc or parsed.path)):
        return schema_id
    segments = [segment for segment in parsed.path.split("/") if segment]
    last = segments[-1] if segments else ""
    return last.removesuffix(".json")


def self_description_issues(schema: dict[str, Any], capability: Capability, base_path: str) -> list[ValidationIssue]:
    """Compare a fetched schema's own identity against the capability that references it.

    Name matching is a substring heuristic and only ever advisory.
    """
    path = f"{base_path}.schema"
    issues: list[ValidationIssue] = []
    declared = next(
        (value for value in (schema.get("$id"), schema.get("name")) if isinstance(value, str) and value),
        None,
    )

    if declared is None:
        issues.append(
            ValidationIssue.info(
                IssueCode.SCHEMA_NOT_SELF_DESCRIBING,
                path,
                "Schema does not contain self-describing $id or name field",
                "Consider adding $id field to schema for better discoverability",
            )
        )
    else:
        name = schema_name_from_id(declared)
        if name and name not in capability.name and capability.final_segment not in name:
            issues.append(
                ValidationIssue.warn(
                    IssueCode.SCHEMA_NAME_MISMATCH,
                    path,
                    f'Schema name "{name}" may not match capability "{capability.name}"',
                )
            )

    version = schema.get("version")
    if version and str(version) != capability.version:
        issues.append(
            ValidationIssue.info(
                IssueCode.SCHEMA_VERSION_MISMATCH,
                path,
                f'Schema version "{version}" differs from capability version "{capability.version}"',
                "Ensure schema and capability versions are aligned",
            )
        )
    return issues


class NetworkChecker:
    """Fetch every capability schema (through the cache) and cross-check it."""

    def __init__(self, fetcher: HttpFetcher | None = None, cache: SchemaCache | None = None) -> None:
        self._fetcher = fetcher or HttpFetcher()
        self._cache = cache if cache is not None else get_default_schema_cache()

    @property
    def cache(self) -> SchemaCache:
        return self._cache

    async def check(self, profile: Profile, options: NetworkCheckOptions | None = None) -> list[ValidationIssue]:
        if not isinstance(profile, Profile):
            raise ProfileContractError(type(self).__name__, profile)
        opts = options or NetworkCheckOptions()
        if opts.skip_schema_fetch:
            return []

        semaphore = asyncio.Semaphore(max(opts.max_concurrency, 1))

        async def _bounded(index: int, capability: Capability) -> list[ValidationIssue]:
            async with semaphore:
                return await self._check_capability(index, capability, opts)

        results = await asyncio.gather(
            *(_bounded(index, capability) for index, capability in enumerate(profile.ucp.capabilities))
        )
        issues = [issue for batch in results for issue in batch]
        logger.debug("Network phase checked %d schemas, %d issues", len(results), len(issues))
        return issues

    async def _check_capability(
        self, index: int, capability: Capability, opts: NetworkCheckOptions
    ) -> list[ValidationIssue]:
        base_path = f"$.ucp.capabilities[{index}]"
        url = capability.schema_url
        if not url:
            return []

        cached = self._cache.get(url)
        if cached is not None:
            logger.debug("Schema cache hit: %s", url)
            return self_description_issues(cached.body, capability, base_path)

        logger.debug("Schema cache miss: %s", url)
        result = await self._fetcher.fetch_json(url, timeout_ms=opts.timeout_ms, cancel_event=opts.cancel_event)
        if not result.success:
            return [
                ValidationIssue.warn(
                    IssueCode.SCHEMA_FETCH_FAILED,
                    f"{base_path}.schema",
                    f"Failed to fetch schema from {url}",
                    result.error or "Schema URL may be incorrect or temporarily unavailable",
                )
            ]
        if not isinstance(result.data, dict):
            return [
                ValidationIssue.warn(
                    IssueCode.SCHEMA_FETCH_FAILED,
                    f"{base_path}.schema",
                    "Schema response is empty or not a JSON object",
                )
            ]

        self._cache.put(url, result.data, ttl_ms=opts.cache_ttl_ms, etag=result.etag)
        return self_description_issues(result.data, capability, base_path)


def normalize_domain(domain: str) -> str:
    """Reduce user input such as ``https://Shop.example.com/`` to ``shop.example.com``."""
    value = domain.strip()
    if "://" in value:
        value = urlparse(value).netloc or value.split("://", 1)[1]
    value = value.split("/", 1)[0]
    return value.strip().lower()


def well_known_urls(domain: str) -> list[str]:
    host = normalize_domain(domain)
    return [f"https://{host}{path}" for path in WELL_KNOWN_PATHS]


class ProfileAcquirer:
    """Fetch a Business Profile from a merchant domain's well-known locations."""

    def __init__(self, fetcher: HttpFetcher | None = None) -> None:
        self._fetcher = fetcher or HttpFetcher()

    async def acquire(
        self,
        domain: str,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        cancel_event: asyncio.Event | None = None,
    ) -> AcquisitionResult:
        """Try each well-known path in order; never raises for transport faults."""
        failures: list[str] = []
        for url in well_known_urls(domain):
            result = await self._fetcher.fetch_profile(url, timeout_ms=timeout_ms, cancel_event=cancel_event)
            if not result.success:
                failures.append(f"{url}: {result.error}")
                continue
            if not isinstance(result.data, dict):
                failures.append(f"{url}: response is not a JSON object")
                continue
            if not result.data.get("ucp"):
                failures.append(f'{url}: JSON has no "ucp" key')
                continue
            logger.info("Acquired profile from %s", url)
            return AcquisitionResult(profile=result.data, profile_url=url)

        logger.warning("No profile found for %s", domain)
        hint = "Check that the profile is accessible and returns valid JSON"
        if failures:
            hint = f"{hint} ({'; '.join(failures)})"
        return AcquisitionResult(
            profile=None,
            issues=[
                ValidationIssue.error(
                    IssueCode.PROFILE_FETCH_FAILED,
                    "$.well-known/ucp",
                    "No UCP profile found at /.well-known/ucp or /.well-known/ucp.json",
                    hint,
                )
            ],
        )
