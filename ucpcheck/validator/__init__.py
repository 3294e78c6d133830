"""Business Profile validation engine."""

from ucpcheck.validator.cache import SchemaCache, SchemaCacheEntry, clear_schema_cache, get_default_schema_cache
from ucpcheck.validator.exceptions import ProfileContractError, UcpCheckError
from ucpcheck.validator.fetch import FetchResult, HttpFetcher
from ucpcheck.validator.issues import IssueCode, Severity, ValidationIssue, ValidationMode, ValidationReport
from ucpcheck.validator.network import AcquisitionResult, NetworkChecker, NetworkCheckOptions, ProfileAcquirer
from ucpcheck.validator.orchestrator import (
    ProfileValidator,
    ValidationOptions,
    get_default_validator,
    validate_json_string,
    validate_profile,
    validate_quick,
    validate_remote,
)
from ucpcheck.validator.rules import RulesChecker
from ucpcheck.validator.structural import StructuralChecker, StructuralResult, is_valid_version

__all__ = [
    "AcquisitionResult",
    "FetchResult",
    "HttpFetcher",
    "IssueCode",
    "NetworkCheckOptions",
    "NetworkChecker",
    "ProfileAcquirer",
    "ProfileContractError",
    "ProfileValidator",
    "RulesChecker",
    "SchemaCache",
    "SchemaCacheEntry",
    "Severity",
    "StructuralChecker",
    "StructuralResult",
    "UcpCheckError",
    "ValidationIssue",
    "ValidationMode",
    "ValidationOptions",
    "ValidationReport",
    "clear_schema_cache",
    "get_default_schema_cache",
    "get_default_validator",
    "is_valid_version",
    "validate_json_string",
    "validate_profile",
    "validate_quick",
    "validate_remote",
]
