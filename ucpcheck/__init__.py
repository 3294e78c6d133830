"""ucpcheck - validate Business Profile documents published at /.well-known/ucp."""

from ucpcheck.config import UcpCheckConfig, load_config
from ucpcheck.profile import Profile
from ucpcheck.validator import (
    IssueCode,
    ProfileValidator,
    Severity,
    ValidationIssue,
    ValidationMode,
    ValidationOptions,
    ValidationReport,
    clear_schema_cache,
    validate_json_string,
    validate_profile,
    validate_quick,
    validate_remote,
)

__version__ = "0.1.0"

__all__ = [
    "IssueCode",
    "Profile",
    "ProfileValidator",
    "Severity",
    "UcpCheckConfig",
    "ValidationIssue",
    "ValidationMode",
    "ValidationOptions",
    "ValidationReport",
    "__version__",
    "clear_schema_cache",
    "load_config",
    "validate_json_string",
    "validate_profile",
    "validate_quick",
    "validate_remote",
]
