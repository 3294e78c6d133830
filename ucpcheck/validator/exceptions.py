"""Exceptions for ucpcheck.

Document defects are never raised; these cover callers that break the
checker contracts.
"""


class UcpCheckError(Exception):
    """Base exception for ucpcheck."""

    pass


class ProfileContractError(UcpCheckError, TypeError):
    """Raised when a checker that needs a narrowed ``Profile`` receives raw input."""

    def __init__(self, checker: str, received: object) -> None:
        self.checker = checker
        self.received_type = type(received).__name__
        super().__init__(
            f"{checker} requires a Profile produced by StructuralChecker.narrow(), "
            f"got {self.received_type}"
        )
