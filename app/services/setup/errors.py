from __future__ import annotations

from typing import Optional


class ProvisioningError(RuntimeError):
    pass


class PreconditionMissingError(ProvisioningError):
    """A required input or local prerequisite is absent; nothing was called remotely."""


class RemoteCallError(ProvisioningError):
    """An AWS API call failed for a reason other than "resource already exists"."""

    def __init__(self, message: str, *, operation: str, error_code: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.error_code = error_code
