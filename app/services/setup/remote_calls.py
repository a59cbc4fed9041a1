from __future__ import annotations

import logging
from collections.abc import Awaitable, Collection
from dataclasses import dataclass, field
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from app.services.setup.errors import RemoteCallError

logger = logging.getLogger(__name__)

IAM_ALREADY_EXISTS = frozenset({"EntityAlreadyExists"})
IAM_NOT_FOUND = frozenset({"NoSuchEntity"})
ECR_ALREADY_EXISTS = frozenset({"RepositoryAlreadyExistsException"})
ECR_NOT_FOUND = frozenset({"RepositoryNotFoundException"})


@dataclass(frozen=True)
class RemoteCallResult:
    """Response of an AWS call, or the tolerated error code it failed with."""

    response: dict[str, Any] = field(default_factory=dict)
    error_code: Optional[str] = None

    @property
    def tolerated(self) -> bool:
        return self.error_code is not None


def client_error_code(exc: ClientError) -> str:
    return str((exc.response.get("Error") or {}).get("Code") or "")


def client_error_message(exc: ClientError) -> str:
    return str((exc.response.get("Error") or {}).get("Message") or exc)


async def call_aws(
    operation: str,
    call: Awaitable[dict[str, Any]],
    *,
    tolerate: Collection[str] = (),
) -> RemoteCallResult:
    """Await an AWS API call, mapping error codes listed in `tolerate` to a result.

    Any other failure is raised as `RemoteCallError` with the provider's message.
    """

    try:
        response = await call
    except ClientError as exc:
        code = client_error_code(exc)
        if code in tolerate:
            logger.info("%s returned %s; continuing", operation, code)
            return RemoteCallResult(error_code=code)

        logger.exception("%s failed (%s)", operation, code)
        raise RemoteCallError(
            f"{operation} failed: {client_error_message(exc)}",
            operation=operation,
            error_code=code or None,
        ) from exc
    except BotoCoreError as exc:
        logger.exception("%s failed", operation)
        raise RemoteCallError(f"{operation} failed: {exc}", operation=operation) from exc

    return RemoteCallResult(response=response or {})
