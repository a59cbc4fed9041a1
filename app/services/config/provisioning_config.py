from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from app.services.setup.errors import PreconditionMissingError
from app.services.setup.policy_documents import oidc_provider_arn, repository_arn, role_arn


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ProvisioningConfig:
    """Inputs for the GitHub Actions -> ECR push role provisioning workflow.

    `source_repository` is the GitHub repository allowed to assume the role, in
    "owner/name" form. `repository_name` is the ECR repository the role may push to.
    """

    account_id: str
    region_name: str
    repository_name: str
    source_repository: str
    role_name: str = "GitHubActionsECRRole"
    create_oidc_provider: bool = False
    policy_name: str = "ECRPushPolicy"
    output_dir: Path = field(default_factory=Path.cwd)
    ensure_repository: bool = True

    _ACCOUNT_ID_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\d{12}$")
    _SOURCE_REPOSITORY_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
    _ROLE_NAME_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[\w+=,.@-]{1,64}$")
    # ECR repository names may contain namespaces: "team/app"
    _REPOSITORY_NAME_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^(?:[a-z0-9]+(?:[._-][a-z0-9]+)*/)*[a-z0-9]+(?:[._-][a-z0-9]+)*$"
    )

    @staticmethod
    def _required_env(*names: str) -> str:
        for name in names:
            value = (os.getenv(name) or "").strip()
            if value:
                return value
        raise PreconditionMissingError(f"Missing required environment variable: {' or '.join(names)}")

    @staticmethod
    def from_env() -> "ProvisioningConfig":
        output_dir_raw = os.getenv("PROVISIONING_OUTPUT_DIR")

        return ProvisioningConfig(
            account_id=ProvisioningConfig._required_env("AWS_ACCOUNT_ID"),
            region_name=ProvisioningConfig._required_env("AWS_REGION", "AWS_DEFAULT_REGION"),
            repository_name=ProvisioningConfig._required_env("ECR_REPOSITORY"),
            source_repository=ProvisioningConfig._required_env("GITHUB_REPOSITORY"),
            role_name=os.getenv("IAM_ROLE_NAME") or "GitHubActionsECRRole",
            create_oidc_provider=env_flag("CREATE_OIDC_PROVIDER", False),
            policy_name=os.getenv("IAM_POLICY_NAME") or "ECRPushPolicy",
            output_dir=Path(output_dir_raw) if output_dir_raw else Path.cwd(),
            ensure_repository=env_flag("ECR_ENSURE_REPOSITORY", True),
        )

    def validate(self) -> None:
        """Fail fast on missing or malformed inputs, before any AWS call is made."""

        for name in ("account_id", "region_name", "repository_name", "source_repository", "role_name", "policy_name"):
            if not str(getattr(self, name) or "").strip():
                raise PreconditionMissingError(f"Missing required setting: {name}")

        if not self._ACCOUNT_ID_RE.match(self.account_id):
            raise PreconditionMissingError(f"Invalid AWS account id (expected 12 digits): {self.account_id!r}")
        if not self._SOURCE_REPOSITORY_RE.match(self.source_repository):
            raise PreconditionMissingError(
                f"Invalid GitHub repository reference (expected owner/name): {self.source_repository!r}"
            )
        if not self._ROLE_NAME_RE.match(self.role_name):
            raise PreconditionMissingError(f"Invalid IAM role name: {self.role_name!r}")
        if not self._REPOSITORY_NAME_RE.match(self.repository_name):
            raise PreconditionMissingError(f"Invalid ECR repository name: {self.repository_name!r}")

    @property
    def role_arn(self) -> str:
        return role_arn(account_id=self.account_id, role_name=self.role_name)

    @property
    def repository_arn(self) -> str:
        return repository_arn(
            region_name=self.region_name,
            account_id=self.account_id,
            repository_name=self.repository_name,
        )

    @property
    def oidc_provider_arn(self) -> str:
        return oidc_provider_arn(account_id=self.account_id)

