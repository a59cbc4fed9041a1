from __future__ import annotations

import logging
import os
from typing import Any, Optional, cast

from aiobotocore.session import AioSession, get_session
from botocore.exceptions import BotoCoreError

from app.models.provisioning import ProvisioningResult, StepOutcome
from app.services.config import ProvisioningConfig
from app.services.setup.ecr_setup_service import EcrSetupService
from app.services.setup.errors import PreconditionMissingError
from app.services.setup.iam_setup_service import IamSetupService
from app.services.setup.policy_documents import (
    ECR_PUSH_POLICY_FILENAME,
    TRUST_POLICY_FILENAME,
    build_ecr_push_policy,
    build_trust_policy,
    repository_uri,
    write_policy_document,
)

logger = logging.getLogger(__name__)


class ProvisioningWorkflow:
    """Sets up GitHub Actions -> ECR push access for one repository.

    Steps, strictly in order:
    1) Ensure the GitHub OIDC provider exists (forced create tolerates "already exists").
    2) Write `trust-policy.json` and ensure the IAM role exists (existing role untouched).
    3) Write `ecr-push-policy.json` and put it as the role's inline policy (replace).
    4) Optionally ensure the ECR repository exists.

    Any failure other than "already exists" aborts the remaining steps. Nothing is rolled
    back; every step is safe to repeat, so recovery is re-running the whole workflow.
    """

    def __init__(self, config: ProvisioningConfig, *, session: Optional[AioSession] = None) -> None:
        self._config = config
        self._session = session

    def _get_session(self) -> AioSession:
        if self._session is None:
            self._session = get_session()
        return self._session

    def _check_output_dir(self) -> None:
        output_dir = self._config.output_dir
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PreconditionMissingError(f"Cannot create policy output directory {output_dir}: {exc}") from exc
        if not os.access(output_dir, os.W_OK):
            raise PreconditionMissingError(f"Policy output directory is not writable: {output_dir}")

    async def check_preconditions(self) -> None:
        """Validate inputs, the output directory and local AWS credentials, before any remote call."""

        self._config.validate()
        self._check_output_dir()

        try:
            credentials = await self._get_session().get_credentials()
        except BotoCoreError as exc:
            raise PreconditionMissingError(f"Unable to resolve AWS credentials: {exc}") from exc

        if credentials is None:
            raise PreconditionMissingError(
                "No AWS credentials found (configure a profile, environment variables or an instance role)"
            )

    async def run(self) -> ProvisioningResult:
        await self.check_preconditions()

        config = self._config
        session = self._get_session()
        steps: list[StepOutcome] = []
        policy_files: list[str] = []

        iam_cm = session.create_client("iam", region_name=config.region_name)
        async with cast(Any, iam_cm) as iam_client:
            iam = IamSetupService(client=iam_client, account_id=config.account_id)

            steps.append(await iam.ensure_oidc_provider(force_create=config.create_oidc_provider))

            trust_policy = build_trust_policy(
                account_id=config.account_id,
                source_repository=config.source_repository,
            )
            policy_files.append(
                str(write_policy_document(path=config.output_dir / TRUST_POLICY_FILENAME, document=trust_policy))
            )
            role_outcome = await iam.ensure_role(role_name=config.role_name, trust_policy=trust_policy)
            steps.append(role_outcome)

            push_policy = build_ecr_push_policy(
                region_name=config.region_name,
                account_id=config.account_id,
                repository_name=config.repository_name,
            )
            policy_files.append(
                str(write_policy_document(path=config.output_dir / ECR_PUSH_POLICY_FILENAME, document=push_policy))
            )
            steps.append(
                await iam.put_inline_policy(
                    role_name=config.role_name,
                    policy_name=config.policy_name,
                    document=push_policy,
                )
            )

        if config.ensure_repository:
            ecr_cm = session.create_client("ecr", region_name=config.region_name)
            async with cast(Any, ecr_cm) as ecr_client:
                ecr = EcrSetupService(client=ecr_client, account_id=config.account_id, region_name=config.region_name)
                steps.append(await ecr.ensure_repository(repository_name=config.repository_name))

        result = ProvisioningResult(
            role_arn=role_outcome.resource_ref,
            repository_arn=config.repository_arn,
            repository_uri=repository_uri(
                region_name=config.region_name,
                account_id=config.account_id,
                repository_name=config.repository_name,
            ),
            region_name=config.region_name,
            repository_name=config.repository_name,
            steps=steps,
            policy_files=policy_files,
        )
        logger.info(
            "Provisioning complete: role=%s, steps=%s",
            result.role_arn,
            ", ".join(f"{s.step}={s.status.value}" for s in steps),
        )
        return result
