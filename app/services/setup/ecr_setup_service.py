from __future__ import annotations

import logging
from typing import Any

from app.models.provisioning import StepOutcome, StepStatus
from app.services.setup.policy_documents import repository_arn
from app.services.setup.remote_calls import ECR_ALREADY_EXISTS, ECR_NOT_FOUND, call_aws

logger = logging.getLogger(__name__)


class EcrSetupService:
    """Ensures the target ECR repository exists (create on demand)."""

    def __init__(self, *, client: Any, account_id: str, region_name: str) -> None:
        self._client = client
        self._account_id = account_id
        self._region_name = region_name

    def _repository_arn(self, repository_name: str) -> str:
        return repository_arn(
            region_name=self._region_name,
            account_id=self._account_id,
            repository_name=repository_name,
        )

    async def ensure_repository(self, *, repository_name: str) -> StepOutcome:
        described = await call_aws(
            "ecr:DescribeRepositories",
            self._client.describe_repositories(repositoryNames=[repository_name]),
            tolerate=ECR_NOT_FOUND,
        )
        repositories = described.response.get("repositories") or []
        if not described.tolerated and repositories:
            arn = str(repositories[0]["repositoryArn"])
            logger.info("ECR repository already exists: %s", arn)
            return StepOutcome(step="repository", status=StepStatus.ALREADY_EXISTS, resource_ref=arn)

        created = await call_aws(
            "ecr:CreateRepository",
            self._client.create_repository(
                repositoryName=repository_name,
                imageTagMutability="MUTABLE",
                imageScanningConfiguration={"scanOnPush": True},
            ),
            tolerate=ECR_ALREADY_EXISTS,
        )
        if created.tolerated:
            arn = self._repository_arn(repository_name)
            return StepOutcome(step="repository", status=StepStatus.ALREADY_EXISTS, resource_ref=arn)

        arn = str(created.response["repository"]["repositoryArn"])
        logger.info("Created ECR repository: %s", arn)
        return StepOutcome(step="repository", status=StepStatus.CREATED, resource_ref=arn)
