from __future__ import annotations

import json
import logging
from typing import Any, Optional

from app.models.provisioning import StepOutcome, StepStatus
from app.services.setup.errors import RemoteCallError
from app.services.setup.policy_documents import (
    GITHUB_OIDC_AUDIENCE,
    GITHUB_OIDC_HOST,
    GITHUB_OIDC_THUMBPRINT,
    GITHUB_OIDC_URL,
    oidc_provider_arn,
)
from app.services.setup.remote_calls import IAM_ALREADY_EXISTS, IAM_NOT_FOUND, call_aws

logger = logging.getLogger(__name__)


class IamSetupService:
    """Provisioning helper for the IAM side of GitHub Actions OIDC federation.

    Every method is create-if-absent (or replace, for the inline policy), so the whole
    sequence can be re-run after a partial failure. An existing role is never modified:
    its trust policy is reported, not rewritten.
    """

    def __init__(self, *, client: Any, account_id: str) -> None:
        self._client = client
        self._account_id = account_id

    async def oidc_provider_exists(self) -> bool:
        # list_open_id_connect_providers is not paginated; it returns every provider.
        result = await call_aws("iam:ListOpenIDConnectProviders", self._client.list_open_id_connect_providers())
        providers = result.response.get("OpenIDConnectProviderList") or []
        return any(str(p.get("Arn", "")).endswith(f"oidc-provider/{GITHUB_OIDC_HOST}") for p in providers)

    async def ensure_oidc_provider(self, *, force_create: bool = False) -> StepOutcome:
        provider_arn = oidc_provider_arn(account_id=self._account_id)

        if not force_create and await self.oidc_provider_exists():
            logger.info("OIDC provider already exists: %s", provider_arn)
            return StepOutcome(step="oidc_provider", status=StepStatus.ALREADY_EXISTS, resource_ref=provider_arn)

        result = await call_aws(
            "iam:CreateOpenIDConnectProvider",
            self._client.create_open_id_connect_provider(
                Url=GITHUB_OIDC_URL,
                ClientIDList=[GITHUB_OIDC_AUDIENCE],
                ThumbprintList=[GITHUB_OIDC_THUMBPRINT],
            ),
            tolerate=IAM_ALREADY_EXISTS,
        )
        if result.tolerated:
            logger.info("OIDC provider already exists: %s", provider_arn)
            return StepOutcome(step="oidc_provider", status=StepStatus.ALREADY_EXISTS, resource_ref=provider_arn)

        created_arn = result.response.get("OpenIDConnectProviderArn") or provider_arn
        logger.info("Created OIDC provider: %s", created_arn)
        return StepOutcome(step="oidc_provider", status=StepStatus.CREATED, resource_ref=created_arn)

    async def _get_role_arn(self, *, role_name: str) -> Optional[str]:
        result = await call_aws("iam:GetRole", self._client.get_role(RoleName=role_name), tolerate=IAM_NOT_FOUND)
        if result.tolerated:
            return None
        return str(result.response["Role"]["Arn"])

    async def ensure_role(self, *, role_name: str, trust_policy: dict[str, Any]) -> StepOutcome:
        existing_arn = await self._get_role_arn(role_name=role_name)
        if existing_arn is not None:
            logger.info("IAM role already exists, leaving it unchanged: %s", existing_arn)
            return StepOutcome(step="role", status=StepStatus.ALREADY_EXISTS, resource_ref=existing_arn)

        result = await call_aws(
            "iam:CreateRole",
            self._client.create_role(
                RoleName=role_name,
                AssumeRolePolicyDocument=json.dumps(trust_policy),
                Description="Role assumed by GitHub Actions to push images to ECR",
            ),
            tolerate=IAM_ALREADY_EXISTS,
        )
        if result.tolerated:
            # Created concurrently between GetRole and CreateRole.
            raced_arn = await self._get_role_arn(role_name=role_name)
            if raced_arn is None:
                raise RemoteCallError(
                    f"IAM role {role_name} reported as existing but could not be read",
                    operation="iam:GetRole",
                )
            return StepOutcome(step="role", status=StepStatus.ALREADY_EXISTS, resource_ref=raced_arn)

        created_arn = str(result.response["Role"]["Arn"])
        logger.info("Created IAM role: %s", created_arn)
        return StepOutcome(step="role", status=StepStatus.CREATED, resource_ref=created_arn)

    async def put_inline_policy(self, *, role_name: str, policy_name: str, document: dict[str, Any]) -> StepOutcome:
        await call_aws(
            "iam:PutRolePolicy",
            self._client.put_role_policy(
                RoleName=role_name,
                PolicyName=policy_name,
                PolicyDocument=json.dumps(document),
            ),
        )
        ref = f"{role_name}/{policy_name}"
        logger.info("Attached inline policy %s to role %s", policy_name, role_name)
        return StepOutcome(step="inline_policy", status=StepStatus.UPDATED, resource_ref=ref)
