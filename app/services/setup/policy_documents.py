"""IAM policy documents for the GitHub Actions -> ECR push role.

Pure builders (no AWS calls). The trust policy is the only access-control boundary
of the whole setup: it must keep pinning both the `sub` claim to a single GitHub
repository and the `aud` claim to STS.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

GITHUB_OIDC_HOST = "token.actions.githubusercontent.com"
GITHUB_OIDC_URL = f"https://{GITHUB_OIDC_HOST}"
GITHUB_OIDC_AUDIENCE = "sts.amazonaws.com"
GITHUB_OIDC_THUMBPRINT = "6938fd4d98bab03faadb97b34396831e3780aea1"

POLICY_VERSION = "2012-10-17"

TRUST_POLICY_FILENAME = "trust-policy.json"
ECR_PUSH_POLICY_FILENAME = "ecr-push-policy.json"

ECR_AUTH_ACTIONS: tuple[str, ...] = ("ecr:GetAuthorizationToken",)
ECR_REPOSITORY_ACTIONS: tuple[str, ...] = ("ecr:CreateRepository", "ecr:DescribeRepositories")
ECR_UPLOAD_ACTIONS: tuple[str, ...] = (
    "ecr:BatchCheckLayerAvailability",
    "ecr:InitiateLayerUpload",
    "ecr:UploadLayerPart",
    "ecr:CompleteLayerUpload",
    "ecr:PutImage",
)
ECR_PUSH_ACTIONS: frozenset[str] = frozenset(ECR_AUTH_ACTIONS + ECR_REPOSITORY_ACTIONS + ECR_UPLOAD_ACTIONS)


def role_arn(*, account_id: str, role_name: str) -> str:
    return f"arn:aws:iam::{account_id}:role/{role_name}"


def oidc_provider_arn(*, account_id: str) -> str:
    return f"arn:aws:iam::{account_id}:oidc-provider/{GITHUB_OIDC_HOST}"


def repository_arn(*, region_name: str, account_id: str, repository_name: str) -> str:
    return f"arn:aws:ecr:{region_name}:{account_id}:repository/{repository_name}"


def repository_uri(*, region_name: str, account_id: str, repository_name: str) -> str:
    return f"{account_id}.dkr.ecr.{region_name}.amazonaws.com/{repository_name}"


def subject_claim(source_repository: str) -> str:
    return f"repo:{source_repository}:*"


def build_trust_policy(*, account_id: str, source_repository: str) -> dict[str, Any]:
    """Trust policy allowing only `source_repository` workflows to assume the role."""

    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Federated": oidc_provider_arn(account_id=account_id)},
                "Action": "sts:AssumeRoleWithWebIdentity",
                "Condition": {
                    "StringEquals": {f"{GITHUB_OIDC_HOST}:aud": GITHUB_OIDC_AUDIENCE},
                    "StringLike": {f"{GITHUB_OIDC_HOST}:sub": subject_claim(source_repository)},
                },
            }
        ],
    }


def build_ecr_push_policy(*, region_name: str, account_id: str, repository_name: str) -> dict[str, Any]:
    """Minimal push permissions: auth token on `*`, everything else on one repository."""

    repo_arn = repository_arn(region_name=region_name, account_id=account_id, repository_name=repository_name)
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Sid": "GetAuthorizationToken",
                "Effect": "Allow",
                "Action": list(ECR_AUTH_ACTIONS),
                "Resource": "*",
            },
            {
                "Sid": "ManageRepository",
                "Effect": "Allow",
                "Action": list(ECR_REPOSITORY_ACTIONS),
                "Resource": repo_arn,
            },
            {
                "Sid": "PushImages",
                "Effect": "Allow",
                "Action": list(ECR_UPLOAD_ACTIONS),
                "Resource": repo_arn,
            },
        ],
    }


def dump_policy_document(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2)


def write_policy_document(*, path: Path, document: dict[str, Any]) -> Path:
    """Write a policy document to disk for operator review and return its path."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_policy_document(document) + "\n", encoding="utf-8")
    logger.info("Wrote policy document: %s", path)
    return path
