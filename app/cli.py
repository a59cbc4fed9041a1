from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from app.logging_config import ensure_logging, parse_log_level
from app.services.config import ProvisioningConfig
from app.services.config.provisioning_config import env_flag
from app.services.setup.errors import PreconditionMissingError, RemoteCallError
from app.services.setup.policy_documents import (
    ECR_PUSH_POLICY_FILENAME,
    TRUST_POLICY_FILENAME,
    build_ecr_push_policy,
    build_trust_policy,
    write_policy_document,
)
from app.services.setup.provisioning_workflow import ProvisioningWorkflow

EXIT_REMOTE_CALL_FAILED = 1
EXIT_PRECONDITION_MISSING = 2


def _config_from_args(args: argparse.Namespace) -> ProvisioningConfig:
    config = ProvisioningConfig(
        account_id=args.account_id or "",
        region_name=args.region or "",
        repository_name=args.repository or "",
        source_repository=args.source_repository or "",
        role_name=args.role_name,
        create_oidc_provider=args.create_oidc_provider,
        policy_name=args.policy_name,
        output_dir=Path(args.output_dir),
        ensure_repository=args.ensure_repository,
    )
    config.validate()
    return config


def cmd_apply(args: argparse.Namespace) -> None:
    config = _config_from_args(args)
    result = asyncio.run(ProvisioningWorkflow(config).run())
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    print()
    print("\n".join(result.next_steps()))


def cmd_render(args: argparse.Namespace) -> None:
    config = _config_from_args(args)
    trust = build_trust_policy(account_id=config.account_id, source_repository=config.source_repository)
    push = build_ecr_push_policy(
        region_name=config.region_name,
        account_id=config.account_id,
        repository_name=config.repository_name,
    )
    for name, document in ((TRUST_POLICY_FILENAME, trust), (ECR_PUSH_POLICY_FILENAME, push)):
        print(write_policy_document(path=config.output_dir / name, document=document))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Provision an IAM role that GitHub Actions can assume (OIDC) to push images to ECR",
    )
    parser.add_argument("--account-id", default=os.getenv("AWS_ACCOUNT_ID"), help="AWS account id (12 digits).")
    parser.add_argument(
        "--region",
        default=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
        help="AWS region of the ECR repository.",
    )
    parser.add_argument("--repository", default=os.getenv("ECR_REPOSITORY"), help="ECR repository name.")
    parser.add_argument(
        "--source-repository",
        default=os.getenv("GITHUB_REPOSITORY"),
        help="GitHub repository (owner/name) allowed to assume the role.",
    )
    parser.add_argument("--role-name", default=os.getenv("IAM_ROLE_NAME") or "GitHubActionsECRRole")
    parser.add_argument("--policy-name", default=os.getenv("IAM_POLICY_NAME") or "ECRPushPolicy")
    parser.add_argument(
        "--create-oidc-provider",
        action="store_true",
        default=env_flag("CREATE_OIDC_PROVIDER", False),
        help="Create the GitHub OIDC provider even if a listing does not show it missing.",
    )
    parser.add_argument(
        "--no-ensure-repository",
        dest="ensure_repository",
        action="store_false",
        default=env_flag("ECR_ENSURE_REPOSITORY", True),
        help="Do not create the ECR repository when it is missing.",
    )
    parser.add_argument(
        "--output-dir",
        default=os.getenv("PROVISIONING_OUTPUT_DIR") or ".",
        help="Directory the policy documents are written to for review.",
    )
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        default=os.getenv("LOG_LEVEL") or "INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Create or update the AWS resources")
    apply_parser.set_defaults(func=cmd_apply)

    render_parser = subparsers.add_parser("render", help="Only write the policy documents, no AWS calls")
    render_parser.set_defaults(func=cmd_render)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    ensure_logging(args.log_level)
    try:
        args.func(args)
    except PreconditionMissingError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_PRECONDITION_MISSING
    except RemoteCallError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_REMOTE_CALL_FAILED
    except OSError as exc:
        print(f"error: cannot write policy documents: {exc}", file=sys.stderr)
        return EXIT_PRECONDITION_MISSING
    return 0


if __name__ == "__main__":
    sys.exit(main())
