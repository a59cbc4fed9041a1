import json

import pytest

from app.services.setup.policy_documents import (
    ECR_PUSH_ACTIONS,
    GITHUB_OIDC_AUDIENCE,
    build_ecr_push_policy,
    build_trust_policy,
    repository_arn,
    role_arn,
    write_policy_document,
)


@pytest.mark.parametrize(
    "source_repository",
    ["harina-30/spring-boot-docker", "octo-org/app.service", "a/b"],
)
def test_trust_policy_pins_subject_and_audience(source_repository):
    policy = build_trust_policy(account_id="665168932067", source_repository=source_repository)

    assert len(policy["Statement"]) == 1
    statement = policy["Statement"][0]
    assert statement["Effect"] == "Allow"
    assert statement["Action"] == "sts:AssumeRoleWithWebIdentity"
    assert statement["Principal"] == {
        "Federated": "arn:aws:iam::665168932067:oidc-provider/token.actions.githubusercontent.com"
    }
    assert statement["Condition"] == {
        "StringEquals": {"token.actions.githubusercontent.com:aud": "sts.amazonaws.com"},
        "StringLike": {"token.actions.githubusercontent.com:sub": f"repo:{source_repository}:*"},
    }
    assert GITHUB_OIDC_AUDIENCE == "sts.amazonaws.com"


def test_push_policy_only_uses_allow_listed_actions():
    policy = build_ecr_push_policy(
        region_name="eu-north-1",
        account_id="665168932067",
        repository_name="coursera/spring-boot-docker",
    )
    expected_arn = "arn:aws:ecr:eu-north-1:665168932067:repository/coursera/spring-boot-docker"

    granted = set()
    for statement in policy["Statement"]:
        assert statement["Effect"] == "Allow"
        actions = statement["Action"]
        granted.update(actions)
        if actions == ["ecr:GetAuthorizationToken"]:
            assert statement["Resource"] == "*"
        else:
            assert "ecr:GetAuthorizationToken" not in actions
            assert statement["Resource"] == expected_arn

    assert granted == ECR_PUSH_ACTIONS
    assert "ecr:CreateRepository" in granted
    assert "ecr:PutImage" in granted


def test_example_arns():
    assert role_arn(account_id="665168932067", role_name="GitHubActionsECRRole") == (
        "arn:aws:iam::665168932067:role/GitHubActionsECRRole"
    )
    assert repository_arn(
        region_name="eu-north-1",
        account_id="665168932067",
        repository_name="coursera/spring-boot-docker",
    ) == "arn:aws:ecr:eu-north-1:665168932067:repository/coursera/spring-boot-docker"


def test_write_policy_document_creates_readable_json(tmp_path):
    document = build_trust_policy(account_id="665168932067", source_repository="owner/name")
    path = write_policy_document(path=tmp_path / "nested" / "trust-policy.json", document=document)

    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == document
