"""
Shared test fixtures.

AWS is never contacted: workflows get a FakeSession backed by an in-memory account.
"""

import pytest

from app.services.config import ProvisioningConfig
from tests.mocks.aws import FakeAwsAccount, FakeSession


@pytest.fixture
def aws_account():
    return FakeAwsAccount(account_id="665168932067", region_name="eu-north-1")


@pytest.fixture
def aws_session(aws_account):
    return FakeSession(aws_account)


@pytest.fixture
def provisioning_config(tmp_path):
    return ProvisioningConfig(
        account_id="665168932067",
        region_name="eu-north-1",
        repository_name="coursera/spring-boot-docker",
        source_repository="harina-30/spring-boot-docker",
        output_dir=tmp_path,
    )


@pytest.fixture
def provisioning_env(monkeypatch, tmp_path):
    """Environment as the CI/operator would set it."""
    for name in ("AWS_DEFAULT_REGION", "IAM_ROLE_NAME", "IAM_POLICY_NAME", "CREATE_OIDC_PROVIDER", "ECR_ENSURE_REPOSITORY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_ACCOUNT_ID", "665168932067")
    monkeypatch.setenv("AWS_REGION", "eu-north-1")
    monkeypatch.setenv("ECR_REPOSITORY", "coursera/spring-boot-docker")
    monkeypatch.setenv("GITHUB_REPOSITORY", "harina-30/spring-boot-docker")
    monkeypatch.setenv("PROVISIONING_OUTPUT_DIR", str(tmp_path))
    return tmp_path
