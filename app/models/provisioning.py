from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StepStatus(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    UPDATED = "updated"


class StepOutcome(BaseModel):
    step: str = Field(..., description="Workflow step name")
    status: StepStatus
    resource_ref: str = Field(..., description="ARN (or URI) of the resource the step ensured")


class ProvisioningResult(BaseModel):
    role_arn: str
    repository_arn: str
    repository_uri: str
    region_name: str
    repository_name: str
    steps: list[StepOutcome] = Field(default_factory=list)
    policy_files: list[str] = Field(default_factory=list)

    @property
    def github_secrets(self) -> dict[str, str]:
        return {
            "AWS_ROLE_ARN": self.role_arn,
            "AWS_REGION": self.region_name,
            "ECR_REPOSITORY": self.repository_name,
        }

    def next_steps(self) -> list[str]:
        lines = ["Add the following secrets to the GitHub repository (Settings > Secrets and variables > Actions):"]
        lines.extend(f"  {name} = {value}" for name, value in self.github_secrets.items())
        lines.append("Then run the workflow that builds and pushes the image.")
        return lines


class PolicyDocumentResponse(BaseModel):
    name: str
    document: dict[str, Any]
