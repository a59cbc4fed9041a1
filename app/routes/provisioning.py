from __future__ import annotations

from fastapi import APIRouter, Depends

from app.models.provisioning import PolicyDocumentResponse
from app.services.config import ProvisioningConfig
from app.services.dependencies import get_provisioning_config
from app.services.setup.policy_documents import (
    ECR_PUSH_POLICY_FILENAME,
    TRUST_POLICY_FILENAME,
    build_ecr_push_policy,
    build_trust_policy,
)

router = APIRouter(prefix="/provisioning", tags=["provisioning"])


@router.get("/trust-policy", response_model=PolicyDocumentResponse)
async def trust_policy(config: ProvisioningConfig = Depends(get_provisioning_config)) -> PolicyDocumentResponse:
    document = build_trust_policy(account_id=config.account_id, source_repository=config.source_repository)
    return PolicyDocumentResponse(name=TRUST_POLICY_FILENAME, document=document)


@router.get("/ecr-push-policy", response_model=PolicyDocumentResponse)
async def ecr_push_policy(config: ProvisioningConfig = Depends(get_provisioning_config)) -> PolicyDocumentResponse:
    document = build_ecr_push_policy(
        region_name=config.region_name,
        account_id=config.account_id,
        repository_name=config.repository_name,
    )
    return PolicyDocumentResponse(name=ECR_PUSH_POLICY_FILENAME, document=document)
