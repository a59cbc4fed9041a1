"""Setup (provisioning) services.

This package contains orchestration helpers that *provision* or *verify* the AWS
resources a GitHub Actions pipeline needs to push images to ECR (OIDC provider,
IAM role with inline policy, ECR repository).
"""
