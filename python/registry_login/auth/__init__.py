"""
Registry credential clients.

One client per cloud registry provider:
- AWS ECR (Elastic Container Registry)
- GCP GCR / Artifact Registry
- Azure ACR (Azure Container Registry)
"""

from registry_login.auth import aws, azure, gcp
from registry_login.auth.authenticator import Authenticator

__all__ = [
    "Authenticator",
    "aws",
    "azure",
    "gcp",
]
