"""
Registry provider detection and credential login for container images.

Identifies whether an image lives in AWS ECR, GCP GCR/Artifact Registry,
Azure ACR or a generic registry, and obtains short-lived credentials from
the matching cloud provider.
"""

from registry_login.auth.authenticator import Authenticator
from registry_login.context import LoginContext
from registry_login.login import LoginOptions, Manager, image_registry_provider, new_manager
from registry_login.provider import Provider
from registry_login.reference import ImageReference, parse_reference

__version__ = "0.1.0"

__all__ = [
    "Authenticator",
    "ImageReference",
    "LoginContext",
    "LoginOptions",
    "Manager",
    "Provider",
    "image_registry_provider",
    "new_manager",
    "parse_reference",
]
