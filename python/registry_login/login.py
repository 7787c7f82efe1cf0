"""
Registry provider detection and login dispatch.

image_registry_provider() classifies an image into one of the known
registry providers, and Manager.login() forwards a login request to the
credential client for that provider.
"""

from dataclasses import dataclass
from typing import Optional

from registry_login.auth import aws, azure, gcp
from registry_login.auth.authenticator import Authenticator
from registry_login.context import LoginContext
from registry_login.provider import Provider
from registry_login.utils.logging_utils import get_logger

logger = get_logger(__name__)


def image_registry_provider(image: str, reference) -> Provider:
    """Identify the registry provider hosting an image.

    Checks run in a fixed order and the first match wins: the ECR pattern is
    matched against the full image string, then the GCP and Azure host
    suffixes against the reference's registry host.

    Args:
        image: Image name as given by the caller
        reference: Parsed reference exposing ``registry_str``

    Returns:
        The matching Provider, or Provider.GENERIC
    """
    _, _, ok = aws.parse_image(image)
    if ok:
        return Provider.AWS
    if gcp.valid_host(reference.registry_str):
        return Provider.GCP
    if azure.valid_host(reference.registry_str):
        return Provider.AZURE
    return Provider.GENERIC


@dataclass(frozen=True)
class LoginOptions:
    """Options for registry provider login.

    Attributes:
        aws_auto_login: Allow ambient AWS credentials to be used for ECR images
        gcp_auto_login: Allow Application Default Credentials for GCR/Artifact Registry images
        azure_auto_login: Allow the ambient Azure identity for ACR images
    """

    aws_auto_login: bool = False
    gcp_auto_login: bool = False
    azure_auto_login: bool = False


class Manager:
    """Login manager for the supported registry providers.

    Holds one credential client per cloud provider. Clients can be replaced
    with the with_*_client setters, which return the manager for chaining.
    Replace clients before issuing logins; the manager takes no lock.
    """

    def __init__(self, ecr: Optional[aws.Client] = None, gcr: Optional[gcp.Client] = None,
                 acr: Optional[azure.Client] = None):
        self.ecr = ecr if ecr is not None else aws.new_client()
        self.gcr = gcr if gcr is not None else gcp.new_client()
        self.acr = acr if acr is not None else azure.new_client()

    def with_ecr_client(self, client: aws.Client) -> "Manager":
        """Override the default ECR client."""
        self.ecr = client
        return self

    def with_gcr_client(self, client: gcp.Client) -> "Manager":
        """Override the default GCR client."""
        self.gcr = client
        return self

    def with_acr_client(self, client: azure.Client) -> "Manager":
        """Override the default ACR client."""
        self.acr = client
        return self

    def login(self, ctx: LoginContext, image: str, reference, options: LoginOptions) -> Optional[Authenticator]:
        """Authenticate against the registry hosting image.

        The provider client's result is returned as is and its exceptions
        propagate unchanged. Generic registries need no credentials, so no
        client is called and None is returned.

        Args:
            ctx: Login context passed through to the provider client
            image: Image name as given by the caller
            reference: Parsed reference exposing ``registry_str``
            options: Per-provider auto-login switches

        Returns:
            Authenticator, or None for generic registries
        """
        provider = image_registry_provider(image, reference)
        logger.debug(f"Registry provider for {image}: {provider}")

        if provider is Provider.AWS:
            return self.ecr.login(ctx, options.aws_auto_login, image)
        if provider is Provider.GCP:
            return self.gcr.login(ctx, options.gcp_auto_login, image, reference)
        if provider is Provider.AZURE:
            return self.acr.login(ctx, options.azure_auto_login, image, reference)
        return None


def new_manager() -> Manager:
    """Return a Manager wired with the default provider clients."""
    return Manager()
