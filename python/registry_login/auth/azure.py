"""
Azure Container Registry credential client.

Gets an Azure Resource Manager access token from azure-identity (managed
identity, workload identity, environment or CLI credentials) and exchanges
it for an ACR refresh token via the registry's OAuth2 exchange endpoint.
"""

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

from registry_login.auth.authenticator import Authenticator
from registry_login.context import LoginContext
from registry_login.provider import Provider
from registry_login.utils.error_utils import create_provider_not_enabled_error, create_registry_auth_error
from registry_login.utils.logging_utils import get_logger

logger = get_logger(__name__)

# ACR uses a placeholder GUID as the username when the password is a refresh token
ACR_USERNAME = "00000000-0000-0000-0000-000000000000"
DEFAULT_EXCHANGE_TIMEOUT = 30.0

_HOST_SUFFIXES = (".azurecr.io", ".azurecr.cn", ".azurecr.de", ".azurecr.us")

# Resource Manager scope per sovereign cloud, keyed by registry host suffix
_ARM_SCOPES = {
    ".azurecr.cn": "https://management.chinacloudapi.cn/.default",
    ".azurecr.de": "https://management.microsoftazure.de/.default",
    ".azurecr.us": "https://management.usgovcloudapi.net/.default",
}
DEFAULT_ARM_SCOPE = "https://management.azure.com/.default"


def valid_host(host: str) -> bool:
    """Return True if host is an Azure Container Registry hostname."""
    return any(host.endswith(suffix) for suffix in _HOST_SUFFIXES)


def arm_scope(host: str) -> str:
    """Return the Resource Manager token scope for the cloud hosting registry host."""
    for suffix, scope in _ARM_SCOPES.items():
        if host.endswith(suffix):
            return scope
    return DEFAULT_ARM_SCOPE


class Client:
    """ACR credential client"""

    def __init__(self, client_id: Optional[str] = None, credential=None):
        """Initialize the client

        Args:
            client_id: Client ID of a user-assigned managed identity (required when
                several identities are assigned to the host)
            credential: Optional azure-identity credential to use instead of building one
        """
        self.client_id = client_id or None
        self._credential = credential

    def with_credential(self, credential) -> "Client":
        """Use the given azure-identity credential for subsequent logins."""
        self._credential = credential
        return self

    def _get_credential(self):
        if self._credential is not None:
            return self._credential
        if self.client_id:
            from azure.identity import ManagedIdentityCredential

            logger.info(f"Using managed identity with client ID: {self.client_id}")
            return ManagedIdentityCredential(client_id=self.client_id)

        from azure.identity import DefaultAzureCredential

        logger.info("Using DefaultAzureCredential (no client ID specified)")
        return DefaultAzureCredential()

    def exchange_refresh_token(self, ctx: LoginContext, registry: str, access_token: str) -> str:
        """Exchange an AAD access token for an ACR refresh token."""
        exchange_url = f"https://{registry}/oauth2/exchange"
        data = urllib.parse.urlencode(
            {
                "grant_type": "access_token",
                "service": registry,
                "access_token": access_token,
            }
        ).encode("utf-8")

        req = urllib.request.Request(exchange_url, data=data, method="POST")
        req.add_header("Content-Type", "application/x-www-form-urlencoded")

        remaining = ctx.remaining()
        timeout = max(remaining, 1.0) if remaining is not None else DEFAULT_EXCHANGE_TIMEOUT
        with urllib.request.urlopen(req, timeout=timeout) as response:
            result = json.loads(response.read().decode("utf-8"))
        return result["refresh_token"]

    def get_login_auth(self, ctx: LoginContext, registry: str) -> Authenticator:
        """Obtain an ACR refresh token for registry.

        Raises:
            RegistryAuthError: If the identity or the exchange endpoint refuses
        """
        from azure.core.exceptions import AzureError

        ctx.check()
        try:
            credential = self._get_credential()
            token = credential.get_token(arm_scope(registry))
            ctx.check()
            refresh_token = self.exchange_refresh_token(ctx, registry, token.token)
        except urllib.error.HTTPError as e:
            logger.error(f"ACR token exchange failed: {e}")
            logger.error(f"  client ID: {self.client_id or 'not set'}")
            raise create_registry_auth_error(Provider.AZURE, registry, e) from e
        except (AzureError, urllib.error.URLError) as e:
            logger.error(f"error logging into ACR: {e}")
            raise create_registry_auth_error(Provider.AZURE, registry, e) from e
        except (KeyError, ValueError) as e:
            logger.error(f"Unexpected ACR token exchange response: {e}")
            raise create_registry_auth_error(Provider.AZURE, registry, e) from e

        return Authenticator(username=ACR_USERNAME, password=refresh_token)

    def login(self, ctx: LoginContext, auto_login: bool, image: str, reference) -> Authenticator:
        """Obtain ACR credentials for image.

        Args:
            ctx: Login context carrying the deadline and cancellation signal
            auto_login: Whether the ambient Azure identity may be used
            image: Image name as given by the caller
            reference: Parsed image reference; its registry host is the exchange target

        Raises:
            ProviderNotEnabledError: If auto_login is False
            RegistryAuthError: If no refresh token can be obtained
        """
        if not auto_login:
            logger.debug("ACR auto-login is not enabled")
            raise create_provider_not_enabled_error(Provider.AZURE, image)

        logger.info(f"logging in to Azure ACR for {image}")
        return self.get_login_auth(ctx, reference.registry_str)


def new_client() -> Client:
    """Return an ACR client using DefaultAzureCredential."""
    return Client()
