"""
GCP Container Registry / Artifact Registry credential client.

Uses Application Default Credentials (workload identity, the metadata
server, or a local gcloud login) to mint an OAuth2 access token that the
registries accept as a password for the ``oauth2accesstoken`` user.
"""

from typing import List, Optional

from registry_login.auth.authenticator import Authenticator
from registry_login.context import LoginContext
from registry_login.provider import Provider
from registry_login.utils.error_utils import create_provider_not_enabled_error, create_registry_auth_error
from registry_login.utils.logging_utils import get_logger

logger = get_logger(__name__)

GCR_USERNAME = "oauth2accesstoken"
DEFAULT_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def valid_host(host: str) -> bool:
    """Return True if host is a GCR or Artifact Registry hostname."""
    return host == "gcr.io" or host.endswith(".gcr.io") or host.endswith("-docker.pkg.dev")


def _deadline_request(ctx: LoginContext):
    """Build a google-auth transport whose HTTP calls are bounded by ctx."""
    from google.auth.transport.requests import Request

    class DeadlineRequest(Request):
        def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
            ctx.check()
            remaining = ctx.remaining()
            if remaining is not None:
                timeout = max(remaining, 1.0)
            if timeout is None:
                return super().__call__(url, method=method, body=body, headers=headers, **kwargs)
            return super().__call__(url, method=method, body=body, headers=headers, timeout=timeout, **kwargs)

    return DeadlineRequest()


class Client:
    """GCR credential client"""

    def __init__(self, scopes: Optional[List[str]] = None):
        self.scopes = list(scopes or DEFAULT_SCOPES)

    def with_scopes(self, scopes: List[str]) -> "Client":
        """Request the given OAuth2 scopes instead of the defaults."""
        self.scopes = list(scopes)
        return self

    def get_login_auth(self, ctx: LoginContext, registry: str) -> Authenticator:
        """Fetch an access token from Application Default Credentials.

        Raises:
            RegistryAuthError: If no credentials are available or the refresh fails
        """
        import google.auth
        from google.auth.exceptions import GoogleAuthError

        ctx.check()
        try:
            credentials, project_id = google.auth.default(scopes=self.scopes)
            logger.debug(f"Using Application Default Credentials (project: {project_id})")
            credentials.refresh(_deadline_request(ctx))
        except GoogleAuthError as e:
            logger.error(f"error logging into GCP: {e}")
            raise create_registry_auth_error(Provider.GCP, registry, e) from e

        if not credentials.token:
            error = ValueError("credentials refresh returned no access token")
            logger.error(f"error logging into GCP: {error}")
            raise create_registry_auth_error(Provider.GCP, registry, error)

        return Authenticator(username=GCR_USERNAME, password=credentials.token)

    def login(self, ctx: LoginContext, auto_login: bool, image: str, reference) -> Authenticator:
        """Obtain GCR/Artifact Registry credentials for image.

        Args:
            ctx: Login context carrying the deadline and cancellation signal
            auto_login: Whether Application Default Credentials may be used
            image: Image name as given by the caller
            reference: Parsed image reference

        Raises:
            ProviderNotEnabledError: If auto_login is False
            RegistryAuthError: If no access token can be obtained
        """
        if not auto_login:
            logger.debug("GCR auto-login is not enabled")
            raise create_provider_not_enabled_error(Provider.GCP, image)

        logger.info(f"logging in to GCP GCR for {image}")
        return self.get_login_auth(ctx, reference.registry_str)


def new_client() -> Client:
    """Return a GCR client requesting the cloud-platform scope."""
    return Client()
