"""
AWS ECR credential client.

Exchanges the ambient AWS identity (environment credentials, profile,
instance or task role) for an ECR authorization token using boto3.
"""

import base64
import re
from typing import Tuple

from registry_login.auth.authenticator import Authenticator
from registry_login.context import LoginContext
from registry_login.provider import Provider
from registry_login.utils.error_utils import (
    create_invalid_image_error,
    create_provider_not_enabled_error,
    create_registry_auth_error,
)
from registry_login.utils.logging_utils import get_logger

logger = get_logger(__name__)

ECR_USERNAME = "AWS"

# <account>.dkr.ecr[-fips].<region>.amazonaws.com[.cn]/<repository>[:tag]
# Searched rather than anchored so pull-through-cache paths that embed an
# ECR host are recognised too.
_REGISTRY_PART_RE = re.compile(r"([0-9+]*)\.dkr\.ecr(?:-fips)?\.([^/.]*)\.(amazonaws\.com[.cn]*)/([^:]+):?(.*)")


def parse_image(image: str) -> Tuple[str, str, bool]:
    """Parse an ECR image name.

    Args:
        image: Image name, e.g. '123456789012.dkr.ecr.us-west-2.amazonaws.com/my-repo:v1'

    Returns:
        Tuple of (account_id, region, ok). ok is False and the strings are
        empty when the image is not hosted in ECR.
    """
    match = _REGISTRY_PART_RE.search(image or "")
    if not match:
        return "", "", False
    return match.group(1), match.group(2), True


def registry_host(image: str) -> str:
    """Return the ECR hostname embedded in image, or an empty string."""
    match = _REGISTRY_PART_RE.search(image or "")
    if not match:
        return ""
    return image[match.start() : match.start(4) - 1]


class Client:
    """ECR credential client"""

    def __init__(self, session=None, profile: str = None):
        """Initialize the client

        Args:
            session: Optional boto3.Session; the default session is used when None
            profile: Optional AWS profile name, resolved at login time when no session is given
        """
        self._session = session
        self.profile = profile

    def with_session(self, session) -> "Client":
        """Use the given boto3 session for subsequent logins."""
        self._session = session
        return self

    def _ecr_client(self, region: str, ctx: LoginContext):
        import boto3
        from botocore.config import Config

        kwargs = {"region_name": region}
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = max(remaining, 1.0)
            kwargs["config"] = Config(connect_timeout=timeout, read_timeout=timeout, retries={"max_attempts": 0})

        if self._session is None and self.profile:
            self._session = boto3.Session(profile_name=self.profile)
        if self._session is not None:
            return self._session.client("ecr", **kwargs)
        return boto3.client("ecr", **kwargs)

    def get_login_auth(self, ctx: LoginContext, account_id: str, region: str, registry: str = "") -> Authenticator:
        """Fetch an ECR authorization token and decode it into registry credentials.

        Raises:
            RegistryAuthError: If the token cannot be obtained or decoded
        """
        from botocore.exceptions import BotoCoreError, ClientError

        registry = registry or f"{account_id}.dkr.ecr.{region}.amazonaws.com"
        ctx.check()
        try:
            client = self._ecr_client(region, ctx)
            if account_id:
                response = client.get_authorization_token(registryIds=[account_id])
            else:
                response = client.get_authorization_token()
            token_b64 = response["authorizationData"][0]["authorizationToken"]
            token = base64.b64decode(token_b64).decode("utf-8")
            username, password = token.split(":", 1)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"ECR authentication failed: {e}")
            raise create_registry_auth_error(Provider.AWS, registry, e) from e
        except (KeyError, IndexError, ValueError) as e:
            logger.error(f"Unexpected ECR authorization token format: {e}")
            raise create_registry_auth_error(Provider.AWS, registry, e) from e

        return Authenticator(username=username or ECR_USERNAME, password=password)

    def login(self, ctx: LoginContext, auto_login: bool, image: str) -> Authenticator:
        """Obtain ECR credentials for image.

        Args:
            ctx: Login context carrying the deadline and cancellation signal
            auto_login: Whether ambient AWS credentials may be used
            image: ECR image name

        Returns:
            Authenticator for the image's registry

        Raises:
            ProviderNotEnabledError: If auto_login is False
            InvalidImageError: If image is not an ECR image
            RegistryAuthError: If AWS refuses to issue a token
        """
        if not auto_login:
            logger.debug("ECR auto-login is not enabled")
            raise create_provider_not_enabled_error(Provider.AWS, image)

        logger.info(f"logging in to AWS ECR for {image}")
        account_id, region, ok = parse_image(image)
        if not ok:
            raise create_invalid_image_error(image, "not an AWS ECR image")

        return self.get_login_auth(ctx, account_id, region, registry=registry_host(image))


def new_client() -> Client:
    """Return an ECR client using the default boto3 credential chain."""
    return Client()
