"""Registry credential material returned by the provider clients."""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Authenticator:
    """Username/password pair accepted by a registry's token endpoint.

    Cloud providers issue short-lived passwords behind a fixed username:
    ``AWS`` for ECR, ``oauth2accesstoken`` for GCR/Artifact Registry and an
    all-zero GUID for ACR refresh tokens.
    """

    username: str
    password: str = field(repr=False)

    def auth_string(self) -> str:
        """Base64 of ``username:password``, as stored in docker config files."""
        return base64.b64encode(f"{self.username}:{self.password}".encode("utf-8")).decode("utf-8")

    def authorization_header(self) -> str:
        """Value for an HTTP ``Authorization`` header."""
        return f"Basic {self.auth_string()}"

    def to_docker_config(self, registry: str) -> Dict[str, Any]:
        """Build a ``.dockerconfigjson`` document holding these credentials for registry."""
        return {
            "auths": {
                registry: {
                    "username": self.username,
                    "password": self.password,
                    "auth": self.auth_string(),
                }
            }
        }
