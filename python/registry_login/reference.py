"""
Container image reference parsing.

Splits image names such as ``nginx``, ``gcr.io/project/app:v1`` or
``myregistry.azurecr.io/team/app@sha256:...`` into registry, repository,
tag and digest. Docker Hub names are normalised the way registry clients do:
``nginx`` becomes ``index.docker.io/library/nginx:latest``.
"""

import re
from dataclasses import dataclass
from typing import Optional

from registry_login.utils.error_utils import create_invalid_image_error

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"

# Hostnames that all refer to Docker Hub
_DOCKER_HUB_ALIASES = ("docker.io", "registry-1.docker.io", "index.docker.io")

_REPOSITORY_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_REPOSITORY_RE = re.compile(rf"^{_REPOSITORY_COMPONENT}(?:/{_REPOSITORY_COMPONENT})*$")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST_RE = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-fA-F0-9]{32,}$")


@dataclass(frozen=True)
class ImageReference:
    """Parsed image reference.

    Attributes:
        registry: Registry hostname, including a port if one was given
        repository: Repository path within the registry
        tag: Image tag (None for digest-only references)
        digest: Content digest, e.g. ``sha256:<hex>``
        original: The string that was parsed
    """

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None
    original: str = ""

    @property
    def registry_str(self) -> str:
        """Registry host used for provider detection."""
        return self.registry

    @property
    def context(self) -> str:
        """``registry/repository`` without tag or digest."""
        return f"{self.registry}/{self.repository}"

    @property
    def identifier(self) -> str:
        """The tag, or the digest for digest references."""
        return self.digest or self.tag or DEFAULT_TAG

    @property
    def name(self) -> str:
        if self.digest:
            return f"{self.context}@{self.digest}"
        return f"{self.context}:{self.tag or DEFAULT_TAG}"

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, image: str) -> "ImageReference":
        """Parse an image string.

        Args:
            image: Image name, e.g. ``123456789012.dkr.ecr.us-west-2.amazonaws.com/my-repo:v1``

        Returns:
            ImageReference

        Raises:
            InvalidImageError: If the string is not a valid image reference
        """
        if not image or not image.strip():
            raise create_invalid_image_error(image, "reference is empty")
        if image != image.strip() or any(c.isspace() for c in image):
            raise create_invalid_image_error(image, "reference contains whitespace")

        remainder = image
        digest = None
        if "@" in remainder:
            remainder, digest = remainder.split("@", 1)
            if not _DIGEST_RE.match(digest):
                raise create_invalid_image_error(image, f"invalid digest '{digest}'")

        # A tag follows the last ':' unless that colon belongs to a registry port
        tag = None
        last_colon = remainder.rfind(":")
        if last_colon > remainder.rfind("/"):
            remainder, tag = remainder[:last_colon], remainder[last_colon + 1:]
            if not _TAG_RE.match(tag):
                raise create_invalid_image_error(image, f"invalid tag '{tag}'")

        parts = remainder.split("/", 1)
        if len(parts) == 2 and ("." in parts[0] or ":" in parts[0] or parts[0] == "localhost"):
            registry, repository = parts
        else:
            registry, repository = DEFAULT_REGISTRY, remainder

        if registry in _DOCKER_HUB_ALIASES:
            registry = DEFAULT_REGISTRY
            if "/" not in repository:
                repository = f"library/{repository}"

        if not repository:
            raise create_invalid_image_error(image, "repository is empty")
        if not _REPOSITORY_RE.match(repository):
            raise create_invalid_image_error(
                image, f"repository '{repository}' must be lowercase alphanumerics separated by '.', '_', '-' or '/'"
            )

        if tag is None and digest is None:
            tag = DEFAULT_TAG

        return cls(registry=registry, repository=repository, tag=tag, digest=digest, original=image)


def parse_reference(image: str) -> ImageReference:
    """Parse an image string into an ImageReference."""
    return ImageReference.parse(image)
