"""Registry provider identifiers."""

from enum import Enum


class Provider(str, Enum):
    """Cloud provider hosting a container image registry"""

    GENERIC = "generic"
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"

    def __str__(self) -> str:
        return self.value
