"""
Error message utilities for providing actionable guidance to users.

This module defines the exceptions raised by the credential clients, the
reference parser and the login context, together with factory functions
that attach suggested fixes for each registry provider.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    NETWORK = "network"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [self.message]

        if self.suggestions:
            lines.append("\nSuggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\nAdditional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


class RegistryLoginError(ActionableError):
    """Base class for errors raised while obtaining registry credentials"""


class ProviderNotEnabledError(RegistryLoginError):
    """Raised by a credential client whose auto-login option is disabled"""

    def __init__(self, provider: str, message: str, **kwargs):
        self.provider = provider
        super().__init__(message, **kwargs)


class InvalidImageError(RegistryLoginError):
    """Raised when an image reference cannot be parsed or does not fit a provider"""


class RegistryAuthError(RegistryLoginError):
    """Raised when a provider refuses or fails to issue registry credentials"""

    def __init__(self, provider: str, registry: str, message: str, **kwargs):
        self.provider = provider
        self.registry = registry
        super().__init__(message, **kwargs)


class LoginCancelledError(RegistryLoginError):
    """Raised when a login is cancelled or runs past its deadline"""


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""


# Option and environment variable that enable each provider's auto-login.
AUTO_LOGIN_SETTINGS = {
    "aws": ("aws_auto_login", "AWS_AUTO_LOGIN", "--aws-auto-login"),
    "gcp": ("gcp_auto_login", "GCP_AUTO_LOGIN", "--gcp-auto-login"),
    "azure": ("azure_auto_login", "AZURE_AUTO_LOGIN", "--azure-auto-login"),
}

PROVIDER_NAMES = {
    "aws": "AWS ECR",
    "gcp": "GCP GCR",
    "azure": "Azure ACR",
}


def create_provider_not_enabled_error(provider: Any, image: str) -> ProviderNotEnabledError:
    """Create actionable error for a provider whose auto-login is switched off"""
    key = str(provider)
    option, env_var, flag = AUTO_LOGIN_SETTINGS[key]
    return ProviderNotEnabledError(
        provider=key,
        message=f"{PROVIDER_NAMES[key]} authentication failed: auto-login is not enabled",
        category=ErrorCategory.CONFIGURATION,
        suggestions=[
            f"Pass {flag} on the command line",
            f"Set {env_var}=true in the environment",
            f"Set login.{option}: true in config.yaml",
        ],
        details={"image": image},
    )


def create_registry_auth_error(provider: Any, registry: str, error: Exception) -> RegistryAuthError:
    """Create actionable error for provider credential failures"""
    key = str(provider)
    error_str = str(error).lower()
    suggestions = []

    if key == "aws":
        suggestions = [
            "Verify AWS credentials are configured (aws configure, AWS_PROFILE or an instance role)",
            "Check the IAM policy allows ecr:GetAuthorizationToken",
            "Run 'aws ecr get-login-password' to test ECR authentication",
        ]
        if "expired" in error_str:
            suggestions.insert(0, "Refresh the expired AWS session credentials")
    elif key == "gcp":
        suggestions = [
            "Verify Application Default Credentials are available (gcloud auth application-default login)",
            "On GKE, check the Kubernetes service account is bound to a GCP service account",
            "Check the service account has roles/artifactregistry.reader or storage.objectViewer",
        ]
    elif key == "azure":
        suggestions = [
            "Verify the managed identity has the AcrPull role on the registry",
            "Verify the managed identity is assigned to the node pool VMSS",
            "Check AZURE_CLIENT_ID matches the identity's client ID",
        ]
        if "identity not found" in error_str:
            suggestions.insert(0, "AZURE_CLIENT_ID does not name an identity assigned to this host")

    if "timeout" in error_str or "timed out" in error_str:
        suggestions.append("Check network connectivity to the provider's identity endpoint")

    return RegistryAuthError(
        provider=key,
        registry=registry,
        message=f"{PROVIDER_NAMES.get(key, key)} authentication failed for {registry}",
        category=ErrorCategory.AUTHENTICATION,
        suggestions=suggestions,
        details={
            "registry": registry,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def create_invalid_image_error(image: str, reason: str) -> InvalidImageError:
    """Create actionable error for an image reference that cannot be used"""
    return InvalidImageError(
        message=f"Invalid image reference '{image}': {reason}",
        category=ErrorCategory.VALIDATION,
        suggestions=[
            "Use the format [registry/]repository[:tag][@digest]",
            "Repository names must be lowercase",
        ],
        details={"image": image},
    )
