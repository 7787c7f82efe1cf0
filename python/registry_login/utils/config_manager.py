"""
Configuration Manager for registry login

This module handles loading and managing configuration from config.yaml
and environment variables.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from registry_login.utils.error_utils import ConfigValidationError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def _parse_bool(value: Any, field: str) -> bool:
    """Coerce a config or environment value to bool"""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigValidationError(f"{field} must be a boolean, got: {value} (type: {type(value).__name__})")


class ConfigManager:
    """Manages configuration for registry login"""

    def __init__(self, config_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to CONFIG_FILE env var or config.yaml)
            validate: If True, validate configuration on initialization
        """
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.config = self._load_config()

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "login": {
                "aws_auto_login": False,
                "gcp_auto_login": False,
                "azure_auto_login": False,
                "timeout": 30,
            },
            "aws": {"profile": ""},
            "gcp": {"scopes": ["https://www.googleapis.com/auth/cloud-platform"]},
            "azure": {"client_id": ""},
            "output": {"auth_file": ".registry-auth.json"},
        }

        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                if not isinstance(user_config, dict):
                    logging.error(f"Config file {self.config_file} must contain a mapping, using defaults")
                    return default_config
                return self._merge_config(default_config, user_config)
            else:
                logging.debug(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config file: {e}")
            return default_config

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            elif key in result and isinstance(result[key], dict) and value is None:
                continue
            else:
                result[key] = value
        return result

    def _section(self, name: str) -> Dict[str, Any]:
        """Return a config section, treating an empty or non-mapping section as empty"""
        section = self.config.get(name)
        return section if isinstance(section, dict) else {}

    # Login configuration
    def _get_auto_login(self, key: str, env_var: str) -> bool:
        value = os.environ.get(env_var)
        if value is None:
            value = self._section("login").get(key, False)
        return _parse_bool(value, f"login.{key}")

    def get_aws_auto_login(self) -> bool:
        """Get ECR auto-login switch from environment or config"""
        return self._get_auto_login("aws_auto_login", "AWS_AUTO_LOGIN")

    def get_gcp_auto_login(self) -> bool:
        """Get GCR auto-login switch from environment or config"""
        return self._get_auto_login("gcp_auto_login", "GCP_AUTO_LOGIN")

    def get_azure_auto_login(self) -> bool:
        """Get ACR auto-login switch from environment or config"""
        return self._get_auto_login("azure_auto_login", "AZURE_AUTO_LOGIN")

    def get_login_timeout(self) -> float:
        """Get login timeout in seconds, with type coercion"""
        timeout = os.environ.get("LOGIN_TIMEOUT") or self._section("login").get("timeout", 30)
        try:
            return float(timeout)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"login.timeout must be a number, got: {timeout} (type: {type(timeout).__name__})"
            )

    def get_login_options(self):
        """Build LoginOptions from the auto-login switches"""
        from registry_login.login import LoginOptions

        return LoginOptions(
            aws_auto_login=self.get_aws_auto_login(),
            gcp_auto_login=self.get_gcp_auto_login(),
            azure_auto_login=self.get_azure_auto_login(),
        )

    # Provider configuration
    def get_aws_profile(self) -> Optional[str]:
        """Get AWS profile name from environment or config"""
        profile = os.environ.get("AWS_PROFILE") or self._section("aws").get("profile", "")
        return profile or None

    def get_gcp_scopes(self) -> list:
        """Get OAuth2 scopes requested for GCP access tokens"""
        return list(self._section("gcp").get("scopes") or [])

    def get_azure_client_id(self) -> Optional[str]:
        """Get managed identity client ID from environment or config"""
        client_id = os.environ.get("AZURE_CLIENT_ID") or self._section("azure").get("client_id", "")
        return client_id or None

    def get_auth_file(self) -> str:
        """Get path of the registry auth file written after login"""
        return os.environ.get("REGISTRY_AUTH_FILE") or self._section("output").get("auth_file", "")

    def build_manager(self):
        """Build a login Manager whose clients follow this configuration"""
        from registry_login.auth import aws, azure, gcp
        from registry_login.login import Manager

        manager = Manager()

        profile = self.get_aws_profile()
        if profile:
            manager.with_ecr_client(aws.Client(profile=profile))

        scopes = self.get_gcp_scopes()
        if scopes:
            manager.with_gcr_client(gcp.Client(scopes=scopes))

        client_id = self.get_azure_client_id()
        if client_id:
            manager.with_acr_client(azure.Client(client_id=client_id))

        return manager

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        for name in ("login", "aws", "gcp", "azure", "output"):
            section = self.config.get(name)
            if section is not None and not isinstance(section, dict):
                errors.append(f"{name} must be a mapping, got: {section} (type: {type(section).__name__})")

        for getter in (self.get_aws_auto_login, self.get_gcp_auto_login, self.get_azure_auto_login):
            try:
                getter()
            except ConfigValidationError as e:
                errors.append(str(e))

        try:
            timeout = self.get_login_timeout()
            if timeout <= 0:
                errors.append(f"login.timeout must be a positive number (seconds), got: {timeout}")
            elif timeout > 600:
                warnings.append(f"login.timeout is very high ({timeout}s), logins may hang for a long time")
        except ConfigValidationError as e:
            errors.append(str(e))

        scopes = self._section("gcp").get("scopes")
        if scopes is not None and (
            not isinstance(scopes, list) or not all(isinstance(s, str) and s.strip() for s in scopes)
        ):
            errors.append(f"gcp.scopes must be a list of non-empty strings, got: {scopes}")

        auth_file = self.get_auth_file()
        if not auth_file or not str(auth_file).strip():
            errors.append("output.auth_file is required and cannot be empty")

        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def print_config(self):
        """Print current configuration"""
        print("Current Configuration:")
        print(f"  AWS Auto-Login: {self.get_aws_auto_login()}")
        print(f"  GCP Auto-Login: {self.get_gcp_auto_login()}")
        print(f"  Azure Auto-Login: {self.get_azure_auto_login()}")
        print(f"  Login Timeout: {self.get_login_timeout()}")
        print(f"  AWS Profile: {self.get_aws_profile() or 'default'}")
        print(f"  GCP Scopes: {', '.join(self.get_gcp_scopes()) or 'none'}")
        print(f"  Azure Client ID: {self.get_azure_client_id() or 'not set'}")
        print(f"  Auth File: {self.get_auth_file()}")
