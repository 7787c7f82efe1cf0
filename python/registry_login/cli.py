"""
Command line entry point.

    registry-login provider IMAGE
    registry-login login IMAGE [--aws-auto-login] [--gcp-auto-login] [--azure-auto-login]
    registry-login config
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from registry_login.auth.authenticator import Authenticator
from registry_login.context import LoginContext
from registry_login.login import LoginOptions, image_registry_provider
from registry_login.reference import parse_reference
from registry_login.utils.config_manager import ConfigManager
from registry_login.utils.error_utils import ActionableError, ConfigValidationError
from registry_login.utils.logging_utils import setup_logging


def write_auth_file(path: str, registry: str, authenticator: Authenticator) -> None:
    """Merge credentials for registry into a docker-style auth file.

    Entries for other registries already in the file are preserved.
    """
    config = {}
    if os.path.exists(path):
        with open(path, "r") as f:
            config = json.load(f) or {}

    auths = config.setdefault("auths", {})
    auths.update(authenticator.to_docker_config(registry)["auths"])

    auth_dir = os.path.dirname(path)
    if auth_dir:
        os.makedirs(auth_dir, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        json.dump(config, f, indent=2)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="registry-login", description="Detect container registry providers and obtain registry credentials"
    )
    parser.add_argument("--config", help="Path to config.yaml (defaults to CONFIG_FILE env var or ./config.yaml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    provider_parser = subparsers.add_parser("provider", help="Print the registry provider hosting an image")
    provider_parser.add_argument("image", help="Image reference, e.g. gcr.io/my-project/my-repo:v1")

    login_parser = subparsers.add_parser("login", help="Obtain credentials for the registry hosting an image")
    login_parser.add_argument("image", help="Image reference")
    login_parser.add_argument("--aws-auto-login", action="store_true", help="Use ambient AWS credentials for ECR")
    login_parser.add_argument(
        "--gcp-auto-login", action="store_true", help="Use Application Default Credentials for GCR"
    )
    login_parser.add_argument("--azure-auto-login", action="store_true", help="Use the ambient Azure identity for ACR")
    login_parser.add_argument("--timeout", type=float, help="Seconds before the login is abandoned")
    login_parser.add_argument("--auth-file", help="Auth file to write credentials to")

    subparsers.add_parser("config", help="Print the effective configuration")

    return parser.parse_args(argv)


def _login(args: argparse.Namespace, config: ConfigManager) -> int:
    reference = parse_reference(args.image)
    configured = config.get_login_options()
    options = LoginOptions(
        aws_auto_login=args.aws_auto_login or configured.aws_auto_login,
        gcp_auto_login=args.gcp_auto_login or configured.gcp_auto_login,
        azure_auto_login=args.azure_auto_login or configured.azure_auto_login,
    )
    timeout = args.timeout if args.timeout is not None else config.get_login_timeout()
    ctx = LoginContext(timeout=timeout)

    authenticator = config.build_manager().login(ctx, args.image, reference, options)
    if authenticator is None:
        print(f"No credentials required for {reference.registry_str}")
        return 0

    auth_file = args.auth_file or config.get_auth_file()
    try:
        write_auth_file(auth_file, reference.registry_str, authenticator)
    except (OSError, ValueError) as e:
        logging.error(f"Could not write auth file {auth_file}: {e}")
        return 1
    print(f"Login succeeded for {reference.registry_str}; credentials written to {auth_file}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = ConfigManager(config_file=args.config)

        if args.command == "provider":
            print(image_registry_provider(args.image, parse_reference(args.image)))
            return 0
        if args.command == "config":
            config.print_config()
            return 0
        return _login(args, config)
    except (ActionableError, ConfigValidationError) as e:
        logging.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
