"""Unit tests for registry_login/cli.py"""

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from registry_login.auth.authenticator import Authenticator
from registry_login.cli import main, write_auth_file
from registry_login.login import LoginOptions, Manager
from registry_login.utils.error_utils import RegistryAuthError

ECR_IMAGE = "123456789012.dkr.ecr.us-west-2.amazonaws.com/my-repo:v1"


@pytest.fixture
def config_path(tmp_path):
    """Path to a config file that does not exist, so defaults apply"""
    return str(tmp_path / "config.yaml")


@pytest.fixture
def mock_manager():
    manager = MagicMock(spec=Manager)
    manager.login.return_value = Authenticator("AWS", "mytoken")
    return manager


class TestProviderCommand:
    """Tests for `registry-login provider`"""

    @pytest.mark.parametrize(
        "image,expected",
        [
            (ECR_IMAGE, "aws"),
            ("gcr.io/my-project/my-repo", "gcp"),
            ("myregistry.azurecr.io/my-repo", "azure"),
            ("docker.io/library/nginx", "generic"),
        ],
    )
    def test_prints_provider(self, capsys, config_path, image, expected):
        """Test that the provider tag is printed"""
        assert main(["--config", config_path, "provider", image]) == 0
        assert capsys.readouterr().out.strip() == expected

    def test_invalid_image_exits_nonzero(self, config_path):
        """Test that an unparsable image returns exit code 1"""
        assert main(["--config", config_path, "provider", "Not/Valid"]) == 1


class TestLoginCommand:
    """Tests for `registry-login login`"""

    def test_generic_registry_needs_no_credentials(self, capsys, config_path, tmp_path):
        """Test that generic registries succeed without writing an auth file"""
        auth_file = tmp_path / "auth.json"
        assert main(["--config", config_path, "login", "docker.io/library/nginx", "--auth-file", str(auth_file)]) == 0
        assert "No credentials required for index.docker.io" in capsys.readouterr().out
        assert not auth_file.exists()

    def test_generic_login_ignores_unknown_aws_profile(self, capsys, config_path, tmp_path, monkeypatch):
        """Test that a missing AWS profile does not affect registries outside ECR"""
        monkeypatch.setenv("AWS_PROFILE", "does-not-exist")
        monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws-config"))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws-credentials"))

        code = main(["--config", config_path, "login", "docker.io/library/nginx", "--auth-file", str(tmp_path / "a.json")])

        assert code == 0
        assert "No credentials required for index.docker.io" in capsys.readouterr().out

    def test_ecr_login_with_unknown_aws_profile_exits_nonzero(self, config_path, tmp_path, monkeypatch):
        """Test that a missing AWS profile is reported as a login failure"""
        monkeypatch.setenv("AWS_PROFILE", "does-not-exist")
        monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws-config"))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws-credentials"))

        code = main(
            ["--config", config_path, "login", ECR_IMAGE, "--aws-auto-login", "--auth-file", str(tmp_path / "a.json")]
        )

        assert code == 1

    def test_disabled_provider_exits_nonzero(self, config_path):
        """Test that an ECR login without auto-login fails with exit code 1"""
        with patch("boto3.client") as mock_boto3:
            assert main(["--config", config_path, "login", ECR_IMAGE]) == 1
            mock_boto3.assert_not_called()

    def test_writes_credentials_to_auth_file(self, config_path, tmp_path, mock_manager):
        """Test that successful logins are written in docker config format"""
        auth_file = tmp_path / "nested" / "auth.json"
        with patch("registry_login.cli.ConfigManager.build_manager", return_value=mock_manager):
            code = main(["--config", config_path, "login", ECR_IMAGE, "--aws-auto-login", "--auth-file", str(auth_file)])

        assert code == 0
        config = json.loads(auth_file.read_text())
        entry = config["auths"]["123456789012.dkr.ecr.us-west-2.amazonaws.com"]
        assert entry["username"] == "AWS"
        assert entry["password"] == "mytoken"
        assert oct(os.stat(auth_file).st_mode & 0o777) == oct(0o600)

    def test_flags_enable_auto_login(self, config_path, tmp_path, mock_manager):
        """Test that command line flags turn on the matching provider options"""
        with patch("registry_login.cli.ConfigManager.build_manager", return_value=mock_manager):
            main(
                [
                    "--config", config_path, "login", ECR_IMAGE,
                    "--aws-auto-login", "--azure-auto-login", "--auth-file", str(tmp_path / "auth.json"),
                ]
            )

        options = mock_manager.login.call_args[0][3]
        assert options == LoginOptions(aws_auto_login=True, gcp_auto_login=False, azure_auto_login=True)

    def test_config_enables_auto_login(self, tmp_path, mock_manager):
        """Test that config.yaml switches apply without flags"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("login:\n  gcp_auto_login: true\n")
        with patch("registry_login.cli.ConfigManager.build_manager", return_value=mock_manager):
            main(["--config", str(config_file), "login", ECR_IMAGE, "--auth-file", str(tmp_path / "auth.json")])

        options = mock_manager.login.call_args[0][3]
        assert options.gcp_auto_login is True
        assert options.aws_auto_login is False

    def test_timeout_flag_sets_context_deadline(self, config_path, tmp_path, mock_manager):
        """Test that --timeout bounds the login context"""
        with patch("registry_login.cli.ConfigManager.build_manager", return_value=mock_manager):
            main(["--config", config_path, "login", ECR_IMAGE, "--timeout", "5", "--auth-file", str(tmp_path / "a.json")])

        ctx = mock_manager.login.call_args[0][0]
        assert 0 < ctx.remaining() <= 5

    def test_auth_error_exits_nonzero(self, config_path, mock_manager):
        """Test that provider failures return exit code 1"""
        mock_manager.login.side_effect = RegistryAuthError("aws", "registry", "access denied")
        with patch("registry_login.cli.ConfigManager.build_manager", return_value=mock_manager):
            assert main(["--config", config_path, "login", ECR_IMAGE, "--aws-auto-login"]) == 1


class TestWriteAuthFile:
    """Tests for write_auth_file"""

    def test_preserves_other_registries(self, tmp_path):
        """Test that existing entries for other registries are kept"""
        auth_file = tmp_path / "auth.json"
        auth_file.write_text(json.dumps({"auths": {"ghcr.io": {"auth": "abc"}}, "credsStore": "desktop"}))

        write_auth_file(str(auth_file), "gcr.io", Authenticator("oauth2accesstoken", "token"))

        config = json.loads(auth_file.read_text())
        assert config["auths"]["ghcr.io"] == {"auth": "abc"}
        assert config["auths"]["gcr.io"]["password"] == "token"
        assert config["credsStore"] == "desktop"

    def test_replaces_existing_entry(self, tmp_path):
        """Test that a new login overwrites the registry's old entry"""
        auth_file = tmp_path / "auth.json"
        write_auth_file(str(auth_file), "gcr.io", Authenticator("oauth2accesstoken", "old"))
        write_auth_file(str(auth_file), "gcr.io", Authenticator("oauth2accesstoken", "new"))

        config = json.loads(auth_file.read_text())
        assert config["auths"]["gcr.io"]["password"] == "new"


class TestConfigCommand:
    """Tests for `registry-login config`"""

    def test_prints_configuration(self, capsys, config_path):
        """Test that the effective configuration is printed"""
        assert main(["--config", config_path, "config"]) == 0
        assert "Current Configuration:" in capsys.readouterr().out


class TestEmptyConfigSections:
    """Tests for config files with empty sections"""

    def test_provider_with_empty_login_section(self, capsys, tmp_path):
        """Test that an empty login section does not stop classification"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("login:\n")

        assert main(["--config", str(config_file), "provider", "gcr.io/p/app"]) == 0
        assert capsys.readouterr().out.strip() == "gcp"

    def test_non_mapping_section_exits_nonzero(self, tmp_path):
        """Test that a scalar section is reported as a configuration error"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("login: yes\n")

        assert main(["--config", str(config_file), "provider", "gcr.io/p/app"]) == 1
