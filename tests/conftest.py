"""
Pytest configuration file.

Sets up the Python path so test files can import from the python/ directory,
and keeps the host's login-related environment out of the tests.
"""
import sys
from pathlib import Path

import pytest

# Add python directory to path for all tests
_python_dir = Path(__file__).parent.parent / 'python'
_python_dir_abs = str(_python_dir.absolute())
if _python_dir_abs not in sys.path:
    sys.path.insert(0, _python_dir_abs)

_LOGIN_ENV_VARS = (
    "AWS_AUTO_LOGIN",
    "GCP_AUTO_LOGIN",
    "AZURE_AUTO_LOGIN",
    "LOGIN_TIMEOUT",
    "AWS_PROFILE",
    "AZURE_CLIENT_ID",
    "REGISTRY_AUTH_FILE",
    "CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def clean_login_environment(monkeypatch):
    """Remove login-related environment variables for every test"""
    for name in _LOGIN_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ctx():
    """A login context with no deadline"""
    from registry_login.context import LoginContext

    return LoginContext.background()
