"""Unit tests for registry_login/context.py"""

import threading

import pytest

from registry_login.context import LoginContext
from registry_login.utils.error_utils import ErrorCategory, LoginCancelledError


class TestLoginContext:
    """Tests for LoginContext"""

    def test_background_has_no_deadline(self):
        """Test that a background context never expires"""
        ctx = LoginContext.background()
        assert ctx.deadline is None
        assert ctx.remaining() is None
        assert ctx.expired() is False
        ctx.check()

    def test_remaining_is_bounded_by_timeout(self):
        """Test that remaining time starts at or below the timeout"""
        ctx = LoginContext(timeout=10)
        assert 0 < ctx.remaining() <= 10
        assert ctx.expired() is False

    def test_zero_timeout_is_expired(self):
        """Test that a zero timeout fails check() with a timeout error"""
        ctx = LoginContext(timeout=0)
        assert ctx.remaining() == 0.0
        with pytest.raises(LoginCancelledError) as exc_info:
            ctx.check()
        assert exc_info.value.category == ErrorCategory.TIMEOUT

    def test_cancel_makes_check_raise(self):
        """Test that cancel() is observed by check()"""
        ctx = LoginContext(timeout=60)
        ctx.cancel()
        assert ctx.cancelled is True
        with pytest.raises(LoginCancelledError, match="Login cancelled"):
            ctx.check()

    def test_cancel_from_another_thread(self):
        """Test that cancellation from another thread is visible"""
        ctx = LoginContext.background()
        worker = threading.Thread(target=ctx.cancel)
        worker.start()
        worker.join()
        assert ctx.cancelled is True
