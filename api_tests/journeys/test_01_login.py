"""
Journey 01: Login

Captures the access/refresh token pair every later journey depends on.
"""
import pytest

from api_tests.config import settings
from user_api_client import UserAPIError


class TestLogin:

    def test_login(self, user_api, session_context):
        """Fixture super-admin can log in."""
        data = user_api.login(settings.admin_email, settings.admin_password, settings.device_type)
        session_context.record_login(data)

        assert session_context.access_token
        assert session_context.refresh_token

    def test_login_invalid_credentials(self, user_api):
        with pytest.raises(UserAPIError):
            user_api.login("wrong@email.com", "wrongpassword", settings.device_type)

    def test_login_missing_fields(self, user_api):
        """Email alone is not enough."""
        with pytest.raises(UserAPIError):
            user_api.login(settings.admin_email)

    def test_get_user_info(self, authed_api):
        data = authed_api.info()

        assert "message" in data
        assert data["message"] == "success"
