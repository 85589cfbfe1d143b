"""
Journey 02: Registration

Registers the user that journeys 04 and 09 update and delete.
"""
import pytest

from api_tests import payloads
from user_api_client import UserAPIError

pytestmark = pytest.mark.usefixtures("writes_allowed")


class TestRegistration:

    def test_create_user(self, authed_api, session_context):
        data = authed_api.register(payloads.new_user())

        assert data["message"] == "User registered successfully"
        assert "data" in data
        assert "id" in data["data"]
        session_context.user_id = data["data"]["id"]

    def test_create_user_missing_required_fields(self, authed_api):
        incomplete_user = {
            "firstName": "test",
            "lastName": "admin",
        }
        with pytest.raises(UserAPIError):
            authed_api.register(incomplete_user)

    def test_create_user_weak_password(self, authed_api):
        weak_password_user = payloads.new_user(password=payloads.WEAK_PASSWORD)
        weak_password_user["lastName"] = "user"

        with pytest.raises(UserAPIError):
            authed_api.register(weak_password_user)
