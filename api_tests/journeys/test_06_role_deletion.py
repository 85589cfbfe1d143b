"""
Journey 06: Role deletion

Removes the role created in journey 03.
"""
import pytest

from api_tests import payloads
from user_api_client import UserAPIError

pytestmark = pytest.mark.usefixtures("writes_allowed")


class TestRoleDeletion:

    def test_delete_role(self, authed_api, session_context):
        role_id = session_context.require("role_id")

        data = authed_api.delete_roles([role_id])

        assert data["message"] == "Roles Deleted successfully"

    def test_delete_non_existent_role(self, authed_api):
        with pytest.raises(UserAPIError):
            authed_api.delete_roles([payloads.NON_EXISTENT_ROLE_ID])
