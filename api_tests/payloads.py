"""Request bodies used by the journeys.

Emails and role names carry a random suffix so repeated runs against a
store that is not reset between runs do not collide.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict

from user_api_client import PERMISSION_KEYS

STRONG_PASSWORD = "Test@pna12345"
WEAK_PASSWORD = "weak"

NON_EXISTENT_USER_ID = "non_existent_user_id"
NON_EXISTENT_ROLE_ID = "non_existent_role_id"


def unique_suffix() -> str:
    return uuid.uuid4().hex[:8]


def full_permission_set(granted: bool = True) -> Dict[str, bool]:
    """Every known permission flag set to ``granted``."""
    return {key: granted for key in PERMISSION_KEYS}


def new_user(email: str | None = None, password: str = STRONG_PASSWORD) -> Dict[str, Any]:
    return {
        "firstName": "test",
        "lastName": "admin",
        "email": email or f"test.admin.{unique_suffix()}@example.com",
        "password": password,
        "phone": "9876543211",
    }


def new_role(name: str | None = None) -> Dict[str, Any]:
    return {
        "name": name or f"test-admin-{unique_suffix()}",
        "permissions": full_permission_set(),
    }


def user_update(role_id: str, email: str | None = None) -> Dict[str, Any]:
    return {
        "firstName": "super",
        "lastName": "user",
        "email": email or f"super.user.{unique_suffix()}@example.com",
        "phone": "9090909090",
        "roleId": role_id,
    }
