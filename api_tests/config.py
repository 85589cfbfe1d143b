"""Shared configuration for the user API integration suite.

Values are read from the environment, falling back to ``.env.defaults`` at
the repository root and then to built-in defaults:

- USER_API_BASE_URL: target API; empty runs against the in-process mock
- USER_API_ADMIN_EMAIL / USER_API_ADMIN_PASSWORD: fixture login
- USER_API_DEVICE_TYPE: ``deviceType`` sent on login
- USER_API_TIMEOUT: request timeout in seconds
- USER_API_ALLOW_WRITES: set to 0 to skip journeys that create or delete data
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urljoin

from api_tests.env_defaults import get_env_default

DEFAULT_ADMIN_EMAIL = "superadmin@pnacademy.in"
DEFAULT_ADMIN_PASSWORD = "Test@pna12345"
DEFAULT_DEVICE_TYPE = "web"
DEFAULT_TIMEOUT = 30.0


def _setting(key: str, fallback: str = "") -> str:
    value = os.getenv(key)
    if value is not None:
        return value
    default = get_env_default(key)
    return default if default is not None else fallback


@dataclass
class ApiTargetProfile:
    """Concrete set of credentials + host for the API under test."""

    base_url: str
    admin_email: str
    admin_password: str
    device_type: str = DEFAULT_DEVICE_TYPE
    timeout: float = DEFAULT_TIMEOUT
    allow_writes: bool = True

    @property
    def uses_mock(self) -> bool:
        """True when no external target is configured."""
        return not self.base_url.strip()


class ApiTestConfig:
    """Configuration loaded from the environment and .env.defaults."""

    def __init__(self) -> None:
        timeout_str = _setting("USER_API_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(timeout_str)
        except ValueError:
            print(f"[CONFIG] Ignoring invalid USER_API_TIMEOUT={timeout_str!r}, using {DEFAULT_TIMEOUT}")
            timeout = DEFAULT_TIMEOUT

        allow_writes_str = _setting("USER_API_ALLOW_WRITES", "1")

        self._active = ApiTargetProfile(
            base_url=_setting("USER_API_BASE_URL"),
            admin_email=_setting("USER_API_ADMIN_EMAIL") or DEFAULT_ADMIN_EMAIL,
            admin_password=_setting("USER_API_ADMIN_PASSWORD") or DEFAULT_ADMIN_PASSWORD,
            device_type=_setting("USER_API_DEVICE_TYPE") or DEFAULT_DEVICE_TYPE,
            timeout=timeout,
            allow_writes=allow_writes_str.strip() not in {"0", "false", "False", "no"},
        )

        target = self._active.base_url or "in-process mock"
        print(f"[CONFIG] Target {target} (writes={'on' if self.allow_writes else 'off'})")

    @property
    def base_url(self) -> str:
        return self._active.base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._active.base_url = value

    @property
    def uses_mock(self) -> bool:
        return self._active.uses_mock

    @property
    def admin_email(self) -> str:
        return self._active.admin_email

    @property
    def admin_password(self) -> str:
        return self._active.admin_password

    @property
    def device_type(self) -> str:
        return self._active.device_type

    @property
    def timeout(self) -> float:
        return self._active.timeout

    @property
    def allow_writes(self) -> bool:
        return self._active.allow_writes

    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))


# Singleton instance - initialized on first import
settings = ApiTestConfig()
