"""State carried from one journey step to the next.

Early journeys (login, registration, role creation) record what the API
handed back; later journeys (update, refresh, delete) read it. A single
instance lives for the whole pytest session and is passed around as the
``session_context`` fixture. Nothing is persisted between runs.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict


class MissingContextError(LookupError):
    """A journey step needs a value an earlier step never captured."""


@dataclass
class SessionContext:
    access_token: str = ""
    refresh_token: str = ""
    user_id: str = ""
    role_id: str = ""

    def record_login(self, payload: Dict[str, Any]) -> None:
        """Capture the token pair from a login response."""
        self.access_token = payload.get("accessToken") or ""
        self.refresh_token = payload.get("refreshToken") or ""

    def require(self, name: str) -> str:
        """Return a captured value, failing loudly when it is still empty."""
        if name not in {f.name for f in fields(self)}:
            raise AttributeError(f"SessionContext has no field {name!r}")

        value = getattr(self, name)
        if not value:
            raise MissingContextError(
                f"{name} has not been captured; the journey step that sets it "
                f"did not run or failed"
            )
        return value

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, "")
