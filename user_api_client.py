"""
User Management API Client
Handles communication with the user-management REST API
"""
import requests
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

# Permission flags accepted by the role endpoints
PERMISSION_KEYS = (
    "canManageAssessment",
    "canManageUser",
    "canManageRole",
    "canManageNotification",
    "canManageLocalGroup",
    "canManageReports",
    "canAttemptAssessment",
    "canViewReport",
    "canManageMyAccount",
    "canViewNotification",
)

EXPORT_CSV_HEADER = "id,first_name,last_name,email,phone,createdAt,updatedAt"


class UserAPIError(Exception):
    """Exception raised when the user API rejects a request.

    ``status_code`` is the HTTP status for non-2xx responses and ``None``
    when the request never got a response (bad URL, connection error).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def _decode(response: requests.Response) -> Any:
    """Return the JSON body when the server sent one, the raw text otherwise."""
    content_type = response.headers.get("Content-Type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            pass
    return response.text


class UserAPIClient:
    """Client for interacting with the user-management API"""

    def __init__(self, base_url: str, access_token: str = "", timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.refresh_token = ""
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def call(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None,
             params: Optional[Dict[str, Any]] = None) -> Any:
        """Send one request and return the decoded body.

        Any non-2xx status or transport failure raises UserAPIError.
        """
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.request(
                method,
                self._url(endpoint),
                headers=headers,
                json=data,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise UserAPIError(f"Request failed: {e}") from e

        # 3xx responses requests did not follow count as rejections too
        if not 200 <= response.status_code < 300:
            status = response.status_code
            logger.warning(f"{method} {endpoint} rejected with HTTP {status}")
            raise UserAPIError(f"{method} {endpoint} failed with HTTP {status}",
                               status_code=status, payload=_decode(response))

        return _decode(response)

    def login(self, email: str, password: Optional[str] = None,
              device_type: Optional[str] = None) -> Dict[str, Any]:
        """Log in and keep the returned token pair on the client.

        Fields passed as None are left out of the request body.
        """
        payload = {
            key: value
            for key, value in (("email", email), ("password", password), ("deviceType", device_type))
            if value is not None
        }

        data = self.call("POST", "login", payload)
        if not isinstance(data, dict):
            raise UserAPIError("login returned no token payload", payload=data)

        self.access_token = data.get("accessToken", "")
        self.refresh_token = data.get("refreshToken", "")
        logger.info("Successfully logged in to user API")
        return data

    def info(self) -> Dict[str, Any]:
        """Get the profile of the logged-in user"""
        return self.call("GET", "info")

    def register(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """Register a new user from a raw request body"""
        return self.call("POST", "register", user)

    def create_role(self, name: str, permissions: Dict[str, Any]) -> Dict[str, Any]:
        return self.call("POST", "role", {"name": name, "permissions": permissions})

    def update_user(self, user_id: str, data_to_update: Dict[str, Any]) -> Dict[str, Any]:
        return self.call("PATCH", "update", {"id": user_id, "dataToUpdate": data_to_update})

    def list_users(self, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        return self.call("GET", "bulk", params={"page": page, "pageSize": page_size})

    def list_roles(self, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        return self.call("GET", "roles", params={"page": page, "pageSize": page_size})

    def delete_roles(self, role_ids: List[str]) -> Dict[str, Any]:
        return self.call("DELETE", "role", {"roleIds": [{"roleId": role_id} for role_id in role_ids]})

    def refresh_access_token(self, refresh_token: Optional[str] = None) -> Dict[str, Any]:
        """Exchange a refresh token for a new access token.

        Uses the client's stored refresh token when none is given. If the
        response carries an ``accessToken`` the client switches to it.
        """
        token = refresh_token if refresh_token is not None else self.refresh_token
        data = self.call("POST", "access-token", {"refreshToken": token})

        new_token = data.get("accessToken") if isinstance(data, dict) else None
        if new_token:
            self.access_token = new_token
            logger.info("Access token refreshed")
        return data

    def export_users(self) -> str:
        """Download the user export as CSV text"""
        data = self.call("GET", "export")
        return data if isinstance(data, str) else str(data)

    def delete_users(self, user_ids: List[str]) -> Dict[str, Any]:
        return self.call("DELETE", "delete", {"userIds": list(user_ids)})

    def close(self):
        self.session.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
