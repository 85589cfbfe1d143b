"""Mock user-management API server for offline runs.

This mock server implements the endpoints exercised by the journeys:
- login / access-token: issue access and refresh tokens
- info: profile of the token owner
- register / update / bulk / delete / export: user management
- role / roles: role management

State lives in a MockUserApiState instance owned by the app, so several
servers can run side by side without sharing users or tokens.
"""
from __future__ import annotations

import argparse
import csv
import io
import logging
import re
import secrets
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.serving import make_server

from user_api_client import EXPORT_CSV_HEADER, PERMISSION_KEYS

logger = logging.getLogger(__name__)

# Default fixture super-admin
MOCK_ADMIN_EMAIL = "superadmin@pnacademy.in"
MOCK_ADMIN_PASSWORD = "Test@pna12345"

REQUIRED_USER_FIELDS = ("firstName", "lastName", "email", "password", "phone")
UPDATABLE_USER_FIELDS = {"firstName", "lastName", "email", "phone", "roleId"}

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\d{10}$")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_strong_password(password: str) -> bool:
    """At least 8 characters with upper, lower, digit and symbol."""
    return (
        len(password) >= 8
        and any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
        and any(not c.isalnum() for c in password)
    )


class MockUserApiState:
    """In-memory users, roles and tokens behind the mock API."""

    def __init__(self) -> None:
        self.users: Dict[str, Dict[str, Any]] = {}  # user_id -> public user record
        self.passwords: Dict[str, str] = {}  # user_id -> password
        self.roles: Dict[str, Dict[str, Any]] = {}  # role_id -> role
        self.access_tokens: Dict[str, str] = {}  # token -> user_id
        self.refresh_tokens: Dict[str, str] = {}  # token -> user_id

    def reset(self) -> None:
        """Drop all users, roles and tokens."""
        self.users.clear()
        self.passwords.clear()
        self.roles.clear()
        self.access_tokens.clear()
        self.refresh_tokens.clear()

    def add_user(self, first_name: str, last_name: str, email: str, phone: str,
                 password: str) -> Dict[str, Any]:
        user_id = str(uuid.uuid4())
        timestamp = _now()
        user = {
            "id": user_id,
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "phone": phone,
            "roleId": None,
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    def seed_admin(self, email: str = MOCK_ADMIN_EMAIL,
                   password: str = MOCK_ADMIN_PASSWORD) -> Dict[str, Any]:
        """Create the fixture super-admin unless that email already exists."""
        existing = self.find_user_by_email(email)
        if existing:
            self.passwords[existing["id"]] = password
            return existing
        return self.add_user("super", "admin", email, "9999999999", password)

    def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for user in self.users.values():
            if user["email"].lower() == email.lower():
                return user
        return None

    def issue_tokens(self, user_id: str) -> Tuple[str, str]:
        access_token = secrets.token_urlsafe(32)
        refresh_token = secrets.token_urlsafe(32)
        self.access_tokens[access_token] = user_id
        self.refresh_tokens[refresh_token] = user_id
        return access_token, refresh_token

    def revoke_tokens(self, user_id: str) -> None:
        for tokens in (self.access_tokens, self.refresh_tokens):
            for token in [t for t, owner in tokens.items() if owner == user_id]:
                del tokens[token]

    def export_csv(self) -> str:
        buffer = io.StringIO()
        buffer.write(EXPORT_CSV_HEADER + "\n")
        writer = csv.writer(buffer, lineterminator="\n")
        for user in self.users.values():
            writer.writerow([
                user["id"],
                user["firstName"],
                user["lastName"],
                user["email"],
                user["phone"],
                user["createdAt"],
                user["updatedAt"],
            ])
        return buffer.getvalue()


# Default state used by the standalone server
STATE = MockUserApiState()


def _error(message: str, status: int):
    return jsonify({"message": message}), status


def _paginate(items: List[Dict[str, Any]]) -> Tuple[Optional[Dict[str, Any]], Optional[tuple]]:
    """Slice items by the page/pageSize query; returns (page, error)."""
    try:
        page = int(request.args.get("page", 1))
        page_size = int(request.args.get("pageSize", 10))
    except ValueError:
        return None, _error("page and pageSize must be integers", 400)

    if page < 1 or page_size < 1:
        return None, _error("page and pageSize must be positive", 400)

    start = (page - 1) * page_size
    return {
        "items": items[start:start + page_size],
        "page": page,
        "pageSize": page_size,
        "total": len(items),
    }, None


def create_mock_api_app(state: MockUserApiState | None = None) -> Flask:
    """Create and configure the mock user API Flask app."""
    app = Flask(__name__)
    app.config['TESTING'] = True
    state = state if state is not None else STATE
    app.config['MOCK_STATE'] = state

    def requires_auth(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get('Authorization', '')
            token = header[len('Bearer '):].strip() if header.startswith('Bearer ') else ''
            user_id = state.access_tokens.get(token) if token else None
            if user_id is None or user_id not in state.users:
                return _error("Unauthorized", 401)
            g.current_user_id = user_id
            return view(*args, **kwargs)
        return wrapper

    def _body() -> Dict[str, Any]:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return _error(e.description, e.code)
        logger.exception("Mock user API failed")
        return _error(f"Internal Error: {e}", 500)

    @app.route('/login', methods=['POST'])
    def login():
        data = _body()
        email = data.get('email')
        password = data.get('password')
        device_type = data.get('deviceType')

        if not all(isinstance(v, str) and v for v in (email, password, device_type)):
            return _error("email, password and deviceType are required", 400)

        user = state.find_user_by_email(email)
        if user is None or state.passwords.get(user['id']) != password:
            return _error("Invalid credentials", 401)

        access_token, refresh_token = state.issue_tokens(user['id'])
        logger.info(f"Mock login for {email} ({device_type})")
        return jsonify({
            "message": "Login successful",
            "accessToken": access_token,
            "refreshToken": refresh_token,
        }), 200

    @app.route('/info', methods=['GET'])
    @requires_auth
    def info():
        return jsonify({"message": "success", "data": state.users[g.current_user_id]}), 200

    @app.route('/register', methods=['POST'])
    @requires_auth
    def register():
        data = _body()
        missing = [name for name in REQUIRED_USER_FIELDS if not data.get(name)]
        if missing:
            return _error(f"Missing required fields: {', '.join(missing)}", 400)

        if not isinstance(data['email'], str) or not EMAIL_RE.match(data['email']):
            return _error("Invalid email", 400)
        if not PHONE_RE.match(str(data['phone'])):
            return _error("Phone must be 10 digits", 400)
        if not is_strong_password(str(data['password'])):
            return _error("Password is too weak", 400)
        if state.find_user_by_email(data['email']):
            return _error("Email already registered", 409)

        user = state.add_user(data['firstName'], data['lastName'], data['email'],
                              data['phone'], data['password'])
        return jsonify({"message": "User registered successfully", "data": user}), 201

    @app.route('/role', methods=['POST'])
    @requires_auth
    def create_role():
        data = _body()
        name = data.get('name')
        permissions = data.get('permissions')

        if not name or not isinstance(name, str):
            return _error("Role name is required", 400)
        if not permissions or not isinstance(permissions, dict):
            return _error("permissions are required", 400)

        unknown = sorted(set(permissions) - set(PERMISSION_KEYS))
        if unknown:
            return _error(f"Invalid permissions: {', '.join(unknown)}", 400)
        if not all(isinstance(value, bool) for value in permissions.values()):
            return _error("Permission values must be booleans", 400)
        if any(role['name'] == name for role in state.roles.values()):
            return _error("Role already exists", 409)

        role_id = str(uuid.uuid4())
        role = {"id": role_id, "name": name, "permissions": dict(permissions)}
        state.roles[role_id] = role
        return jsonify({"message": "Role Created successfully", "data": role}), 201

    @app.route('/role', methods=['DELETE'])
    @requires_auth
    def delete_roles():
        role_ids = _body().get('roleIds')
        if not role_ids or not isinstance(role_ids, list):
            return _error("roleIds are required", 400)

        ids = [entry.get('roleId') if isinstance(entry, dict) else None for entry in role_ids]
        if any(not isinstance(role_id, str) or not role_id for role_id in ids):
            return _error("Each entry needs a roleId", 400)

        unknown = [role_id for role_id in ids if role_id not in state.roles]
        if unknown:
            return _error(f"Roles not found: {', '.join(map(str, unknown))}", 404)

        for role_id in ids:
            state.roles.pop(role_id, None)
        for user in state.users.values():
            if user['roleId'] in ids:
                user['roleId'] = None
        return jsonify({"message": "Roles Deleted successfully"}), 200

    @app.route('/roles', methods=['GET'])
    @requires_auth
    def list_roles():
        page, error = _paginate(list(state.roles.values()))
        if error:
            return error
        page['roles'] = page.pop('items')
        return jsonify({"message": "success", "data": page}), 200

    @app.route('/update', methods=['PATCH'])
    @requires_auth
    def update_user():
        data = _body()
        user_id = data.get('id')
        user = state.users.get(user_id) if isinstance(user_id, str) else None
        if user is None:
            return _error("User not found", 404)

        changes = data.get('dataToUpdate')
        if not changes or not isinstance(changes, dict):
            return _error("dataToUpdate is required", 400)

        unknown = sorted(set(changes) - UPDATABLE_USER_FIELDS)
        if unknown:
            return _error(f"Fields cannot be updated: {', '.join(unknown)}", 400)
        role_id = changes.get('roleId')
        if 'roleId' in changes and (not isinstance(role_id, str) or role_id not in state.roles):
            return _error("Role not found", 400)
        if 'email' in changes:
            if not isinstance(changes['email'], str) or not EMAIL_RE.match(changes['email']):
                return _error("Invalid email", 400)
            other = state.find_user_by_email(changes['email'])
            if other and other['id'] != user['id']:
                return _error("Email already registered", 409)
        if 'phone' in changes and not PHONE_RE.match(str(changes['phone'])):
            return _error("Phone must be 10 digits", 400)

        user.update(changes)
        user['updatedAt'] = _now()
        return jsonify({"message": "User Updated successfully", "data": user}), 200

    @app.route('/bulk', methods=['GET'])
    @requires_auth
    def list_users():
        page, error = _paginate(list(state.users.values()))
        if error:
            return error
        page['users'] = page.pop('items')
        return jsonify({"message": "success", "data": page}), 200

    @app.route('/access-token', methods=['POST'])
    def new_access_token():
        refresh_token = _body().get('refreshToken')
        user_id = state.refresh_tokens.get(refresh_token) if isinstance(refresh_token, str) else None
        if user_id is None:
            return _error("Invalid refresh token", 401)

        access_token = secrets.token_urlsafe(32)
        state.access_tokens[access_token] = user_id
        return jsonify({
            "message": "New Access Token granted successfully",
            "accessToken": access_token,
        }), 200

    @app.route('/export', methods=['GET'])
    @requires_auth
    def export_users():
        return Response(
            state.export_csv(),
            mimetype='text/csv',
            headers={'Content-Disposition': 'attachment; filename=users.csv'},
        )

    @app.route('/delete', methods=['DELETE'])
    @requires_auth
    def delete_users():
        user_ids = _body().get('userIds')
        if not user_ids or not isinstance(user_ids, list):
            return _error("userIds are required", 400)
        if not all(isinstance(user_id, str) for user_id in user_ids):
            return _error("userIds must be strings", 400)

        unknown = [user_id for user_id in user_ids if user_id not in state.users]
        if unknown:
            return _error(f"Users not found: {', '.join(map(str, unknown))}", 404)

        for user_id in user_ids:
            state.users.pop(user_id, None)
            state.passwords.pop(user_id, None)
            state.revoke_tokens(user_id)
        return jsonify({"message": "Users Deleted successfully"}), 200

    return app


def reset_mock_state():
    """Reset the default mock state (users, roles, tokens)."""
    STATE.reset()


class MockUserApiServer:
    """Threaded werkzeug server around one Flask app.

    Serves the mock user API for ``state`` unless another ``app`` is given.
    """

    def __init__(self, state: MockUserApiState | None = None, host: str = '127.0.0.1',
                 port: int = 0, app: Flask | None = None):
        self.state = state
        self.app = app if app is not None else create_mock_api_app(state)
        self.server = make_server(host, port, self.app, threaded=True)
        self.thread = None

    def start(self):
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()

    def stop(self):
        self.server.shutdown()
        self.server.server_close()
        if self.thread:
            self.thread.join(timeout=5)

    @property
    def url(self) -> str:
        return f"http://{self.server.host}:{self.server.server_port}"


@contextmanager
def running_target(config):
    """Yield the base URL the suite should talk to.

    A configured base URL is used as is. Otherwise a mock server seeded with
    the configured admin runs for the duration of the block, and
    ``config.base_url`` points at it until the block exits.
    """
    if not config.uses_mock:
        yield config.base_url
        return

    state = MockUserApiState()
    state.seed_admin(config.admin_email, config.admin_password)
    server = MockUserApiServer(state)
    server.start()
    config.base_url = server.url
    logger.info(f"Serving mock user API on {server.url}")
    try:
        yield server.url
    finally:
        config.base_url = ""
        server.stop()


def main():
    """Serve the mock API standalone for local development."""
    parser = argparse.ArgumentParser(description="Run the mock user-management API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5555)
    parser.add_argument("--admin-email", default=MOCK_ADMIN_EMAIL)
    parser.add_argument("--admin-password", default=MOCK_ADMIN_PASSWORD)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    reset_mock_state()
    STATE.seed_admin(args.admin_email, args.admin_password)
    app = create_mock_api_app(STATE)

    logger.info(f"Mock user API running on http://{args.host}:{args.port}")
    logger.info(f"Login with {args.admin_email}")
    app.run(host=args.host, port=args.port)


if __name__ == '__main__':
    main()
