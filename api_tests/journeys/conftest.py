"""
Fixtures for journey-based testing.

These fixtures are shared by every journey, providing:
- One API client and one SessionContext for the whole session
- A raw httpx client for auth-enforcement checks
"""
import httpx
import pytest

from api_tests.config import settings
from api_tests.session_context import SessionContext
from user_api_client import UserAPIClient


# ============================================================================
# Journey state
# ============================================================================

@pytest.fixture(scope='session')
def session_context() -> SessionContext:
    """State threaded from earlier journeys into later ones."""
    return SessionContext()


@pytest.fixture(scope='session')
def user_api(target_base_url):
    """API client shared by all journeys."""
    with UserAPIClient(target_base_url, timeout=settings.timeout) as client:
        yield client


@pytest.fixture
def authed_api(user_api, session_context):
    """API client carrying whatever access token the context holds right now."""
    user_api.access_token = session_context.access_token
    return user_api


# ============================================================================
# HTTP Client for raw API checks
# ============================================================================

@pytest.fixture
def api_client(target_base_url):
    """HTTP client for requests that bypass UserAPIClient."""
    with httpx.Client(base_url=target_base_url, timeout=settings.timeout, follow_redirects=False) as client:
        yield client


@pytest.fixture
def protected_routes() -> list[tuple[str, str, dict | None]]:
    """Every route that requires a Bearer token, with a representative body."""
    return [
        ('GET', '/info', None),
        ('POST', '/register', {'firstName': 'test', 'lastName': 'admin'}),
        ('POST', '/role', {'name': 'unauthorised-role', 'permissions': {}}),
        ('PATCH', '/update', {'id': 'x', 'dataToUpdate': {'firstName': 'x'}}),
        ('GET', '/bulk?page=1&pageSize=10', None),
        ('GET', '/roles?page=1&pageSize=10', None),
        ('DELETE', '/role', {'roleIds': [{'roleId': 'x'}]}),
        ('GET', '/export', None),
        ('DELETE', '/delete', {'userIds': ['x']}),
    ]
