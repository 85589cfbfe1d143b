import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api_tests.config import settings
from api_tests.mock_user_api import MockUserApiServer, MockUserApiState, running_target


@pytest.fixture(scope='session')
def target_base_url():
    """Base URL of the API under test.

    Uses USER_API_BASE_URL when set; otherwise serves a mock API for the
    whole session and points ``settings`` at it.
    """
    with running_target(settings) as url:
        print(f"[CONFIG] Journeys target {url}")
        yield url


@pytest.fixture
def writes_allowed():
    """Skip tests that create or delete data when writes are disabled."""
    if not settings.allow_writes:
        pytest.skip("USER_API_ALLOW_WRITES is off for this target")


@pytest.fixture
def mock_state():
    """Fresh mock API state with the fixture super-admin seeded."""
    state = MockUserApiState()
    state.seed_admin(settings.admin_email, settings.admin_password)
    return state


@pytest.fixture
def mock_user_api_server(mock_state):
    """Fixture that provides a running mock user API server."""
    server = MockUserApiServer(mock_state)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def serve_app():
    """Factory that serves an arbitrary Flask app and returns its URL."""
    servers = []

    def _serve(app) -> str:
        server = MockUserApiServer(app=app)
        server.start()
        servers.append(server)
        return server.url

    yield _serve

    for server in servers:
        server.stop()


@pytest.fixture
def admin_credentials():
    return {
        'email': settings.admin_email,
        'password': settings.admin_password,
        'device_type': settings.device_type,
    }
