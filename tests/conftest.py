"""
Pytest configuration and fixtures for application tracking tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import httpx
import pytest

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Set test database path before importing any modules
os.environ['DATABASE_PATH'] = str(Path(tempfile.gettempdir()) / 'test_applications.db')

USERS_URL = "http://users.test/api/users"
JOBS_URL = "http://jobs.test/api/jobs"
JOBS_BASE_URL = "http://jobs.test"


class FakeRemoteServices:
    """
    Stand-in for the user and job services behind an httpx.MockTransport.

    Unregistered routes answer 404. Every request is recorded.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], object] = {}

    def add(self, method: str, path: str, status_code: int = 200, json=None) -> None:
        self._routes[(method, path)] = (status_code, json)

    def fail(self, method: str, path: str, exc_type=httpx.ConnectError) -> None:
        self._routes[(method, path)] = exc_type

    def paths(self, method: str) -> list[str]:
        return [r.url.path for r in self.requests if r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404)
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("simulated failure", request=request)
        status_code, body = route
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)


@pytest.fixture(scope="function")
def test_db_path():
    """Create a temporary database path for testing."""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup, including WAL files
    for path in (db_path, Path(str(db_path) + '-wal'), Path(str(db_path) + '-shm')):
        if path.exists():
            path.unlink()


@pytest.fixture(scope="function")
def test_db(test_db_path):
    """Create and initialize a test database."""
    from application_tracking.database.connection import init_database

    init_database(test_db_path)

    yield test_db_path


@pytest.fixture
def repository(test_db):
    from application_tracking.models.application import ApplicationRepository

    return ApplicationRepository(test_db)


@pytest.fixture
def remote():
    return FakeRemoteServices()


@pytest.fixture
async def http_client(remote):
    async with httpx.AsyncClient(transport=httpx.MockTransport(remote.handler)) as client:
        yield client


@pytest.fixture
async def task_runner():
    from application_tracking.tasks.runner import DeferredTaskRunner

    runner = DeferredTaskRunner()
    yield runner
    await runner.shutdown()


@pytest.fixture
def user_client(http_client):
    from application_tracking.clients.services import UserServiceClient

    return UserServiceClient(http_client, USERS_URL, max_attempts=1)


@pytest.fixture
def job_client(http_client):
    from application_tracking.clients.services import JobServiceClient

    return JobServiceClient(http_client, JOBS_URL, JOBS_BASE_URL, max_attempts=1)


@pytest.fixture
def orchestrator(repository, user_client, job_client, task_runner):
    from application_tracking.services.application_service import ApplicationOrchestrator

    return ApplicationOrchestrator(repository, user_client, job_client, task_runner)


# Markers for test categories
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that wire the full container")
    config.addinivalue_line("markers", "slow: marks slow tests")
