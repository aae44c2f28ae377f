"""
Pytest configuration: temporary upload storage and a fresh board per test.
"""
import os
import shutil
import tempfile
import pytest
from pathlib import Path

# Set upload directory BEFORE importing the app
# This must happen at the very top, before any module imports main
TEST_UPLOAD_DIR = Path(tempfile.mkdtemp(prefix="hexboard-uploads-"))
os.environ["UPLOAD_DIR"] = str(TEST_UPLOAD_DIR)


@pytest.fixture(scope="session", autouse=True)
def cleanup_upload_dir():
    """Remove uploaded test images after all tests complete."""
    yield

    shutil.rmtree(TEST_UPLOAD_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_board():
    """Start every test with an empty shared board and a fresh rate limit."""
    from api.coordinator import coordinator
    from api.security import limiter

    coordinator.reset()
    limiter.reset()

    yield


@pytest.fixture
def coordinator():
    """A standalone coordinator, independent of the app's global one."""
    from api.coordinator import SessionCoordinator

    return SessionCoordinator()


@pytest.fixture
def joined(coordinator):
    """Join helper: joined(connection_id, **join_fields) -> User."""
    def _join(connection_id, **fields):
        coordinator.handle(connection_id, "join", fields)
        return coordinator.session.registry.get(connection_id)
    return _join
