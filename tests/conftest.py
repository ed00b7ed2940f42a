"""Shared test fixtures for gl-members tests."""

import argparse
import sys
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gl_members.client import GitLabClient
from gl_members.models import ResourceState

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"


@pytest.fixture
def mock_client():
    """GitLabClient pointing at mock server."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token", dry_run=False)


@pytest.fixture
def dry_run_client():
    """GitLabClient in dry-run mode."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token", dry_run=True)


def api_member(user_id: int, access_level: int, expires_at: str | None = None) -> dict[str, Any]:
    """Group member entry as returned by GET /groups/:id/members."""
    return {
        "id": user_id,
        "username": f"user{user_id}",
        "name": f"User {user_id}",
        "state": "active",
        "access_level": access_level,
        "expires_at": expires_at,
    }


@pytest.fixture
def sample_members() -> list[dict[str, Any]]:
    """Owner plus a developer, as listed by the API."""
    return [api_member(1, 50), api_member(2, 30)]


@pytest.fixture
def synced_state() -> ResourceState:
    """State recorded after a successful apply on group 456."""
    return ResourceState(
        id="456",
        group_id="456",
        members=[
            {"id": 1, "access_level": "owner", "expires_at": "", "username": "user1", "name": "User 1", "state": "active"},
            {
                "id": 2,
                "access_level": "developer",
                "expires_at": "",
                "username": "user2",
                "name": "User 2",
                "state": "active",
            },
        ],
        status="synced",
    )


def make_args(**kwargs) -> argparse.Namespace:
    """Helper to create argparse.Namespace with default values."""
    defaults = {
        "dry_run": False,
        "json_output": False,
        "verbose": False,
        "gitlab_url": None,
        "max_retries": 0,
        "state_file": "gl-members.state.json",
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)
