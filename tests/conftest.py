"""Shared test fixtures for the GitDocify test suite.

All tests use a throwaway SQLite database. Each test starts from empty
tables. GitHub is replaced by ``FakeGitHub`` (an ``httpx.MockTransport``
handler) and LiteLLM is patched per test with ``unittest.mock.patch``.
"""

import base64
import os
import tempfile

# Use the test database and known credentials before any app imports.
_TEST_DB = os.path.join(tempfile.gettempdir(), "gitdocify_test.db")
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{_TEST_DB}")
os.environ["LOG_FORMAT"] = "text"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["GITHUB_CLIENT_ID"] = "test-github-client"
os.environ["GITHUB_CLIENT_SECRET"] = "test-github-secret"
os.environ["GOOGLE_CLIENT_ID"] = "test-google-client"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-google-secret"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["GITHUB_REQUEST_INTERVAL"] = "0"
# Offline test runs: use LiteLLM's bundled model cost map instead of fetching it.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from gitdocify.database import get_db, SessionLocal
from gitdocify.main import app, rate_limiter
from gitdocify.api.dependencies import get_github_client_factory
from gitdocify.core.config import settings
from gitdocify.core.token_factory import create_session_token
from gitdocify.models import Document, User
from gitdocify.services.github_client import GitHubClient


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all tables before each test so failures leave data for debugging."""
    db = SessionLocal()
    try:
        db.query(Document).delete()
        db.query(User).delete()
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


class FakeGitHub:
    """In-memory GitHub REST API serving one repository.

    Tests mutate ``tree``, ``files`` and ``errors`` before issuing requests.
    ``errors`` maps a request path to an HTTP status to return instead.
    """

    def __init__(self, owner: str = "octocat", repo: str = "Hello-World"):
        self.owner = owner
        self.repo = repo
        self.metadata = {
            "name": repo,
            "full_name": f"{owner}/{repo}",
            "default_branch": "master",
            "description": "My first repository on GitHub!",
            "language": None,
            "stargazers_count": 2500,
            "forks_count": 2000,
            "license": None,
        }
        self.tree = ["README.md", "package.json", "src/index.js"]
        self.files = {
            "README.md": b"Hello World!\n",
            "package.json": b'{"name": "hello-world", "version": "1.0.0"}\n',
        }
        self.errors: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.errors:
            status = self.errors[path]
            return httpx.Response(status, json={"message": f"HTTP {status}"})

        prefix = f"/repos/{self.owner}/{self.repo}"
        if path == prefix:
            return httpx.Response(200, json=self.metadata)
        if path.startswith(f"{prefix}/git/trees/"):
            entries = [{"path": p, "type": "blob"} for p in self.tree]
            entries.append({"path": "src", "type": "tree"})
            return httpx.Response(200, json={"tree": entries, "truncated": False})
        if path.startswith(f"{prefix}/contents/"):
            file_path = path[len(f"{prefix}/contents/"):]
            if file_path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={
                "type": "file",
                "encoding": "base64",
                "path": file_path,
                "content": base64.b64encode(self.files[file_path]).decode(),
            })
        if path == "/user/repos":
            return httpx.Response(200, json=[{
                "id": 1296269,
                "name": self.repo,
                "full_name": f"{self.owner}/{self.repo}",
                "description": self.metadata["description"],
                "private": False,
                "html_url": f"https://github.com/{self.owner}/{self.repo}",
                "language": None,
                "stargazers_count": 2500,
                "forks_count": 2000,
                "updated_at": "2024-01-01T00:00:00Z",
                "topics": ["octocat"],
            }])
        return httpx.Response(404, json={"message": "Not Found"})

    def client(self, access_token: str, **kwargs) -> GitHubClient:
        return GitHubClient(access_token, transport=httpx.MockTransport(self.handler), **kwargs)

    def paths_requested(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture()
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def client(db, fake_github):
    """TestClient with the DB session and GitHub client factory overridden."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_github_client_factory] = lambda: fake_github.client
    rate_limiter.reset()  # Start each test with a fresh window so tests don't hit 429
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _make_user(db, user_id: str, provider: str, access_token) -> User:
    user = User(
        user_id=user_id,
        provider=provider,
        display_name="The Octocat",
        email="octocat@example.com",
        access_token=access_token,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def github_user(db) -> User:
    return _make_user(db, "github:583231", "github", "gho_testtoken")


@pytest.fixture()
def google_user(db) -> User:
    return _make_user(db, "google:1048576", "google", "ya29.testtoken")


def _bearer(user: User) -> dict:
    token = create_session_token(user.user_id, user.provider, settings.session_secret)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def github_headers(github_user) -> dict:
    """Session headers for a user signed in with GitHub."""
    return _bearer(github_user)


@pytest.fixture()
def google_headers(google_user) -> dict:
    """Session headers for a user signed in with Google (no GitHub credential)."""
    return _bearer(google_user)


def make_completion(text: str) -> MagicMock:
    """LiteLLM-shaped completion response carrying *text*."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = text
    return response


@pytest.fixture()
def completion_response():
    """Factory fixture for LiteLLM completion responses."""
    return make_completion
