"""Tests for the generation pipeline orchestration."""

from unittest.mock import patch

import pytest

from gitdocify.core.auth import SessionContext
from gitdocify.exceptions import (
    MissingCredentialError,
    ModelUnconfiguredError,
    QuotaExceededError,
    ValidationError,
)
from gitdocify.models import Document
from gitdocify.schemas.document import GenerateRequest
from gitdocify.services.documentation_service import DocumentationService
from gitdocify.services.generation_service import DocumentGenerator

PREFIX = "/repos/octocat/Hello-World"


@pytest.fixture()
def github_session(github_user) -> SessionContext:
    return SessionContext(user_id=github_user.user_id, provider="github", access_token=github_user.access_token)


@pytest.fixture()
def google_session(google_user) -> SessionContext:
    return SessionContext(user_id=google_user.user_id, provider="google", access_token=google_user.access_token)


def _service(db, fake_github, api_key="sk-test") -> DocumentationService:
    generator = DocumentGenerator(model="gemini/gemini-1.5-flash", api_key=api_key)
    return DocumentationService(db, generator, fake_github.client)


class TestRepositoryMode:

    def test_success(self, db, fake_github, github_session, completion_response):
        request = GenerateRequest(repository="octocat/Hello-World")
        with patch("litellm.completion", return_value=completion_response("# Hello-World\n\nDocs.")) as mock:
            result = _service(db, fake_github).generate(request, github_session)

        assert result.fallback is False
        assert result.content == "# Hello-World\n\nDocs."
        assert result.document.title == "Hello-World Documentation"
        assert result.document.repository == "octocat/Hello-World"
        prompt = mock.call_args.kwargs["messages"][0]["content"]
        assert "--- File: README.md ---" in prompt
        assert "Hello World!" in prompt

    def test_generation_error_uses_fallback(self, db, fake_github, github_session):
        request = GenerateRequest(repository="octocat/Hello-World")
        with patch("litellm.completion", side_effect=Exception("quota exhausted")):
            result = _service(db, fake_github).generate(request, github_session)

        assert result.fallback is True
        assert result.content
        assert "Hello-World" in result.content
        assert result.notice
        assert db.query(Document).count() == 1

    def test_not_found_uses_fallback(self, db, fake_github, github_session):
        fake_github.errors[PREFIX] = 404
        request = GenerateRequest(repository="octocat/Hello-World")
        with patch("litellm.completion") as mock:
            result = _service(db, fake_github).generate(request, github_session)

        mock.assert_not_called()
        assert result.fallback is True
        assert "not found" in result.notice
        assert "# Hello-World" in result.content

    def test_zero_files_does_not_fall_back(self, db, fake_github, github_session, completion_response):
        fake_github.tree = ["src/index.js"]
        request = GenerateRequest(repository="octocat/Hello-World")
        with patch("litellm.completion", return_value=completion_response("docs")):
            result = _service(db, fake_github).generate(request, github_session)
        assert result.fallback is False

    def test_unconfigured_model_checked_before_fetching(self, db, fake_github, github_session):
        request = GenerateRequest(repository="octocat/Hello-World")
        with pytest.raises(ModelUnconfiguredError):
            _service(db, fake_github, api_key=None).generate(request, github_session)
        assert fake_github.requests == []

    def test_google_session_missing_credential(self, db, fake_github, google_session):
        request = GenerateRequest(repository="octocat/Hello-World")
        with pytest.raises(MissingCredentialError):
            _service(db, fake_github).generate(request, google_session)

    @pytest.mark.parametrize("repository", ["octocat", "octocat/", "/Hello-World", "a/b/c"])
    def test_malformed_repository(self, db, fake_github, github_session, repository):
        with pytest.raises(ValidationError):
            _service(db, fake_github).generate(GenerateRequest(repository=repository), github_session)


class TestPromptMode:

    def test_generates_and_titles(self, db, fake_github, google_session, completion_response):
        responses = [completion_response("# Guide\n\nBody"), completion_response("Onboarding Guide")]
        with patch("litellm.completion", side_effect=responses):
            result = _service(db, fake_github).generate(GenerateRequest(prompt="Write a guide"), google_session)
        assert result.document.title == "Onboarding Guide"
        assert result.repository is None
        assert result.fallback is False

    def test_empty_prompt(self, db, fake_github, google_session):
        with pytest.raises(ValidationError, match="Prompt cannot be empty"):
            _service(db, fake_github).generate(GenerateRequest(prompt="   "), google_session)

    def test_generation_errors_surface(self, db, fake_github, google_session):
        with patch("litellm.completion", side_effect=Exception("quota exceeded")):
            with pytest.raises(QuotaExceededError):
                _service(db, fake_github).generate(GenerateRequest(prompt="hi"), google_session)
        assert db.query(Document).count() == 0


class TestCodeMode:

    def test_title_from_file_name(self, db, fake_github, google_session, completion_response):
        request = GenerateRequest(code="def add(a, b): return a + b", file_type="python", file_name="math.py")
        with patch("litellm.completion", return_value=completion_response("# math.py")):
            result = _service(db, fake_github).generate(request, google_session)
        assert result.document.title == "math.py Documentation"

    def test_title_from_file_type(self, db, fake_github, google_session, completion_response):
        request = GenerateRequest(code="x = 1", file_type="python")
        with patch("litellm.completion", return_value=completion_response("# code")):
            result = _service(db, fake_github).generate(request, google_session)
        assert result.document.title == "python Code Documentation"


def test_no_mode_is_validation_error(db, fake_github, google_session):
    with pytest.raises(ValidationError):
        _service(db, fake_github).generate(GenerateRequest(), google_session)
