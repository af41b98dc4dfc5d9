"""Tests for the LiteLLM-backed document generator."""

from unittest.mock import patch

import pytest

from gitdocify.exceptions import (
    EmptyResponseError,
    GenerationFailedError,
    ModelUnconfiguredError,
    QuotaExceededError,
    SafetyBlockedError,
)
from gitdocify.services.generation_service import (
    DocumentGenerator,
    classify_generation_error,
    clean_title,
)


def _generator(api_key="sk-test") -> DocumentGenerator:
    return DocumentGenerator(model="gemini/gemini-1.5-flash", api_key=api_key)


class TestGenerate:

    def test_returns_text(self, completion_response):
        with patch("litellm.completion", return_value=completion_response("# Docs")) as mock:
            assert _generator().generate("prompt") == "# Docs"
        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == "gemini/gemini-1.5-flash"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 8192
        assert kwargs["top_p"] == 0.95

    def test_clamps_parameters(self, completion_response):
        with patch("litellm.completion", return_value=completion_response("ok")) as mock:
            _generator().generate("p", temperature=5.0, max_output_tokens=100_000)
            assert mock.call_args.kwargs["temperature"] == 2.0
            assert mock.call_args.kwargs["max_tokens"] == 8192

            _generator().generate("p", temperature=-1.0, max_output_tokens=0)
            assert mock.call_args.kwargs["temperature"] == 0.0
            assert mock.call_args.kwargs["max_tokens"] == 1

    def test_unconfigured(self):
        with patch("litellm.completion") as mock:
            with pytest.raises(ModelUnconfiguredError):
                _generator(api_key=None).generate("p")
        mock.assert_not_called()

    def test_blank_response_is_empty_error(self, completion_response):
        with patch("litellm.completion", return_value=completion_response("   \n")):
            with pytest.raises(EmptyResponseError):
                _generator().generate("p")

    def test_none_content_is_empty_error(self, completion_response):
        with patch("litellm.completion", return_value=completion_response(None)):
            with pytest.raises(EmptyResponseError):
                _generator().generate("p")

    def test_upstream_error_classified(self):
        with patch("litellm.completion", side_effect=Exception("429 RESOURCE_EXHAUSTED: quota")):
            with pytest.raises(QuotaExceededError) as exc_info:
                _generator().generate("p")
        assert exc_info.value.status_code == 429


class TestClassifyGenerationError:

    def test_safety(self):
        assert isinstance(classify_generation_error(Exception("Response blocked by SAFETY")), SafetyBlockedError)

    def test_quota(self):
        assert isinstance(classify_generation_error(Exception("Quota exceeded for project")), QuotaExceededError)
        assert isinstance(classify_generation_error(Exception("rate limit reached")), QuotaExceededError)

    def test_other(self):
        error = classify_generation_error(ConnectionError("connection reset"))
        assert isinstance(error, GenerationFailedError)
        assert error.status_code == 500
        assert error.message == "Failed to generate document"

    def test_passthrough(self):
        original = SafetyBlockedError("x")
        assert classify_generation_error(original) is original


class TestTitles:

    def test_generates_title(self, completion_response):
        with patch("litellm.completion", return_value=completion_response('"Deploying Widgets"')) as mock:
            assert _generator().generate_title("# Content") == "Deploying Widgets"
        assert mock.call_args.kwargs["temperature"] == 0.5
        assert mock.call_args.kwargs["max_tokens"] == 50

    def test_empty_content(self):
        with patch("litellm.completion") as mock:
            assert _generator().generate_title("") == "Untitled Document"
        mock.assert_not_called()

    def test_error_returns_default(self):
        with patch("litellm.completion", side_effect=Exception("boom")):
            assert _generator().generate_title("content") == "Generated Documentation"

    def test_long_title_cut_with_ellipsis(self):
        title = clean_title("T" * 150)
        assert len(title) == 100
        assert title.endswith("...")

    def test_quotes_stripped(self):
        assert clean_title("  'Quoted'  ") == "Quoted"
