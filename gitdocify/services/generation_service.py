"""Text generation via LiteLLM.

``DocumentGenerator`` wraps a single-turn ``litellm.completion`` call with
clamped sampling parameters. Upstream failures are translated into the
GenerationError hierarchy by ``classify_generation_error`` and nowhere else.
"""

import logging
from typing import Optional

from ..core.config import settings
from ..exceptions import (
    EmptyResponseError,
    GenerationError,
    GenerationFailedError,
    ModelUnconfiguredError,
    QuotaExceededError,
    SafetyBlockedError,
)
from .prompts import build_title_prompt

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
DEFAULT_MAX_OUTPUT_TOKENS = 8192
MIN_OUTPUT_TOKENS = 1
MAX_OUTPUT_TOKENS = 8192
TOP_P = 0.95

TITLE_TEMPERATURE = 0.5
TITLE_MAX_TOKENS = 50
TITLE_MAX_LENGTH = 100
UNTITLED = "Untitled Document"
TITLE_ON_ERROR = "Generated Documentation"

_SAFETY_MARKERS = ("safety", "blocked")
_QUOTA_MARKERS = ("quota", "resource_exhausted", "resource exhausted", "rate limit")


def classify_generation_error(exc: Exception) -> GenerationError:
    """Translate an upstream model error into a GenerationError.

    Already-classified errors pass through unchanged.
    """
    if isinstance(exc, GenerationError):
        return exc
    message = str(exc)
    lowered = message.lower()
    if any(marker in lowered for marker in _SAFETY_MARKERS):
        return SafetyBlockedError(message)
    if any(marker in lowered for marker in _QUOTA_MARKERS):
        return QuotaExceededError(message)
    return GenerationFailedError(message)


def clamp(value: Optional[float], low: float, high: float, default: float) -> float:
    if value is None:
        return default
    return max(low, min(high, value))


def clean_title(raw: str) -> str:
    """Strip whitespace and surrounding quotes, then cap at TITLE_MAX_LENGTH."""
    title = raw.strip()
    if title[:1] in ("'", '"'):
        title = title[1:]
    if title[-1:] in ("'", '"'):
        title = title[:-1]
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        title = title[: TITLE_MAX_LENGTH - 3].rstrip() + "..."
    return title


class DocumentGenerator:
    """Single-turn completion client for documentation text.

    The API key is fixed at construction; ``is_configured`` reports whether
    one was supplied.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str],
        api_base: Optional[str] = None,
        timeout: float = 120.0,
    ):
        self.model = model
        self._api_key = api_key
        self.api_base = api_base
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "DocumentGenerator":
        return cls(
            model=settings.generation_model,
            api_key=settings.gemini_api_key,
            api_base=settings.generation_api_base,
            timeout=settings.generation_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _complete(self, prompt: str, temperature: float, max_tokens: int, top_p: Optional[float] = None) -> str:
        import litellm

        kwargs: dict = {
            "model": self.model,
            "api_key": self._api_key,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": self.timeout,
        }
        if top_p is not None:
            kwargs["top_p"] = top_p
        if self.api_base:
            kwargs["api_base"] = self.api_base

        response = litellm.completion(**kwargs)
        return response.choices[0].message.content or ""

    def generate(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        """Generate text for *prompt*.

        Raises:
            ModelUnconfiguredError: no API key.
            EmptyResponseError: the model returned blank text.
            SafetyBlockedError, QuotaExceededError, GenerationFailedError:
                classified upstream failures.
        """
        if not self.is_configured:
            raise ModelUnconfiguredError()

        temp = clamp(temperature, MIN_TEMPERATURE, MAX_TEMPERATURE, DEFAULT_TEMPERATURE)
        max_tokens = int(clamp(max_output_tokens, MIN_OUTPUT_TOKENS, MAX_OUTPUT_TOKENS, DEFAULT_MAX_OUTPUT_TOKENS))

        try:
            text = self._complete(prompt, temp, max_tokens, top_p=TOP_P)
        except Exception as e:
            error = classify_generation_error(e)
            logger.error(
                "Generation failed: %s", error.error_code.value,
                extra={"model": self.model, "upstream_error": type(e).__name__},
            )
            raise error from e

        if not text.strip():
            raise EmptyResponseError()

        logger.info(
            "Generated %d characters", len(text),
            extra={"model": self.model, "prompt_chars": len(prompt)},
        )
        return text

    def generate_title(self, content: str) -> str:
        """Short title for *content*. Never raises."""
        if not content or not content.strip():
            return UNTITLED
        if not self.is_configured:
            return TITLE_ON_ERROR

        try:
            raw = self._complete(build_title_prompt(content), TITLE_TEMPERATURE, TITLE_MAX_TOKENS)
        except Exception as e:
            logger.warning("Title generation failed: %s", type(e).__name__)
            return TITLE_ON_ERROR

        title = clean_title(raw)
        return title or TITLE_ON_ERROR
