"""Structured logging configuration for GitDocify.

JSON lines by default, human-readable text when ``LOG_FORMAT=text``.
The request id set by the request context middleware is attached to every
record emitted while that request is being served.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional


# Set by the request context middleware, read by the JSON formatter.
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")


class _JsonFormatter(logging.Formatter):
    """Emit each log record as a single JSON line.

    Fields passed through ``extra=`` are merged into the top-level object.
    """

    _RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys())

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = request_id_var.get("")
        if rid:
            payload["request_id"] = rid

        for key, value in record.__dict__.items():
            if key not in self._RESERVED and key not in payload:
                payload[key] = value

        if record.exc_info and "exception" not in payload:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


# ---------------------------------------------------------------------------
# Secret redaction: OAuth tokens and model API keys must never reach the logs
# ---------------------------------------------------------------------------

# Whole-match patterns: the token itself is replaced.
_TOKEN_PATTERNS = [
    re.compile(r'\bgh[pousr]_[A-Za-z0-9]{20,}\b'),        # GitHub tokens
    re.compile(r'\bgithub_pat_[A-Za-z0-9_]{20,}\b'),      # GitHub fine-grained PATs
    re.compile(r'\bya29\.[A-Za-z0-9._\-]{20,}'),          # Google OAuth access tokens
    re.compile(r'\bAIza[0-9A-Za-z_\-]{30,}'),             # Google API keys (Gemini)
]

# Prefixed patterns: group 1 (the label) is kept, the value is replaced.
_PREFIXED_PATTERNS = [
    re.compile(r'(?i)(bearer\s+)[a-zA-Z0-9._\-]{20,}'),
    re.compile(
        r'(?i)((?:api_key|client_secret|secret|password|access_token|authorization)[=:]\s*)[^\s,&\'"]{8,}'
    ),
]

_REDACTED = "***REDACTED***"


class _SecretFilter(logging.Filter):
    """Redact potential secrets from log messages and exception text."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(
                self._redact(a) if isinstance(a, str) else a for a in record.args
            )
        if record.exc_text:
            record.exc_text = self._redact(record.exc_text)
        return True

    @staticmethod
    def _redact(text: str) -> str:
        for pattern in _TOKEN_PATTERNS:
            text = pattern.sub(_REDACTED, text)
        for pattern in _PREFIXED_PATTERNS:
            text = pattern.sub(lambda m: m.group(1) + _REDACTED, text)
        return text


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure application-wide logging.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to INFO.
        log_format: ``"json"`` for structured output, ``"text"`` for human-readable.
                    Defaults to ``"json"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SecretFilter())

    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Reduce noise from third-party libraries.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured", extra={"level": level, "format": fmt})
