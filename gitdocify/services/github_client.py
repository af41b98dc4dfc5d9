"""GitHub REST API client.

Deep module: callers ask for metadata, trees, file contents and repository
lists and get plain values back. Authentication headers, request pacing and
translation of HTTP failures into the application's exception hierarchy are
handled internally. Nothing here retries.
"""

import base64
import logging
import threading
import time
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from ..exceptions import AccessDeniedError, FetchTimeoutError, GitHubAPIError, RepositoryNotFoundError
from ..schemas.repository import RepositoryMetadata, RepositorySummary

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class RequestPacer:
    """Enforce a minimum spacing between outbound requests.

    A single process-wide instance serializes every GitHub call through one
    "last request time", so it caps throughput regardless of how many worker
    threads are fetching.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request = float("-inf")
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until the next request may be sent, then claim the slot."""
        with self._lock:
            now = self._clock()
            delay = self._last_request + self.min_interval - now
            if delay > 0:
                self._sleep(delay)
                now = self._clock()
            self._last_request = now


_default_pacer: Optional[RequestPacer] = None
_pacer_lock = threading.Lock()


def get_default_pacer(min_interval: float) -> RequestPacer:
    """Process-wide pacer, created on first use."""
    global _default_pacer
    with _pacer_lock:
        if _default_pacer is None:
            _default_pacer = RequestPacer(min_interval=min_interval)
        return _default_pacer


class GitHubClient:
    """Thin client over the endpoints the generator needs.

    Args:
        access_token: The user's OAuth access token.
        api_url: REST API base URL.
        pacer: Request pacer; defaults to no pacing.
        timeout: Per-request HTTP timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        access_token: str,
        api_url: str = DEFAULT_API_URL,
        pacer: Optional[RequestPacer] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not access_token:
            raise ValueError("GitHubClient requires an access token")
        self._pacer = pacer
        self._timeout = timeout
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ----- requests ---------------------------------------------------------

    def _get(self, path: str, subject: str, **params: Any) -> Any:
        """GET *path* and return decoded JSON.

        *subject* names what is being fetched, for error messages.
        """
        if self._pacer is not None:
            self._pacer.wait()

        try:
            resp = self._client.get(path, params=params or None)
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(subject, self._timeout) from exc
        except httpx.HTTPError as exc:
            raise GitHubAPIError(f"GitHub API request failed: {type(exc).__name__}") from exc

        logger.debug(
            "GitHub GET %s -> %d", path, resp.status_code,
            extra={"rate_limit_remaining": resp.headers.get("x-ratelimit-remaining")},
        )

        if resp.status_code == 404:
            raise RepositoryNotFoundError(subject)
        if resp.status_code == 403:
            if resp.headers.get("x-ratelimit-remaining") == "0":
                raise AccessDeniedError("GitHub API rate limit exceeded. Please try again later.")
            raise AccessDeniedError()
        if resp.status_code == 401:
            raise AccessDeniedError("Unauthorized. Invalid or expired access token.")
        if resp.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error {resp.status_code} for {subject}",
                upstream_status=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise GitHubAPIError(f"GitHub API returned invalid JSON for {subject}") from exc

    # ----- operations -------------------------------------------------------

    def get_repository(self, owner: str, repo: str) -> RepositoryMetadata:
        data = self._get(f"/repos/{owner}/{repo}", f"{owner}/{repo}")
        license_info = data.get("license") or {}
        return RepositoryMetadata(
            name=data.get("name") or repo,
            default_branch=data.get("default_branch") or "main",
            description=data.get("description") or None,
            language=data.get("language") or None,
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            license_name=license_info.get("name") or None,
        )

    def get_tree(self, owner: str, repo: str, ref: str) -> list[str]:
        """Blob paths of the recursive tree at *ref*, in API order."""
        data = self._get(
            f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}",
            f"{owner}/{repo}",
            recursive="1",
        )
        if data.get("truncated"):
            logger.info("GitHub truncated the tree listing", extra={"repository": f"{owner}/{repo}"})
        return [
            item["path"]
            for item in data.get("tree", [])
            if item.get("type") == "blob" and item.get("path")
        ]

    def get_file_bytes(self, owner: str, repo: str, path: str, ref: str) -> bytes:
        """Raw bytes of one file, decoded from the contents API's base64 payload."""
        data = self._get(
            f"/repos/{owner}/{repo}/contents/{quote(path)}",
            f"{owner}/{repo}/{path}",
            ref=ref,
        )
        if isinstance(data, list):
            raise GitHubAPIError(f"Path '{path}' is a directory, not a file")
        if data.get("type") != "file":
            raise GitHubAPIError(f"Path '{path}' is not a file")
        if data.get("encoding", "base64") != "base64" or data.get("content") is None:
            raise GitHubAPIError(f"File '{path}' has no inline content")
        return base64.b64decode(data["content"])

    def list_repositories(self, per_page: int = 50) -> list[RepositorySummary]:
        """The user's repositories, most recently updated first."""
        data = self._get(
            "/user/repos",
            "user repositories",
            sort="updated",
            per_page=str(per_page),
            visibility="all",
        )
        return [
            RepositorySummary(
                id=r["id"],
                name=r["name"],
                full_name=r["full_name"],
                description=r.get("description"),
                private=bool(r.get("private")),
                html_url=r["html_url"],
                language=r.get("language"),
                stargazers_count=r.get("stargazers_count") or 0,
                forks_count=r.get("forks_count") or 0,
                updated_at=r.get("updated_at"),
                topics=r.get("topics") or [],
            )
            for r in data
        ]
