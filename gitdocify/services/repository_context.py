"""Repository context: metadata, file tree and key-file contents.

Runs the fetch half of the generation pipeline:

    metadata + tree  ->  key-file selection  ->  size-limited content fetch

Metadata and tree fetches are raced against a wall-clock timeout. Per-file
fetches fan out on a small worker pool; a failed file is logged and dropped.
"""

import codecs
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..core.timeouts import run_all_with_timeout, run_with_timeout
from ..exceptions import GitDocifyException
from ..schemas.repository import FetchedFile, RepositoryMetadata, RepositoryRef
from .github_client import GitHubClient

logger = logging.getLogger(__name__)

# Well-known files worth sending to the model, most informative first.
KEY_FILES: tuple[str, ...] = (
    "README.md",
    "package.json",
    "tsconfig.json",
    "next.config.js",
    "next.config.mjs",
    "next.config.ts",
    "tailwind.config.ts",
    "src/app/page.tsx",
    "src/pages/index.js",
    "requirements.txt",
    "pyproject.toml",
    "pom.xml",
    "build.gradle",
    "src/main.py",
    "src/main.java",
    "main.go",
    "Cargo.toml",
    "composer.json",
    "Gemfile",
)

MAX_TREE_ENTRIES = 1000
MAX_FILE_SIZE = 1024 * 1024
TRUNCATION_MARKER = "\n... (file truncated)"
FETCH_TIMEOUT_SECONDS = 30.0
CONTENT_FETCH_WORKERS = 4


@dataclass
class RepositoryContext:
    """Everything the prompt assembler needs about one repository."""

    ref: RepositoryRef
    branch: str
    metadata: RepositoryMetadata
    tree: list[str]
    files: list[FetchedFile] = field(default_factory=list)


def select_key_files(tree: Sequence[str]) -> list[str]:
    """Canonical entries present verbatim in *tree*, in canonical order."""
    present = set(tree)
    return [path for path in KEY_FILES if path in present]


def truncate_content(raw: bytes) -> str:
    """Decode file bytes, cutting anything past MAX_FILE_SIZE.

    Oversized content keeps at most MAX_FILE_SIZE bytes, followed by
    TRUNCATION_MARKER. A multi-byte character split by the cut is dropped
    whole, so the kept text never encodes to more than MAX_FILE_SIZE bytes.
    """
    if len(raw) > MAX_FILE_SIZE:
        # final=False holds back an incomplete trailing sequence instead of emitting U+FFFD
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        return decoder.decode(raw[:MAX_FILE_SIZE], final=False) + TRUNCATION_MARKER
    return raw.decode("utf-8", errors="replace")


def fetch_key_files(
    client: GitHubClient,
    ref: RepositoryRef,
    branch: str,
    paths: Sequence[str],
    max_workers: int = CONTENT_FETCH_WORKERS,
) -> list[FetchedFile]:
    """Fetch *paths* concurrently. Failures are dropped; order follows *paths*."""
    if not paths:
        return []

    def fetch_one(path: str) -> Optional[FetchedFile]:
        try:
            raw = client.get_file_bytes(ref.owner, ref.repo, path, branch)
        except GitDocifyException as e:
            logger.warning(
                "Skipping file %s: %s", path, e.message,
                extra={"repository": ref.full_name, "error_code": e.error_code.value},
            )
            return None
        except Exception as e:
            logger.warning(
                "Skipping file %s: %s", path, type(e).__name__,
                extra={"repository": ref.full_name},
            )
            return None
        return FetchedFile(path=path, content=truncate_content(raw))

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="content") as pool:
        results = list(pool.map(fetch_one, paths))

    files = [f for f in results if f is not None]
    logger.info(
        "Fetched %d of %d key files", len(files), len(paths),
        extra={"repository": ref.full_name},
    )
    return files


def fetch_repository_context(
    client: GitHubClient,
    ref: RepositoryRef,
    branch: Optional[str] = None,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> RepositoryContext:
    """Fetch metadata, tree and key-file contents for *ref*.

    Without a *branch* override the tree is read at the default branch, so
    metadata is fetched first. With an override both calls run together.

    Raises:
        FetchTimeoutError: metadata or tree fetch exceeded *timeout*.
        RepositoryNotFoundError: GitHub answered 404.
        AccessDeniedError: GitHub answered 401/403.
    """
    if branch:
        results = run_all_with_timeout(
            {
                "repository metadata": lambda: client.get_repository(ref.owner, ref.repo),
                "file tree": lambda: client.get_tree(ref.owner, ref.repo, branch),
            },
            timeout,
        )
        metadata = results["repository metadata"]
        tree = results["file tree"]
        resolved_branch = branch
    else:
        metadata = run_with_timeout(
            lambda: client.get_repository(ref.owner, ref.repo), timeout, "repository metadata"
        )
        resolved_branch = metadata.default_branch
        tree = run_with_timeout(
            lambda: client.get_tree(ref.owner, ref.repo, resolved_branch), timeout, "file tree"
        )

    if len(tree) > MAX_TREE_ENTRIES:
        logger.info(
            "Tree has %d entries, keeping the first %d", len(tree), MAX_TREE_ENTRIES,
            extra={"repository": ref.full_name},
        )
        tree = tree[:MAX_TREE_ENTRIES]

    files = fetch_key_files(client, ref, resolved_branch, select_key_files(tree))
    return RepositoryContext(
        ref=ref,
        branch=resolved_branch,
        metadata=metadata,
        tree=tree,
        files=files,
    )
