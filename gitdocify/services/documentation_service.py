"""Documentation service: deep module for the generation pipeline.

One public operation, ``generate``, takes a validated request body and the
caller's session, picks the request mode, runs it, and persists the result.

Modes:
    code        ``{code, fileType, fileName?}``: single-file prompt.
    repository  ``{repository, branch?}``: fetch context from GitHub, build the
                repository prompt, generate. Any failure after the session
                and configuration checks is replaced by the fallback document.
    prompt      ``{prompt}``: generate from free text, then title it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.auth import SessionContext, ensure_github_credential
from ..exceptions import GitDocifyException, ModelUnconfiguredError, ValidationError
from ..models import Document
from ..repositories import DocumentRepository
from ..schemas.document import GenerateRequest, GenerationOptions
from ..schemas.repository import RepositoryRef
from .generation_service import DocumentGenerator
from .github_client import GitHubClient
from .prompts import build_code_prompt, build_fallback_document, build_repository_prompt, requested_sections
from .repository_context import fetch_repository_context

logger = logging.getLogger(__name__)

GitHubClientFactory = Callable[[str], GitHubClient]

FALLBACK_NOTICE = "Detailed repository analysis was unavailable, so a basic template was used."


@dataclass
class GenerationResult:
    document: Document
    content: str
    repository: Optional[str]
    generated_at: datetime
    fallback: bool = False
    notice: Optional[str] = None


@dataclass
class _Draft:
    title: str
    content: str
    repository: Optional[str] = None
    fallback: bool = False
    notice: Optional[str] = None


class DocumentationService:
    """Runs one generation request end to end."""

    def __init__(
        self,
        db: Session,
        generator: DocumentGenerator,
        github_client_factory: GitHubClientFactory,
    ):
        self.db = db
        self.generator = generator
        self.github_client_factory = github_client_factory
        self.doc_repo = DocumentRepository(db)

    def generate(self, request: GenerateRequest, session: SessionContext) -> GenerationResult:
        """Generate and store a document for *session*'s user.

        Raises:
            ValidationError: no usable mode, empty prompt, or malformed repository.
            MissingCredentialError: repository mode without a GitHub session.
            ModelUnconfiguredError: no model API key.
            GenerationError: prompt and code modes surface model failures.
        """
        if request.code and request.file_type:
            draft = self._generate_for_code(request)
        elif request.repository:
            draft = self._generate_for_repository(request, session)
        elif request.prompt is not None:
            draft = self._generate_for_prompt(request)
        else:
            raise ValidationError("Repository, code, or prompt is required")

        document = self.doc_repo.create(
            title=draft.title,
            content=draft.content,
            user_id=session.user_id,
            repository=draft.repository,
        )
        logger.info(
            "Stored generated document",
            extra={"doc_id": document.id, "user_id": session.user_id, "fallback": draft.fallback},
        )
        return GenerationResult(
            document=document,
            content=draft.content,
            repository=draft.repository,
            generated_at=datetime.now(timezone.utc),
            fallback=draft.fallback,
            notice=draft.notice,
        )

    # ----- modes ------------------------------------------------------------

    def _generate_for_code(self, request: GenerateRequest) -> _Draft:
        options = request.options
        prompt = build_code_prompt(request.code, request.file_type, request.file_name)
        content = self.generator.generate(prompt, options.temperature, options.max_output_tokens)
        if request.file_name:
            title = f"{request.file_name} Documentation"
        else:
            title = f"{request.file_type} Code Documentation"
        return _Draft(title=title, content=content)

    def _generate_for_prompt(self, request: GenerateRequest) -> _Draft:
        if not request.prompt.strip():
            raise ValidationError("Prompt cannot be empty", field="prompt")
        options = request.options
        content = self.generator.generate(request.prompt, options.temperature, options.max_output_tokens)
        title = self.generator.generate_title(content)
        return _Draft(title=title, content=content)

    def _generate_for_repository(self, request: GenerateRequest, session: SessionContext) -> _Draft:
        ref = RepositoryRef.parse(request.repository)
        access_token = ensure_github_credential(session)
        if not self.generator.is_configured:
            raise ModelUnconfiguredError()

        title = f"{ref.repo} Documentation"
        try:
            content = self._analyze_repository(ref, request.branch, request.options, access_token)
        except GitDocifyException as e:
            logger.warning(
                "Repository generation failed, using fallback: %s", e.message,
                extra={"repository": ref.full_name, "error_code": e.error_code.value},
            )
            return _Draft(
                title=title,
                content=build_fallback_document(ref),
                repository=ref.full_name,
                fallback=True,
                notice=f"{e.message} {FALLBACK_NOTICE}",
            )
        except Exception:
            logger.exception("Unexpected error during repository generation", extra={"repository": ref.full_name})
            return _Draft(
                title=title,
                content=build_fallback_document(ref),
                repository=ref.full_name,
                fallback=True,
                notice=FALLBACK_NOTICE,
            )

        return _Draft(title=title, content=content, repository=ref.full_name)

    def _analyze_repository(
        self,
        ref: RepositoryRef,
        branch: Optional[str],
        options: GenerationOptions,
        access_token: str,
    ) -> str:
        with self.github_client_factory(access_token) as client:
            context = fetch_repository_context(client, ref, branch=branch)

        sections = requested_sections(
            include_readme=options.include_readme,
            include_installation=options.include_installation,
            include_api=options.include_api,
            include_examples=options.include_examples,
            include_contributing=options.include_contributing,
        )
        prompt = build_repository_prompt(
            ref,
            context.metadata,
            context.tree,
            context.files,
            options.depth,
            sections,
        )
        logger.info(
            "Generating repository documentation",
            extra={"repository": ref.full_name, "files": len(context.files), "prompt_chars": len(prompt)},
        )
        return self.generator.generate(prompt, options.temperature, options.max_output_tokens)
