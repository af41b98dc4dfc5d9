"""Document API endpoints.

    POST /api/documents/generate  generate and store a document
    GET  /api/documents           the caller's documents, newest first
    GET  /api/documents/{doc_id}  one document owned by the caller
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import SessionContext, require_session
from ..database import get_db
from ..repositories import DocumentRepository
from ..schemas.document import (
    DocumentListItem,
    DocumentListResponse,
    DocumentResponse,
    GenerateRequest,
    GenerateResponse,
)
from ..services.documentation_service import DocumentationService, GitHubClientFactory
from ..services.generation_service import DocumentGenerator
from .dependencies import get_generator, get_github_client_factory

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("/generate", response_model=GenerateResponse)
def generate_document(
    body: GenerateRequest,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
    generator: DocumentGenerator = Depends(get_generator),
    github_client_factory: GitHubClientFactory = Depends(get_github_client_factory),
):
    """Generate documentation from a repository, a prompt, or a code file.

    Repository requests need a GitHub session. If repository analysis or
    generation fails, a template document is stored instead and the
    response carries ``fallback: true`` with a ``notice``.
    """
    service = DocumentationService(db, generator, github_client_factory)
    result = service.generate(body, session)
    return GenerateResponse(
        document=DocumentResponse.model_validate(result.document),
        content=result.content,
        repository=result.repository,
        generated_at=result.generated_at,
        fallback=result.fallback,
        notice=result.notice,
    )


@router.get("", response_model=DocumentListResponse)
def list_documents(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
):
    docs = DocumentRepository(db).list_for_user(session.user_id, skip=skip, limit=limit)
    return DocumentListResponse(documents=[DocumentListItem.model_validate(d) for d in docs])


@router.get("/{doc_id}", response_model=DocumentResponse)
def get_document(
    doc_id: str,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
):
    """404 when the document does not exist, 403 when someone else owns it."""
    doc = DocumentRepository(db).get_owned(doc_id, session.user_id)
    return DocumentResponse.model_validate(doc)
