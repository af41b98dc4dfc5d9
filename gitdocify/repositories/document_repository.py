"""Document repository for database operations.

Documents are create-once: there is no update or delete path. Every read
that goes through the API is scoped to the requesting user.
"""

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Document
from ..exceptions import DocumentNotFoundError, ForbiddenError


def generate_doc_id() -> str:
    """Random document id: ``doc-`` plus 32 hex chars."""
    return f"doc-{uuid.uuid4().hex}"


class DocumentRepository:
    """Repository for generated documents."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        title: str,
        content: str,
        user_id: str,
        repository: Optional[str] = None,
    ) -> Document:
        doc = Document(
            id=generate_doc_id(),
            title=title,
            content=content,
            user_id=user_id,
            repository=repository,
        )
        self.db.add(doc)
        self.db.commit()
        self.db.refresh(doc)
        return doc

    def get_owned(self, doc_id: str, user_id: str) -> Document:
        """Load a document and verify *user_id* owns it.

        Raises DocumentNotFoundError when missing, ForbiddenError when the
        document belongs to someone else.
        """
        doc = self.db.query(Document).filter(Document.id == doc_id).first()
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        if doc.user_id != user_id:
            raise ForbiddenError("You do not have permission to view this document")
        return doc

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Document]:
        """Documents owned by *user_id*, newest first."""
        return (
            self.db.query(Document)
            .filter(Document.user_id == user_id)
            .order_by(Document.created_at.desc(), Document.id)
            .offset(skip)
            .limit(limit)
            .all()
        )
