"""Document model."""

from sqlalchemy import Column, ForeignKey, Index, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Document(Base):
    """A generated Markdown document, owned by exactly one user.

    Rows are written once by the generation pipeline and only read back
    afterwards.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_user_id_created_at", "user_id", "created_at"),
    )

    id = Column(String(50), primary_key=True)  # doc-{uuid hex}
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    # Repository the document was generated from ("owner/repo"), if any.
    repository = Column(String(255), nullable=True)

    user_id = Column(
        String(100),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="documents")
