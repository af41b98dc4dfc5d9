"""User model.

One row per identity-provider account. Users never register with a
password: they sign in through GitHub or Google and the provider's access
token is kept server-side so repository requests can act on their behalf.
"""

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    """OAuth-backed user account.

    ``user_id`` is ``"<provider>:<provider account id>"`` so the same person
    signing in with GitHub and with Google gets two independent accounts.
    """

    __tablename__ = "users"

    user_id = Column(String(100), primary_key=True)
    provider = Column(String(20), nullable=False)
    display_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)

    # Provider access token. Never serialized into API responses.
    access_token = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    documents = relationship("Document", back_populates="user", cascade="all, delete-orphan")
