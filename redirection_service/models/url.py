from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from redirection_service.database.connection import Base


class URLMapping(Base):
    """
    Key -> URL mapping.

    Rows are inserted once and never updated by the service. ``expires_at``
    implements the storage TTL: expired rows are treated as absent.
    """
    __tablename__ = "url_table"

    url_key = Column(String(64), primary_key=True)
    url_redirect = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime, nullable=True, index=True)  # naive UTC
