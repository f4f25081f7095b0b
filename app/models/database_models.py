"""
SQLAlchemy ORM models for the website generator database.
"""
from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    JSON,
)

from app.database import Base


# Models
class Project(Base):
    """A website idea together with the sections derived from it."""

    __tablename__ = "projects"

    id = Column(String(32), primary_key=True)  # uuid4 hex, assigned by the store
    website_idea = Column(Text, nullable=False)
    sections = Column(JSON, nullable=False)  # ordered list of section names
    # Set by the store's clock (not server_default) so ordering keeps sub-second precision
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
