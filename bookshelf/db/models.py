"""
SQLAlchemy database models for Bookshelf Sync.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Document(Base):
    """One value of the per-user tree store, addressed by its slash path."""
    __tablename__ = 'documents'

    path = Column(String(1024), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Account(Base):
    """A sign-in identity."""
    __tablename__ = 'accounts'

    uid = Column(String(64), primary_key=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    password_hash = Column(String(512), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
