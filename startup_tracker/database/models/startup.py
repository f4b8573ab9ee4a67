"""
Startup model: one tracked company, keyed naturally by name.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

NOT_FOUND = "not found"


class Startup(Base):
    """A startup discovered by one of the sources."""

    __tablename__ = "startups"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Company name; natural key for upserts"
    )

    website: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default=NOT_FOUND,
        comment="Company website or 'not found'"
    )

    linkedin_url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default=NOT_FOUND,
        comment="LinkedIn company URL or 'not found'"
    )

    source: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Scraper that found the company"
    )

    def __repr__(self) -> str:
        return f"<Startup(name='{self.name}')>"
