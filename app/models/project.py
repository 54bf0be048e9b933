# File: app/models/project.py

"""
Project model.

A project is one tracked brand. It owns its business domains and the history
of reputation analyses generated for it.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.services.text_utils import load_json_list

if TYPE_CHECKING:
    from app.models.analysis import ProjectAnalysis
    from app.models.domain import Domain
    from app.models.user import User


class Project(TimestampMixin, Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Brand profile
    country_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # JSON array of alternative names / product names
    aliases_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    logo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    owner: Mapped["User"] = relationship(back_populates="projects")
    domains: Mapped[list["Domain"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )
    analyses: Mapped[list["ProjectAnalysis"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )

    @property
    def aliases(self) -> list[str]:
        return load_json_list(self.aliases_json)
