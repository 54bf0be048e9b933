# File: app/models/domain.py

"""
Domain model: one business area of a project with the competitors tracked
for it. Competitors are kept as a JSON array of names in a text column.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.services.text_utils import load_json_list

if TYPE_CHECKING:
    from app.models.project import Project


class Domain(TimestampMixin, Base):
    __tablename__ = "domains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    competitors: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    project: Mapped["Project"] = relationship(back_populates="domains")

    @property
    def competitor_list(self) -> list[str]:
        return load_json_list(self.competitors)
