"""
Per-version configuration bundles.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from projectstore.kernel.models.base import Base, utcnow


class ProjectProperty(Base):
    """
    Named key/value bundle for one project version.

    ``entries`` holds ``[key, value]`` pairs so insertion order survives
    backends that normalise JSON objects.
    """

    __tablename__ = "project_properties"

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id"),
        primary_key=True,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )
    path_name: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
    )
    entries: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProjectProperty {self.project_id}:{self.version} {self.path_name}>"
