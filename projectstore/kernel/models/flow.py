"""
Per-version flow-graph snapshots.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from projectstore.kernel.models.base import Base, utcnow


class ProjectFlow(Base):
    """Serialized flow graph, keyed by (project, version, flow id)."""

    __tablename__ = "project_flows"

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id"),
        primary_key=True,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )
    flow_id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
    )
    graph: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProjectFlow {self.project_id}:{self.version} {self.flow_id}>"
