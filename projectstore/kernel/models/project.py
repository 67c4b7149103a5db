"""
Project models.
"""

from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import Boolean, Index, Integer, JSON, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projectstore.kernel.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from projectstore.kernel.models.permission import ProjectPermission


# Backend field-size limits, checked before hitting the database
NAME_MAX_LENGTH = 64
DESCRIPTION_MAX_LENGTH = 2048
USER_MAX_LENGTH = 64


class Project(Base, TimestampMixin):
    """
    Top-level project row.

    Never hard-deleted: removal flips ``active``. ``version`` is the
    current-version pointer (0 until the first version is registered) and
    ``last_version`` is the highest version number ever registered, which
    keeps numbers from being reused after retention cleanup.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH),
        default="",
        nullable=False,
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Versioning
    version: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    last_version: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    # Project-level configuration (proxy users and the like)
    settings: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    # Audit
    created_by: Mapped[str] = mapped_column(
        String(USER_MAX_LENGTH),
        nullable=False,
    )
    last_modified_by: Mapped[str] = mapped_column(
        String(USER_MAX_LENGTH),
        nullable=False,
    )

    # Relationships
    permissions: Mapped[List["ProjectPermission"]] = relationship(
        "ProjectPermission",
        back_populates="project",
        lazy="selectin",
    )

    __table_args__ = (
        # At most one active project per name; removed names may be reused
        Index(
            "uq_projects_active_name",
            "name",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active"),
        ),
        Index("ix_projects_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Project {self.id} {self.name} v{self.version}>"
