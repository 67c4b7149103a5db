"""
Project access-control entries.
"""

from datetime import datetime
from enum import IntFlag
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from projectstore.kernel.models.base import Base, utcnow
from projectstore.kernel.models.project import USER_MAX_LENGTH

if TYPE_CHECKING:
    from projectstore.kernel.models.project import Project


class Permission(IntFlag):
    """Rights a principal can hold on a project."""
    NONE = 0
    READ = 1
    WRITE = 2
    EXECUTE = 4
    SCHEDULE = 8
    METRICS = 16
    ADMIN = 1 << 30


class ProjectPermission(Base):
    """One user or group entry; keyed by (project, principal, is_group)."""

    __tablename__ = "project_permissions"

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id"),
        primary_key=True,
    )
    principal: Mapped[str] = mapped_column(
        String(USER_MAX_LENGTH),
        primary_key=True,
    )
    is_group: Mapped[bool] = mapped_column(
        Boolean,
        primary_key=True,
    )
    permissions: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="permissions",
    )

    def __repr__(self) -> str:
        kind = "group" if self.is_group else "user"
        return f"<ProjectPermission {self.project_id} {kind}:{self.principal}={self.permissions}>"


def permission_names(permission: int) -> str:
    """Readable form for audit messages, e.g. ``READ,EXECUTE``."""
    permission = Permission(permission)
    if permission & Permission.ADMIN:
        return "ADMIN"
    names = [
        member.name
        for member in (Permission.READ, Permission.WRITE, Permission.EXECUTE,
                       Permission.SCHEDULE, Permission.METRICS)
        if permission & member
    ]
    return ",".join(names) or "NONE"
