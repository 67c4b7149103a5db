"""
Uploaded artifact versions.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from projectstore.kernel.models.base import Base, utcnow
from projectstore.kernel.models.project import USER_MAX_LENGTH


class ProjectVersion(Base):
    """
    Immutable metadata for one uploaded version of a project.

    The archive bytes live with the artifact transport; this row keeps the
    checksum, the transport's resource id and the local file reference.
    """

    __tablename__ = "project_versions"

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id"),
        primary_key=True,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )

    uploader: Mapped[str] = mapped_column(
        String(USER_MAX_LENGTH),
        nullable=False,
    )
    upload_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    md5: Mapped[Optional[bytes]] = mapped_column(
        LargeBinary(16),
        nullable=True,
    )
    resource_id: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
    )

    # Artifact reference
    file_type: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True,
    )
    file_name: Mapped[Optional[str]] = mapped_column(
        String(256),
        nullable=True,
    )
    file_size: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
    )
    local_file: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
    )

    # Set once the transfer has been recorded by upload_project_file
    uploaded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ProjectVersion {self.project_id}:{self.version}>"
