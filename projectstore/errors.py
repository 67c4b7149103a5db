"""
Error taxonomy for the project store.

Every store operation except EventLog.post_event surfaces failures as one of
these types.
"""

from typing import Optional


class ProjectManagerError(Exception):
    """Base class for all project store failures."""


class NotFoundError(ProjectManagerError):
    """Requested project, version, flow or property does not exist."""


class DuplicateNameError(ProjectManagerError):
    """An active project with the same name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Active project with name {name!r} already exists")
        self.name = name


class DuplicateVersionError(ProjectManagerError):
    """The (project, version) pair is already registered."""

    def __init__(self, project_id: int, version: int):
        super().__init__(f"Version {version} of project {project_id} already exists")
        self.project_id = project_id
        self.version = version


class VersionOrderingError(ProjectManagerError):
    """The version is not greater than every version ever registered."""

    def __init__(self, project_id: int, version: int, last_version: Optional[int] = None):
        message = f"Version {version} of project {project_id} is not newer than the latest"
        if last_version is not None:
            message += f" ({last_version})"
        super().__init__(message)
        self.project_id = project_id
        self.version = version
        self.last_version = last_version


class ConstraintViolationError(ProjectManagerError):
    """A field exceeds a backend size limit or violates a constraint."""


class StorageError(ProjectManagerError):
    """
    Backend I/O failure.

    transient=True marks failures worth retrying with backoff (lock timeouts,
    dropped connections); permanent ones should not be retried.
    """

    def __init__(self, message: str, *, transient: bool = False):
        super().__init__(message)
        self.transient = transient
