"""
Pydantic schemas exchanged with store callers.
"""

from projectstore.schemas.project import PermissionEntry, Project
from projectstore.schemas.version import ProjectFileHandler
from projectstore.schemas.props import Props
from projectstore.schemas.flow import Flow
from projectstore.schemas.event import ProjectLogEvent

__all__ = [
    "PermissionEntry",
    "Project",
    "ProjectFileHandler",
    "Props",
    "Flow",
    "ProjectLogEvent",
]
