"""
Project aggregate schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, Field

from projectstore.kernel.models.permission import Permission


class PermissionEntry(NamedTuple):
    """(principal, is_group, permission) as returned by get_project_permissions."""

    principal: str
    is_group: bool
    permission: Permission


class Project(BaseModel):
    """
    Project aggregate handed to callers.

    ``version`` mirrors the stored current-version pointer at fetch time;
    store calls that move the pointer or change permissions update the
    instance they were given.
    """

    id: int
    name: str
    description: str = ""
    active: bool = True
    version: int = 0
    created_by: str
    last_modified_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    permissions: List[PermissionEntry] = Field(default_factory=list)

    def get_permission(self, principal: str, is_group: bool = False) -> Permission:
        for entry in self.permissions:
            if entry.principal == principal and entry.is_group == is_group:
                return entry.permission
        return Permission.NONE

    def has_permission(
        self,
        principal: str,
        required: Permission,
        is_group: bool = False,
    ) -> bool:
        """ADMIN holders pass every check."""
        granted = self.get_permission(principal, is_group)
        if granted & Permission.ADMIN:
            return True
        return (granted & required) == required

    def set_permission(self, principal: str, permission: Permission, is_group: bool = False) -> None:
        remaining = [
            e for e in self.permissions
            if not (e.principal == principal and e.is_group == is_group)
        ]
        if permission:
            remaining.append(PermissionEntry(principal, is_group, Permission(permission)))
        self.permissions = sorted(remaining, key=lambda e: (e.is_group, e.principal))

    @classmethod
    def from_row(cls, row: Any) -> "Project":
        """Build from a ``kernel.models.Project`` row with permissions loaded."""
        return cls(
            id=row.id,
            name=row.name,
            description=row.description or "",
            active=row.active,
            version=row.version,
            created_by=row.created_by,
            last_modified_by=row.last_modified_by,
            created_at=row.created_at,
            updated_at=row.updated_at,
            settings=dict(row.settings or {}),
            permissions=sorted(
                (
                    PermissionEntry(p.principal, p.is_group, Permission(p.permissions))
                    for p in row.permissions
                ),
                key=lambda e: (e.is_group, e.principal),
            ),
        )
