"""
Project access control.
"""

from projectstore.kernel.permissions.permission_registry import (
    PermissionRegistry,
    upsert_permission,
)

__all__ = ["PermissionRegistry", "upsert_permission"]
