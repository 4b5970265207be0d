"""Role/permission catalog and authorization decisions."""

from .types import Permission, PermissionDef, Role, RoleDef

__all__ = ["Permission", "PermissionDef", "Role", "RoleDef"]
