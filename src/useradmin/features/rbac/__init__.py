from .store import RoleAssignmentStore

__all__ = ["RoleAssignmentStore"]
