from .models import (
    Homeslider,
    HomesliderCreate,
    HomesliderUpdate,
    PermissionGroup,
    PermissionGroupCreate,
    PermissionGroupUpdate,
    homeslider,
    permission_groups,
)

RESOURCES = [permission_groups, homeslider]

__all__ = [
    "Homeslider",
    "HomesliderCreate",
    "HomesliderUpdate",
    "PermissionGroup",
    "PermissionGroupCreate",
    "PermissionGroupUpdate",
    "homeslider",
    "permission_groups",
    "RESOURCES",
]
