"""
Route dependencies for role-gated endpoints.
"""

from fastapi import Depends

from nightline.core.permissions import Capability, permission
from nightline.core.security import deny_access, get_current_user
from nightline.models.user import User


def require_capability(capability: Capability):
    """Dependency factory: the current user, provided their role holds `capability`."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not permission(user.role, capability):
            raise deny_access(capability.value, user)
        return user

    return dependency
