from fastapi import Depends, HTTPException, status

from scolarite.auth.dependencies import get_current_user
from scolarite.auth.schemas import CurrentUser
from scolarite.core.enums import UserRole


def require_role(*roles: UserRole):
    """
    Dependency factory to restrict an endpoint to the given roles.

    Example:
        Depends(require_role(UserRole.ADMIN))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _checker
