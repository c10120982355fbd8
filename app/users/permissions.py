from fastapi import Depends, HTTPException, status
from app.users.auth import get_current_user
from app.users.models import User, UserRole
from typing import List, Set


def role_required(allowed_roles: List[UserRole]):
    allowed_set: Set[UserRole] = set(allowed_roles or [])

    def wrapper(current_user: User = Depends(get_current_user)):
        # Admin bypass
        if current_user.role == UserRole.ADMIN:
            return current_user

        if current_user.role not in allowed_set:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )

        return current_user

    return wrapper


admin_required = role_required([UserRole.ADMIN])
