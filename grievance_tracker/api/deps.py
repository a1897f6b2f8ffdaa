"""
Shared FastAPI dependencies.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from grievance_tracker.api import deps

    router = APIRouter()

    @router.get("/me")
    def read_me(current_user = Depends(deps.get_current_user)):
        return current_user
"""

from typing import Callable, Optional, TypeVar

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from grievance_tracker.core.constants import HEADER_USER_ID
from grievance_tracker.core.exceptions import (
    AuthenticationError,
    BaseAppException,
    ConflictError,
    DatabaseError,
    InvalidStateError,
    OperationError,
    PermissionDeniedError,
    ResourceNotFoundError,
    ValidationError,
)
from grievance_tracker.core.logging import user_id as user_id_var
from grievance_tracker.db.session import get_db
from grievance_tracker.models.base import UserRole
from grievance_tracker.models.user import User
from grievance_tracker.repositories.user import UserRepository
from grievance_tracker.services.base import ErrorCode, ServiceResult

T = TypeVar("T")


# --- Authentication & Authorization -------------------------------------------

def get_current_user(
    x_user_id: Optional[int] = Header(default=None, alias=HEADER_USER_ID),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user from the identity header."""
    if x_user_id is None:
        raise AuthenticationError(f"Missing {HEADER_USER_ID} header")
    user = UserRepository(db).find_by_id(x_user_id)
    if user is None:
        raise AuthenticationError("Unknown user", details={"user_id": x_user_id})
    user_id_var.set(str(user.id))
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory admitting only users holding one of ``roles``."""
    allowed = set(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise PermissionDeniedError(
                "You do not have permission to perform this action",
                required_roles=sorted(role.value for role in allowed),
            )
        return current_user

    return dependency


get_admin_user = require_roles(UserRole.ADMIN)
get_staff_user = require_roles(UserRole.STAFF, UserRole.ADMIN)
get_staff_only_user = require_roles(UserRole.STAFF)


# --- Result translation -------------------------------------------------------

def raise_for_result(result: ServiceResult[T]) -> T:
    """
    Unwrap a service result or raise the matching HTTP-level exception.

    Raises:
        BaseAppException: Subclass chosen by the result's error code
    """
    if result.is_success:
        return result.data

    error = result.error
    details = error.details or {}
    code = error.code

    if code == ErrorCode.VALIDATION_ERROR:
        raise ValidationError(error.message, details=details)
    if code == ErrorCode.NOT_FOUND:
        raise ResourceNotFoundError(
            details.get("resource_type", "Resource"),
            details.get("resource_id"),
            message=error.message,
        )
    if code == ErrorCode.INVALID_STATE:
        raise InvalidStateError(error.message, details=details)
    if code in (ErrorCode.ALREADY_EXISTS, ErrorCode.CONFLICT):
        raise ConflictError(error.message, details=details)
    if code == ErrorCode.INSUFFICIENT_PERMISSIONS:
        raise PermissionDeniedError(error.message)
    if code == ErrorCode.DATABASE_ERROR:
        raise DatabaseError(error.message, details=details)
    raise OperationError(error.message, details=details)


__all__ = [
    "get_db",
    "get_current_user",
    "require_roles",
    "get_admin_user",
    "get_staff_user",
    "get_staff_only_user",
    "raise_for_result",
    "BaseAppException",
]
