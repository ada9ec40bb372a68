"""FastAPI dependencies for authentication and permissions."""

import logging
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from humans_api.core.exceptions import AuthenticationError, NotFoundError
from humans_api.db.supabase import SupabaseClient

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)

# Permission → colleague roles allowed to use it
PERMISSIONS: dict[str, tuple[str, ...]] = {
    "viewRecords": ("viewer", "agent", "manager", "admin"),
    "createEditRecords": ("agent", "manager", "admin"),
    "manageColleagues": ("admin",),
}


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Any:
    """Extract and validate the current user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Validated user object from Supabase Auth.

    Raises:
        HTTPException: If authentication fails.
    """
    if credentials is None:
        logger.warning("AUTH: No credentials provided in request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        client = SupabaseClient.get_client()
        response = client.auth.get_user(credentials.credentials)

        if response is None or response.user is None:
            raise AuthenticationError("Invalid authentication token")

        return response.user

    except AuthenticationError as e:
        logger.warning("AUTH: AuthenticationError - %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except Exception as e:
        logger.exception("AUTH: Unexpected error during token validation")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_colleague(
    current_user: Annotated[Any, Depends(get_current_user)],
) -> dict[str, Any]:
    """Load the colleague record behind the authenticated user.

    Raises:
        HTTPException: 403 if the user is not a CRM colleague.
    """
    try:
        return await SupabaseClient.get_colleague_by_id(current_user.id)
    except NotFoundError as e:
        logger.warning("AUTH: user %s is not a colleague", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Colleague account required",
        ) from e


def require_permission(permission: str) -> Any:
    """Create a dependency that requires a colleague permission.

    Args:
        permission: Key of ``PERMISSIONS``.

    Returns:
        Dependency returning the colleague when their role is allowed.
    """
    allowed_roles = PERMISSIONS[permission]

    async def permission_checker(
        colleague: Annotated[dict[str, Any], Depends(get_current_colleague)],
    ) -> dict[str, Any]:
        if colleague.get("role") not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return colleague

    return permission_checker


# Type aliases for common dependency patterns
ColleagueManager = Annotated[dict[str, Any], Depends(require_permission("manageColleagues"))]
