from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from backoffice.core.rbac.checker import check_permissions
from backoffice.core.security import Principal, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_db(request: Request) -> Generator:
    """Database session dependency, one session per request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_current_principal(token: Optional[str] = Depends(oauth2_scheme)) -> Principal:
    """Get the authenticated principal from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    principal = decode_access_token(token)
    if principal is None:
        raise credentials_exception
    return principal


def require_permission(*codes: str, require_all: bool = False) -> Callable[..., Principal]:
    """
    Dependency factory for endpoints that need specific permissions.

    Args:
        codes: One or more permission codes
        require_all: If True, the role must hold ALL codes. Default: any one.

    Usage:
        @router.post("", dependencies=[Depends(require_permission("MENU_SYSTEM_ROLE"))])
        def create_role(...):
            ...

        @router.put("/{id}")
        def update_role(principal: Principal = Depends(require_permission("MENU_SYSTEM_ROLE"))):
            ...
    """

    def dependency(
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> Principal:
        if not check_permissions(db, principal.role_code, codes, require_all=require_all):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(codes)}",
            )
        return principal

    return dependency
