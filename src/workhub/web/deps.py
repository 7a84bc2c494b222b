from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from workhub.app import App
from workhub.errors import AuthenticationError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def require_admin(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> None:
    """Guard for mutating endpoints: checks the Authorization Bearer token against the admin token."""
    token = credentials.credentials if credentials and credentials.scheme.lower() == "bearer" else None
    if not app.is_admin_token_valid(token):
        raise AuthenticationError("Valid admin token required")


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AdminDep = Annotated[None, Depends(require_admin)]
