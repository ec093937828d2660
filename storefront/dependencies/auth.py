from typing import Annotated, List

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth

from storefront.api.users.models import DecodedToken
from storefront.config.constants import UserRole
from storefront.shared.exceptions import ForbiddenException, UnauthorizedException

security = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> DecodedToken:
    if not credentials or not credentials.credentials:
        raise UnauthorizedException(detail="Authentication token is missing")

    try:
        decoded_token_dict = auth.verify_id_token(credentials.credentials)
    except Exception as e:
        raise UnauthorizedException(
            detail=f"Invalid authentication credentials: {e}"
        ) from e
    return DecodedToken(**decoded_token_dict)


async def get_current_user(
    decoded_token: Annotated[DecodedToken, Depends(verify_token)],
) -> DecodedToken:
    return decoded_token


class RoleChecker:
    def __init__(self, allowed_roles: List[UserRole]):
        self.allowed_roles = allowed_roles

    async def __call__(
        self,
        current_user: Annotated[DecodedToken, Depends(get_current_user)],
    ) -> DecodedToken:
        if current_user.role not in self.allowed_roles:
            raise ForbiddenException(
                "You do not have permission to perform this action."
            )
        return current_user


admin_only = RoleChecker([UserRole.ADMIN])
