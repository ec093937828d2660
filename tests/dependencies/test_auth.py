from unittest import mock

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from storefront.api.users.models import DecodedToken
from storefront.config.constants import UserRole
from storefront.dependencies.auth import admin_only, verify_token
from storefront.shared.exceptions import ForbiddenException, UnauthorizedException


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
@mock.patch("storefront.dependencies.auth.auth")
class TestVerifyToken:
    async def test_valid_token(self, mock_auth):
        mock_auth.verify_id_token.return_value = {"uid": "u1", "role": "admin"}
        decoded = await verify_token(_bearer("good"))
        assert decoded.uid == "u1"
        assert decoded.role == UserRole.ADMIN
        mock_auth.verify_id_token.assert_called_once_with("good")

    async def test_missing_token(self, mock_auth):
        with pytest.raises(UnauthorizedException):
            await verify_token(None)
        mock_auth.verify_id_token.assert_not_called()

    async def test_rejected_token(self, mock_auth):
        mock_auth.verify_id_token.side_effect = ValueError("expired")
        with pytest.raises(UnauthorizedException) as exc_info:
            await verify_token(_bearer("stale"))
        assert "expired" in exc_info.value.detail


@pytest.mark.asyncio
class TestRoleChecker:
    async def test_admin_passes(self):
        admin = DecodedToken(uid="a", role=UserRole.ADMIN)
        assert await admin_only(admin) is admin

    async def test_user_and_missing_role_are_forbidden(self):
        for user in (DecodedToken(uid="u", role=UserRole.USER), DecodedToken(uid="n")):
            with pytest.raises(ForbiddenException):
                await admin_only(user)
