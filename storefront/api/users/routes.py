from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.users.models import CreateUserSchema, DecodedToken
from storefront.api.users.service import UserService
from storefront.database.connection import get_db
from storefront.dependencies.auth import admin_only, get_current_user
from storefront.dependencies.cache import get_cache
from storefront.shared.cache_service import CacheContext
from storefront.shared.responses import success_response

users_router = APIRouter(prefix="/api/v1/user", tags=["Users"])


def get_user_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheContext, Depends(get_cache)],
) -> UserService:
    return UserService(session, cache)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
CurrentUser = Annotated[DecodedToken, Depends(get_current_user)]


@users_router.post("/new", summary="Register the current user's profile")
async def create_user(
    payload: CreateUserSchema, current_user: CurrentUser, service: UserServiceDep
):
    created, user = await service.create_user(current_user.uid, payload)
    if created:
        return success_response(
            user,
            message=f"Welcome, {user['name']}",
            status_code=status.HTTP_201_CREATED,
        )
    return success_response(user, message=f"Welcome back, {user['name']}")


@users_router.get("/all", summary="Get every user", dependencies=[Depends(admin_only)])
async def get_all_users(service: UserServiceDep):
    return success_response(await service.get_all_users())


@users_router.get("/{id}", summary="Get a user profile")
async def get_user(id: str, current_user: CurrentUser, service: UserServiceDep):
    return success_response(await service.get_user(id, current_user))


@users_router.delete(
    "/{id}", summary="Delete a user", dependencies=[Depends(admin_only)]
)
async def delete_user(id: str, service: UserServiceDep):
    await service.delete_user(id)
    return success_response({"id": id}, message="User deleted successfully")
