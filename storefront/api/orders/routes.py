from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.orders.models import CreateOrderSchema
from storefront.api.orders.service import OrderService
from storefront.api.users.models import DecodedToken
from storefront.database.connection import get_db
from storefront.dependencies.auth import admin_only, get_current_user
from storefront.dependencies.cache import get_cache
from storefront.shared.cache_service import CacheContext
from storefront.shared.responses import success_response

orders_router = APIRouter(prefix="/api/v1/order", tags=["Orders"])


def get_order_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheContext, Depends(get_cache)],
) -> OrderService:
    return OrderService(session, cache)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
CurrentUser = Annotated[DecodedToken, Depends(get_current_user)]


@orders_router.post(
    "/new", summary="Place an order", status_code=status.HTTP_201_CREATED
)
async def create_order(
    payload: CreateOrderSchema, current_user: CurrentUser, service: OrderServiceDep
):
    order = await service.create_order(current_user.uid, payload)
    return success_response(
        order,
        message="Order placed successfully",
        status_code=status.HTTP_201_CREATED,
    )


@orders_router.get("/my", summary="Get the current user's orders")
async def get_my_orders(current_user: CurrentUser, service: OrderServiceDep):
    return success_response(await service.get_my_orders(current_user.uid))


@orders_router.get(
    "/all", summary="Get every order", dependencies=[Depends(admin_only)]
)
async def get_all_orders(service: OrderServiceDep):
    return success_response(await service.get_all_orders())


@orders_router.get("/{id}", summary="Get an order by ID")
async def get_order(id: int, current_user: CurrentUser, service: OrderServiceDep):
    return success_response(await service.get_order(id, current_user))


@orders_router.put(
    "/{id}",
    summary="Advance an order to its next status",
    dependencies=[Depends(admin_only)],
)
async def process_order(id: int, service: OrderServiceDep):
    order = await service.process_order(id)
    return success_response(order, message="Order processed successfully")


@orders_router.delete(
    "/{id}", summary="Delete an order", dependencies=[Depends(admin_only)]
)
async def delete_order(id: int, service: OrderServiceDep):
    await service.delete_order(id)
    return success_response({"id": id}, message="Order deleted successfully")
