from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.orders.cache import OrdersCache
from storefront.api.orders.models import CreateOrderSchema, OrderSchema
from storefront.api.users.models import DecodedToken
from storefront.config.constants import NEXT_ORDER_STATUS, OrderStatus, UserRole
from storefront.database.models import Order, Product
from storefront.shared.cache_service import CacheContext
from storefront.shared.error_handler import ErrorHandler, handle_service_errors
from storefront.shared.exceptions import (
    BadRequestException,
    ForbiddenException,
    ResourceNotFoundException,
)
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


def dump_order(order: Order) -> Dict[str, Any]:
    return OrderSchema(
        id=order.id,
        user_id=order.user_id,
        shipping_info={
            "address": order.address,
            "city": order.city,
            "state": order.state,
            "country": order.country,
            "pin_code": order.pin_code,
        },
        subtotal=order.subtotal,
        tax=order.tax,
        shipping_charges=order.shipping_charges,
        discount=order.discount,
        total=order.total,
        status=order.status,
        order_items=order.order_items,
        created_at=order.created_at,
    ).model_dump(mode="json")


class OrderService:
    def __init__(self, session: AsyncSession, cache: CacheContext):
        self.session = session
        self.cache = cache
        self.orders_cache = OrdersCache(cache)
        self._error_handler = ErrorHandler(__name__)

    async def _get_order_or_404(self, order_id: int) -> Order:
        order = await self.session.get(Order, order_id)
        if order is None:
            raise ResourceNotFoundException(detail="Order not found")
        return order

    @handle_service_errors("placing order")
    async def create_order(
        self, user_id: str, order_data: CreateOrderSchema
    ) -> Dict[str, Any]:
        """Reserve stock for every item and record the order in one transaction"""
        items: List[Dict[str, Any]] = []
        for item in order_data.order_items:
            product = await self.session.get(Product, item.product_id)
            if product is None:
                raise ResourceNotFoundException(
                    detail=f"Product {item.product_id} not found"
                )
            if product.stock < item.quantity:
                raise BadRequestException(
                    detail=f"Insufficient stock for product {product.id}"
                )
            product.stock -= item.quantity
            items.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "photo": product.photos[0]["url"] if product.photos else None,
                    "price": product.price,
                    "quantity": item.quantity,
                }
            )

        shipping = order_data.shipping_info
        order = Order(
            user_id=user_id,
            address=shipping.address,
            city=shipping.city,
            state=shipping.state,
            country=shipping.country,
            pin_code=shipping.pin_code,
            subtotal=order_data.subtotal,
            tax=order_data.tax,
            shipping_charges=order_data.shipping_charges,
            discount=order_data.discount,
            total=order_data.total,
            status=OrderStatus.PROCESSING.value,
            order_items=items,
        )
        self.session.add(order)
        await self.session.commit()
        await self.session.refresh(order)
        logger.info(f"Order {order.id} placed by {user_id}")

        await self.cache.invalidate(
            product=True,
            order=True,
            admin=True,
            user_id=user_id,
            product_id=[item["product_id"] for item in items],
        )
        return dump_order(order)

    @handle_service_errors("retrieving user orders")
    async def get_my_orders(self, user_id: str) -> List[Dict[str, Any]]:
        async def load():
            stmt = (
                select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.created_at.desc(), Order.id.desc())
            )
            result = await self.session.execute(stmt)
            return [dump_order(o) for o in result.scalars().all()]

        return await self.orders_cache.my_orders(user_id, load)

    @handle_service_errors("retrieving all orders")
    async def get_all_orders(self) -> List[Dict[str, Any]]:
        async def load():
            stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
            result = await self.session.execute(stmt)
            return [dump_order(o) for o in result.scalars().all()]

        return await self.orders_cache.all_orders(load)

    @handle_service_errors("retrieving order")
    async def get_order(self, order_id: int, requester: DecodedToken) -> Dict[str, Any]:
        async def load():
            return dump_order(await self._get_order_or_404(order_id))

        order = await self.orders_cache.order(order_id, load)
        # The cached copy is shared, so ownership is checked on every read
        if requester.role != UserRole.ADMIN and order["user_id"] != requester.uid:
            raise ForbiddenException("You do not have access to this order")
        return order

    @handle_service_errors("processing order")
    async def process_order(self, order_id: int) -> Dict[str, Any]:
        """Advance the order one step: Processing -> Shipped -> Delivered"""
        order = await self._get_order_or_404(order_id)
        order.status = NEXT_ORDER_STATUS[OrderStatus(order.status)].value
        await self.session.commit()

        await self.cache.invalidate(
            order=True, admin=True, user_id=order.user_id, order_id=order.id
        )
        return dump_order(order)

    @handle_service_errors("deleting order")
    async def delete_order(self, order_id: int) -> None:
        order = await self._get_order_or_404(order_id)
        user_id = order.user_id
        await self.session.delete(order)
        await self.session.commit()

        await self.cache.invalidate(
            order=True, admin=True, user_id=user_id, order_id=order_id
        )
