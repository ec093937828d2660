from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dashboard.cache import DashboardCache
from storefront.api.dashboard.models import (
    BarCharts,
    DashboardStats,
    LineCharts,
    PieCharts,
)
from storefront.config.constants import (
    ADULT_AGE_LIMIT,
    LATEST_TRANSACTIONS_LIMIT,
    LONG_WINDOW_MONTHS,
    MARKETING_COST_PERCENT,
    SHORT_WINDOW_MONTHS,
    TEEN_AGE_LIMIT,
    Gender,
    OrderStatus,
    UserRole,
)
from storefront.database.models import Order, Product, User
from storefront.shared.analytics import (
    age_on,
    bucket_by_month,
    category_breakdown,
    month_windows,
    months_ago,
    percent_change,
)
from storefront.shared.cache_service import CacheContext
from storefront.shared.error_handler import ErrorHandler, handle_service_errors
from storefront.shared.utils import get_logger, round_half_up, utc_now

logger = get_logger(__name__)

Window = Tuple[datetime, datetime]


class DashboardService:
    """Admin dashboard aggregates over products, users and orders"""

    def __init__(
        self,
        session: AsyncSession,
        cache: CacheContext,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.dashboard_cache = DashboardCache(cache)
        self.clock = clock
        self._error_handler = ErrorHandler(__name__)

    async def _count(self, model: Type[Any], *conditions) -> int:
        stmt = select(func.count()).select_from(model).where(*conditions)
        return (await self.session.execute(stmt)).scalar_one()

    async def _sum(self, column, *conditions) -> float:
        stmt = select(func.coalesce(func.sum(column), 0)).where(*conditions)
        return (await self.session.execute(stmt)).scalar_one()

    async def _created_in(
        self, model: Type[Any], start: datetime, end: datetime, inclusive_end: bool = True
    ) -> List[Any]:
        upper = model.created_at <= end if inclusive_end else model.created_at < end
        stmt = select(model).where(model.created_at >= start, upper)
        return list((await self.session.execute(stmt)).scalars().all())

    async def _category_breakdown(self) -> List[Dict[str, int]]:
        stmt = (
            select(Product.category, func.count())
            .group_by(Product.category)
            .order_by(Product.category)
        )
        rows = (await self.session.execute(stmt)).all()
        return category_breakdown(
            [(category, count) for category, count in rows],
            await self._count(Product),
        )

    async def _period_counts(self, model: Type[Any], windows: Dict[str, Window]):
        this_start, this_end = windows["this_month"]
        last_start, last_end = windows["last_month"]
        current = await self._created_in(model, this_start, this_end)
        previous = await self._created_in(model, last_start, last_end, inclusive_end=False)
        return current, previous

    @handle_service_errors("computing dashboard stats")
    async def get_stats(self) -> Dict[str, Any]:
        async def load():
            today = self.clock()
            windows = month_windows(today)

            this_products, last_products = await self._period_counts(Product, windows)
            this_users, last_users = await self._period_counts(User, windows)
            this_orders, last_orders = await self._period_counts(Order, windows)

            this_revenue = sum(o.total or 0 for o in this_orders)
            last_revenue = sum(o.total or 0 for o in last_orders)

            product_count = await self._count(Product)
            user_count = await self._count(User)
            order_count = await self._count(Order)
            female_count = await self._count(User, User.gender == Gender.FEMALE.value)

            six_month_orders = await self._created_in(
                Order, months_ago(today, SHORT_WINDOW_MONTHS), today
            )
            latest = (
                await self.session.execute(
                    select(Order)
                    .order_by(Order.created_at.desc(), Order.id.desc())
                    .limit(LATEST_TRANSACTIONS_LIMIT)
                )
            ).scalars().all()

            stats = DashboardStats(
                category_count=await self._category_breakdown(),
                change_percent={
                    "revenue": percent_change(this_revenue, last_revenue),
                    "product": percent_change(len(this_products), len(last_products)),
                    "user": percent_change(len(this_users), len(last_users)),
                    "order": percent_change(len(this_orders), len(last_orders)),
                },
                count={
                    "revenue": await self._sum(Order.total),
                    "product": product_count,
                    "user": user_count,
                    "order": order_count,
                },
                chart={
                    "orders": bucket_by_month(SHORT_WINDOW_MONTHS, today, six_month_orders),
                    "revenue": bucket_by_month(
                        SHORT_WINDOW_MONTHS, today, six_month_orders, prop="total"
                    ),
                },
                user_ratio={"male": user_count - female_count, "female": female_count},
                latest_transaction=[
                    {
                        "id": order.id,
                        "discount": order.discount,
                        "amount": order.total,
                        "quantity": len(order.order_items or []),
                        "status": order.status,
                    }
                    for order in latest
                ],
            )
            return stats.model_dump(mode="json")

        return await self.dashboard_cache.stats(load)

    @handle_service_errors("computing pie charts")
    async def get_pie_charts(self) -> Dict[str, Any]:
        async def load():
            today = self.clock()
            product_count = await self._count(Product)
            out_of_stock = await self._count(Product, Product.stock == 0)

            gross_income = await self._sum(Order.total)
            discount = await self._sum(Order.discount)
            production_cost = await self._sum(Order.shipping_charges)
            tax_burnt = await self._sum(Order.tax)
            marketing_cost = round_half_up(gross_income * MARKETING_COST_PERCENT / 100)

            dobs = (await self.session.execute(select(User.dob))).scalars().all()
            ages = [age_on(dob, today) for dob in dobs]

            charts = PieCharts(
                order_fulfillment={
                    "processing": await self._count(
                        Order, Order.status == OrderStatus.PROCESSING.value
                    ),
                    "shipped": await self._count(
                        Order, Order.status == OrderStatus.SHIPPED.value
                    ),
                    "delivered": await self._count(
                        Order, Order.status == OrderStatus.DELIVERED.value
                    ),
                },
                product_categories=await self._category_breakdown(),
                stock_availability={
                    "in_stock": product_count - out_of_stock,
                    "out_of_stock": out_of_stock,
                },
                revenue_distribution={
                    "net_margin": gross_income
                    - discount
                    - production_cost
                    - tax_burnt
                    - marketing_cost,
                    "discount": discount,
                    "production_cost": production_cost,
                    "tax_burnt": tax_burnt,
                    "marketing_cost": marketing_cost,
                },
                admin_customer={
                    "admin": await self._count(User, User.role == UserRole.ADMIN.value),
                    "customer": await self._count(User, User.role == UserRole.USER.value),
                },
                user_age_group={
                    "teen": sum(1 for age in ages if age < TEEN_AGE_LIMIT),
                    "adult": sum(
                        1 for age in ages if TEEN_AGE_LIMIT <= age < ADULT_AGE_LIMIT
                    ),
                    "old": sum(1 for age in ages if age >= ADULT_AGE_LIMIT),
                },
            )
            return charts.model_dump(mode="json")

        return await self.dashboard_cache.pie_charts(load)

    @handle_service_errors("computing bar charts")
    async def get_bar_charts(self) -> Dict[str, Any]:
        async def load():
            today = self.clock()
            short_start = months_ago(today, SHORT_WINDOW_MONTHS)
            long_start = months_ago(today, LONG_WINDOW_MONTHS)

            products = await self._created_in(Product, short_start, today)
            users = await self._created_in(User, short_start, today)
            orders = await self._created_in(Order, long_start, today)

            charts = BarCharts(
                products=bucket_by_month(SHORT_WINDOW_MONTHS, today, products),
                users=bucket_by_month(SHORT_WINDOW_MONTHS, today, users),
                orders=bucket_by_month(LONG_WINDOW_MONTHS, today, orders),
            )
            return charts.model_dump(mode="json")

        return await self.dashboard_cache.bar_charts(load)

    @handle_service_errors("computing line charts")
    async def get_line_charts(self) -> Dict[str, Any]:
        async def load():
            today = self.clock()
            start = months_ago(today, LONG_WINDOW_MONTHS)

            products = await self._created_in(Product, start, today)
            users = await self._created_in(User, start, today)
            orders = await self._created_in(Order, start, today)

            charts = LineCharts(
                products=bucket_by_month(LONG_WINDOW_MONTHS, today, products),
                users=bucket_by_month(LONG_WINDOW_MONTHS, today, users),
                discount=bucket_by_month(
                    LONG_WINDOW_MONTHS, today, orders, prop="discount"
                ),
                revenue=bucket_by_month(LONG_WINDOW_MONTHS, today, orders, prop="total"),
            )
            return charts.model_dump(mode="json")

        return await self.dashboard_cache.line_charts(load)
