from typing import Dict, List

from pydantic import BaseModel


class ChangePercent(BaseModel):
    revenue: float
    product: float
    user: float
    order: float


class Totals(BaseModel):
    revenue: float
    product: int
    user: int
    order: int


class MonthlyOrders(BaseModel):
    orders: List[float]
    revenue: List[float]


class UserRatio(BaseModel):
    male: int
    female: int


class Transaction(BaseModel):
    id: int
    discount: float
    amount: float
    quantity: int
    status: str


class DashboardStats(BaseModel):
    category_count: List[Dict[str, int]]
    change_percent: ChangePercent
    count: Totals
    chart: MonthlyOrders
    user_ratio: UserRatio
    latest_transaction: List[Transaction]


class OrderFulfillment(BaseModel):
    processing: int
    shipped: int
    delivered: int


class StockAvailability(BaseModel):
    in_stock: int
    out_of_stock: int


class RevenueDistribution(BaseModel):
    net_margin: float
    discount: float
    production_cost: float
    tax_burnt: float
    marketing_cost: float


class AdminCustomer(BaseModel):
    admin: int
    customer: int


class UserAgeGroup(BaseModel):
    teen: int
    adult: int
    old: int


class PieCharts(BaseModel):
    order_fulfillment: OrderFulfillment
    product_categories: List[Dict[str, int]]
    stock_availability: StockAvailability
    revenue_distribution: RevenueDistribution
    admin_customer: AdminCustomer
    user_age_group: UserAgeGroup


class BarCharts(BaseModel):
    products: List[float]
    users: List[float]
    orders: List[float]


class LineCharts(BaseModel):
    products: List[float]
    users: List[float]
    discount: List[float]
    revenue: List[float]
