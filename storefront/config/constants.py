from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class OrderStatus(str, Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"


# Processing -> Shipped -> Delivered; a delivered order stays delivered
NEXT_ORDER_STATUS = {
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
    OrderStatus.DELIVERED: OrderStatus.DELIVERED,
}


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Product photos
MIN_PRODUCT_PHOTOS = 1
MAX_PRODUCT_PHOTOS = 5

# Reviews
MIN_RATING = 1
MAX_RATING = 5

# Catalog
LATEST_PRODUCTS_LIMIT = 5

# Dashboard
LATEST_TRANSACTIONS_LIMIT = 4
MARKETING_COST_PERCENT = 30
SHORT_WINDOW_MONTHS = 6
LONG_WINDOW_MONTHS = 12
TEEN_AGE_LIMIT = 20
ADULT_AGE_LIMIT = 40
