from storefront.database.models.order import Order
from storefront.database.models.product import Product
from storefront.database.models.review import Review
from storefront.database.models.user import User

__all__ = ["Order", "Product", "Review", "User"]
