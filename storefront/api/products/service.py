import math
from typing import Any, Dict, List, Sequence

from sqlalchemy import delete, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.products.cache import ProductsCache
from storefront.api.products.models import (
    CreateProductSchema,
    ListingFilter,
    ProductSchema,
    UpdateProductSchema,
)
from storefront.config.constants import LATEST_PRODUCTS_LIMIT, SortDirection
from storefront.config.settings import settings
from storefront.database.models import Product, Review
from storefront.shared.cache_service import CacheContext
from storefront.shared.error_handler import ErrorHandler, handle_service_errors
from storefront.shared.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


def dump_products(products: Sequence[Product]) -> List[Dict[str, Any]]:
    return [ProductSchema.model_validate(p).model_dump(mode="json") for p in products]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductService:
    """Catalog reads through the cache, catalog writes followed by invalidation"""

    def __init__(
        self,
        session: AsyncSession,
        cache: CacheContext,
        page_size: int = settings.PAGE_SIZE,
    ):
        self.session = session
        self.cache = cache
        self.products_cache = ProductsCache(cache)
        self.page_size = page_size
        self._error_handler = ErrorHandler(__name__)

    async def _get_product_or_404(self, product_id: int) -> Product:
        product = await self.session.get(Product, product_id)
        if product is None:
            raise ResourceNotFoundException(detail="Product not found")
        return product

    @handle_service_errors("retrieving latest products")
    async def get_latest_products(self) -> List[Dict[str, Any]]:
        async def load():
            stmt = (
                select(Product)
                .order_by(Product.created_at.desc(), Product.id.desc())
                .limit(LATEST_PRODUCTS_LIMIT)
            )
            result = await self.session.execute(stmt)
            return dump_products(result.scalars().all())

        return await self.products_cache.latest_products(load)

    @handle_service_errors("retrieving categories")
    async def get_categories(self) -> List[str]:
        async def load():
            stmt = select(distinct(Product.category)).order_by(Product.category)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        return await self.products_cache.categories(load)

    @handle_service_errors("retrieving all products")
    async def get_admin_products(self) -> List[Dict[str, Any]]:
        async def load():
            result = await self.session.execute(select(Product).order_by(Product.id))
            return dump_products(result.scalars().all())

        return await self.products_cache.all_products(load)

    @handle_service_errors("retrieving product")
    async def get_product(self, product_id: int) -> Dict[str, Any]:
        async def load():
            product = await self._get_product_or_404(product_id)
            return ProductSchema.model_validate(product).model_dump(mode="json")

        return await self.products_cache.product(product_id, load)

    @handle_service_errors("searching products")
    async def search_products(self, listing_filter: ListingFilter) -> Dict[str, Any]:
        """One page of products matching the filter, plus the page count"""

        async def load():
            conditions = []
            if listing_filter.search:
                pattern = f"%{_escape_like(listing_filter.search)}%"
                conditions.append(Product.name.ilike(pattern, escape="\\"))
            if listing_filter.max_price is not None:
                conditions.append(Product.price <= listing_filter.max_price)
            if listing_filter.category:
                conditions.append(Product.category == listing_filter.category)

            stmt = select(Product).where(*conditions)
            if listing_filter.sort == SortDirection.ASC:
                stmt = stmt.order_by(Product.price.asc(), Product.id)
            elif listing_filter.sort == SortDirection.DESC:
                stmt = stmt.order_by(Product.price.desc(), Product.id)
            else:
                stmt = stmt.order_by(Product.id)
            stmt = stmt.offset((listing_filter.page - 1) * self.page_size).limit(
                self.page_size
            )

            count_stmt = select(func.count()).select_from(Product).where(*conditions)

            products = (await self.session.execute(stmt)).scalars().all()
            filtered_count = (await self.session.execute(count_stmt)).scalar_one()
            return {
                "products": dump_products(products),
                "total_page": math.ceil(filtered_count / self.page_size),
            }

        return await self.products_cache.listing(listing_filter, load)

    @handle_service_errors("creating product")
    async def create_product(self, product_data: CreateProductSchema) -> Dict[str, Any]:
        product = Product(
            name=product_data.name.strip(),
            description=product_data.description,
            price=product_data.price,
            stock=product_data.stock,
            category=product_data.category.strip().lower(),
            photos=[photo.model_dump() for photo in product_data.photos],
        )
        self.session.add(product)
        await self.session.commit()
        await self.session.refresh(product)
        logger.info(f"Created product {product.id}")

        await self.cache.invalidate(product=True, admin=True)
        return ProductSchema.model_validate(product).model_dump(mode="json")

    @handle_service_errors("updating product")
    async def update_product(
        self, product_id: int, product_data: UpdateProductSchema
    ) -> Dict[str, Any]:
        changes = product_data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationException(detail="No fields to update")

        product = await self._get_product_or_404(product_id)

        if "photos" in changes:
            # Replace the list so the JSON column is flagged dirty
            product.photos = list(changes.pop("photos"))
        if "category" in changes:
            changes["category"] = changes["category"].strip().lower()
        for field, value in changes.items():
            setattr(product, field, value)

        await self.session.commit()
        await self.session.refresh(product)

        await self.cache.invalidate(product=True, admin=True, product_id=product.id)
        return ProductSchema.model_validate(product).model_dump(mode="json")

    @handle_service_errors("deleting product")
    async def delete_product(self, product_id: int) -> None:
        product = await self._get_product_or_404(product_id)

        await self.session.execute(delete(Review).where(Review.product_id == product_id))
        await self.session.delete(product)
        await self.session.commit()
        logger.info(f"Deleted product {product_id}")

        await self.cache.invalidate(
            product=True, admin=True, review=True, product_id=product_id
        )
