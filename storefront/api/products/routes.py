from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.products.models import (
    CreateProductSchema,
    ListingFilter,
    UpdateProductSchema,
)
from storefront.api.products.service import ProductService
from storefront.config.constants import SortDirection
from storefront.database.connection import get_db
from storefront.dependencies.auth import admin_only
from storefront.dependencies.cache import get_cache
from storefront.shared.cache_service import CacheContext
from storefront.shared.responses import success_response

products_router = APIRouter(prefix="/api/v1/product", tags=["Products"])


def get_product_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheContext, Depends(get_cache)],
) -> ProductService:
    return ProductService(session, cache)


ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]


@products_router.post(
    "/new",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only)],
)
async def create_product(payload: CreateProductSchema, service: ProductServiceDep):
    product = await service.create_product(payload)
    return success_response(
        product,
        message="Product created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@products_router.get("/all", summary="Search products with filters and pagination")
async def search_products(
    service: ProductServiceDep,
    search: Optional[str] = Query(None, description="Case-insensitive name match"),
    sort: Optional[SortDirection] = Query(None, description="Sort by price"),
    category: Optional[str] = Query(None),
    price: Optional[float] = Query(None, ge=0, description="Maximum price"),
    page: int = Query(1, ge=1),
):
    listing_filter = ListingFilter(
        search=search, sort=sort, category=category, max_price=price, page=page
    )
    return success_response(await service.search_products(listing_filter))


@products_router.get("/latest", summary="Get the newest products")
async def get_latest_products(service: ProductServiceDep):
    return success_response(await service.get_latest_products())


@products_router.get("/categories", summary="Get all distinct categories")
async def get_categories(service: ProductServiceDep):
    return success_response(await service.get_categories())


@products_router.get(
    "/admin-products",
    summary="Get every product",
    dependencies=[Depends(admin_only)],
)
async def get_admin_products(service: ProductServiceDep):
    return success_response(await service.get_admin_products())


@products_router.get("/{id}", summary="Get a product by ID")
async def get_product(id: int, service: ProductServiceDep):
    return success_response(await service.get_product(id))


@products_router.put(
    "/{id}",
    summary="Update a product",
    dependencies=[Depends(admin_only)],
)
async def update_product(
    id: int, payload: UpdateProductSchema, service: ProductServiceDep
):
    product = await service.update_product(id, payload)
    return success_response(product, message="Product updated successfully")


@products_router.delete(
    "/{id}",
    summary="Delete a product",
    dependencies=[Depends(admin_only)],
)
async def delete_product(id: int, service: ProductServiceDep):
    await service.delete_product(id)
    return success_response({"id": id}, message="Product deleted successfully")
