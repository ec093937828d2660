from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.reviews.models import CreateReviewSchema
from storefront.api.reviews.service import ReviewService
from storefront.api.users.models import DecodedToken
from storefront.database.connection import get_db
from storefront.dependencies.auth import get_current_user
from storefront.dependencies.cache import get_cache
from storefront.shared.cache_service import CacheContext
from storefront.shared.responses import success_response

reviews_router = APIRouter(prefix="/api/v1/product", tags=["Reviews"])


def get_review_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheContext, Depends(get_cache)],
) -> ReviewService:
    return ReviewService(session, cache)


ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
CurrentUser = Annotated[DecodedToken, Depends(get_current_user)]


@reviews_router.get("/reviews/{id}", summary="Get all reviews of a product")
async def get_product_reviews(id: int, service: ReviewServiceDep):
    return success_response(await service.get_product_reviews(id))


@reviews_router.post("/review/new/{id}", summary="Review a product")
async def submit_review(
    id: int,
    payload: CreateReviewSchema,
    current_user: CurrentUser,
    service: ReviewServiceDep,
):
    created, summary = await service.submit_review(id, current_user.uid, payload)
    if created:
        return success_response(
            summary.model_dump(),
            message="Review submitted successfully",
            status_code=status.HTTP_201_CREATED,
        )
    return success_response(summary.model_dump(), message="Review updated")


@reviews_router.delete("/review/{id}", summary="Delete your review")
async def delete_review(id: int, current_user: CurrentUser, service: ReviewServiceDep):
    summary = await service.delete_review(id, current_user.uid)
    return success_response(summary.model_dump(), message="Review deleted successfully")
