from typing import Any, Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.products.cache import ProductsCache
from storefront.api.reviews.models import CreateReviewSchema, ReviewSchema
from storefront.database.models import Product, Review, User
from storefront.shared.cache_service import CacheContext
from storefront.shared.error_handler import ErrorHandler, handle_service_errors
from storefront.shared.exceptions import ForbiddenException, ResourceNotFoundException
from storefront.shared.ratings import RatingSummary, recompute_ratings
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


class ReviewService:
    def __init__(self, session: AsyncSession, cache: CacheContext):
        self.session = session
        self.cache = cache
        self.products_cache = ProductsCache(cache)
        self._error_handler = ErrorHandler(__name__)

    @handle_service_errors("retrieving reviews")
    async def get_product_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        """Reviews of a product, most recently updated first"""

        async def load():
            stmt = (
                select(Review, User.name, User.photo)
                .outerjoin(User, User.id == Review.user_id)
                .where(Review.product_id == product_id)
                .order_by(Review.updated_at.desc(), Review.id.desc())
            )
            rows = (await self.session.execute(stmt)).all()
            return [
                ReviewSchema(
                    id=review.id,
                    product_id=review.product_id,
                    rating=review.rating,
                    comment=review.comment,
                    user={"id": review.user_id, "name": name, "photo": photo},
                    created_at=review.created_at,
                    updated_at=review.updated_at,
                ).model_dump(mode="json")
                for review, name, photo in rows
            ]

        return await self.products_cache.reviews(product_id, load)

    async def _refresh_product_rating(self, product: Product) -> RatingSummary:
        ratings = await self.session.execute(
            select(Review.rating).where(Review.product_id == product.id)
        )
        summary = recompute_ratings(ratings.scalars().all())
        product.ratings = summary.average_rating
        product.num_of_reviews = summary.review_count
        return summary

    async def _invalidate_product_reviews(self, product_id: int) -> None:
        await self.cache.invalidate(
            product=True, review=True, admin=True, product_id=product_id
        )

    @handle_service_errors("submitting review")
    async def submit_review(
        self, product_id: int, user_id: str, review_data: CreateReviewSchema
    ) -> Tuple[bool, RatingSummary]:
        """Create the user's review of a product, or update it if one exists.

        Returns (created, new rating summary).
        """
        user = await self.session.get(User, user_id)
        if user is None:
            raise ResourceNotFoundException(detail="User profile not found")

        product = await self.session.get(Product, product_id)
        if product is None:
            raise ResourceNotFoundException(detail="Product not found")

        existing = (
            await self.session.execute(
                select(Review).where(
                    Review.user_id == user_id, Review.product_id == product_id
                )
            )
        ).scalar_one_or_none()

        if existing is not None:
            existing.rating = review_data.rating
            existing.comment = review_data.comment
        else:
            self.session.add(
                Review(
                    rating=review_data.rating,
                    comment=review_data.comment,
                    user_id=user_id,
                    product_id=product_id,
                )
            )
        await self.session.flush()

        summary = await self._refresh_product_rating(product)
        await self.session.commit()

        await self._invalidate_product_reviews(product_id)
        return existing is None, summary

    @handle_service_errors("deleting review")
    async def delete_review(self, review_id: int, user_id: str) -> RatingSummary:
        review = await self.session.get(Review, review_id)
        if review is None:
            raise ResourceNotFoundException(detail="Review not found")
        if review.user_id != user_id:
            raise ForbiddenException("You can only delete your own reviews")

        product_id = review.product_id
        await self.session.delete(review)
        await self.session.flush()

        product = await self.session.get(Product, product_id)
        if product is None:
            raise ResourceNotFoundException(detail="Product not found")

        summary = await self._refresh_product_rating(product)
        await self.session.commit()

        await self._invalidate_product_reviews(product_id)
        return summary
