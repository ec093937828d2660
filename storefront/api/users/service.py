from typing import Any, Dict, List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.users.models import CreateUserSchema, DecodedToken, UserSchema
from storefront.config.constants import UserRole
from storefront.database.models import Product, Review, User
from storefront.shared.cache_service import CacheContext
from storefront.shared.error_handler import ErrorHandler, handle_service_errors
from storefront.shared.exceptions import ForbiddenException, ResourceNotFoundException
from storefront.shared.ratings import recompute_ratings
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


def dump_user(user: User) -> Dict[str, Any]:
    return UserSchema.model_validate(user).model_dump(mode="json")


class UserService:
    """User profiles. Reads go straight to the database and are never cached."""

    def __init__(self, session: AsyncSession, cache: CacheContext):
        self.session = session
        self.cache = cache
        self._error_handler = ErrorHandler(__name__)

    @handle_service_errors("creating user")
    async def create_user(
        self, user_id: str, user_data: CreateUserSchema
    ) -> Tuple[bool, Dict[str, Any]]:
        """Register the caller's profile. Returns (created, profile)."""
        existing = await self.session.get(User, user_id)
        if existing is not None:
            return False, dump_user(existing)

        user = User(
            id=user_id,
            name=user_data.name.strip(),
            email=str(user_data.email),
            photo=user_data.photo,
            gender=user_data.gender.value,
            role=UserRole.USER.value,
            dob=user_data.dob,
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        logger.info(f"Registered user {user_id}")

        await self.cache.invalidate(admin=True)
        return True, dump_user(user)

    @handle_service_errors("retrieving all users")
    async def get_all_users(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(User).order_by(User.created_at.desc(), User.id)
        )
        return [dump_user(u) for u in result.scalars().all()]

    @handle_service_errors("retrieving user")
    async def get_user(self, user_id: str, requester: DecodedToken) -> Dict[str, Any]:
        if requester.role != UserRole.ADMIN and requester.uid != user_id:
            raise ForbiddenException("You can only view your own profile")
        user = await self.session.get(User, user_id)
        if user is None:
            raise ResourceNotFoundException(detail="User not found")
        return dump_user(user)

    @handle_service_errors("deleting user")
    async def delete_user(self, user_id: str) -> None:
        """Remove a user together with their reviews"""
        user = await self.session.get(User, user_id)
        if user is None:
            raise ResourceNotFoundException(detail="User not found")

        reviewed = (
            await self.session.execute(
                select(Review.product_id).where(Review.user_id == user_id)
            )
        ).scalars().all()
        await self.session.execute(delete(Review).where(Review.user_id == user_id))
        await self.session.delete(user)
        await self.session.flush()

        for product_id in reviewed:
            product = await self.session.get(Product, product_id)
            if product is None:
                continue
            ratings = await self.session.execute(
                select(Review.rating).where(Review.product_id == product_id)
            )
            summary = recompute_ratings(ratings.scalars().all())
            product.ratings = summary.average_rating
            product.num_of_reviews = summary.review_count

        await self.session.commit()
        logger.info(f"Deleted user {user_id} and {len(reviewed)} reviews")

        if reviewed:
            await self.cache.invalidate(
                product=True, review=True, admin=True, product_id=list(reviewed)
            )
        else:
            await self.cache.invalidate(admin=True)
