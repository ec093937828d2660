from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.config.constants import Gender, UserRole
from storefront.database.base import Base
from storefront.shared.utils import utc_now


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_created_at", "created_at"),
        Index("idx_users_role", "role"),
    )

    # Firebase uid
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    photo: Mapped[str] = mapped_column(String(500), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False, default=Gender.MALE.value)
    role: Mapped[str] = mapped_column(String(10), nullable=False, default=UserRole.USER.value)
    dob: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
