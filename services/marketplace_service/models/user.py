"""Reference to the identity service's users table."""

from typing import Optional

from libs.db.base import Base
from services.marketplace_service.models.enums import UserRole, enum_values
from sqlalchemy import Enum as SAEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column


class UserRef(Base):
    """Users are owned by the identity service; this service only reads them
    and promotes buyers to sellers when they open a store."""

    __tablename__ = "users"
    __table_args__ = {"extend_existing": True, "info": {"skip_autogenerate": True}}

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, values_callable=enum_values, name="user_role_enum"),
        default=UserRole.USER,
        server_default="user",
    )

    def __repr__(self):
        return f"<UserRef {self.id} role={self.role}>"
