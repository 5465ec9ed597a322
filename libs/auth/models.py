from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

ROLE_USER = "user"
ROLE_SELLER = "seller"
ROLE_ADMIN = "admin"
ROLE_MODERATOR = "moderator"


class AuthUser(BaseModel):
    """
    Represents an authenticated user decoded from the bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = ROLE_USER
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_moderator(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_MODERATOR)
