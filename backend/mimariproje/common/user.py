"""Fundamental user data model for the marketplace session."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field


class UserType(StrEnum):
    """Account kinds known to the marketplace backend."""

    INDIVIDUAL = "individual"
    COMPANY = "company"
    FIRM = "firm"
    ADMIN = "admin"

    @property
    def is_organization(self) -> bool:
        """Whether the account represents an organization."""
        return self in (UserType.COMPANY, UserType.FIRM)


class User(BaseModel):
    """Cached copy of the backend user record.

    The backend owns this record; the session only holds it for its lifetime.
    Fields the backend adds later are kept as extras so that a round trip
    through this model never loses data.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    email: str
    # the backend stores a free string; unknown kinds are kept as plain text
    user_type: Annotated[UserType | str, Field(union_mode="left_to_right")] = UserType.INDIVIDUAL
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    full_name: str | None = None
    profession: str | None = None
    phone: str | None = None
    location: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    profile_image_url: str | None = None
    subscription_type: str | None = None
    created_at: str | None = None
    is_verified: bool = False
    is_active: bool = True
    is_online: bool | None = None

    @property
    def display_name(self) -> str:
        """Return the most specific name available for the user."""
        if self.full_name:
            return self.full_name
        organization = isinstance(self.user_type, UserType) and self.user_type.is_organization
        if organization and self.company_name:
            return self.company_name
        names = [name for name in (self.first_name, self.last_name) if name]
        return " ".join(names) if names else self.email

    @property
    def is_admin(self) -> bool:
        """Whether the user may open admin-gated views."""
        return self.user_type is UserType.ADMIN

    def merged(self, **fields: Any) -> User:
        """Return a copy of this user with the given fields replaced.

        :param fields: Field values to overlay on the cached record
        :return: A new User instance
        """
        return User.model_validate({**self.model_dump(), **fields})
