from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from folio.core.db import Record
from folio.utils import now


class Role(StrEnum):
    """Authorization tier of a user."""

    ADMIN = "admin"
    READER = "reader"


DEFAULT_ROLE = Role.READER


class User(Record):
    """User domain model with credentials."""

    id: UUID = Field(default_factory=uuid4)
    email: str
    password_hash: str  # bcrypt hash
    full_name: str
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    full_name: str = Field(..., description="Display name")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email, full_name=user.full_name)


class VerifiedUser(UserView):
    """Authenticated user together with the role currently assigned to them."""

    role: Role = Field(..., description="Authorization tier")

    @classmethod
    def from_domain_with_role(cls, user: User, role: Role) -> "VerifiedUser":
        return cls(id=user.id, email=user.email, full_name=user.full_name, role=role)
