"""
Identity Entities

User profiles and the signed-in session value. Authentication itself is
handled outside this library; a Session only records who signed in and
which company they act for.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

COLLECTION = "users"


class UserRole(Enum):
    SUPER_ADMIN = "SuperAdmin"
    COMPANY_ADMIN = "CompanyAdmin"
    USER = "User"


@dataclass(frozen=True)
class UserProfile:
    """Entity stored in ``users/{id}``."""

    user_id: str
    email: str
    first_name: str
    last_name: str
    company_id: str
    role: UserRole = UserRole.USER
    tags: Tuple[str, ...] = ()
    is_active: bool = True
    created_at: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "companyId": self.company_id,
            "role": self.role.value,
            "tags": list(self.tags),
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            user_id=data["id"],
            email=data.get("email", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            company_id=data.get("companyId", ""),
            role=UserRole(data.get("role") or UserRole.USER.value),
            tags=tuple(data.get("tags") or ()),
            is_active=bool(data.get("isActive", True)),
            created_at=int(data.get("createdAt") or 0),
        )


@dataclass(frozen=True)
class Session:
    """
    The signed-in user, passed explicitly to every operation that needs it.

    ``profile`` is None when the user has no ``users`` record; such a session
    acts for ``fallback_company_id``.
    """

    user_id: str
    profile: Optional[UserProfile] = None
    fallback_company_id: str = "UNKNOWN_COMPANY"
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def company_id(self) -> str:
        if self.profile and self.profile.company_id:
            return self.profile.company_id
        return self.fallback_company_id
