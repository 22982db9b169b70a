"""
Customer Entities
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

COLLECTION = "customers"


def split_full_name(name: str) -> Tuple[str, str]:
    """
    Split a typed full name into first and last name.

    The first whitespace-separated token is the first name; the rest,
    single-spaced, is the last name.
    """
    parts = (name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


@dataclass(frozen=True)
class GeoLocation:
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["GeoLocation"]:
        if not data:
            return None
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))


@dataclass(frozen=True)
class Customer:
    """
    Entity representing a company's customer.

    Timestamps are epoch milliseconds. Customers are soft-deleted.
    """

    customer_id: str
    company_id: str
    first_name: str
    last_name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    alternate_address: str = ""
    lead_source: str = ""
    notes: str = ""
    location: Optional[GeoLocation] = None
    created_at: int = 0
    updated_at: int = 0
    is_deleted: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.customer_id,
            "companyId": self.company_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "alternateAddress": self.alternate_address,
            "leadSource": self.lead_source,
            "notes": self.notes,
            "location": self.location.to_dict() if self.location else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isDeleted": self.is_deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Customer":
        return cls(
            customer_id=data["id"],
            company_id=data.get("companyId", ""),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            address=data.get("address") or "",
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            alternate_address=data.get("alternateAddress") or "",
            lead_source=data.get("leadSource") or "",
            notes=data.get("notes") or "",
            location=GeoLocation.from_dict(data.get("location")),
            created_at=int(data.get("createdAt") or 0),
            updated_at=int(data.get("updatedAt") or 0),
            is_deleted=bool(data.get("isDeleted", False)),
        )
