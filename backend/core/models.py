from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PropertyType(str, Enum):
    HOUSE = "HOUSE"
    APARTMENT = "APARTMENT"
    LAND = "LAND"
    COMMERCIAL = "COMMERCIAL"
    OFFICE = "OFFICE"
    WAREHOUSE = "WAREHOUSE"
    RANCH = "RANCH"
    BUILDING = "BUILDING"


class OperationType(str, Enum):
    SALE = "SALE"
    RENT = "RENT"
    TRANSFER = "TRANSFER"


class PropertyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    RENTED = "RENTED"


@dataclass(slots=True)
class Locality:
    country: str | None = None
    region: str | None = None  # state
    city: str | None = None
    neighborhood: str | None = None  # colony / sub-locality


@dataclass(slots=True)
class Layout:
    bedrooms: int = 0
    bathrooms: float = 0
    total_area_m2: float = 0.0
    built_area_m2: float = 0.0
    parking: int = 0


@dataclass(slots=True)
class Listing:
    id: str
    category: PropertyType
    deal_kind: OperationType
    locality: Locality = field(default_factory=Locality)
    layout: Layout = field(default_factory=Layout)
    amenities: frozenset[str] = frozenset()
    sale_price: float | None = None
    rent_price: float | None = None
    title: str = ""
    status: PropertyStatus = PropertyStatus.AVAILABLE
    currency: str = "MXN"
    views: int = 0
    favorites: int = 0
    date_added: datetime | None = None
    agent_id: str | None = None
    agency_id: str | None = None

    @property
    def price(self) -> float:
        # Transfers are quoted on the rent price column.
        if self.deal_kind is OperationType.SALE:
            return self.sale_price or 0.0
        return self.rent_price or 0.0
