"""
Catalog records shared by the parser, the cache and the API
"""
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, List

from constants import ACTIVE_STATUS, DEFAULT_CATEGORY


class AttemptStatus:
    LOADING = "loading"
    LOADED = "loaded"
    FAILED_RETRYING = "failed-retrying"
    FAILED_TERMINAL = "failed-terminal"


# snake_case attribute -> camelCase storage/API key
_BUSINESS_KEYS = {
    "id": "id",
    "name": "name",
    "owner_name": "ownerName",
    "address": "address",
    "phone_number": "phoneNumber",
    "whatsapp_number": "whatsAppNumber",
    "email_address": "emailAddress",
    "has_delivery": "hasDelivery",
    "delivery_area": "deliveryArea",
    "operation_hours": "operationHours",
    "special_hours": "specialHours",
    "profile_picture_url": "profilePictureUrl",
    "product_sheet_url": "productSheetUrl",
    "status": "status",
    "bio": "bio",
    "map_location": "mapLocation",
    "delivery_cost": "deliveryCost",
    "island_wide_delivery": "islandWideDelivery",
    "island_wide_delivery_cost": "islandWideDeliveryCost",
}

_PRODUCT_KEYS = {
    "name": "name",
    "category": "category",
    "price": "price",
    "description": "description",
    "image_url": "imageUrl",
    "in_stock": "inStock",
}


@dataclass
class BusinessRecord:
    """A garden business from the published roster"""

    id: str
    name: str
    owner_name: str = ""
    address: str = ""
    phone_number: str = ""
    whatsapp_number: str = ""
    email_address: str = ""
    has_delivery: bool = False
    delivery_area: str = ""
    operation_hours: str = ""
    special_hours: str = ""
    profile_picture_url: str = ""
    product_sheet_url: str = ""
    status: str = ""
    bio: str = ""
    map_location: str = ""
    delivery_cost: Optional[float] = None
    island_wide_delivery: str = ""
    island_wide_delivery_cost: Optional[float] = None

    @property
    def is_visible(self) -> bool:
        """Active, has a profile picture and a name"""
        return (
            (self.status or "").lower() == ACTIVE_STATUS
            and len(self.profile_picture_url or "") > 0
            and len(self.name or "") > 0
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {_BUSINESS_KEYS[k]: v for k, v in data.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BusinessRecord":
        kwargs = {}
        for attr, key in _BUSINESS_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
        return cls(**kwargs)


@dataclass
class ProductRecord:
    """A plant product listed on a business's product sheet"""

    name: str
    category: str = DEFAULT_CATEGORY
    price: float = 0.0
    description: str = ""
    image_url: str = ""
    in_stock: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {_PRODUCT_KEYS[k]: v for k, v in data.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductRecord":
        kwargs = {}
        for attr, key in _PRODUCT_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
        return cls(**kwargs)


@dataclass
class ImageResolutionAttempt:
    """One candidate tried for one displayed image"""

    source_url: str
    index: int
    candidate_url: str
    status: str = AttemptStatus.LOADING

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CacheEntry:
    """A whole cached payload and the epoch millis it was fetched at"""

    key: str
    payload: Any
    fetched_at: int

    def age_seconds(self, now_millis: int) -> float:
        return max(0, now_millis - self.fetched_at) / 1000.0


def group_by_category(products: List[ProductRecord]) -> Dict[str, List[ProductRecord]]:
    """Group products preserving the order each category is first seen"""
    grouped: Dict[str, List[ProductRecord]] = {}
    for product in products:
        grouped.setdefault(product.category, []).append(product)
    return grouped


def products_to_dict(grouped: Dict[str, List[ProductRecord]]) -> Dict[str, List[Dict[str, Any]]]:
    return {category: [p.to_dict() for p in items] for category, items in grouped.items()}


def products_from_dict(data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, List[ProductRecord]]:
    return {category: [ProductRecord.from_dict(p) for p in items] for category, items in data.items()}
