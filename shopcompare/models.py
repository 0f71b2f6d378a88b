# shopcompare/models.py
import datetime
import enum
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytz

from .errors import ValidationError


def now_utc() -> datetime.datetime:
    return datetime.datetime.now(tz=pytz.UTC)


def new_id() -> str:
    return str(uuid.uuid4())


class Category(str, enum.Enum):
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    HOME = "home"
    BEAUTY = "beauty"
    SPORTS = "sports"
    BOOKS = "books"
    TOYS = "toys"
    FOOD = "food"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]


_CATEGORY_NAMES = {
    Category.ELECTRONICS: "Electronics",
    Category.CLOTHING: "Clothing",
    Category.HOME: "Home & Garden",
    Category.BEAUTY: "Beauty",
    Category.SPORTS: "Sports",
    Category.BOOKS: "Books",
    Category.TOYS: "Toys",
    Category.FOOD: "Groceries",
    Category.OTHER: "Other",
}


class Availability(str, enum.Enum):
    IN_STOCK = "inStock"
    LOW_STOCK = "lowStock"
    OUT_OF_STOCK = "outOfStock"
    PRE_ORDER = "preOrder"

    @property
    def label(self) -> str:
        return _AVAILABILITY_LABELS[self]


_AVAILABILITY_LABELS = {
    Availability.IN_STOCK: "In stock",
    Availability.LOW_STOCK: "Low stock",
    Availability.OUT_OF_STOCK: "Out of stock",
    Availability.PRE_ORDER: "Pre-order",
}


class Priority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting: high=3, medium=2, low=1."""
        return {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}[self]


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValidationError(message)


def _require_aware(value: Optional[datetime.datetime], name: str) -> None:
    if value is not None:
        _require(value.tzinfo is not None, f"{name} must be timezone-aware, got {value!r}")


@dataclass(frozen=True)
class RetailerPrice:
    """
    One retailer's offer for a product.
    Prices are plain floats in `currency`; shipping is charged on top.
    """
    retailer_name: str
    price: float
    currency: str = "BYN"
    availability: Availability = Availability.IN_STOCK
    shipping_cost: float = 0.0
    delivery_days: int = 3
    retailer_url: Optional[str] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        _require(self.price >= 0, f"price must be >= 0, got {self.price!r}")
        _require(
            self.shipping_cost >= 0,
            f"shipping_cost must be >= 0, got {self.shipping_cost!r}",
        )
        _require(
            self.delivery_days >= 0,
            f"delivery_days must be >= 0, got {self.delivery_days!r}",
        )
        object.__setattr__(self, "availability", Availability(self.availability))

    @property
    def total_price(self) -> float:
        return self.price + self.shipping_cost


@dataclass(frozen=True)
class Product:
    """
    Catalog entry with prices from several retailers.

    Instances are replaced, never mutated: use dataclasses.replace() to derive
    an updated copy. Deal expiry is evaluated at query time; an expired deal
    keeps its fields.
    """
    name: str
    description: str
    category: Category
    prices: Tuple[RetailerPrice, ...] = ()
    image_url: Optional[str] = None
    average_rating: float = 0.0
    review_count: int = 0
    specifications: Dict[str, str] = field(default_factory=dict, hash=False)
    is_on_wishlist: bool = False
    is_deal: bool = False
    deal_expiry_date: Optional[datetime.datetime] = None
    deal_discount: Optional[int] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        _require(
            0.0 <= self.average_rating <= 5.0,
            f"average_rating must be within 0..5, got {self.average_rating!r}",
        )
        _require(self.review_count >= 0, f"review_count must be >= 0, got {self.review_count!r}")
        if self.deal_discount is not None:
            _require(
                0 <= self.deal_discount <= 100,
                f"deal_discount must be within 0..100, got {self.deal_discount!r}",
            )
        _require(
            not self.is_deal or self.deal_discount is not None,
            f"product {self.name!r} is a deal but has no discount",
        )
        _require_aware(self.deal_expiry_date, "deal_expiry_date")
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "prices", tuple(self.prices))
        # Keys kept in lexicographic order for deterministic display
        object.__setattr__(
            self, "specifications", dict(sorted(self.specifications.items()))
        )

    @property
    def lowest_price(self) -> float:
        return min((p.price for p in self.prices), default=0.0)

    @property
    def highest_price(self) -> float:
        return max((p.price for p in self.prices), default=0.0)

    @property
    def price_savings(self) -> float:
        return self.highest_price - self.lowest_price

    @property
    def best_retailer(self) -> Optional[RetailerPrice]:
        # Chosen by base price only; shipping is ignored here
        return min(self.prices, key=lambda p: p.price, default=None)

    def specification_rows(self) -> List[Tuple[str, str]]:
        return list(self.specifications.items())


@dataclass(frozen=True)
class WishlistItem:
    product_id: str
    added_date: datetime.datetime = field(default_factory=now_utc)
    notes: str = ""
    priority: Priority = Priority.MEDIUM
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        _require_aware(self.added_date, "added_date")
        object.__setattr__(self, "priority", Priority(self.priority))


@dataclass(frozen=True)
class UserPreferences:
    currency: str = "BYN"
    language: str = "ru"
    dark_mode_enabled: bool = False
    max_shipping_cost: Optional[float] = None
    preferred_retailers: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.max_shipping_cost is not None:
            _require(
                self.max_shipping_cost >= 0,
                f"max_shipping_cost must be >= 0, got {self.max_shipping_cost!r}",
            )
        object.__setattr__(self, "preferred_retailers", tuple(self.preferred_retailers))


@dataclass(frozen=True)
class NotificationSettings:
    deal_alerts_enabled: bool = True
    price_drop_alerts_enabled: bool = True
    wishlist_updates_enabled: bool = True
    weekly_digest_enabled: bool = False


@dataclass(frozen=True)
class User:
    username: str
    email: str
    preferences: UserPreferences = field(default_factory=UserPreferences)
    favorite_categories: Tuple[Category, ...] = ()
    notification_settings: NotificationSettings = field(default_factory=NotificationSettings)
    created_date: datetime.datetime = field(default_factory=now_utc)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        _require_aware(self.created_date, "created_date")
        # Set semantics, first occurrence wins
        unique: List[Category] = []
        for c in self.favorite_categories:
            c = Category(c)
            if c not in unique:
                unique.append(c)
        object.__setattr__(self, "favorite_categories", tuple(unique))
