# shopcompare/queries.py
"""
Pure functions over a catalog snapshot: deal selection and ranking, wishlist
views and per-product price comparison. Nothing here touches storage or keeps
state, so results are recomputed on every call against the current time.
"""
import datetime
import enum
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

import pytz

from .catalog import CatalogSnapshot
from .models import Category, Priority, Product, RetailerPrice, now_utc

EXPIRING_SOON_DAYS = int(os.getenv("EXPIRING_SOON_DAYS", "3"))

_DISTANT_PAST = datetime.datetime.min.replace(tzinfo=pytz.UTC)
_DISTANT_FUTURE = datetime.datetime.max.replace(tzinfo=pytz.UTC)


class WishlistSort(str, enum.Enum):
    DATE_ADDED = "dateAdded"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"
    NAME = "name"
    PRIORITY = "priority"


def matches(product: Product, category: Optional[Category] = None, query: str = "") -> bool:
    """Category equality AND case-insensitive substring on name or description."""
    if category is not None and product.category != category:
        return False
    if query:
        q = query.lower()
        return q in product.name.lower() or q in product.description.lower()
    return True


def filter_products(
    products: Iterable[Product], category: Optional[Category] = None, query: str = ""
) -> List[Product]:
    return [p for p in products if matches(p, category, query)]


# Deals

def is_active_deal(product: Product, now: Optional[datetime.datetime] = None) -> bool:
    now = now or now_utc()
    if not product.is_deal:
        return False
    return product.deal_expiry_date is None or product.deal_expiry_date > now


def sort_by_discount(products: Iterable[Product]) -> List[Product]:
    return sorted(products, key=lambda p: p.deal_discount or 0, reverse=True)


def active_deals(
    products: Iterable[Product],
    now: Optional[datetime.datetime] = None,
    category: Optional[Category] = None,
    query: str = "",
) -> List[Product]:
    """Active deals narrowed by category and search text, highest discount first."""
    now = now or now_utc()
    deals = [p for p in products if is_active_deal(p, now) and matches(p, category, query)]
    return sort_by_discount(deals)


def expiring_deals(
    products: Iterable[Product],
    now: Optional[datetime.datetime] = None,
    category: Optional[Category] = None,
    query: str = "",
) -> List[Product]:
    """Active deals ending within EXPIRING_SOON_DAYS, soonest first."""
    now = now or now_utc()
    horizon = now + datetime.timedelta(days=EXPIRING_SOON_DAYS)
    soon = [
        p for p in active_deals(products, now, category, query)
        if p.deal_expiry_date is not None and p.deal_expiry_date <= horizon
    ]
    return sorted(soon, key=lambda p: p.deal_expiry_date or _DISTANT_FUTURE)


def _split(delta: datetime.timedelta):
    minutes = int(delta.total_seconds() // 60)
    days, rest = divmod(minutes, 24 * 60)
    hours, minutes = divmod(rest, 60)
    return days, hours, minutes


def time_remaining(product: Product, now: Optional[datetime.datetime] = None) -> str:
    if product.deal_expiry_date is None:
        return ""
    return format_time_remaining(product.deal_expiry_date, now)


def format_time_remaining(
    expiry: datetime.datetime, now: Optional[datetime.datetime] = None
) -> str:
    now = now or now_utc()
    delta = expiry - now
    if delta.total_seconds() <= 0:
        return "Expiring soon"
    days, hours, minutes = _split(delta)
    if days > 0:
        return f"{days} days left"
    if hours > 0:
        return f"{hours} hours left"
    if minutes > 0:
        return f"{minutes} min left"
    return "Expiring soon"


def deal_badge(product: Product, now: Optional[datetime.datetime] = None) -> Optional[str]:
    """Compact countdown ("3d", "5h") for a deal with an expiry."""
    if not product.is_deal or product.deal_expiry_date is None:
        return None
    delta = product.deal_expiry_date - (now or now_utc())
    if delta.total_seconds() > 0:
        days, hours, _ = _split(delta)
        if days > 0:
            return f"{days}d"
        if hours > 0:
            return f"{hours}h"
    return "Expiring soon"


# Wishlist

def wishlist_view(
    snapshot: CatalogSnapshot,
    category: Optional[Category] = None,
    query: str = "",
    sort: WishlistSort = WishlistSort.DATE_ADDED,
) -> List[Product]:
    ids = {i.product_id for i in snapshot.wishlist_items}
    joined = [p for p in snapshot.products if p.id in ids]
    return sort_wishlist(filter_products(joined, category, query), snapshot, sort)


def sort_wishlist(
    products: List[Product], snapshot: CatalogSnapshot, sort: WishlistSort
) -> List[Product]:
    sort = WishlistSort(sort)
    # sorted() is stable, including with reverse=True
    if sort is WishlistSort.DATE_ADDED:
        def added(p):
            item = snapshot.wishlist_item_for(p.id)
            return item.added_date if item else _DISTANT_PAST
        return sorted(products, key=added, reverse=True)
    if sort is WishlistSort.PRICE_ASC:
        return sorted(products, key=lambda p: p.lowest_price)
    if sort is WishlistSort.PRICE_DESC:
        return sorted(products, key=lambda p: p.lowest_price, reverse=True)
    if sort is WishlistSort.NAME:
        return sorted(products, key=lambda p: p.name)

    def rank(p):
        item = snapshot.wishlist_item_for(p.id)
        return (item.priority if item else Priority.LOW).rank
    return sorted(products, key=rank, reverse=True)


# Price comparison

@dataclass(frozen=True)
class PriceComparison:
    """
    Offers of one product ordered by total price (price + shipping).

    `selected` is the cheapest offer by total price, while `best` is the
    product's best retailer by base price alone. Price differences are
    measured against `best.total_price`, so an offer can show a negative
    difference when shipping reorders the two.
    """
    product: Product
    sorted_prices: List[RetailerPrice]

    @property
    def selected(self) -> Optional[RetailerPrice]:
        return self.sorted_prices[0] if self.sorted_prices else None

    @property
    def best(self) -> Optional[RetailerPrice]:
        return self.product.best_retailer

    def price_difference(self, offer: RetailerPrice) -> float:
        best = self.best
        if best is None:
            return 0.0
        return offer.total_price - best.total_price

    def is_best_price(self, offer: RetailerPrice) -> bool:
        best = self.best
        return best is not None and offer.id == best.id


def compare_prices(product: Product) -> PriceComparison:
    return PriceComparison(
        product=product,
        sorted_prices=sorted(product.prices, key=lambda rp: rp.total_price),
    )
