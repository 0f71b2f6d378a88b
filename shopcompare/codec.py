# shopcompare/codec.py
"""
JSON encoding of the catalog and profile records.

Field names are the model attribute names, enums are stored as their raw
values and datetimes as ISO-8601 strings with an offset. Absent optional
fields are written as null so a decode restores them as None.
"""
import datetime
import json
from typing import Any, Dict, List, Optional

import pytz

from .errors import PersistenceError
from .models import (
    NotificationSettings,
    Product,
    RetailerPrice,
    User,
    UserPreferences,
    WishlistItem,
)


def _dt_out(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt_in(value: Optional[str]) -> Optional[datetime.datetime]:
    if value is None:
        return None
    parsed = datetime.datetime.fromisoformat(value)
    # Records written without an offset are read as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=pytz.UTC)
    return parsed


def retailer_price_to_dict(rp: RetailerPrice) -> Dict[str, Any]:
    return {
        "id": rp.id,
        "retailer_name": rp.retailer_name,
        "price": rp.price,
        "currency": rp.currency,
        "availability": rp.availability.value,
        "shipping_cost": rp.shipping_cost,
        "delivery_days": rp.delivery_days,
        "retailer_url": rp.retailer_url,
    }


def retailer_price_from_dict(d: Dict[str, Any]) -> RetailerPrice:
    return RetailerPrice(
        id=d["id"],
        retailer_name=d["retailer_name"],
        price=d["price"],
        currency=d.get("currency", "BYN"),
        availability=d.get("availability", "inStock"),
        shipping_cost=d.get("shipping_cost", 0.0),
        delivery_days=d.get("delivery_days", 3),
        retailer_url=d.get("retailer_url"),
    )


def product_to_dict(p: Product) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "category": p.category.value,
        "image_url": p.image_url,
        "prices": [retailer_price_to_dict(rp) for rp in p.prices],
        "average_rating": p.average_rating,
        "review_count": p.review_count,
        "specifications": dict(p.specifications),
        "is_on_wishlist": p.is_on_wishlist,
        "is_deal": p.is_deal,
        "deal_expiry_date": _dt_out(p.deal_expiry_date),
        "deal_discount": p.deal_discount,
    }


def product_from_dict(d: Dict[str, Any]) -> Product:
    return Product(
        id=d["id"],
        name=d["name"],
        description=d.get("description", ""),
        category=d["category"],
        image_url=d.get("image_url"),
        prices=[retailer_price_from_dict(rp) for rp in d.get("prices", [])],
        average_rating=d.get("average_rating", 0.0),
        review_count=d.get("review_count", 0),
        specifications=d.get("specifications") or {},
        is_on_wishlist=d.get("is_on_wishlist", False),
        is_deal=d.get("is_deal", False),
        deal_expiry_date=_dt_in(d.get("deal_expiry_date")),
        deal_discount=d.get("deal_discount"),
    )


def wishlist_item_to_dict(item: WishlistItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "added_date": _dt_out(item.added_date),
        "notes": item.notes,
        "priority": item.priority.value,
    }


def wishlist_item_from_dict(d: Dict[str, Any]) -> WishlistItem:
    return WishlistItem(
        id=d["id"],
        product_id=d["product_id"],
        added_date=_dt_in(d["added_date"]),
        notes=d.get("notes", ""),
        priority=d.get("priority", "medium"),
    )


def user_to_dict(u: User) -> Dict[str, Any]:
    prefs = u.preferences
    ns = u.notification_settings
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "preferences": {
            "currency": prefs.currency,
            "language": prefs.language,
            "dark_mode_enabled": prefs.dark_mode_enabled,
            "max_shipping_cost": prefs.max_shipping_cost,
            "preferred_retailers": list(prefs.preferred_retailers),
        },
        "favorite_categories": [c.value for c in u.favorite_categories],
        "notification_settings": {
            "deal_alerts_enabled": ns.deal_alerts_enabled,
            "price_drop_alerts_enabled": ns.price_drop_alerts_enabled,
            "wishlist_updates_enabled": ns.wishlist_updates_enabled,
            "weekly_digest_enabled": ns.weekly_digest_enabled,
        },
        "created_date": _dt_out(u.created_date),
    }


def user_from_dict(d: Dict[str, Any]) -> User:
    return User(
        id=d["id"],
        username=d["username"],
        email=d["email"],
        preferences=UserPreferences(**d.get("preferences", {})),
        favorite_categories=d.get("favorite_categories", []),
        notification_settings=NotificationSettings(**d.get("notification_settings", {})),
        created_date=_dt_in(d["created_date"]),
    )


def encode_products(products: List[Product]) -> str:
    return json.dumps([product_to_dict(p) for p in products], ensure_ascii=False)


def decode_products(raw: str) -> List[Product]:
    return _decode_list(raw, product_from_dict, "products")


def encode_wishlist(items: List[WishlistItem]) -> str:
    return json.dumps([wishlist_item_to_dict(i) for i in items], ensure_ascii=False)


def decode_wishlist(raw: str) -> List[WishlistItem]:
    return _decode_list(raw, wishlist_item_from_dict, "wishlist")


def encode_user(user: User) -> str:
    return json.dumps(user_to_dict(user), ensure_ascii=False)


def decode_user(raw: str) -> User:
    try:
        return user_from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError) as e:
        raise PersistenceError(f"Cannot decode user record: {e}") from e


def _decode_list(raw: str, decode_one, what: str) -> list:
    # ValidationError is a ValueError, so rejected values land here too
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON list, got {type(data).__name__}")
        return [decode_one(d) for d in data]
    except (ValueError, KeyError, TypeError) as e:
        raise PersistenceError(f"Cannot decode {what}: {e}") from e
