# shopcompare/report.py
import datetime
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .models import Product, User
from .pricewatch import PriceChange
from .queries import compare_prices, format_time_remaining

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

LIGHT_PALETTE = {
    "page_bg": "#f5f5f5",
    "card_bg": "#ffffff",
    "card_border": "#dadce0",
    "text_primary": "#202124",
    "text_secondary": "#5f6368",
    "deal_badge": "#d84315",
    "price_decrease": "#2e7d32",
    "link_color": "#1a73e8",
}

DARK_PALETTE = {
    "page_bg": "#121212",
    "card_bg": "#1e1e1e",
    "card_border": "#3c4043",
    "text_primary": "#e8eaed",
    "text_secondary": "#9aa0a6",
    "deal_badge": "#ff8a65",
    "price_decrease": "#81c995",
    "link_color": "#8ab4f8",
}


def palette_for(user: User) -> Dict[str, str]:
    return DARK_PALETTE if user.preferences.dark_mode_enabled else LIGHT_PALETTE


@dataclass
class Digest:
    """Sections of one notification email; empty sections are omitted."""
    user: User
    generated_at: datetime.datetime
    deals: List[Product] = field(default_factory=list)
    expiring: List[Product] = field(default_factory=list)
    price_drops: List[PriceChange] = field(default_factory=list)
    added: List[Product] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.deals or self.expiring or self.price_drops or self.added or self.removed)

    @property
    def currency(self) -> str:
        return self.user.preferences.currency


def price_to_str(amount: Optional[float], currency: str = "BYN") -> str:
    if amount is None or amount < 0:
        return "Unavailable"
    return f"{amount:.2f} {currency}"


def _product_row(p: Product, currency: str) -> Dict[str, Any]:
    best = compare_prices(p).selected
    return {
        "name": p.name,
        "image_url": p.image_url or "",
        "lowest_price_str": price_to_str(p.lowest_price, currency),
        "store_count": len(p.prices),
        "best_offer": (
            f"{best.retailer_name} ({price_to_str(best.total_price, currency)} incl. shipping)"
            if best else ""
        ),
        "product_url": (best.retailer_url or "") if best else "",
    }


def _context(digest: Digest) -> Dict[str, Any]:
    cur = digest.currency
    now = digest.generated_at

    deals = []
    for p in digest.deals:
        row = _product_row(p, cur)
        row["discount"] = p.deal_discount or 0
        deals.append(row)

    expiring = []
    for p in digest.expiring:
        row = _product_row(p, cur)
        row["discount"] = p.deal_discount or 0
        row["time_left"] = format_time_remaining(p.deal_expiry_date, now)
        expiring.append(row)

    drops = []
    for p, before, after in digest.price_drops:
        pct_str = ""
        if before and before > 0:
            pct_str = f"(-{(before - after) * 100.0 / before:.1f}%)"
        drops.append(
            {
                "item": _product_row(p, cur),
                "before_str": price_to_str(before, cur),
                "after_str": price_to_str(after, cur),
                "pct_str": pct_str,
            }
        )

    summary_text = (
        f"{len(digest.deals)} active deals · {len(digest.expiring)} expiring soon · "
        f"{len(digest.price_drops)} price drops · {len(digest.added)} added · "
        f"{len(digest.removed)} removed"
    )

    return {
        "username": digest.user.username,
        "generated_at": now.strftime("%Y-%m-%d %H:%M %Z"),
        "summary_text": summary_text,
        "deals": deals,
        "expiring": expiring,
        "price_drops": drops,
        "added": [_product_row(p, cur) for p in digest.added],
        "removed": [{"name": name} for name in digest.removed],
    }


def build_subject(digest: Digest) -> str:
    return f"[ShopCompare] Updates for {digest.user.username}: {_context(digest)['summary_text']}"


def build_plaintext_report(digest: Digest) -> str:
    template = env.get_template("digest_text.txt")
    return template.render(**_context(digest))


def build_html_report(digest: Digest) -> str:
    template = env.get_template("digest.html")
    ctx = _context(digest)
    ctx["colors"] = palette_for(digest.user)
    ctx["title"] = f"ShopCompare digest – {digest.user.username}"
    return template.render(**ctx)
