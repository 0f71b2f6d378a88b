# shopcompare/pricewatch.py
import os
from typing import Dict, List, Optional, Tuple

from .models import Product

PRICE_NOTIFY_THRESHOLD = float(os.getenv("PRICE_NOTIFY_THRESHOLD", "5"))

PriceChange = Tuple[Product, Optional[float], float]


def diff_prices(
    previous: Dict[str, Optional[float]],
    current: List[Product],
    threshold: float = PRICE_NOTIFY_THRESHOLD,
) -> Tuple[List[Product], List[str], List[PriceChange]]:
    """
    Compare a baseline of lowest prices against the current products.
    - previous: mapping product_id -> lowest price at the last check
    - current: products being watched now
    Returns:
      (added_products, removed_ids, price_changes[(product, before, after)])
    Products keep the order of `current`; removed ids are sorted.
    """
    new_ids = {p.id for p in current}
    added = [p for p in current if p.id not in previous]
    removed = sorted(pid for pid in previous if pid not in new_ids)

    price_changes: List[PriceChange] = []
    for p in current:
        if p.id not in previous:
            continue
        before = previous[p.id]
        after = p.lowest_price
        if before == after:
            continue

        # Unknown baseline: always report
        if before is None or before < 0:
            price_changes.append((p, before, after))
            continue

        if before == 0:
            pct = 100.0
        else:
            pct = abs(after - before) * 100.0 / abs(before)

        if pct >= threshold:
            price_changes.append((p, before, after))

    return added, removed, price_changes


def price_drops(changes: List[PriceChange]) -> List[PriceChange]:
    return [c for c in changes if c[1] is not None and c[2] < c[1]]


def baseline_of(products: List[Product]) -> Dict[str, float]:
    return {p.id: p.lowest_price for p in products}
