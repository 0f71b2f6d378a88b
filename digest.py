import datetime
import json
import os
import random
import time
from typing import Dict, List, Optional, Set, Tuple

from shopcompare import emailer, queries
from shopcompare.catalog import CatalogStore
from shopcompare.errors import PersistenceError
from shopcompare.logger import get_logger
from shopcompare.models import User, now_utc
from shopcompare.pricewatch import baseline_of, diff_prices, price_drops
from shopcompare.profile import ProfileStore
from shopcompare.report import Digest, build_html_report, build_plaintext_report, build_subject
from shopcompare.storage import (
    DB_PATH,
    DIGEST_BASELINE_KEY,
    DIGEST_LAST_SENT_KEY,
    DIGEST_SEEN_DEALS_KEY,
    SqliteKeyValueStore,
)

logger = get_logger(__name__)

POLL_MINUTES = int(os.getenv("POLL_MINUTES", "60"))
MODE = os.getenv("MODE", "once").lower()  # "once" or "daemon"
WEEKLY_DIGEST_DAYS = int(os.getenv("WEEKLY_DIGEST_DAYS", "7"))
SEEN_SECTIONS = ("deals", "expiring")


def jitter_sleep_minutes(minutes: int) -> None:
    base = max(1, minutes)
    jitter = random.uniform(-0.1 * base, 0.1 * base)
    total = base + jitter
    logger.info("Sleeping %.1f minutes before next cycle.", total)
    time.sleep(total * 60)


def load_baseline(storage: SqliteKeyValueStore) -> Optional[Dict[str, float]]:
    raw = storage.get(DIGEST_BASELINE_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Discarding unreadable digest baseline: %s", e)
        return None
    return data if isinstance(data, dict) else None


def load_seen_deals(storage: SqliteKeyValueStore) -> Optional[Dict[str, Set[str]]]:
    raw = storage.get(DIGEST_SEEN_DEALS_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
        return {section: set(data[section]) for section in SEEN_SECTIONS}
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("Discarding unreadable seen-deals record: %s", e)
        return None


def weekly_digest_due(storage: SqliteKeyValueStore, now: datetime.datetime) -> bool:
    raw = storage.get(DIGEST_LAST_SENT_KEY)
    if not raw:
        return True
    try:
        last_sent = datetime.datetime.fromisoformat(raw)
    except ValueError:
        logger.warning("Invalid last-sent timestamp %r; treating digest as due.", raw)
        return True
    return now - last_sent >= datetime.timedelta(days=WEEKLY_DIGEST_DAYS)


def build_digest(
    catalog: CatalogStore,
    user: User,
    previous: Optional[Dict[str, float]],
    now: datetime.datetime,
    seen: Optional[Dict[str, Set[str]]] = None,
) -> Tuple[Digest, Dict[str, float], Dict[str, List[str]]]:
    """
    Collect the sections enabled by the user's notification settings.

    Deals and expiring deals already announced in an earlier digest (`seen`)
    are left out. Returns the digest, the new wishlist baseline and the ids
    of the currently active and expiring deals.
    """
    snapshot = catalog.snapshot()
    settings = user.notification_settings
    wishlist = queries.wishlist_view(snapshot, sort=queries.WishlistSort.PRIORITY)
    digest = Digest(user=user, generated_at=now)

    current = {
        "deals": queries.active_deals(snapshot.products, now),
        "expiring": queries.expiring_deals(snapshot.products, now),
    }
    if settings.deal_alerts_enabled:
        seen = seen or {}
        digest.deals = [p for p in current["deals"] if p.id not in seen.get("deals", ())]
        digest.expiring = [p for p in current["expiring"] if p.id not in seen.get("expiring", ())]

    # First run only records the baseline
    if previous is not None:
        added, removed_ids, changes = diff_prices(previous, wishlist)
        if settings.price_drop_alerts_enabled:
            digest.price_drops = price_drops(changes)
        if settings.wishlist_updates_enabled:
            digest.added = added
            for pid in removed_ids:
                product = catalog.get_product(pid)
                digest.removed.append(product.name if product else pid)

    now_seen = {section: [p.id for p in products] for section, products in current.items()}
    return digest, baseline_of(wishlist), now_seen


def run_cycle(
    catalog: CatalogStore,
    profile: ProfileStore,
    now: Optional[datetime.datetime] = None,
) -> bool:
    """
    Build and send one digest. Returns True when an email went out.

    The baseline and seen deals are recorded only once the digest was sent
    or had nothing to report, so a failed send is retried next cycle.
    """
    now = now or now_utc()
    storage = catalog.storage
    user = profile.current_user
    if user is None:
        logger.info("No user profile yet; skipping digest.")
        return False

    if user.notification_settings.weekly_digest_enabled and not weekly_digest_due(storage, now):
        logger.info("Weekly digest for %s not due yet.", user.username)
        return False

    digest, baseline, seen = build_digest(
        catalog, user, load_baseline(storage), now, load_seen_deals(storage)
    )
    state = {
        DIGEST_BASELINE_KEY: json.dumps(baseline),
        DIGEST_SEEN_DEALS_KEY: json.dumps(seen),
    }

    if digest.is_empty():
        logger.info("Nothing new to report for %s.", user.username)
        storage.set_many(state)
        return False

    sent = emailer.send_email(
        build_subject(digest),
        build_html_report(digest),
        build_plaintext_report(digest),
        user.email,
    )
    if sent:
        state[DIGEST_LAST_SENT_KEY] = now.isoformat()
        storage.set_many(state)
    return sent


def open_stores(db_path: str = DB_PATH) -> Tuple[CatalogStore, ProfileStore]:
    storage = SqliteKeyValueStore(db_path)
    catalog = CatalogStore(storage)
    return catalog, ProfileStore(storage, catalog)


def run_once() -> int:
    catalog, profile = open_stores()
    try:
        run_cycle(catalog, profile)
    except PersistenceError as e:
        logger.error("Digest aborted, storage unavailable: %s", e)
        return 1
    return 0


def run_daemon() -> None:
    logger.info("Starting digest daemon; poll every %d minutes.", POLL_MINUTES)
    while True:
        try:
            # Reopen each cycle to pick up changes written by other processes
            catalog, profile = open_stores()
            run_cycle(catalog, profile)
        except Exception as e:
            logger.exception("Unhandled error in digest loop: %s", e)

        jitter_sleep_minutes(POLL_MINUTES)


if __name__ == "__main__":
    try:
        if MODE == "daemon":
            run_daemon()
        else:
            raise SystemExit(run_once())
    except Exception as e:
        logger.exception("Fatal digest error: %s", e)
        raise SystemExit(2)
