# shopcompare/catalog.py
import dataclasses
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from . import codec
from .errors import PersistenceError
from .logger import get_logger
from .models import Category, Priority, Product, WishlistItem
from .sample_data import baseline_products
from .storage import PRODUCTS_KEY, WISHLIST_KEY, SqliteKeyValueStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    products: Tuple[Product, ...] = ()
    wishlist_items: Tuple[WishlistItem, ...] = ()

    def wishlist_item_for(self, product_id: str) -> Optional[WishlistItem]:
        return next((i for i in self.wishlist_items if i.product_id == product_id), None)


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of a store mutation.
    `changed` is False for no-ops (absent id, duplicate add). When the snapshot
    changed but could not be written, `persisted` is False and `error` is set;
    the in-memory state still holds the change.
    """
    changed: bool
    persisted: bool = True
    error: Optional[PersistenceError] = None

    @property
    def ok(self) -> bool:
        return self.persisted


@dataclass(frozen=True)
class StoreChange:
    operation: str
    persisted: bool


Listener = Callable[[StoreChange], None]

NO_CHANGE = MutationResult(changed=False)


class ObservableStore:
    """Plain callback registry shared by the catalog and profile stores."""

    def __init__(self):
        self._listeners: List[Listener] = []
        self.last_persistence_error: Optional[PersistenceError] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, operation: str, persisted: bool):
        change = StoreChange(operation, persisted)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                logger.exception("Listener failed for %s: %s", operation, e)

    def _persist(self, operation: str, write: Callable[[], None]) -> MutationResult:
        try:
            write()
        except PersistenceError as e:
            logger.warning("Could not persist %s; keeping in-memory state: %s", operation, e)
            self.last_persistence_error = e
            self._notify(operation, False)
            return MutationResult(changed=True, persisted=False, error=e)
        self._notify(operation, True)
        return MutationResult(changed=True)


class CatalogStore(ObservableStore):
    """
    Owns the product list and the wishlist items.

    Every mutation swaps in a new immutable CatalogSnapshot under a lock, so
    readers see either the old or the new state. The snapshot is then written
    to the key-value storage; products and wishlist go in one transaction when
    an operation touches both.
    """

    def __init__(self, storage: SqliteKeyValueStore):
        super().__init__()
        self.storage = storage
        self._lock = threading.RLock()
        self._snapshot = CatalogSnapshot()
        self._load()
        self._seed_if_empty()

    # Loading & saving

    def _load(self):
        try:
            self.storage.ensure_db()
        except PersistenceError as e:
            logger.warning("Storage unavailable, starting from an empty catalog: %s", e)
            self.last_persistence_error = e
            return

        products = self._load_list(PRODUCTS_KEY, codec.decode_products)
        items = self._load_list(WISHLIST_KEY, codec.decode_wishlist)
        # The wishlist is authoritative for the per-product flag
        item_ids = {i.product_id for i in items}
        products = [
            p if p.is_on_wishlist == (p.id in item_ids)
            else dataclasses.replace(p, is_on_wishlist=p.id in item_ids)
            for p in products
        ]
        self._snapshot = CatalogSnapshot(tuple(products), tuple(items))
        logger.info("Loaded %d products and %d wishlist items.", len(products), len(items))

    def _load_list(self, key: str, decode) -> list:
        try:
            raw = self.storage.get(key)
            return decode(raw) if raw else []
        except PersistenceError as e:
            logger.warning("Discarding unreadable %s: %s", key, e)
            self.last_persistence_error = e
            return []

    def _seed_if_empty(self):
        if self._snapshot.products:
            return
        products = baseline_products()
        with self._lock:
            self._snapshot = dataclasses.replace(self._snapshot, products=tuple(products))
        logger.info("Seeded catalog with %d sample products.", len(products))
        self._persist("seed", lambda: self._write(products=True))

    def _write(self, products: bool = False, wishlist: bool = False):
        snap = self._snapshot
        values: Dict[str, str] = {}
        if products:
            values[PRODUCTS_KEY] = codec.encode_products(list(snap.products))
        if wishlist:
            values[WISHLIST_KEY] = codec.encode_wishlist(list(snap.wishlist_items))
        self.storage.set_many(values)

    def _commit(
        self,
        operation: str,
        snapshot: CatalogSnapshot,
        products: bool = False,
        wishlist: bool = False,
    ) -> MutationResult:
        with self._lock:
            self._snapshot = snapshot
            # Encode under the lock so the written state is exactly this snapshot
            return self._persist(operation, lambda: self._write(products, wishlist))

    # Reads

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def list_products(self) -> List[Product]:
        return list(self._snapshot.products)

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self._snapshot.products if p.id == product_id), None)

    def get_products(self, category: Category) -> List[Product]:
        return [p for p in self._snapshot.products if p.category == category]

    def search_products(self, query: str) -> List[Product]:
        q = query.lower()
        return [
            p for p in self._snapshot.products
            if q in p.name.lower() or q in p.description.lower()
        ]

    # Product mutations

    def add_product(self, product: Product) -> MutationResult:
        with self._lock:
            snap = self._snapshot
            if any(p.id == product.id for p in snap.products):
                logger.info("Product %s already in catalog; use update_product.", product.id)
                return NO_CHANGE
            new = dataclasses.replace(snap, products=snap.products + (product,))
            logger.debug("Adding product %s (%s).", product.id, product.name)
            return self._commit("add_product", new, products=True)

    def update_product(self, product: Product) -> MutationResult:
        with self._lock:
            snap = self._snapshot
            if not any(p.id == product.id for p in snap.products):
                logger.debug("update_product: %s not found; ignoring.", product.id)
                return NO_CHANGE
            products = tuple(product if p.id == product.id else p for p in snap.products)
            return self._commit(
                "update_product", dataclasses.replace(snap, products=products), products=True
            )

    def delete_product(self, product_id: str) -> MutationResult:
        with self._lock:
            snap = self._snapshot
            products = tuple(p for p in snap.products if p.id != product_id)
            if len(products) == len(snap.products):
                logger.debug("delete_product: %s not found; ignoring.", product_id)
                return NO_CHANGE
            return self._commit(
                "delete_product", dataclasses.replace(snap, products=products), products=True
            )

    # Wishlist

    def is_in_wishlist(self, product_id: str) -> bool:
        return self._snapshot.wishlist_item_for(product_id) is not None

    def get_wishlist_item(self, product_id: str) -> Optional[WishlistItem]:
        return self._snapshot.wishlist_item_for(product_id)

    def get_wishlist_products(self) -> List[Product]:
        snap = self._snapshot
        ids = {i.product_id for i in snap.wishlist_items}
        return [p for p in snap.products if p.id in ids]

    def add_to_wishlist(
        self,
        product_id: str,
        notes: str = "",
        priority: Priority = Priority.MEDIUM,
    ) -> MutationResult:
        with self._lock:
            snap = self._snapshot
            items = snap.wishlist_items
            if snap.wishlist_item_for(product_id) is None:
                items = items + (WishlistItem(product_id=product_id, notes=notes, priority=priority),)
            products = self._with_wishlist_flag(snap.products, product_id, True)
            if items is snap.wishlist_items and products == snap.products:
                logger.debug("Product %s already on wishlist.", product_id)
                return NO_CHANGE
            new = CatalogSnapshot(products, items)
            return self._commit("add_to_wishlist", new, products=True, wishlist=True)

    def remove_from_wishlist(self, product_id: str) -> MutationResult:
        with self._lock:
            snap = self._snapshot
            items = tuple(i for i in snap.wishlist_items if i.product_id != product_id)
            products = self._with_wishlist_flag(snap.products, product_id, False)
            if len(items) == len(snap.wishlist_items) and products == snap.products:
                logger.debug("Product %s not on wishlist.", product_id)
                return NO_CHANGE
            new = CatalogSnapshot(products, items)
            return self._commit("remove_from_wishlist", new, products=True, wishlist=True)

    def update_wishlist_item(self, item: WishlistItem) -> MutationResult:
        with self._lock:
            snap = self._snapshot
            if not any(i.id == item.id for i in snap.wishlist_items):
                logger.debug("update_wishlist_item: %s not found; ignoring.", item.id)
                return NO_CHANGE
            clash = snap.wishlist_item_for(item.product_id)
            if clash is not None and clash.id != item.id:
                logger.warning(
                    "Wishlist item %s would duplicate product %s; ignoring.",
                    item.id, item.product_id,
                )
                return NO_CHANGE
            items = tuple(item if i.id == item.id else i for i in snap.wishlist_items)
            return self._commit(
                "update_wishlist_item",
                dataclasses.replace(snap, wishlist_items=items),
                wishlist=True,
            )

    @staticmethod
    def _with_wishlist_flag(products, product_id: str, flag: bool) -> Tuple[Product, ...]:
        return tuple(
            dataclasses.replace(p, is_on_wishlist=flag)
            if p.id == product_id and p.is_on_wishlist != flag else p
            for p in products
        )

    # Reset

    def reset_all(self) -> MutationResult:
        products = baseline_products()
        logger.info("Resetting catalog to %d baseline products; wishlist cleared.", len(products))
        return self._commit(
            "reset_all",
            CatalogSnapshot(tuple(products), ()),
            products=True,
            wishlist=True,
        )
