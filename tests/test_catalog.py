import dataclasses

from shopcompare.catalog import CatalogStore
from shopcompare.models import Category, Priority, WishlistItem, now_utc
from shopcompare import codec
from shopcompare.storage import PRODUCTS_KEY, WISHLIST_KEY


def test_first_start_seeds_baseline(catalog):
    products = catalog.list_products()
    assert len(products) >= 9
    assert {p.category for p in products} == set(Category)
    assert any(not p.is_deal for p in products)
    assert any(
        p.is_deal and p.deal_discount is not None and p.deal_expiry_date > now_utc()
        for p in products
    )
    assert catalog.snapshot().wishlist_items == ()


def test_state_is_reloaded_from_storage(storage, catalog, make_product):
    p = make_product(name="Kettle")
    catalog.add_product(p)
    catalog.add_to_wishlist(p.id, notes="kitchen", priority=Priority.HIGH)

    reopened = CatalogStore(storage)
    assert reopened.get_product(p.id) == catalog.get_product(p.id)
    assert reopened.list_products() == catalog.list_products()
    assert reopened.get_wishlist_item(p.id).notes == "kitchen"


def test_corrupt_storage_falls_back_to_seed(storage):
    storage.ensure_db()
    storage.set_many({PRODUCTS_KEY: "{broken", WISHLIST_KEY: "[]"})
    store = CatalogStore(storage)
    assert len(store.list_products()) >= 9
    assert store.last_persistence_error is not None


def test_list_keeps_insertion_order(catalog, make_product):
    a, b = make_product(name="A"), make_product(name="B")
    catalog.add_product(a)
    catalog.add_product(b)
    assert [p.id for p in catalog.list_products()[-2:]] == [a.id, b.id]


def test_get_product_absent_is_none(catalog):
    assert catalog.get_product("nope") is None


def test_get_products_by_category(catalog):
    books = catalog.get_products(Category.BOOKS)
    assert books and all(p.category is Category.BOOKS for p in books)


def test_search_matches_name_or_description_case_insensitively(catalog, make_product):
    a = make_product(name="Blue Teapot", description="ceramic")
    b = make_product(name="Mug", description="Fits a TEAPOT lid")
    catalog.add_product(a)
    catalog.add_product(b)
    assert [p.id for p in catalog.search_products("teapot")] == [a.id, b.id]
    assert catalog.search_products("") == catalog.list_products()
    assert catalog.search_products("zzz-no-match") == []


def test_add_duplicate_id_is_ignored(catalog, make_product):
    p = make_product()
    assert catalog.add_product(p).changed
    before = catalog.list_products()
    assert not catalog.add_product(dataclasses.replace(p, name="Other")).changed
    assert catalog.list_products() == before


def test_update_replaces_by_id(catalog, make_product):
    p = make_product(name="Old")
    catalog.add_product(p)
    result = catalog.update_product(dataclasses.replace(p, name="New"))
    assert result.changed and result.persisted
    assert catalog.get_product(p.id).name == "New"


def test_update_and_delete_absent_are_silent_no_ops(catalog, make_product):
    before = catalog.snapshot()
    assert not catalog.update_product(make_product()).changed
    assert not catalog.delete_product("missing").changed
    assert catalog.snapshot() is before


def test_delete_product(catalog, make_product):
    p = make_product()
    catalog.add_product(p)
    catalog.delete_product(p.id)
    assert catalog.get_product(p.id) is None


def test_wishlist_membership(catalog):
    pid = catalog.list_products()[0].id
    catalog.add_to_wishlist(pid)
    assert catalog.is_in_wishlist(pid)
    assert catalog.get_product(pid).is_on_wishlist

    catalog.remove_from_wishlist(pid)
    assert not catalog.is_in_wishlist(pid)
    assert not catalog.get_product(pid).is_on_wishlist


def test_add_to_wishlist_is_idempotent(catalog):
    pid = catalog.list_products()[0].id
    assert catalog.add_to_wishlist(pid, notes="first").changed
    assert not catalog.add_to_wishlist(pid, notes="second").changed
    items = [i for i in catalog.snapshot().wishlist_items if i.product_id == pid]
    assert len(items) == 1
    assert items[0].notes == "first"


def test_wishlist_for_unknown_product_is_excluded_from_join(catalog):
    catalog.add_to_wishlist("ghost")
    assert catalog.is_in_wishlist("ghost")
    assert all(p.id != "ghost" for p in catalog.get_wishlist_products())


def test_wishlist_products_follow_catalog_order(catalog):
    products = catalog.list_products()
    catalog.add_to_wishlist(products[3].id)
    catalog.add_to_wishlist(products[1].id)
    assert [p.id for p in catalog.get_wishlist_products()] == [products[1].id, products[3].id]


def test_deleted_product_leaves_orphan_item_out_of_join(catalog):
    pid = catalog.list_products()[0].id
    catalog.add_to_wishlist(pid)
    catalog.delete_product(pid)
    assert catalog.is_in_wishlist(pid)
    assert catalog.get_wishlist_products() == []


def test_update_wishlist_item(catalog):
    pid = catalog.list_products()[0].id
    catalog.add_to_wishlist(pid)
    item = catalog.get_wishlist_item(pid)
    catalog.update_wishlist_item(dataclasses.replace(item, notes="gift", priority=Priority.LOW))
    updated = catalog.get_wishlist_item(pid)
    assert (updated.notes, updated.priority) == ("gift", Priority.LOW)


def test_update_wishlist_item_absent_or_clashing_is_ignored(catalog):
    a, b = catalog.list_products()[:2]
    catalog.add_to_wishlist(a.id)
    catalog.add_to_wishlist(b.id)
    item_a = catalog.get_wishlist_item(a.id)
    assert not catalog.update_wishlist_item(dataclasses.replace(item_a, id="other")).changed
    assert not catalog.update_wishlist_item(dataclasses.replace(item_a, product_id=b.id)).changed
    assert len(catalog.snapshot().wishlist_items) == 2


def test_reset_all_restores_baseline_and_clears_wishlist(storage, catalog, make_product):
    extra = make_product(name="Extra")
    catalog.add_product(extra)
    catalog.add_to_wishlist(extra.id)
    catalog.reset_all()

    assert catalog.get_product(extra.id) is None
    assert len(catalog.list_products()) >= 9
    assert catalog.snapshot().wishlist_items == ()
    assert not any(p.is_on_wishlist for p in catalog.list_products())
    assert CatalogStore(storage).snapshot().wishlist_items == ()


def test_persistence_failure_keeps_memory_state(storage, catalog):
    pid = catalog.list_products()[0].id
    storage.fail_writes = True

    result = catalog.add_to_wishlist(pid)
    assert result.changed
    assert not result.persisted and not result.ok
    assert result.error is catalog.last_persistence_error
    assert catalog.is_in_wishlist(pid)

    # Neither key was written
    storage.fail_writes = False
    reopened = CatalogStore(storage)
    assert not reopened.is_in_wishlist(pid)
    assert not reopened.get_product(pid).is_on_wishlist


def test_listeners_receive_changes(catalog):
    changes = []
    unsubscribe = catalog.subscribe(changes.append)
    pid = catalog.list_products()[0].id
    catalog.add_to_wishlist(pid)
    catalog.add_to_wishlist(pid)
    assert [c.operation for c in changes] == ["add_to_wishlist"]
    assert changes[0].persisted

    unsubscribe()
    catalog.remove_from_wishlist(pid)
    assert len(changes) == 1


def test_failing_listener_does_not_block_others(catalog):
    seen = []

    def broken(change):
        raise RuntimeError("boom")

    catalog.subscribe(broken)
    catalog.subscribe(seen.append)
    assert catalog.add_to_wishlist(catalog.list_products()[0].id).ok
    assert len(seen) == 1


def test_snapshot_is_not_affected_by_later_mutations(catalog, make_product):
    before = catalog.snapshot()
    catalog.add_product(make_product())
    assert len(catalog.snapshot().products) == len(before.products) + 1


class CountingCatalog(CatalogStore):
    """Counts how often the current snapshot is read."""

    reads = 0

    @property
    def _snapshot(self):
        self.reads += 1
        return self.__dict__["_current"]

    @_snapshot.setter
    def _snapshot(self, value):
        self.__dict__["_current"] = value


def test_wishlist_join_reads_one_snapshot(storage):
    store = CountingCatalog(storage)
    store.add_to_wishlist(store.list_products()[0].id)
    store.reads = 0
    assert len(store.get_wishlist_products()) == 1
    assert store.reads == 1


def test_load_realigns_wishlist_flags(storage, make_product):
    flagged = make_product(name="Flagged", is_on_wishlist=True)
    unflagged = make_product(name="Unflagged")
    storage.ensure_db()
    storage.set_many({
        PRODUCTS_KEY: codec.encode_products([flagged, unflagged]),
        WISHLIST_KEY: "{broken",
    })
    store = CatalogStore(storage)
    assert not store.get_product(flagged.id).is_on_wishlist
    assert store.last_persistence_error is not None

    storage.set(WISHLIST_KEY, codec.encode_wishlist([WishlistItem(unflagged.id)]))
    store = CatalogStore(storage)
    assert store.get_product(unflagged.id).is_on_wishlist
    assert not store.get_product(flagged.id).is_on_wishlist
