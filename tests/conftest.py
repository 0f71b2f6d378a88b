import datetime

import pytest
import pytz

from shopcompare.catalog import CatalogStore
from shopcompare.errors import PersistenceError
from shopcompare.models import Category, Product, RetailerPrice
from shopcompare.profile import ProfileStore
from shopcompare.storage import SqliteKeyValueStore

NOW = datetime.datetime(2026, 10, 18, 12, 0, tzinfo=pytz.UTC)


class FlakyStorage(SqliteKeyValueStore):
    """Real sqlite store whose writes can be switched off."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.fail_writes = False

    def set_many(self, values):
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().set_many(values)

    def delete(self, *keys):
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().delete(*keys)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def storage(tmp_path):
    return FlakyStorage(str(tmp_path / "state.sqlite3"))


@pytest.fixture
def catalog(storage):
    return CatalogStore(storage)


@pytest.fixture
def profile(storage, catalog):
    return ProfileStore(storage, catalog)


@pytest.fixture
def make_product():
    def _make(name="Widget", prices=(100.0,), category=Category.OTHER, description="", **kw):
        offers = [
            p if isinstance(p, RetailerPrice) else RetailerPrice(f"Store{i + 1}", p)
            for i, p in enumerate(prices)
        ]
        return Product(name=name, description=description, category=category, prices=offers, **kw)

    return _make
