# shopcompare/profile.py
import dataclasses
import threading
from typing import Iterable, Optional

from . import codec
from .catalog import NO_CHANGE, CatalogStore, MutationResult, ObservableStore
from .errors import PersistenceError
from .logger import get_logger
from .models import Category, NotificationSettings, User, UserPreferences
from .storage import USER_KEY, SqliteKeyValueStore

logger = get_logger(__name__)


class ProfileStore(ObservableStore):
    """
    Holds the single local user record.
    Updates without a current user are ignored.
    """

    def __init__(self, storage: SqliteKeyValueStore, catalog: CatalogStore):
        super().__init__()
        self.storage = storage
        self.catalog = catalog
        self._lock = threading.RLock()
        self._user: Optional[User] = None
        self._load()

    def _load(self):
        try:
            self.storage.ensure_db()
            raw = self.storage.get(USER_KEY)
            if raw:
                self._user = codec.decode_user(raw)
                logger.info("Loaded user %s.", self._user.username)
        except PersistenceError as e:
            logger.warning("Could not load user record: %s", e)
            self.last_persistence_error = e

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def _save(self, operation: str, user: User) -> MutationResult:
        with self._lock:
            self._user = user
            raw = codec.encode_user(user)
            return self._persist(operation, lambda: self.storage.set(USER_KEY, raw))

    def create_user(
        self,
        username: str,
        email: str,
        favorite_categories: Iterable[Category] = (),
    ) -> MutationResult:
        user = User(username=username, email=email, favorite_categories=tuple(favorite_categories))
        logger.info("Created user %s.", username)
        return self._save("create_user", user)

    def update_user(self, user: User) -> MutationResult:
        return self._save("update_user", user)

    def _update(self, operation: str, **changes) -> MutationResult:
        with self._lock:
            if self._user is None:
                logger.debug("%s ignored: no current user.", operation)
                return NO_CHANGE
            updated = dataclasses.replace(self._user, **changes)
            if updated == self._user:
                return NO_CHANGE
            return self._save(operation, updated)

    def update_preferences(self, preferences: UserPreferences) -> MutationResult:
        return self._update("update_preferences", preferences=preferences)

    def update_notification_settings(self, settings: NotificationSettings) -> MutationResult:
        return self._update("update_notification_settings", notification_settings=settings)

    def add_favorite_category(self, category: Category) -> MutationResult:
        with self._lock:
            if self._user is None:
                return NO_CHANGE
            current = self._user.favorite_categories
            return self._update("add_favorite_category", favorite_categories=current + (category,))

    def remove_favorite_category(self, category: Category) -> MutationResult:
        with self._lock:
            if self._user is None:
                return NO_CHANGE
            kept = tuple(c for c in self._user.favorite_categories if c != category)
            return self._update("remove_favorite_category", favorite_categories=kept)

    def logout(self) -> MutationResult:
        with self._lock:
            self._user = None
            logger.info("User logged out.")
            return self._persist("logout", lambda: self.storage.delete(USER_KEY))

    def reset_account(self) -> MutationResult:
        result = self.logout()
        catalog_result = self.catalog.reset_all()
        return result if not result.ok else catalog_result
