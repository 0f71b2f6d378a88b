import dataclasses

from shopcompare.models import Category, NotificationSettings, UserPreferences
from shopcompare.profile import ProfileStore


def test_no_user_until_created(profile):
    assert profile.current_user is None
    assert not profile.is_authenticated


def test_create_user_persists(storage, catalog, profile):
    profile.create_user("ann", "ann@example.com", [Category.BOOKS, Category.BOOKS])
    user = profile.current_user
    assert profile.is_authenticated
    assert user.favorite_categories == (Category.BOOKS,)

    reopened = ProfileStore(storage, catalog)
    assert reopened.current_user == user


def test_updates_without_user_are_ignored(profile):
    assert not profile.update_preferences(UserPreferences(currency="USD")).changed
    assert not profile.update_notification_settings(NotificationSettings()).changed
    assert not profile.add_favorite_category(Category.FOOD).changed
    assert not profile.remove_favorite_category(Category.FOOD).changed
    assert profile.current_user is None


def test_update_user_replaces_record(profile):
    profile.create_user("ann", "ann@example.com")
    renamed = dataclasses.replace(profile.current_user, username="anna")
    profile.update_user(renamed)
    assert profile.current_user == renamed


def test_update_preferences_and_notifications(storage, catalog, profile):
    profile.create_user("ann", "ann@example.com")
    prefs = UserPreferences(currency="USD", dark_mode_enabled=True, preferred_retailers=["iStore"])
    settings = NotificationSettings(deal_alerts_enabled=False, weekly_digest_enabled=True)
    profile.update_preferences(prefs)
    profile.update_notification_settings(settings)

    reopened = ProfileStore(storage, catalog).current_user
    assert reopened.preferences == prefs
    assert reopened.notification_settings == settings


def test_favorite_categories_are_idempotent(profile):
    profile.create_user("ann", "ann@example.com")
    assert profile.add_favorite_category(Category.TOYS).changed
    assert not profile.add_favorite_category(Category.TOYS).changed
    assert profile.current_user.favorite_categories == (Category.TOYS,)

    assert not profile.remove_favorite_category(Category.FOOD).changed
    assert profile.remove_favorite_category(Category.TOYS).changed
    assert profile.current_user.favorite_categories == ()


def test_logout_clears_user(storage, catalog, profile):
    profile.create_user("ann", "ann@example.com")
    profile.logout()
    assert profile.current_user is None
    assert ProfileStore(storage, catalog).current_user is None


def test_reset_account_resets_catalog(catalog, profile, make_product):
    profile.create_user("ann", "ann@example.com")
    extra = make_product(name="Extra")
    catalog.add_product(extra)
    catalog.add_to_wishlist(extra.id)

    assert profile.reset_account().ok
    assert profile.current_user is None
    assert catalog.get_product(extra.id) is None
    assert catalog.snapshot().wishlist_items == ()
    assert catalog.list_products()


def test_profile_persistence_failure_keeps_user(storage, profile):
    storage.fail_writes = True
    result = profile.create_user("ann", "ann@example.com")
    assert result.changed and not result.persisted
    assert profile.current_user.username == "ann"
    assert profile.last_persistence_error is result.error
