"""Tests for the settings store (repositories/settings_repo.py, services/settings_service.py)"""

import json
from unittest.mock import patch

import pytest

from exceptions import PermissionDeniedError, QueryError, SettingsParseError, ValidationError
from models.identity import Identity
from models.settings import DEFAULT_SETTINGS, SETTINGS_CATEGORIES
from repositories.settings_repo import decode_document
from security.auth import has_admin_access
from services.settings_service import SettingsService


@pytest.fixture
def service():
    return SettingsService()


class TestDecodeDocument:

    def test_valid(self):
        assert decode_document("general", '{"siteName": "X"}') == {"siteName": "X"}

    def test_already_decoded(self):
        assert decode_document("general", {"a": 1}) == {"a": 1}

    def test_corrupt(self):
        with pytest.raises(SettingsParseError) as exc:
            decode_document("layout", "{not json")
        assert exc.value.category == "layout"


class TestReads:
    """Reads never fail: corrupt, missing and unreachable all degrade."""

    def test_round_trip(self, fake_db, service, admin):
        service.save_all(admin, {"general": {"siteName": "X"}})
        (_, (category, stored)), = fake_db.calls
        assert category == "general"

        fake_db.queue([{"category": category, "settings_data": stored}])
        assert service.get_all()["general"] == {"siteName": "X"}

    def test_unwritten_category_gets_default(self, fake_db, service):
        fake_db.queue([])
        settings = service.get_all()
        assert set(settings) == set(SETTINGS_CATEGORIES)
        assert settings["shipping"] == DEFAULT_SETTINGS["shipping"]

    def test_corrupt_category_is_isolated(self, fake_db, service):
        fake_db.queue([
            {"category": "general", "settings_data": '{"siteName": "Leaf & Root"}'},
            {"category": "layout", "settings_data": "{\"theme\": "},
        ])
        settings = service.get_all()
        assert settings["general"] == {"siteName": "Leaf & Root"}
        assert settings["layout"] == {}

    def test_non_object_document_reads_as_empty(self, fake_db, service):
        fake_db.queue([
            {"category": "general", "settings_data": "null"},
            {"category": "layout", "settings_data": "[1, 2]"},
        ])
        settings = service.get_all()
        assert settings["general"] == {}
        assert settings["layout"] == {}
        assert settings["products"] == DEFAULT_SETTINGS["products"]

    def test_store_failure_serves_defaults(self, fake_db, service):
        fake_db.queue(error=QueryError('relation "settings" does not exist', pgcode="42P01"))
        assert service.get_all() == DEFAULT_SETTINGS

    def test_public_categories_only(self, fake_db, service):
        fake_db.queue([{"category": "layout", "settings_data": '{"theme": "dark"}'}])
        public = service.get_public()
        assert set(public) == {"general", "layout", "products"}
        assert public["layout"] == {"theme": "dark"}
        assert fake_db.calls[0][1] == [["general", "layout", "products"]]
        assert "category = ANY(%s)" in fake_db.statements[0]

    def test_get_category(self, fake_db, service):
        fake_db.queue([])
        assert service.get_category("currencies")["active"] == "LKR"

    def test_defaults_are_copies(self, service):
        defaults = service.get_defaults()
        defaults["general"]["siteName"] = "Changed"
        assert DEFAULT_SETTINGS["general"]["siteName"] == "Herbal Shop"


class TestWrites:
    """Writes are admin-only, validated, and atomic."""

    def test_upsert_per_category_in_one_transaction(self, fake_db, service, admin):
        service.save_all(admin, {"general": {"siteName": "X"}, "layout": {"theme": "dark"}})
        assert len(fake_db.calls) == 2
        assert all("ON CONFLICT (category)" in sql for sql in fake_db.statements)
        assert fake_db.committed == 1
        assert json.loads(fake_db.calls[1][1][1]) == {"theme": "dark"}

    def test_failed_write_rolls_back(self, fake_db, service, admin):
        fake_db.queue(rowcount=1).queue(error=QueryError("disk full"))
        with pytest.raises(QueryError):
            service.save_all(admin, {"general": {}, "layout": {}})
        assert fake_db.rolled_back == 1
        assert fake_db.committed == 0

    @pytest.mark.parametrize("data", [
        {},
        [],
        "general",
        {"": {}},
        {"x" * 51: {}},
        {"general": {"logo": object()}},
        {"general": float("nan")},
        {"general": None},
        {"general": [1, 2]},
        {"general": "dark"},
    ])
    def test_invalid_input(self, fake_db, service, admin, data):
        with pytest.raises(ValidationError):
            service.save_all(admin, data)
        assert fake_db.calls == []

    def test_non_admin_rejected(self, fake_db, service, customer):
        with pytest.raises(PermissionDeniedError) as exc:
            service.save_all(customer, {"general": {}})
        assert exc.value.status_code == 403
        assert fake_db.calls == []

    def test_reset_to_defaults(self, fake_db, service, admin):
        defaults = service.reset_to_defaults(admin)
        assert defaults == DEFAULT_SETTINGS
        assert [params[0] for _, params in fake_db.calls] == list(DEFAULT_SETTINGS)
        assert fake_db.committed == 1


class TestAdminAccess:

    def test_role(self, admin, customer):
        assert has_admin_access(admin) is True
        assert has_admin_access(customer) is False
        assert has_admin_access(None) is False

    def test_email_allow_list(self):
        with patch("security.auth.ADMIN_EMAILS", ["boss@shop.test"]):
            assert has_admin_access(Identity(id=9, email="Boss@Shop.test")) is True
            assert has_admin_access(Identity(id=9, email="other@shop.test")) is False
