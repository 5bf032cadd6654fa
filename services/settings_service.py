"""
services/settings_service.py
----------------------------
Business logic for the site settings store.

Reads never hard-fail: a corrupt category degrades to an empty document,
a never-saved category is served from the defaults, and a store failure
returns the defaults. Writes validate their input and propagate errors.
"""

import copy
import json
from typing import Mapping, Optional

from config import PUBLIC_SETTINGS_CATEGORIES
from exceptions import (
    DatabaseConnectionError,
    QueryError,
    SettingsParseError,
    ValidationError,
)
from models.identity import Identity
from models.settings import DEFAULT_SETTINGS
from repositories.settings_repo import SettingsRepository, decode_document
from security.auth import admin_only
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_CATEGORY_LENGTH = 50


class SettingsService:
    """Serves and saves the per-category settings documents."""

    def __init__(self):
        self.repo = SettingsRepository()

    # ── READ ──────────────────────────────────────────────

    def get_defaults(self) -> dict:
        """A fresh copy of the hard-coded defaults for every category."""
        return copy.deepcopy(DEFAULT_SETTINGS)

    def get_all(self, categories: Optional[list[str]] = None) -> dict:
        """
        All settings, one document per category.

        Args:
            categories: Restrict to these categories (None = everything stored
                plus every default category).

        Returns:
            Category → document. Stored categories are returned as stored
            ({} if the stored JSON is corrupt); missing ones come from the defaults.
        """
        defaults = self.get_defaults()
        try:
            rows = self.repo.fetch_raw(categories)
        except (DatabaseConnectionError, QueryError) as e:
            logger.error(f"Failed to read settings, serving defaults: {e}")
            return self._only(defaults, categories)

        settings = {}
        for row in rows:
            category = row["category"]
            try:
                settings[category] = decode_document(category, row["settings_data"])
            except SettingsParseError as e:
                logger.warning(f"{e.message}; using an empty document")
                settings[category] = {}
                continue
            if not isinstance(settings[category], dict):
                logger.warning(f"Stored settings for '{category}' are not an object; using an empty document")
                settings[category] = {}

        for category, document in defaults.items():
            settings.setdefault(category, document)
        return self._only(settings, categories)

    def get_category(self, category: str) -> dict:
        return self.get_all([category]).get(category, {})

    def get_public(self) -> dict:
        """Settings safe to expose to shoppers (general, layout, products)."""
        return self.get_all(list(PUBLIC_SETTINGS_CATEGORIES))

    # ── WRITE ─────────────────────────────────────────────

    @admin_only
    def save_all(self, identity: Identity, data) -> None:
        """
        Create or replace the given categories. Categories not mentioned
        are left untouched.

        Raises:
            PermissionDeniedError: If the caller is not an admin.
            ValidationError: If `data` is not a non-empty mapping of category
                name to a JSON-serializable document.
        """
        self.repo.upsert_many(self._serialize(data))

    @admin_only
    def reset_to_defaults(self, identity: Identity) -> dict:
        """Overwrite every category with its default document and return the defaults."""
        defaults = self.get_defaults()
        self.repo.upsert_many(self._serialize(defaults))
        logger.info(f"Settings reset to defaults by user {identity.id}")
        return defaults

    @admin_only
    def get_admin_settings(self, identity: Identity) -> dict:
        """Every category, including the non-public ones."""
        return self.get_all()

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _serialize(data) -> dict[str, str]:
        if not isinstance(data, Mapping) or not data:
            raise ValidationError("Settings must be a non-empty object of categories")
        documents = {}
        for category, document in data.items():
            if not isinstance(category, str) or not category.strip():
                raise ValidationError(f"Invalid settings category: {category!r}", field="category")
            if len(category) > MAX_CATEGORY_LENGTH:
                raise ValidationError(
                    f"Settings category longer than {MAX_CATEGORY_LENGTH} characters", field=category
                )
            if not isinstance(document, Mapping):
                raise ValidationError(f"Settings for '{category}' must be an object", field=category)
            try:
                documents[category] = json.dumps(document, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Settings for '{category}' are not JSON-serializable: {e}",
                                      field=category) from e
        return documents

    @staticmethod
    def _only(settings: dict, categories: Optional[list[str]]) -> dict:
        if categories is None:
            return settings
        return {c: settings[c] for c in categories if c in settings}
