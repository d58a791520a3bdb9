"""
Settings Store

One settings record per install. Loading always merges what is stored
over the defaults, so fields added in later versions backfill for
existing installs. This merge is the only schema-migration mechanism.
"""

from datetime import datetime
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from klarity.audit import AuditLogger
from klarity.models.audit import AuditEventBuilder
from klarity.models.ledger import UserSettings, default_settings, epoch_ms
from klarity.services.storage import KeyValueStore, StorageError
from klarity.stores.codec import read_json, write_json

logger = structlog.get_logger(__name__)


class SettingsStore:
    """Read and replace the singleton `UserSettings` record."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = "klarity_settings",
        clock: Callable[[], datetime] = datetime.now,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._kv = kv
        self._key = key
        self._audit_logger = audit_logger
        # Captured once so repeated loads of a fresh install agree on it
        self._install_date = epoch_ms(clock())

    @property
    def key(self) -> str:
        return self._key

    def defaults(self) -> UserSettings:
        return default_settings(self._install_date)

    def merge_over_defaults(self, data: Optional[dict]) -> UserSettings:
        """
        Overlay a stored (camelCase) settings object on the defaults.

        Null values count as missing. A field holding an invalid value falls
        back to its default on its own; every other stored field is kept.
        """
        defaults = self.defaults().to_wire()
        merged = dict(defaults)
        if data:
            merged.update({
                k: v for k, v in data.items() if k in defaults and v is not None
            })

        try:
            return UserSettings.model_validate(merged)
        except ValidationError as e:
            aliases = {}
            for name, field in UserSettings.model_fields.items():
                aliases[name] = aliases[field.alias] = field.alias
            invalid = sorted({
                aliases[err["loc"][0]]
                for err in e.errors()
                if err["loc"] and err["loc"][0] in aliases
            })
            logger.warning("settings_fields_reset", key=self._key, fields=invalid)
            for field in invalid:
                merged[field] = defaults[field]
            return UserSettings.model_validate(merged)

    def get(self) -> UserSettings:
        """
        Load settings. Never fails: unreadable data yields the defaults.
        """
        try:
            data = read_json(self._kv, self._key)
        except (StorageError, ValueError) as e:
            logger.error("settings_load_failed", key=self._key, error=str(e))
            return self.defaults()

        if not isinstance(data, dict):
            if data is not None:
                logger.warning("settings_not_an_object", key=self._key)
            return self.defaults()

        return self.merge_over_defaults(data)

    def save(self, settings: UserSettings) -> UserSettings:
        """
        Replace the stored record.

        Raises:
            StorageError: If the write fails; the previous record stays.
        """
        write_json(self._kv, self._key, settings.to_wire())
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.settings_saved(
                monthly_budget=settings.monthly_budget,
                payday_day_of_month=settings.payday_day_of_month,
            ))
        return settings

    def reset(self) -> UserSettings:
        """Write the defaults. Raises StorageError like `save`."""
        return self.save(self.defaults())

    def increment_shame(self) -> UserSettings:
        """
        Read-modify-write of `shame_count`. The counter only ever grows.

        Raises:
            StorageError: If the write fails.
        """
        current = self.get()
        updated = current.model_copy(update={"shame_count": current.shame_count + 1})
        write_json(self._kv, self._key, updated.to_wire())
        return updated
