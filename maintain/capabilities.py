"""Capability lookups consulted while scenarios compose their steps."""

from abc import ABC, abstractmethod
import logging

from maintain import exceptions
from maintain.params import parse_bool

logger = logging.getLogger(__name__)


class CapabilityLookup(ABC):
    """Answers topology questions about the host a scenario runs against."""

    @abstractmethod
    def is_database_local(self, database):
        """Return True if the logical database is hosted on this machine."""


class SettingsCapabilities(CapabilityLookup):
    """Capability lookup backed by the `DATABASES` section of maintain's settings.

    Example settings:

        DATABASES:
          candlepin_database:
            local: true
          foreman_database:
            local: false
    """

    def __init__(self, maintain_settings=None):
        if maintain_settings is None:
            from maintain.settings import settings as maintain_settings
        self._settings = maintain_settings

    def is_database_local(self, database):
        databases = self._settings.get("DATABASES") or {}
        entry = databases.get(database)
        if isinstance(entry, dict):
            entry = entry.get("local")
        entry = parse_bool(entry)
        if entry is None:
            raise exceptions.CapabilityError(f"No topology information for {database}")
        if not isinstance(entry, bool):
            raise exceptions.CapabilityError(
                f"Topology for {database} must be a boolean or a mapping with a boolean "
                f"'local' key, got {entry!r}"
            )
        local = entry
        logger.debug(f"{database} is {'local' if local else 'remote'}")
        return local


class StaticCapabilities(CapabilityLookup):
    """Capability lookup answering from a fixed mapping of database -> local."""

    def __init__(self, local_databases=None):
        self.local_databases = dict(local_databases or {})

    def is_database_local(self, database):
        if database not in self.local_databases:
            raise exceptions.CapabilityError(f"No topology information for {database}")
        return self.local_databases[database]
