"""Backup scenarios: taking a backup, and cleaning up after a failed one."""

import logging

from maintain import exceptions
from maintain.context import MappingRule
from maintain.executor import RunStrategy
from maintain.params import param
from maintain.procedures import kinds
from maintain.scenarios import Scenario

logger = logging.getLogger(__name__)

STRATEGIES = ("online", "offline")


class Backup(Scenario):
    """Back up configuration, content and databases, online or offline."""

    label = "backup"
    description = "Backup"
    tags = frozenset({"backup"})
    run_strategy = RunStrategy.FAIL_FAST
    rescue = "backup-rescue-cleanup"
    params = (
        param("strategy", "Backup strategy. One of [online, offline]", required=True),
        param("backup_dir", "Directory where to backup to", required=True),
        param("include_db_dumps", "Include dumps of local dbs as part of offline"),
        param("preserve_dir", "Directory where to backup to"),
        param("incremental_dir", "Changes since specified backup only"),
        param("proxy_features", "List of proxy features to backup (default: all)", array=True),
        param("skip_pulp_content", "Skip Pulp content during backup"),
        param("tar_volume_size", "Size of tar volume (indicates splitting)"),
    )

    @property
    def strategy(self):
        return self.context.get("strategy")

    @property
    def online_backup(self):
        return self.strategy == "online"

    @property
    def include_db_dumps(self):
        return bool(self.context.get("include_db_dumps"))

    def run_metadata(self):
        return {"online_backup": self.online_backup}

    def compose(self):
        if self.strategy not in STRATEGIES:
            raise exceptions.UnsupportedStrategyError(self.strategy)
        if self.online_backup or self.include_db_dumps:
            self.add_step(kinds.BACKUP_SAFETY_CONFIRMATION)
        if self.strategy == "offline":
            self.add_step(kinds.BACKUP_ACCESSIBILITY_CONFIRMATION)
        self.add_step(kinds.BACKUP_PREPARE_DIRECTORY)
        self.add_step(kinds.BACKUP_METADATA, online_backup=self.online_backup)

        if self.online_backup:
            self._add_online_backup_steps()
        else:
            self._add_offline_backup_steps()
        self.add_step(kinds.BACKUP_COMPRESS_DATA)

    def set_context_mapping(self):
        db_backups = [*kinds.ONLINE_DB_BACKUPS.values(), *kinds.OFFLINE_DB_BACKUPS.values()]
        return [
            MappingRule.uniform(
                "backup_dir",
                [
                    kinds.BACKUP_PREPARE_DIRECTORY,
                    kinds.BACKUP_METADATA,
                    kinds.BACKUP_CONFIG_FILES,
                    kinds.BACKUP_COMPRESS_DATA,
                    kinds.BACKUP_PULP,
                    *db_backups,
                ],
            ),
            MappingRule.uniform("preserve_dir", [kinds.BACKUP_PREPARE_DIRECTORY]),
            MappingRule.uniform(
                "incremental_dir", [kinds.BACKUP_PREPARE_DIRECTORY, kinds.BACKUP_METADATA]
            ),
            MappingRule.uniform("proxy_features", [kinds.BACKUP_CONFIG_FILES]),
            MappingRule("skip_pulp_content", {kinds.BACKUP_PULP: "skip"}),
            MappingRule.uniform("tar_volume_size", [kinds.BACKUP_PULP]),
            MappingRule.uniform("include_db_dumps", [kinds.BACKUP_SAFETY_CONFIRMATION]),
        ]

    def _add_online_backup_steps(self):
        self.add_step(kinds.BACKUP_CONFIG_FILES, ignore_changed_files=True, online_backup=True)
        self.add_step(kinds.BACKUP_PULP, ensure_unchanged=True)
        self.add_steps(*kinds.ONLINE_DB_BACKUPS.values())

    def _add_offline_backup_steps(self):
        if self.include_db_dumps:
            self._add_local_db_dumps()
        self.add_step(kinds.FOREMAN_PROXY_FEATURES, load_only=True)
        self.add_steps(
            self.find_procedures(kinds.MAINTENANCE_MODE_ON),
            self.find_procedures(kinds.STOP_SERVICES),
            kinds.BACKUP_CONFIG_FILES,
            kinds.BACKUP_PULP,
            *kinds.OFFLINE_DB_BACKUPS.values(),
            self.find_procedures(kinds.START_SERVICES),
            self.find_procedures(kinds.MAINTENANCE_MODE_OFF),
        )

    def _add_local_db_dumps(self):
        # remote databases are backed up by the host that owns them
        for database, dump_kind in kinds.ONLINE_DB_BACKUPS.items():
            try:
                local = self.capabilities.is_database_local(database)
            except Exception as err:  # noqa: BLE001
                logger.warning(f"Could not tell whether {database} is local: {err}")
                self.add_step(
                    kinds.CAPABILITY_CHECK_FAILED,
                    capability="database_local",
                    subject=database,
                    error=str(err),
                )
                continue
            if local:
                self.add_step(dump_kind)


class BackupRescueCleanup(Scenario):
    """Bring services back and remove partial artifacts after a failed backup."""

    label = "backup-rescue-cleanup"
    description = "Failed backup cleanup"
    tags = frozenset({"backup"})
    run_strategy = RunStrategy.FAIL_SLOW
    params = (
        param("backup_dir", "Directory where to backup to", required=True),
        param("preserve_dir", "Directory where to backup to"),
        param("strategy", "Strategy of the failed backup. One of [online, offline]"),
    )

    def compose(self):
        if self.context.get("strategy") != "online":
            self.add_steps(self.find_procedures(kinds.START_SERVICES))
            self.add_steps(self.find_procedures(kinds.MAINTENANCE_MODE_OFF))
        self.add_step(kinds.BACKUP_CLEAN)

    def set_context_mapping(self):
        return [
            MappingRule.uniform("backup_dir", [kinds.BACKUP_CLEAN]),
            MappingRule.uniform("preserve_dir", [kinds.BACKUP_CLEAN]),
        ]
