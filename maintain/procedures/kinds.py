"""Identifiers for procedure kinds and logical procedure labels.

Kinds name a concrete unit of work; mapping rules and the procedure registry are
keyed by them. Logical identifiers name a role ("stop services") that a
deployment may fulfil with one or more kinds, resolved via `find_procedures`.
"""

# confirmation gates
BACKUP_SAFETY_CONFIRMATION = "backup.online.safety_confirmation"
BACKUP_ACCESSIBILITY_CONFIRMATION = "backup.accessibility_confirmation"

# backup body
BACKUP_PREPARE_DIRECTORY = "backup.prepare_directory"
BACKUP_METADATA = "backup.metadata"
BACKUP_CONFIG_FILES = "backup.config_files"
BACKUP_PULP = "backup.pulp"
BACKUP_ONLINE_CANDLEPIN_DB = "backup.online.candlepin_db"
BACKUP_ONLINE_FOREMAN_DB = "backup.online.foreman_db"
BACKUP_ONLINE_PULPCORE_DB = "backup.online.pulpcore_db"
BACKUP_OFFLINE_CANDLEPIN_DB = "backup.offline.candlepin_db"
BACKUP_OFFLINE_FOREMAN_DB = "backup.offline.foreman_db"
BACKUP_OFFLINE_PULPCORE_DB = "backup.offline.pulpcore_db"
BACKUP_COMPRESS_DATA = "backup.compress_data"
BACKUP_CLEAN = "backup.clean"

FOREMAN_PROXY_FEATURES = "foreman_proxy.features"
SERVICE_START = "service.start"
SERVICE_STOP = "service.stop"
MAINTENANCE_MODE_ENABLE = "maintenance_mode.enable"
MAINTENANCE_MODE_DISABLE = "maintenance_mode.disable"

# placeholder for a capability question that could not be answered while composing
CAPABILITY_CHECK_FAILED = "capability.check_failed"

# logical identifiers
MAINTENANCE_MODE_ON = "maintenance_mode_on"
MAINTENANCE_MODE_OFF = "maintenance_mode_off"
START_SERVICES = "service_start"
STOP_SERVICES = "service_stop"

DEFAULT_LOGICAL_PROCEDURES = {
    MAINTENANCE_MODE_ON: (MAINTENANCE_MODE_ENABLE,),
    MAINTENANCE_MODE_OFF: (MAINTENANCE_MODE_DISABLE,),
    START_SERVICES: (SERVICE_START,),
    STOP_SERVICES: (SERVICE_STOP,),
}

# logical databases, in the order they are always backed up
CANDLEPIN_DATABASE = "candlepin_database"
FOREMAN_DATABASE = "foreman_database"
PULPCORE_DATABASE = "pulpcore_database"

ONLINE_DB_BACKUPS = {
    CANDLEPIN_DATABASE: BACKUP_ONLINE_CANDLEPIN_DB,
    FOREMAN_DATABASE: BACKUP_ONLINE_FOREMAN_DB,
    PULPCORE_DATABASE: BACKUP_ONLINE_PULPCORE_DB,
}
OFFLINE_DB_BACKUPS = {
    CANDLEPIN_DATABASE: BACKUP_OFFLINE_CANDLEPIN_DB,
    FOREMAN_DATABASE: BACKUP_OFFLINE_FOREMAN_DB,
    PULPCORE_DATABASE: BACKUP_OFFLINE_PULPCORE_DB,
}
