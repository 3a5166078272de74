"""
Database persistence for per-service Cloud Files configuration.

The cloud settings and the public path live in separate tables, both keyed
by the owning service's id.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

CLOUD_TABLE = "rackspace_config"
PATH_TABLE = "file_public_path"

CLOUD_COLUMNS = ("username", "password", "tenant_name", "api_key", "url", "region",
                 "storage_type", "container")
PATH_COLUMNS = ("public_path",)

SCHEMA = """
CREATE TABLE IF NOT EXISTS rackspace_config (
    service_id INTEGER PRIMARY KEY,
    username TEXT,
    password TEXT,
    tenant_name TEXT,
    api_key TEXT,
    url TEXT,
    region TEXT,
    storage_type TEXT,
    container TEXT
);
CREATE TABLE IF NOT EXISTS file_public_path (
    service_id INTEGER PRIMARY KEY,
    public_path TEXT
);
"""


class ServiceConfigStore(object):

    def __init__(self, db_path=":memory:"):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        with self.conn:
            self.conn.executescript(SCHEMA)

    def close(self):
        self.conn.close()

    def _find(self, table, service_id):
        cursor = self.conn.execute("SELECT * FROM %s WHERE service_id = ?" % table, (service_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def _upsert(self, table, service_id, values):
        if self._find(table, service_id) is not None:
            if not values:
                return
            assignments = ", ".join("%s = ?" % column for column in values)
            self.conn.execute(
                "UPDATE %s SET %s WHERE service_id = ?" % (table, assignments),
                list(values.values()) + [service_id])
        else:
            # service_id goes first so the row is keyed before anything else is set
            columns = ["service_id"] + list(values)
            self.conn.execute(
                "INSERT INTO %s (%s) VALUES (%s)" % (table, ", ".join(columns), ", ".join("?" * len(columns))),
                [service_id] + list(values.values()))

    def get_config(self, service_id):
        config = {}
        cloud = self._find(CLOUD_TABLE, service_id)
        if cloud:
            config.update(cloud)
        path = self._find(PATH_TABLE, service_id)
        if path:
            config.update(path)
        return config

    def validate_config(self, config):
        return True

    def set_config(self, service_id, config):
        cloud = dict((k, config.get(k)) for k in CLOUD_COLUMNS if config.get(k) is not None)
        path = dict((k, config.get(k)) for k in PATH_COLUMNS if config.get(k) is not None)

        logger.debug("set_config: service %s: %s", service_id, sorted(cloud) + sorted(path))
        try:
            with self.conn:
                self._upsert(CLOUD_TABLE, service_id, cloud)
                self._upsert(PATH_TABLE, service_id, path)
        except sqlite3.Error as e:
            logger.error("set_config: service %s: %s", service_id, e)
            raise

    def remove_config(self, service_id):
        with self.conn:
            self.conn.execute("DELETE FROM %s WHERE service_id = ?" % CLOUD_TABLE, (service_id,))
            self.conn.execute("DELETE FROM %s WHERE service_id = ?" % PATH_TABLE, (service_id,))

    def get_available_configs(self):
        return None

    def get_config_schema(self):
        out = {}
        for table in (CLOUD_TABLE, PATH_TABLE):
            for row in self.conn.execute("PRAGMA table_info(%s)" % table):
                if row["name"] == "service_id":
                    continue
                out[row["name"]] = {
                    "name": row["name"],
                    "type": row["type"].lower(),
                    "allow_null": not row["notnull"],
                    "default": row["dflt_value"],
                }
        return out or None
