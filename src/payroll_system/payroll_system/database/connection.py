from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 0


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Each repository call opens a connection and closes it when done. With
    ``pool_size > 0`` connections come from a mysql-connector pool and
    ``close()`` returns them to it.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _params(self) -> dict:
        return {
            "host": self._config.host,
            "port": int(self._config.port),
            "user": self._config.user,
            "password": self._config.password,
            "database": self._config.database,
            "charset": "utf8mb4",
            "autocommit": False,
        }

    def connect(self):
        if self._config.pool_size <= 0:
            return mysql.connector.connect(**self._params())

        if self._pool is None:
            logger.debug("creating connection pool (size=%d)", self._config.pool_size)
            self._pool = pooling.MySQLConnectionPool(
                pool_name="payroll",
                pool_size=int(self._config.pool_size),
                **self._params(),
            )
        return self._pool.get_connection()
