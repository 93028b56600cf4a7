from contextlib import contextmanager
from typing import Dict, Iterator, List, Union

import mysql.connector
from mysql.connector import Error

from clipsync.config import MySQLConfig

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS clipboard (
        id BIGINT NOT NULL,
        customer_id VARCHAR(255) NOT NULL,
        clipboard_data LONGTEXT NOT NULL,
        PRIMARY KEY (customer_id, id)
    )
"""


class MySQLClipboardTable:
    """Durable clipboard table; one row per (customer_id, id)."""

    def __init__(self, host: str, user: str, password: str, database: str, port: int = 3306) -> None:
        self._params = dict(
            host=host, user=user, password=password, database=database, port=port
        )

    @classmethod
    def from_config(cls, config: MySQLConfig) -> "MySQLClipboardTable":
        return cls(
            host=config.host,
            user=config.user,
            password=config.password,
            database=config.database,
            port=config.port,
        )

    @contextmanager
    def _connection(self) -> Iterator["mysql.connector.MySQLConnection"]:
        # A connection per call: units run on separate threads and
        # connections must not be shared between them.
        conn = mysql.connector.connect(**self._params)
        try:
            yield conn
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(sql, params)
                conn.commit()
            except Error:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def create_schema(self) -> None:
        self._execute(CREATE_TABLE_SQL)

    def upsert(self, item_id: int, customer_id: str, clipboard_data: str) -> int:
        """
        Insert or replace one row. The id is supplied by the caller, so the
        returned id is always the one passed in.
        """
        sql = """
            REPLACE INTO clipboard (id, customer_id, clipboard_data)
            VALUES (%s, %s, %s)
        """
        self._execute(sql, (item_id, customer_id, clipboard_data))
        return item_id

    def list(self, customer_id: str) -> List[Dict[str, Union[int, str]]]:
        sql = "SELECT id, clipboard_data FROM clipboard WHERE customer_id = %s ORDER BY id DESC"
        with self._connection() as conn:
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(sql, (customer_id,))
                rows = cursor.fetchall()
            finally:
                cursor.close()
        return [{"id": int(row["id"]), "clipboard_data": row["clipboard_data"]} for row in rows]

    def delete(self, item_id: int, customer_id: str) -> None:
        sql = "DELETE FROM clipboard WHERE id = %s AND customer_id = %s"
        self._execute(sql, (item_id, customer_id))
