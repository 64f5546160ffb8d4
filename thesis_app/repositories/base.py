"""
Base Repository - Thesis Defense Platform
thesis_app/repositories/base.py

Base repository class with Snowflake connection management and common utilities.
"""

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

import snowflake.connector
from snowflake.connector import DictCursor
from snowflake.connector.errors import DatabaseError, InterfaceError, ProgrammingError

from thesis_app.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    ForeignKeyViolationException,
    RepositoryException,
)
from thesis_app.services.snowflake import get_snowflake_connection

IN_CHUNK_SIZE = 1000


class BaseRepository:
    """Base repository with Snowflake connection management."""

    @contextmanager
    def get_connection(self) -> Generator[snowflake.connector.SnowflakeConnection, None, None]:
        """Context manager for Snowflake connections."""
        conn = None
        try:
            conn = get_snowflake_connection()
            yield conn
        except InterfaceError as e:
            raise DatabaseConnectionException(f"Failed to connect to Snowflake: {e}")
        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_cursor(self, dict_cursor: bool = True) -> Generator[Any, None, None]:
        """Context manager for Snowflake cursors with automatic connection cleanup."""
        with self.get_connection() as conn:
            cursor = conn.cursor(DictCursor) if dict_cursor else conn.cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    def execute_query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        fetch_one: bool = False,
        fetch_all: bool = False,
        commit: bool = False,
    ) -> Optional[Any]:
        """
        Execute a SQL query with error handling.

        Args:
            sql: SQL query string
            params: Query parameters
            fetch_one: Return single row
            fetch_all: Return all rows
            commit: Commit transaction after execution

        Returns:
            Query results, or the affected row count when nothing is fetched
        """
        with self.get_cursor() as cursor:
            try:
                cursor.execute(sql, tuple(params or ()))

                if commit:
                    cursor.connection.commit()

                if fetch_one:
                    return cursor.fetchone()
                elif fetch_all:
                    return cursor.fetchall()

                return cursor.rowcount

            except ProgrammingError as e:
                error_msg = str(e).upper()
                if "UNIQUE" in error_msg or "DUPLICATE" in error_msg:
                    raise DuplicateEntityException(str(e))
                elif "FOREIGN KEY" in error_msg:
                    raise ForeignKeyViolationException(str(e))
                raise RepositoryException(f"Query error: {e}")
            except DatabaseError as e:
                raise RepositoryException(f"Database error: {e}")

    def execute_many(self, statements: List[Tuple[str, Sequence[Any]]]) -> int:
        """
        Run several statements on one connection and commit once.

        Returns:
            Total affected row count
        """
        affected = 0
        with self.get_cursor() as cursor:
            try:
                for sql, params in statements:
                    cursor.execute(sql, tuple(params or ()))
                    affected += cursor.rowcount or 0
                cursor.connection.commit()
            except ProgrammingError as e:
                cursor.connection.rollback()
                error_msg = str(e).upper()
                if "UNIQUE" in error_msg or "DUPLICATE" in error_msg:
                    raise DuplicateEntityException(str(e))
                elif "FOREIGN KEY" in error_msg:
                    raise ForeignKeyViolationException(str(e))
                raise RepositoryException(f"Query error: {e}")
            except DatabaseError as e:
                cursor.connection.rollback()
                raise RepositoryException(f"Database error: {e}")
        return affected

    def paginate(
        self,
        select_sql: str,
        count_sql: str,
        params: Sequence[Any],
        limit: int,
        offset: int,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Run a filtered SELECT with LIMIT/OFFSET plus its COUNT(*) twin.

        Returns:
            (rows, total)
        """
        count_row = self.execute_query(count_sql, params, fetch_one=True) or {}
        total = int(count_row.get("TOTAL") or 0)
        rows = self.execute_query(
            f"{select_sql} LIMIT %s OFFSET %s",
            list(params) + [limit, offset],
            fetch_all=True,
        ) or []
        return rows, total

    def fetch_in(self, select_sql: str, column: str, values: Iterable[Any]) -> List[Dict[str, Any]]:
        """
        SELECT rows whose column matches any of the given values.

        Values are de-duplicated and sent IN_CHUNK_SIZE at a time so large scans
        stay under the statement size limit.
        """
        ids = sorted({str(v) for v in values if v})
        rows: List[Dict[str, Any]] = []
        for start in range(0, len(ids), IN_CHUNK_SIZE):
            chunk = ids[start:start + IN_CHUNK_SIZE]
            placeholders = ", ".join(["%s"] * len(chunk))
            rows.extend(self.execute_query(
                f"{select_sql} WHERE {column} IN ({placeholders})",
                chunk,
                fetch_all=True,
            ) or [])
        return rows

    def build_where(self, filters: Dict[str, Any]) -> Tuple[str, List[Any]]:
        """
        Build a WHERE clause from column -> value pairs, skipping None values.

        Columns are trusted identifiers from the calling repository.
        """
        clauses = []
        params: List[Any] = []
        for column, value in filters.items():
            if value is None:
                continue
            clauses.append(f"{column} = %s")
            params.append(str(value) if isinstance(value, UUID) else value)
        if not clauses:
            return "", params
        return "WHERE " + " AND ".join(clauses), params

    def uuid_to_str(self, uuid_val: Optional[UUID]) -> Optional[str]:
        """Convert UUID to string for Snowflake storage."""
        return str(uuid_val) if uuid_val else None

    def normalize_timestamp(self, dt: Optional[datetime]) -> Optional[datetime]:
        """Ensure timestamp is UTC-aware."""
        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    def parse_variant(self, value: Any) -> Dict[str, Any]:
        """VARIANT columns come back as JSON text; anything unparsable becomes {}."""
        if value is None:
            return {}
        if isinstance(value, dict):
            return value
        try:
            parsed = json.loads(value)
        except (TypeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def build_update_query(
        self,
        table_name: str,
        update_data: Dict[str, Any],
        where_column: str,
        where_value: Any,
        additional_set: Optional[Dict[str, str]] = None,
    ) -> Tuple[str, List[Any]]:
        """
        Build a dynamic UPDATE query.

        Args:
            table_name: Name of the table
            update_data: Dictionary of column -> value to update
            where_column: Column name for WHERE clause
            where_value: Value for WHERE clause
            additional_set: Raw SQL expressions per column (e.g. UPDATED_AT -> CURRENT_TIMESTAMP())

        Returns:
            Tuple of (sql_string, params_list)
        """
        set_clauses = []
        params: List[Any] = []

        for column, value in update_data.items():
            set_clauses.append(f"{column.upper()} = %s")
            params.append(str(value) if isinstance(value, UUID) else value)

        if additional_set:
            for column, expression in additional_set.items():
                set_clauses.append(f"{column.upper()} = {expression}")

        params.append(str(where_value))

        sql = f"""
            UPDATE {table_name}
            SET {', '.join(set_clauses)}
            WHERE {where_column} = %s
        """

        return sql, params
