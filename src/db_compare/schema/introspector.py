"""PostgreSQL schema introspection via pg_catalog and information_schema.

This module queries a live database for the metadata the comparison engine
needs:
- Base tables of a schema
- Columns: raw type, nullability, default, identity/generated flags
- Indexes: name, key columns in key-part order, derived kind

Uses psycopg (v3) ``AsyncConnection`` for PostgreSQL connections.
``PostgresSchemaReader`` adapts it to the ``SchemaReader`` protocol.
"""

import logging

import psycopg
from psycopg import AsyncConnection

from db_compare.config.models import ConnectionProfile
from db_compare.errors import ConnectivityError
from db_compare.schema.models import ColumnDescriptor, IndexDescriptor, IndexKind

logger = logging.getLogger(__name__)

# Tables to exclude from introspection (system tables)
DEFAULT_EXCLUDED_TABLES = frozenset(
    {
        "schema_migrations",
        "pg_stat_statements",
        "spatial_ref_sys",
    }
)

# pg_attribute.attidentity / attgenerated codes
_IDENTITY_EXTRA = {"a": "identity always", "d": "identity by default"}
_GENERATED_EXTRA = {"s": "stored generated"}


class SchemaIntrospector:
    """Introspects one PostgreSQL schema.

    Usage:
        async with SchemaIntrospector(database_url) as introspector:
            tables = await introspector.get_tables()
            columns = await introspector.get_columns("users")
            indexes = await introspector.get_indexes("users")
    """

    def __init__(
        self,
        database_url: str,
        schema_name: str = "public",
        excluded_tables: frozenset[str] | None = None,
        connect_timeout: int = 10,
    ):
        """Initialize with database connection URL.

        Args:
            database_url: PostgreSQL connection URL
            schema_name: Schema to introspect (default: public)
            excluded_tables: Table names to skip. Defaults to
                ``DEFAULT_EXCLUDED_TABLES``.
            connect_timeout: Seconds before a connection attempt fails
        """
        self._database_url = database_url
        self._schema_name = schema_name
        self._excluded_tables = (
            DEFAULT_EXCLUDED_TABLES if excluded_tables is None else excluded_tables
        )
        self._connect_timeout = connect_timeout
        self._conn: AsyncConnection | None = None

    async def __aenter__(self) -> "SchemaIntrospector":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the connection."""
        # Append connect_timeout if not already in URL
        url = self._database_url
        if "connect_timeout" not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}connect_timeout={self._connect_timeout}"

        self._conn = await psycopg.AsyncConnection.connect(url, autocommit=True)

    async def close(self) -> None:
        """Close the connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> AsyncConnection:
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use async with statement.")
        return self._conn

    async def test_connection(self) -> None:
        """Run a trivial query to verify the connection works."""
        async with self._require_conn().cursor() as cur:
            await cur.execute("SELECT 1")
            await cur.fetchone()

    async def schema_exists(self) -> bool:
        """Check that the configured schema exists."""
        async with self._require_conn().cursor() as cur:
            await cur.execute(
                "SELECT 1 FROM pg_namespace WHERE nspname = %s", (self._schema_name,)
            )
            return await cur.fetchone() is not None

    async def get_tables(self) -> list[str]:
        """Get base table names in schema, sorted by name."""
        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """
        async with self._require_conn().cursor() as cur:
            await cur.execute(query, (self._schema_name,))
            rows = await cur.fetchall()
        return sorted(row[0] for row in rows if row[0] not in self._excluded_tables)

    async def get_columns(self, table_name: str) -> list[ColumnDescriptor]:
        """Get columns for a table in ordinal order."""
        query = """
            SELECT
                a.attname,
                format_type(a.atttypid, a.atttypmod),
                NOT a.attnotnull,
                pg_get_expr(d.adbin, d.adrelid),
                a.attidentity,
                a.attgenerated
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
            WHERE n.nspname = %s
              AND c.relname = %s
              AND a.attnum > 0
              AND NOT a.attisdropped
            ORDER BY a.attnum
        """
        async with self._require_conn().cursor() as cur:
            await cur.execute(query, (self._schema_name, table_name))
            rows = await cur.fetchall()

        columns = []
        for name, data_type, nullable, default, identity, generated in rows:
            columns.append(
                ColumnDescriptor(
                    name=name,
                    type=data_type,
                    nullable=nullable,
                    default=default,
                    extra=self._extra(identity, generated),
                )
            )
        return columns

    @staticmethod
    def _extra(identity: str | None, generated: str | None) -> str:
        """Map identity/generated catalog flags to an ``extra`` string."""
        if identity and identity in _IDENTITY_EXTRA:
            return _IDENTITY_EXTRA[identity]
        if generated and generated in _GENERATED_EXTRA:
            return _GENERATED_EXTRA[generated]
        return ""

    async def get_indexes(self, table_name: str) -> list[IndexDescriptor]:
        """Get indexes for a table, including the primary key.

        Key columns are ordered by key-part position; expression key parts
        are rendered with ``pg_get_indexdef``. INCLUDE columns are skipped.
        """
        query = """
            SELECT
                i.relname AS index_name,
                array_agg(
                    coalesce(a.attname::text, pg_get_indexdef(ix.indexrelid, x.ordinality::int, true))
                    ORDER BY x.ordinality
                ) AS columns,
                ix.indisunique AS is_unique,
                ix.indisprimary AS is_primary
            FROM pg_index ix
            JOIN pg_class t ON t.oid = ix.indrelid
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS x(attnum, ordinality) ON TRUE
            LEFT JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = x.attnum
            WHERE n.nspname = %s
              AND t.relname = %s
              AND x.ordinality <= ix.indnkeyatts
            GROUP BY i.relname, ix.indisunique, ix.indisprimary
            ORDER BY i.relname
        """
        async with self._require_conn().cursor() as cur:
            await cur.execute(query, (self._schema_name, table_name))
            rows = await cur.fetchall()

        indexes = []
        for name, columns, is_unique, is_primary in rows:
            indexes.append(
                IndexDescriptor(
                    name=name,
                    columns=tuple(columns),
                    kind=IndexKind.derive(name, unique=is_unique, primary=is_primary),
                )
            )
        return indexes


class PostgresSchemaReader:
    """``SchemaReader`` backed by one ``SchemaIntrospector`` per database and schema.

    Connections are opened on first use of a profile and kept until
    ``close()``. Driver errors surface as ``ConnectivityError``.

    Usage:
        async with PostgresSchemaReader() as reader:
            engine = ComparisonEngine(reader)
            result = await engine.compare(source, targets)
    """

    def __init__(
        self,
        excluded_tables: frozenset[str] | None = None,
        connect_timeout: int = 10,
    ):
        self._excluded_tables = excluded_tables
        self._connect_timeout = connect_timeout
        # One connection per (resolved url, schema)
        self._introspectors: dict[tuple[str, str], SchemaIntrospector] = {}

    async def __aenter__(self) -> "PostgresSchemaReader":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close every connection opened by this reader."""
        introspectors = list(self._introspectors.values())
        self._introspectors.clear()
        for introspector in introspectors:
            await introspector.close()

    @staticmethod
    def _connectivity_error(
        profile: ConnectionProfile, message: str
    ) -> ConnectivityError:
        return ConnectivityError(
            f"{message} ({profile.label}: {profile.host}:{profile.port}/{profile.database})",
            host=profile.host,
            port=profile.port,
            database=profile.database,
        )

    async def _introspector(self, profile: ConnectionProfile) -> SchemaIntrospector:
        key = (profile.resolve_url(), profile.db_schema)
        if key in self._introspectors:
            return self._introspectors[key]

        introspector = SchemaIntrospector(
            key[0],
            schema_name=profile.db_schema,
            excluded_tables=self._excluded_tables,
            connect_timeout=self._connect_timeout,
        )
        logger.debug("Connecting to profile %s", profile.label)
        try:
            await introspector.connect()
            schema_found = await introspector.schema_exists()
        except psycopg.Error as e:
            await introspector.close()
            raise self._connectivity_error(
                profile, f"Failed to connect to database: {e}"
            ) from e

        if not schema_found:
            await introspector.close()
            raise self._connectivity_error(
                profile, f"Schema '{profile.db_schema}' does not exist"
            )

        self._introspectors[key] = introspector
        return introspector

    async def test_connection(self, profile: ConnectionProfile) -> None:
        """Verify that ``profile`` can be reached and its schema exists."""
        introspector = await self._introspector(profile)
        try:
            await introspector.test_connection()
        except psycopg.Error as e:
            raise self._connectivity_error(profile, f"Connection test failed: {e}") from e

    async def get_tables(self, profile: ConnectionProfile) -> list[str]:
        introspector = await self._introspector(profile)
        try:
            return await introspector.get_tables()
        except psycopg.Error as e:
            raise self._connectivity_error(profile, f"Failed to read tables: {e}") from e

    async def get_columns(
        self, profile: ConnectionProfile, table: str
    ) -> list[ColumnDescriptor]:
        introspector = await self._introspector(profile)
        try:
            return await introspector.get_columns(table)
        except psycopg.Error as e:
            raise self._connectivity_error(
                profile, f"Failed to read columns of {table}: {e}"
            ) from e

    async def get_indexes(
        self, profile: ConnectionProfile, table: str
    ) -> list[IndexDescriptor]:
        introspector = await self._introspector(profile)
        try:
            return await introspector.get_indexes(table)
        except psycopg.Error as e:
            raise self._connectivity_error(
                profile, f"Failed to read indexes of {table}: {e}"
            ) from e
