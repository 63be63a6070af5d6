"""
Module: inventory_kernel.db.engine
Responsibility: The Database store handle -- SQLAlchemy engine, session
    factory, and the transactional scope every ledger unit of work runs in.
Architecture position: Kernel > DB.  May import from db/ and (for table
    creation) models/.  MUST NOT import from services/, selectors/, domain/.

Invariants enforced:
    - No module-level engine: callers build a Database and pass it to the
      ledger explicitly.
    - PostgreSQL sessions run at READ COMMITTED; StockService's conditional
      UPDATE statements take the row lock that serializes same-product
      writers until commit.
    - SQLite write transactions start with BEGIN IMMEDIATE so that
      concurrent writers queue on the database lock (up to busy_timeout)
      instead of failing on lock upgrade.
    - session_scope() commits on success and rolls back on any exception.

Failure modes:
    - OperationalError when the database is unreachable or a lock wait
      exceeds the configured timeout.
    - Pool exhaustion if pool_size + max_overflow connections are in use.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from inventory_kernel.db.immutability import register_immutability_listeners
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def _create_sqlite_engine(url, echo: bool, busy_timeout: float) -> Engine:
    in_memory = url.database in (None, "", ":memory:")
    kwargs = {
        "echo": echo,
        "connect_args": {"timeout": busy_timeout, "check_same_thread": False},
    }
    if in_memory:
        # One shared connection; an in-memory database is single-threaded only.
        kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Take BEGIN away from pysqlite so _on_begin decides the lock mode
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


class Database:
    """
    Explicit handle on the Inventory Store and Transaction Log tables.

    Contract:
        Owns one SQLAlchemy engine and its session factory.  All ledger
        writes run inside session_scope(); selectors receive a session from
        the caller and never commit.

    Guarantees:
        - ORM immutability listeners are registered on construction.
        - dispose() releases every pooled connection.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        register_immutability_listeners()

    @classmethod
    def from_url(
        cls,
        database_url: str,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        busy_timeout: float = 30.0,
    ) -> "Database":
        """
        Build a Database from a SQLAlchemy URL.

        Args:
            database_url: PostgreSQL URL for production, or a SQLite URL for
                local and test use.
            echo: If True, log all SQL statements.
            pool_size: Connections kept in the pool (PostgreSQL).
            max_overflow: Connections allowed beyond pool_size (PostgreSQL).
            pool_pre_ping: Test connections before use (PostgreSQL).
            pool_timeout: Seconds to wait for a pooled connection (PostgreSQL).
            pool_recycle: Seconds after which a connection is recycled (PostgreSQL).
            busy_timeout: Seconds a SQLite writer waits for the database lock.
        """
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite":
            engine = _create_sqlite_engine(url, echo, busy_timeout)
        else:
            engine = create_engine(
                url,
                echo=echo,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                isolation_level="READ COMMITTED",
            )

        logger.info(
            "engine_initialized",
            extra={
                "dialect": engine.dialect.name,
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "echo": echo,
            },
        )
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Session factory, e.g. for threads that each need their own session."""
        return self._session_factory

    def session(self) -> Session:
        """Get a new session. The caller closes it."""
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Postconditions: On normal exit, the session is committed and closed.
            On exception, the session is rolled back and closed and the
            exception re-raised.

        Usage:
            with database.session_scope() as session:
                session.add(entity)
        """
        session = self._session_factory()
        logger.debug("transaction_started")
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed")
        except Exception:
            session.rollback()
            logger.debug("transaction_rolled_back")
            raise
        finally:
            session.close()

    def create_tables(self, install_triggers: bool = True) -> None:
        """
        Create the inventory and stock_transactions tables.

        Args:
            install_triggers: If True, install the database-level
                immutability triggers for this dialect.
        """
        from inventory_kernel.db.base import Base
        from inventory_kernel.db.triggers import install_immutability_triggers

        # Models must be imported so Base.metadata knows their tables
        import inventory_kernel.models  # noqa: F401

        Base.metadata.create_all(self._engine)
        if install_triggers:
            install_immutability_triggers(self._engine)
        logger.info("tables_created", extra={"install_triggers": install_triggers})

    def drop_tables(self) -> None:
        """Drop all ledger tables. Use with caution - primarily for testing."""
        from inventory_kernel.db.base import Base
        from inventory_kernel.db.triggers import uninstall_immutability_triggers

        import inventory_kernel.models  # noqa: F401

        uninstall_immutability_triggers(self._engine)
        Base.metadata.drop_all(self._engine)

    def check_connection(self) -> bool:
        """Quick probe: can a connection be opened and a query run?"""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.warning("connection_check_failed", exc_info=True)
            return False

    def dispose(self) -> None:
        """Release all pooled connections."""
        self._engine.dispose()
