"""
Module: inventory_kernel.db.triggers
Responsibility: Loading, installing and verifying the database-level
    immutability triggers (layer 2 of 2; db/immutability.py is layer 1).
Architecture position: Kernel > DB.  MUST NOT import from models/, services/,
    selectors/ or domain/.

Invariants enforced (per dialect, see db/sql/<dialect>/):
    - stock_transactions: no UPDATE, no DELETE.
    - inventory: no DELETE.

Failure modes:
    - PostgreSQL RAISE EXCEPTION / SQLite RAISE(ABORT) on a violating
      statement, surfaced by SQLAlchemy as IntegrityError or
      OperationalError.
    - ValueError for a dialect without a trigger set.
    - FileNotFoundError if the SQL files are missing.
"""

from pathlib import Path

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

SQL_DIR = Path(__file__).parent / "sql"

TRIGGER_FILES = [
    "01_stock_transaction.sql",
    "02_inventory.sql",
]

DROP_FILE = "99_drop_all.sql"

ALL_TRIGGER_NAMES = [
    "trg_stock_transaction_immutability_update",
    "trg_stock_transaction_immutability_delete",
    "trg_inventory_delete",
]

SUPPORTED_DIALECTS = ("postgresql", "sqlite")


def _dialect_dir(engine: Engine) -> Path:
    name = engine.dialect.name
    if name not in SUPPORTED_DIALECTS:
        raise ValueError(f"No immutability triggers defined for dialect {name!r}")
    return SQL_DIR / name


def _load_sql_file(engine: Engine, filename: str) -> str:
    return (_dialect_dir(engine) / filename).read_text(encoding="utf-8")


def _load_all_trigger_sql(engine: Engine) -> str:
    """Concatenate all trigger files for the engine's dialect, in order."""
    parts = []
    for filename in TRIGGER_FILES:
        parts.append(f"-- Loading: {filename}")
        parts.append(_load_sql_file(engine, filename))
    return "\n".join(parts)


def _execute_script(engine: Engine, sql: str) -> None:
    if engine.dialect.name == "sqlite":
        # sqlite3 only runs multi-statement scripts through executescript()
        raw = engine.raw_connection()
        try:
            raw.driver_connection.executescript(sql)
        finally:
            raw.close()
        return

    with engine.connect() as conn:
        conn.exec_driver_sql(sql)
        conn.commit()


# =============================================================================
# Public API
# =============================================================================


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install database-level immutability triggers.

    Preconditions: Tables exist (call after metadata.create_all()).
    Postconditions: Every trigger in ALL_TRIGGER_NAMES is installed.
        Installation is idempotent.
    """
    _execute_script(engine, _load_all_trigger_sql(engine))


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove database-level immutability triggers.

    Only for schema teardown in tests and migrations.  No-op when the
    ledger tables do not exist.
    """
    if not inspect(engine).has_table("stock_transactions"):
        return
    _execute_script(engine, _load_sql_file(engine, DROP_FILE))


def installed_triggers(engine: Engine) -> set[str]:
    """Return the names of ledger triggers currently installed."""
    if engine.dialect.name == "sqlite":
        query = text("SELECT name FROM sqlite_master WHERE type = 'trigger'")
    else:
        query = text(
            "SELECT tgname FROM pg_trigger WHERE NOT tgisinternal"
        )
    with engine.connect() as conn:
        names = {row[0] for row in conn.execute(query)}
    return names & set(ALL_TRIGGER_NAMES)


def triggers_installed(engine: Engine) -> bool:
    """Check whether every ledger trigger is installed."""
    return installed_triggers(engine) == set(ALL_TRIGGER_NAMES)
