"""
Transactional Store

Wraps a SQLAlchemy engine (and its bounded connection pool) behind a small
query interface, plus a transaction scope whose handle is the only way to
issue statements inside that scope.

Usage:
    store = Store.from_app(app)
    row = store.fetch_one("SELECT * FROM recipes WHERE id = :id", {'id': 1})

    def work(tx):
        result = tx.execute("UPDATE recipes SET title = :t WHERE id = :id", {...})
        return result.rows_affected

    store.with_transaction(work)
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.sql.dml import Insert

from .errors import StorageError

logger = logging.getLogger(__name__)

# Execution option marking ambient read connections (sqlite uses a deferred BEGIN for them)
READ_ONLY_OPTION = 'store_read_only'


@dataclass
class ExecuteResult:
    rows_affected: int
    generated_id: Optional[int] = None


# ============================================
# STATEMENT HELPERS
# ============================================

def _statement(query):
    if isinstance(query, str):
        return text(query)
    return query


def _run(conn, query, params):
    stmt = _statement(query)
    return stmt, conn.execute(stmt, params or {})


def _execute_result(stmt, result):
    generated_id = None
    if isinstance(stmt, Insert):
        try:
            pk = result.inserted_primary_key
            generated_id = pk[0] if pk else None
        except InvalidRequestError:
            generated_id = None
    else:
        generated_id = result.lastrowid or None
    return ExecuteResult(rows_affected=result.rowcount, generated_id=generated_id)


def update_columns(runner, table, row_id, values):
    """
    UPDATE the named columns of one row by id.

    table and the keys of values are internal identifiers, never user input.
    Returns the ExecuteResult.
    """
    assignments = ', '.join(f"{column} = :{column}" for column in values)
    params = dict(values)
    params['row_id'] = row_id
    return runner.execute(f"UPDATE {table} SET {assignments} WHERE id = :row_id", params)


def _first(result):
    row = result.mappings().first()
    return dict(row) if row is not None else None


def _all(result):
    return [dict(row) for row in result.mappings().all()]


# ============================================
# SQLITE CONNECTION SETUP
# ============================================

def _sqlite_on_connect(dbapi_connection, connection_record):
    # Hand transaction control to SQLAlchemy and enforce foreign keys
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_on_begin(conn):
    # Writers take the write lock up front so they queue instead of failing on upgrade
    if conn.get_execution_options().get(READ_ONLY_OPTION):
        conn.exec_driver_sql("BEGIN")
    else:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def configure_sqlite(engine):
    """Install the sqlite connection hooks once per engine."""
    if event.contains(engine, 'connect', _sqlite_on_connect):
        return
    event.listen(engine, 'connect', _sqlite_on_connect)
    event.listen(engine, 'begin', _sqlite_on_begin)
    # Connections opened before the hooks existed would miss the pragmas
    engine.dispose()


# ============================================
# TRANSACTION HANDLE
# ============================================

class Transaction:
    """
    Statement runner bound to one connection inside one open transaction.

    It holds no reference to the Store, so code handed a Transaction cannot
    reach the ambient pool by accident. The handle is dead once its scope ends.
    """

    def __init__(self, connection):
        self._conn = connection
        self.dialect_name = connection.dialect.name

    def _connection(self):
        if self._conn is None:
            raise RuntimeError("Transaction handle used after its scope ended")
        return self._conn

    def execute(self, query, params=None):
        stmt, result = _run(self._connection(), query, params)
        return _execute_result(stmt, result)

    def fetch_one(self, query, params=None):
        _, result = _run(self._connection(), query, params)
        return _first(result)

    def fetch_all(self, query, params=None):
        _, result = _run(self._connection(), query, params)
        return _all(result)

    def _close(self):
        self._conn = None


# ============================================
# STORE
# ============================================

class Store:
    """Query and transaction entry point over a pooled SQLAlchemy engine."""

    def __init__(self, engine):
        self.engine = engine
        self.dialect_name = engine.dialect.name
        self._local = threading.local()
        if self.dialect_name == 'sqlite':
            configure_sqlite(engine)

    @classmethod
    def from_app(cls, app):
        """Build a store on the Flask-SQLAlchemy engine of an app."""
        from models import db

        with app.app_context():
            return cls(db.engine)

    @classmethod
    def from_url(cls, url, **engine_options):
        return cls(create_engine(url, **engine_options))

    def dispose(self):
        """Close every pooled connection (process shutdown)."""
        self.engine.dispose()

    # --------------------------------------------
    # Ambient (single statement) access
    # --------------------------------------------

    def _ensure_outside_transaction(self):
        if getattr(self._local, 'in_transaction', False):
            raise RuntimeError(
                "Store used directly inside an open transaction; "
                "issue statements through the transaction handle instead"
            )

    def execute(self, query, params=None):
        """Run one write statement in its own short transaction."""
        self._ensure_outside_transaction()
        try:
            with self.engine.begin() as conn:
                stmt, result = _run(conn, query, params)
                return _execute_result(stmt, result)
        except SQLAlchemyError as exc:
            logger.exception("Statement failed: %s", exc)
            raise StorageError() from exc

    def fetch_one(self, query, params=None):
        self._ensure_outside_transaction()
        try:
            with self.engine.connect() as conn:
                conn.execution_options(**{READ_ONLY_OPTION: True})
                _, result = _run(conn, query, params)
                return _first(result)
        except SQLAlchemyError as exc:
            logger.exception("Query failed: %s", exc)
            raise StorageError() from exc

    def fetch_all(self, query, params=None):
        self._ensure_outside_transaction()
        try:
            with self.engine.connect() as conn:
                conn.execution_options(**{READ_ONLY_OPTION: True})
                _, result = _run(conn, query, params)
                return _all(result)
        except SQLAlchemyError as exc:
            logger.exception("Query failed: %s", exc)
            raise StorageError() from exc

    # --------------------------------------------
    # Transactions
    # --------------------------------------------

    @contextmanager
    def transaction(self, read_only=False):
        """
        Open a connection, begin a transaction and yield its handle.

        Commits when the block exits normally; rolls back and re-raises on
        any exception. The connection always goes back to the pool. Driver
        errors surface as StorageError; domain errors pass through unchanged.

        With read_only=True every statement in the block reads the same
        snapshot: sqlite holds its shared lock until the scope ends, other
        back ends run the block at REPEATABLE READ.
        """
        self._ensure_outside_transaction()
        self._local.in_transaction = True
        try:
            with self.engine.connect() as conn:
                if read_only:
                    conn.execution_options(**{READ_ONLY_OPTION: True})
                    if self.dialect_name != 'sqlite':
                        conn.execution_options(isolation_level='REPEATABLE READ')
                trans = conn.begin()
                tx = Transaction(conn)
                try:
                    yield tx
                except BaseException:
                    if trans.is_active:
                        trans.rollback()
                    logger.debug("Transaction rolled back")
                    raise
                else:
                    trans.commit()
                finally:
                    tx._close()
        except SQLAlchemyError as exc:
            logger.exception("Transaction failed: %s", exc)
            raise StorageError() from exc
        finally:
            self._local.in_transaction = False

    def with_transaction(self, fn, read_only=False):
        """Run fn(tx) inside one transaction and return its result."""
        with self.transaction(read_only=read_only) as tx:
            return fn(tx)

    def read(self, fn):
        """Run fn(tx) against one consistent snapshot (multi-query reads)."""
        return self.with_transaction(fn, read_only=True)
