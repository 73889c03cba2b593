"""
Database loaders - idempotent upserts and read queries for SQLite.
Thin IO layer backing the market-data and account collaborators.
"""

import logging
import sqlite3
from datetime import date
from typing import Dict, Any, List, Tuple, Optional

import pandas as pd

from analysis.models import Account, Holding, PricePoint
from ingestion.transforms.normalizers import to_price_history

logger = logging.getLogger(__name__)


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database with required tables.
    Idempotent - safe to call multiple times.

    Args:
        conn: SQLite connection
    """
    # Enable foreign keys
    conn.execute("PRAGMA foreign_keys = ON")

    # Create prices table
    conn.execute("""
        CREATE TABLE IF NOT EXISTS prices (
            ticker TEXT NOT NULL,
            date DATE NOT NULL,
            open REAL NOT NULL,
            high REAL NOT NULL,
            low REAL NOT NULL,
            close REAL NOT NULL,
            adj_close REAL,
            volume INTEGER NOT NULL,
            source TEXT NOT NULL,
            as_of DATE NOT NULL,
            ingested_at DATETIME NOT NULL,
            PRIMARY KEY (ticker, date)
        )
    """)

    # Create accounts table
    conn.execute("""
        CREATE TABLE IF NOT EXISTS accounts (
            user_id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            birth_date DATE NOT NULL
        )
    """)

    # Create holdings table
    conn.execute("""
        CREATE TABLE IF NOT EXISTS holdings (
            user_id INTEGER NOT NULL REFERENCES accounts(user_id) ON DELETE CASCADE,
            ticker TEXT NOT NULL,
            shares REAL NOT NULL CHECK(shares >= 0),
            PRIMARY KEY (user_id, ticker)
        )
    """)

    # Create indices for performance
    conn.execute("CREATE INDEX IF NOT EXISTS idx_prices_ticker ON prices(ticker)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_prices_date ON prices(date)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_holdings_user ON holdings(user_id)")

    conn.commit()


def get_connection(db_path: str = './data/portfolio.db') -> sqlite3.Connection:
    """
    Get SQLite connection with proper configuration.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Configured SQLite connection
    """
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")  # Better concurrency
    return conn


def upsert_prices(conn: sqlite3.Connection, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """
    Upsert price rows into database.
    Idempotent - can be called multiple times with same data.

    Args:
        conn: SQLite connection
        rows: List of canonical price dictionaries

    Returns:
        Tuple of (inserted_count, updated_count)
    """
    if not rows:
        return (0, 0)

    inserted = 0
    updated = 0

    for row in rows:
        row_date = _iso(row['date'])
        cursor = conn.execute(
            "SELECT COUNT(*) FROM prices WHERE ticker = ? AND date = ?",
            (row['ticker'], row_date)
        )
        exists = cursor.fetchone()[0] > 0

        values = (
            row['open'], row['high'], row['low'], row['close'], row.get('adj_close'),
            row['volume'], row['source'], _iso(row['as_of']), _iso(row['ingested_at']),
            row['ticker'], row_date
        )

        if exists:
            conn.execute("""
                UPDATE prices SET
                    open = ?, high = ?, low = ?, close = ?, adj_close = ?,
                    volume = ?, source = ?, as_of = ?, ingested_at = ?
                WHERE ticker = ? AND date = ?
            """, values)
            updated += 1
        else:
            conn.execute("""
                INSERT INTO prices (
                    open, high, low, close, adj_close,
                    volume, source, as_of, ingested_at, ticker, date
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, values)
            inserted += 1

    conn.commit()
    logger.debug("Upserted %d prices (%d inserted, %d updated)", len(rows), inserted, updated)
    return (inserted, updated)


def upsert_account(conn: sqlite3.Connection, row: Dict[str, Any]) -> bool:
    """
    Insert or update an account.

    Args:
        conn: SQLite connection
        row: Dictionary with user_id, name, birth_date

    Returns:
        True if a new account was created, False if an existing one was updated
    """
    cursor = conn.execute(
        "SELECT COUNT(*) FROM accounts WHERE user_id = ?", (row['user_id'],)
    )
    exists = cursor.fetchone()[0] > 0

    if exists:
        conn.execute(
            "UPDATE accounts SET name = ?, birth_date = ? WHERE user_id = ?",
            (row['name'], _iso(row['birth_date']), row['user_id'])
        )
    else:
        conn.execute(
            "INSERT INTO accounts (user_id, name, birth_date) VALUES (?, ?, ?)",
            (row['user_id'], row['name'], _iso(row['birth_date']))
        )

    conn.commit()
    return not exists


def upsert_holding(conn: sqlite3.Connection, user_id: int, ticker: str, shares: float) -> None:
    """
    Set the share count a user holds in a ticker.
    A zero share count removes the position.
    """
    if shares == 0:
        conn.execute(
            "DELETE FROM holdings WHERE user_id = ? AND ticker = ?", (user_id, ticker)
        )
    else:
        conn.execute("""
            INSERT INTO holdings (user_id, ticker, shares) VALUES (?, ?, ?)
            ON CONFLICT(user_id, ticker) DO UPDATE SET shares = excluded.shares
        """, (user_id, ticker, shares))
    conn.commit()


def load_price_history(
    conn: sqlite3.Connection,
    ticker: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[PricePoint]:
    """
    Query stored prices for a ticker as a chronological price history.

    Args:
        conn: SQLite connection
        ticker: Stock ticker
        start_date: Optional start date filter
        end_date: Optional end date filter

    Returns:
        List of PricePoint, oldest first (empty if no rows)
    """
    base_query = """
        SELECT date, close, adj_close
        FROM prices
        WHERE ticker = ?
    """
    params = [ticker]

    if start_date is not None:
        base_query += " AND date >= ?"
        params.append(start_date.isoformat())

    if end_date is not None:
        base_query += " AND date <= ?"
        params.append(end_date.isoformat())

    base_query += " ORDER BY date ASC"

    df = pd.read_sql_query(base_query, conn, params=params)

    if df.empty:
        return []

    df['date'] = pd.to_datetime(df['date']).dt.date

    return to_price_history(df.to_dict('records'))


def load_account(conn: sqlite3.Connection, user_id: int) -> Optional[Account]:
    """
    Load an account with its holdings.

    Args:
        conn: SQLite connection
        user_id: Account identifier

    Returns:
        Account, or None if the user does not exist
    """
    row = conn.execute(
        "SELECT user_id, name, birth_date FROM accounts WHERE user_id = ?", (user_id,)
    ).fetchone()

    if row is None:
        return None

    holdings = conn.execute(
        "SELECT ticker, shares FROM holdings WHERE user_id = ? ORDER BY ticker", (user_id,)
    ).fetchall()

    return Account(
        user_id=row[0],
        name=row[1],
        birth_date=date.fromisoformat(row[2]),
        holdings=tuple(Holding(ticker=t, shares=float(s)) for t, s in holdings),
    )


def _iso(value: Any) -> Any:
    """Store dates and datetimes as ISO strings."""
    if isinstance(value, date):
        return value.isoformat()
    return value
