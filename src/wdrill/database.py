import sqlite3
import os
from datetime import datetime
from typing import List

from .config import settings


def get_db_connection():
    """Establishes a connection to the SQLite database."""
    db_path = os.path.join(settings.DB_DIR, settings.DB_FILE)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def create_tables():
    """Creates the log and statistic tables if they don't exist."""
    conn = get_db_connection()
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                logger TEXT,
                message TEXT
            );
        """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS statistic (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                words_count INTEGER NOT NULL,
                created_at TEXT NOT NULL
            );
        """
        )
    conn.close()


def init_db():
    """Initializes the database and creates necessary tables."""
    if not os.path.exists(settings.DB_DIR):
        os.makedirs(settings.DB_DIR)
    create_tables()


def record_completion(user_id: str, pair_count: int, timestamp: datetime) -> bool:
    """Stores one finished session. Used as the reporter sink."""
    conn = get_db_connection()
    with conn:
        conn.execute(
            "INSERT INTO statistic (user_id, words_count, created_at) VALUES (?, ?, ?)",
            (user_id, pair_count, timestamp.isoformat()),
        )
    conn.close()
    return True


def fetch_completions(user_id: str) -> List[sqlite3.Row]:
    conn = get_db_connection()
    rows = conn.execute(
        "SELECT words_count, created_at FROM statistic "
        "WHERE user_id = ? ORDER BY created_at ASC",
        (user_id,),
    ).fetchall()
    conn.close()
    return rows
