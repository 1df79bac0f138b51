import logging

from .database import get_db_connection


class SQLiteHandler(logging.Handler):
    """Writes drill events to the `logs` table, keyed by the emitting logger.

    The logger name is stored in its own column so engine, reporter and
    vocabulary events can be filtered without parsing the message text.
    """

    def __init__(self, level=logging.INFO):
        super().__init__(level)
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record):
        try:
            conn = get_db_connection()
            with conn:
                conn.execute(
                    "INSERT INTO logs (level, logger, message) VALUES (?, ?, ?)",
                    (record.levelname, record.name, self.format(record)),
                )
            conn.close()
        except Exception:
            self.handleError(record)
