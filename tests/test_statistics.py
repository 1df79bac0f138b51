import logging
from datetime import datetime, timedelta, timezone

import pytest

from wdrill import database
from wdrill.log_handler import SQLiteHandler
from wdrill.statistics import progress_chart

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def row(words, when):
    return {"words_count": words, "created_at": when.isoformat()}


class TestProgressChart:
    def test_month_view_has_thirty_days(self):
        points = progress_chart([], "month", now=NOW)
        assert len(points) == 30
        assert points[-1].label == "15.03"
        assert points[0].label == "15.02"
        assert all(p.value == 0 for p in points)

    def test_month_view_sums_per_day(self):
        rows = [
            row(4, NOW - timedelta(hours=1)),
            row(6, NOW - timedelta(hours=2)),
            row(5, NOW - timedelta(days=1)),
            row(9, NOW - timedelta(days=45)),
        ]
        points = progress_chart(rows, "month", now=NOW)
        assert points[-1].value == 10
        assert points[-2].value == 5
        assert sum(p.value for p in points) == 15

    def test_year_view_sums_per_month(self):
        rows = [
            row(4, NOW),
            row(5, datetime(2024, 1, 31, 23, 0, tzinfo=timezone.utc)),
            row(7, datetime(2023, 4, 2, tzinfo=timezone.utc)),
            row(8, datetime(2022, 12, 1, tzinfo=timezone.utc)),
        ]
        points = progress_chart(rows, "year", now=NOW)
        assert len(points) == 12
        assert points[-1].label == "Mar 2024"
        assert points[0].label == "Apr 2023"
        assert [p.value for p in points][-3:] == [5, 0, 4]
        assert points[0].value == 7
        assert sum(p.value for p in points) == 16

    def test_naive_now_is_treated_as_utc(self):
        points = progress_chart([row(3, NOW)], "month", now=NOW.replace(tzinfo=None))
        assert points[-1].value == 3

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            progress_chart([], "week", now=NOW)


class TestDatabase:
    def test_record_and_fetch(self, tmp_settings):
        database.init_db()
        assert database.record_completion("u1", 4, NOW) is True
        database.record_completion("u2", 7, NOW)
        database.record_completion("u1", 5, NOW + timedelta(days=1))

        rows = database.fetch_completions("u1")
        assert [r["words_count"] for r in rows] == [4, 5]
        assert progress_chart(rows, "year", now=NOW)[-1].value == 9

    def test_sqlite_log_handler(self, tmp_settings):
        database.init_db()
        log = logging.getLogger("wdrill.test_handler")
        log.propagate = False
        log.setLevel(logging.DEBUG)
        handler = SQLiteHandler()
        log.addHandler(handler)
        try:
            log.info("Session started")
            log.debug("below the handler level")
        finally:
            log.removeHandler(handler)

        conn = database.get_db_connection()
        rows = conn.execute("SELECT level, logger, message FROM logs").fetchall()
        conn.close()
        assert [(r["level"], r["logger"], r["message"]) for r in rows] == [
            ("INFO", "wdrill.test_handler", "Session started")
        ]

    def test_logs_can_be_filtered_by_logger(self, tmp_settings, monkeypatch):
        database.init_db()
        handler = SQLiteHandler()
        engine_log = logging.getLogger("wdrill.engine")
        vocab_log = logging.getLogger("wdrill.vocabulary")
        for log in (engine_log, vocab_log):
            monkeypatch.setattr(log, "propagate", False)
            log.addHandler(handler)
        try:
            engine_log.warning("Ignoring a stale transition")
            vocab_log.warning("Skipping broken.csv: Missing columns.")
        finally:
            for log in (engine_log, vocab_log):
                log.removeHandler(handler)

        conn = database.get_db_connection()
        rows = conn.execute(
            "SELECT message FROM logs WHERE logger = ?", ("wdrill.vocabulary",)
        ).fetchall()
        conn.close()
        assert [r["message"] for r in rows] == ["Skipping broken.csv: Missing columns."]
