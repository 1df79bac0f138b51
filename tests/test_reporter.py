import logging
import time
from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient

from conftest import RecordingSink
from wdrill import globals as wdrill_globals
from wdrill.app import create_app
from wdrill.config import settings
from wdrill.exceptions import PersistenceWarning
from wdrill.reporter import SessionReporter


class TestSessionReporter:
    def test_report_calls_sink_with_timestamp(self):
        sink = RecordingSink()
        reporter = SessionReporter(sink)
        future = reporter.report("u1", 12)
        assert future.result() is True
        reporter.close()

        user_id, count, timestamp = sink.calls[0]
        assert (user_id, count) == ("u1", 12)
        assert timestamp.tzinfo is not None
        assert reporter.warnings == []

    def test_sink_exception_becomes_warning(self, caplog):
        reporter = SessionReporter(RecordingSink(error=RuntimeError("boom")))
        with caplog.at_level(logging.WARNING, logger="wdrill.reporter"):
            assert reporter.report("u1", 4).result() is False
            reporter.close()

        assert len(reporter.warnings) == 1
        assert isinstance(reporter.warnings[0], PersistenceWarning)
        assert "boom" in caplog.text

    def test_sink_refusal_becomes_warning(self):
        reporter = SessionReporter(RecordingSink(result=False))
        assert reporter.report("u1", 4).result() is False
        reporter.close()
        assert len(reporter.warnings) == 1

    def test_closed_executor_does_not_raise(self):
        executor = ThreadPoolExecutor(max_workers=1)
        executor.shutdown()
        reporter = SessionReporter(RecordingSink(), executor=executor)
        assert reporter.report("u1", 4) is None
        assert len(reporter.warnings) == 1

    def test_owned_pool_is_rebuilt_after_close(self):
        sink = RecordingSink()
        reporter = SessionReporter(sink)
        reporter.report("u1", 4)
        reporter.close()
        assert reporter.report("u1", 5).result() is True
        reporter.close()
        assert [c[1] for c in sink.calls] == [4, 5]
        assert reporter.warnings == []

    def test_passed_in_executor_stays_closed(self):
        executor = ThreadPoolExecutor(max_workers=1)
        reporter = SessionReporter(RecordingSink(), executor=executor)
        reporter.close()
        assert reporter.report("u1", 4) is None


class SlowSink(RecordingSink):
    def __call__(self, user_id, pair_count, timestamp):
        time.sleep(0.2)
        return super().__call__(user_id, pair_count, timestamp)


class TestAppShutdown:
    def test_shutdown_flushes_pending_reports(self, tmp_settings, monkeypatch):
        monkeypatch.setattr(settings, "LOG_TO_DB", False)
        sink = SlowSink()
        monkeypatch.setattr(wdrill_globals.reporter, "sink", sink)

        with TestClient(create_app()):
            wdrill_globals.reporter.report("u1", 4)

        assert [c[:2] for c in sink.calls] == [("u1", 4)]
