import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .exceptions import PersistenceWarning

logger = logging.getLogger(__name__)

CompletionSink = Callable[[str, int, datetime], bool]


class SessionReporter:
    """Sends the finished-session event to the sink without waiting for it.

    A failing sink is logged as a PersistenceWarning and kept in `warnings`;
    nothing is raised back to the engine.
    """

    def __init__(self, sink: CompletionSink, executor: Optional[Executor] = None):
        self.sink = sink
        self._executor = executor
        self._owns_executor = executor is None
        self.warnings: List[PersistenceWarning] = []

    @property
    def executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="wdrill-report"
            )
        return self._executor

    def report(self, user_id: str, pair_count: int) -> Optional[Future]:
        timestamp = datetime.now(timezone.utc)
        try:
            future = self.executor.submit(self._record, user_id, pair_count, timestamp)
        except RuntimeError as e:
            self._warn(f"Could not schedule completion for {user_id}: {e}")
            return None
        return future

    def _record(self, user_id: str, pair_count: int, timestamp: datetime) -> bool:
        try:
            ok = self.sink(user_id, pair_count, timestamp)
        except Exception as e:
            self._warn(f"Recording completion for {user_id} failed: {e}")
            return False
        if ok is False:
            self._warn(f"Sink refused completion for {user_id} ({pair_count} words)")
            return False
        logger.info(f"Recorded completion for {user_id}: {pair_count} words")
        return True

    def _warn(self, message: str) -> None:
        warning = PersistenceWarning(message)
        self.warnings.append(warning)
        logger.warning(str(warning))

    def close(self, wait: bool = True) -> None:
        """Flush reports still in flight. An owned pool is rebuilt on the next report."""
        if self._executor is None:
            return
        self._executor.shutdown(wait=wait)
        if self._owns_executor:
            self._executor = None
