import os
import random
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from wdrill.config import settings
from wdrill.engine import StageEngine
from wdrill.models import WordPair
from wdrill.pairs import SEPARATORS
from wdrill.timers import ManualScheduler


class RecordingSink:
    """Stands in for the statistic table."""

    def __init__(self, result=True, error=None):
        self.calls = []
        self.result = result
        self.error = error

    def __call__(self, user_id, pair_count, timestamp):
        self.calls.append((user_id, pair_count, timestamp))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def four_pairs():
    return [
        WordPair(value="Hund", translation="dog"),
        WordPair(value="Katze", translation="cat"),
        WordPair(value="Baum", translation="tree"),
        WordPair(value="Haus", translation="house"),
    ]


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def engine(scheduler):
    return StageEngine(rng=random.Random(7), scheduler=scheduler)


@pytest.fixture
def tmp_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_DIR", str(tmp_path / "db"))
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setattr(settings, "VOCAB_DIR", str(tmp_path / "vocabulary"))
    return settings


# --- Drivers ---
def answer_correctly(engine):
    """Give the right answer for the current pair, whatever the stage."""
    state = engine.get_state()
    pair = engine.current_pair
    if state.active_stage in (1, 2):
        correct = next(a.text for a in state.answers if a.is_correct)
        return engine.submit_choice(correct)
    if state.active_stage == 3:
        feedback = None
        for ch in pair.value.lower():
            if ch not in SEPARATORS:
                feedback = engine.submit_letter(ch)
        return feedback
    return engine.submit_text(pair.value)


def answer_wrongly(engine):
    """Miss the current pair. Stage 3 makes one wrong keystroke, then finishes the word."""
    state = engine.get_state()
    pair = engine.current_pair
    if state.active_stage in (1, 2):
        return engine.submit_choice("definitely not an option")
    if state.active_stage == 3:
        expected = next(ch for ch in pair.value.lower() if ch not in SEPARATORS)
        wrong = next(ch for ch in state.available_letters if ch != expected)
        engine.submit_letter(wrong)
        feedback = None
        for ch in pair.value.lower():
            if ch not in SEPARATORS:
                feedback = engine.submit_letter(ch)
        return feedback
    return engine.submit_text("definitely not the word")
