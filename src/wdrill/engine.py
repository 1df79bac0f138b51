"""Four-stage drilling state machine.

A session walks the whole pair list through four stages, in order:

1. pick the word for a shown translation (multiple choice)
2. pick the translation for a shown word (multiple choice)
3. assemble the word letter by letter
4. type the word from memory

A pair counts as studied at a stage once it is answered correctly there. The
stage ends when every pair is studied, and the session ends after stage 4.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Set, Union

from .config import settings
from .exceptions import InvalidInputError
from .models import Feedback, GameAnswer, SessionSnapshot, SlotView, WordPair
from .pairs import SEPARATORS, PairSet
from .reporter import SessionReporter
from .sampler import DistractorSampler
from .timers import AsyncioScheduler, Scheduler, TimerHandle
from .validators import FreeTextValidator, LetterAssemblyValidator

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    RECALL_WORD = 1
    RECALL_TRANSLATION = 2
    ASSEMBLE = 3
    TYPE = 4


# --- Per-stage rounds ---
@dataclass
class ChoiceRound:
    prompt: str
    answers: List[GameAnswer]
    chosen: Optional[str] = None


@dataclass
class AssemblyRound:
    prompt: str
    assembly: LetterAssemblyValidator
    error_timer: Optional[TimerHandle] = None


@dataclass
class TypingRound:
    prompt: str
    revealed: Optional[str] = None


Round = Union[ChoiceRound, AssemblyRound, TypingRound]


@dataclass
class PendingTransition:
    kind: str  # "advance" fires on a timer, "acknowledge" waits for the learner
    was_correct: bool
    handle: Optional[TimerHandle] = None


@dataclass
class SessionState:
    active_stage: Stage
    current_pair_index: int
    studied_sets: Dict[Stage, Set[int]] = field(
        default_factory=lambda: {stage: set() for stage in Stage}
    )
    completed: bool = False


class StageEngine:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        reporter: Optional[SessionReporter] = None,
        answer_delay_ms: int = settings.ANSWER_DELAY_MS,
        success_pulse_ms: int = settings.SUCCESS_PULSE_MS,
        letter_error_ms: int = settings.LETTER_ERROR_MS,
    ):
        self.rng = rng or random.Random()
        self.scheduler = scheduler or AsyncioScheduler()
        self.reporter = reporter
        self.sampler = DistractorSampler(self.rng)
        self.free_text = FreeTextValidator()
        self.answer_delay_ms = answer_delay_ms
        self.success_pulse_ms = success_pulse_ms
        self.letter_error_ms = letter_error_ms

        self.pairs: Optional[PairSet] = None
        self.user_id: Optional[str] = None
        self._state: Optional[SessionState] = None
        self._round: Optional[Round] = None
        self._pending: Optional[PendingTransition] = None

    # --- Lifecycle ---
    def start(
        self, pairs: Union[PairSet, Sequence[WordPair]], user_id: Optional[str] = None
    ) -> SessionSnapshot:
        pair_set = pairs if isinstance(pairs, PairSet) else PairSet(pairs)
        self.close()
        self.pairs = pair_set
        self.user_id = user_id
        self._state = SessionState(
            active_stage=Stage.RECALL_WORD,
            current_pair_index=self.rng.randrange(pair_set.count),
        )
        self._round = self._build_round()
        logger.info(f"Session started for {user_id}: {pair_set.count} pairs")
        return self.get_state()

    def close(self) -> None:
        """Cancel outstanding timers. Used when a session is abandoned or restarted."""
        if self._pending and self._pending.handle:
            self._pending.handle.cancel()
        self._pending = None
        self._cancel_error_timer()

    @property
    def state(self) -> SessionState:
        if self._state is None:
            raise InvalidInputError("No session has been started.")
        return self._state

    @property
    def current_pair(self) -> WordPair:
        return self.pairs[self.state.current_pair_index]

    # --- Learner actions ---
    def submit_choice(self, answer_text: str) -> Feedback:
        """Any text other than the correct option counts as a wrong pick."""
        current = self._require(ChoiceRound)
        correct_text = next(a.text for a in current.answers if a.is_correct)
        correct = answer_text == correct_text

        current.chosen = answer_text
        self._commit(correct)
        self._schedule_advance(correct, self.answer_delay_ms)
        return Feedback(
            is_correct=correct,
            pair_finished=True,
            pair_correct=correct,
            correct_answer=correct_text,
        )

    def submit_letter(self, letter: str) -> Feedback:
        current = self._require(AssemblyRound)
        assembly = current.assembly
        placed = assembly.submit_letter(letter)

        self._cancel_error_timer()
        if not placed:
            current.error_timer = self.scheduler.call_later(
                self.letter_error_ms, lambda: self._clear_error(current)
            )

        if not assembly.is_complete:
            return Feedback(is_correct=placed, pair_finished=False)

        correct = assembly.is_correct
        self._commit(correct)
        self._schedule_advance(correct, self.answer_delay_ms)
        return Feedback(
            is_correct=placed,
            pair_finished=True,
            pair_correct=correct,
            correct_answer=self.current_pair.value,
        )

    def submit_text(self, text: str) -> Feedback:
        current = self._require(TypingRound)
        target = self.current_pair.value
        correct = self.free_text.submit(text, target)
        self._commit(correct)
        if correct:
            self._schedule_advance(True, self.success_pulse_ms)
        else:
            current.revealed = target
            self._pending = PendingTransition(kind="acknowledge", was_correct=False)
        return Feedback(
            is_correct=correct,
            pair_finished=True,
            pair_correct=correct,
            correct_answer=target,
        )

    def acknowledge_and_advance(self) -> SessionSnapshot:
        if self._pending is None or self._pending.kind != "acknowledge":
            raise InvalidInputError("Nothing to acknowledge.")
        self._pending = None
        self._advance(False)
        return self.get_state()

    # --- Snapshot ---
    def get_state(self) -> SessionSnapshot:
        state = self.state
        snapshot = SessionSnapshot(
            active_stage=int(state.active_stage),
            current_pair_index=None if state.completed else state.current_pair_index,
            total_pairs=self.pairs.count,
            studied=[sorted(state.studied_sets[stage]) for stage in Stage],
            completed=state.completed,
            pending=self._pending.kind if self._pending else None,
        )
        current = self._round
        if isinstance(current, ChoiceRound):
            snapshot.prompt = current.prompt
            snapshot.answers = list(current.answers)
        elif isinstance(current, AssemblyRound):
            assembly = current.assembly
            snapshot.prompt = current.prompt
            snapshot.slots = [
                SlotView(
                    letter=letter,
                    separator=assembly.target[i] in SEPARATORS,
                    error=assembly.error_slot == i,
                )
                for i, letter in enumerate(assembly.slots)
            ]
            snapshot.available_letters = list(assembly.available)
        elif isinstance(current, TypingRound):
            snapshot.prompt = current.prompt
            snapshot.revealed_answer = current.revealed
        return snapshot

    # --- Internals ---
    def _require(self, round_type: type):
        state = self.state
        if state.completed:
            raise InvalidInputError("The session is already completed.")
        if self._pending is not None:
            raise InvalidInputError("Waiting for the next word.")
        if not isinstance(self._round, round_type):
            raise InvalidInputError(
                f"Stage {int(state.active_stage)} does not take this kind of answer."
            )
        return self._round

    def _build_round(self) -> Round:
        pair = self.current_pair
        stage = self.state.active_stage
        if stage is Stage.RECALL_WORD:
            return ChoiceRound(
                prompt=pair.translation,
                answers=self.sampler.sample(pair.value, "value", self.pairs),
            )
        if stage is Stage.RECALL_TRANSLATION:
            return ChoiceRound(
                prompt=pair.value,
                answers=self.sampler.sample(pair.translation, "translation", self.pairs),
            )
        if stage is Stage.ASSEMBLE:
            return AssemblyRound(
                prompt=pair.translation,
                assembly=LetterAssemblyValidator(pair.value, self.rng),
            )
        return TypingRound(prompt=pair.translation)

    def _commit(self, correct: bool) -> None:
        state = self.state
        if correct:
            state.studied_sets[state.active_stage].add(state.current_pair_index)
        logger.debug(
            f"Stage {int(state.active_stage)} pair {state.current_pair_index}: "
            f"{'correct' if correct else 'incorrect'}"
        )

    def _schedule_advance(self, was_correct: bool, delay_ms: int) -> None:
        pending = PendingTransition(kind="advance", was_correct=was_correct)
        self._pending = pending
        pending.handle = self.scheduler.call_later(delay_ms, lambda: self._fire(pending))

    def _fire(self, pending: PendingTransition) -> None:
        # a restart or close replaces the pending transition
        if self._pending is not pending:
            return
        self._pending = None
        self._advance(pending.was_correct)

    def _advance(self, was_correct: bool) -> None:
        state = self.state
        self._cancel_error_timer()
        stage = state.active_stage
        if was_correct and len(state.studied_sets[stage]) == self.pairs.count:
            if stage is Stage.TYPE:
                self._finish()
                return
            next_stage = Stage(stage + 1)
            state.studied_sets[next_stage] = set()
            state.active_stage = next_stage
            state.current_pair_index = self.rng.randrange(self.pairs.count)
            logger.info(f"Stage {int(stage)} mastered, moving to stage {int(next_stage)}")
        else:
            state.current_pair_index = self._pick_next(exclude_current=not was_correct)
        self._round = self._build_round()

    def _pick_next(self, exclude_current: bool) -> int:
        state = self.state
        studied = state.studied_sets[state.active_stage]
        candidates = [i for i in range(self.pairs.count) if i not in studied]
        if exclude_current and len(candidates) > 1:
            candidates = [i for i in candidates if i != state.current_pair_index]
        return self.rng.choice(candidates)

    def _finish(self) -> None:
        state = self.state
        state.completed = True
        self._round = None
        logger.info(f"Session completed for {self.user_id}: {self.pairs.count} pairs")
        if self.reporter is None:
            return
        try:
            self.reporter.report(self.user_id, self.pairs.count)
        except Exception:
            logger.exception("Completion report could not be sent")

    def _clear_error(self, current: AssemblyRound) -> None:
        if self._round is current:
            current.assembly.clear_error()
            current.error_timer = None

    def _cancel_error_timer(self) -> None:
        if isinstance(self._round, AssemblyRound) and self._round.error_timer:
            self._round.error_timer.cancel()
            self._round.error_timer = None
