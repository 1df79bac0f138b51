import logging
import random
from typing import List, Optional

from .exceptions import InvalidInputError
from .pairs import SEPARATORS

logger = logging.getLogger(__name__)


class LetterAssemblyValidator:
    """Letter-by-letter assembly of one word (stage 3).

    Separator slots (space, hyphen) start filled. Every other slot takes one
    lower-cased letter, strictly left to right. A wrong letter leaves the
    placed letters alone but spoils the pair: it is only counted correct when
    the whole word was assembled without a mistake.
    """

    def __init__(self, value: str, rng: Optional[random.Random] = None):
        self.target = value.lower()
        self.slots: List[Optional[str]] = [
            ch if ch in SEPARATORS else None for ch in self.target
        ]
        self.available: List[str] = [ch for ch in self.target if ch not in SEPARATORS]
        (rng or random.Random()).shuffle(self.available)
        self.mistakes = 0
        self.error_slot: Optional[int] = None

    @property
    def next_slot(self) -> Optional[int]:
        for index, letter in enumerate(self.slots):
            if letter is None:
                return index
        return None

    @property
    def is_complete(self) -> bool:
        return self.next_slot is None

    @property
    def is_correct(self) -> bool:
        return self.is_complete and self.mistakes == 0

    def submit_letter(self, letter: str) -> bool:
        """Place `letter` in the next empty slot. Returns False on a mistake.

        Raises InvalidInputError, without touching any state, for a finished
        word or a letter that is not among the remaining ones.
        """
        slot = self.next_slot
        if slot is None:
            raise InvalidInputError("The word is already assembled.")
        letter = letter.lower()
        if len(letter) != 1 or letter not in self.available:
            raise InvalidInputError(f"Letter {letter!r} is not available.")

        if letter != self.target[slot]:
            self.mistakes += 1
            self.error_slot = slot
            logger.debug(f"Wrong letter {letter!r} for slot {slot}")
            return False

        self.slots[slot] = letter
        self.available.remove(letter)
        self.error_slot = None
        return True

    def clear_error(self) -> None:
        self.error_slot = None


class FreeTextValidator:
    """Typed answers (stage 4): trimmed, case-insensitive exact match."""

    @staticmethod
    def normalize(text: str) -> str:
        return (text or "").strip().casefold()

    def submit(self, raw_input: str, target_value: str) -> bool:
        return self.normalize(raw_input) == self.normalize(target_value)
