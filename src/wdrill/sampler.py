import random
from typing import Iterable, List, Optional

from .config import settings
from .models import GameAnswer, WordPair


class DistractorSampler:
    """Builds the multiple-choice answer sets for the recall stages."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def sample(
        self,
        correct_value: str,
        answer_field: str,
        all_pairs: Iterable[WordPair],
        count: int = settings.DISTRACTOR_COUNT,
    ) -> List[GameAnswer]:
        """Return the correct answer plus up to `count` distinct distractors, shuffled.

        Small lists give a smaller answer set; nothing is padded.
        """
        # dict keeps first-seen order so a seeded rng gives repeatable picks
        candidates = dict.fromkeys(getattr(p, answer_field) for p in all_pairs)
        candidates.pop(correct_value, None)

        incorrect = self.rng.sample(list(candidates), min(count, len(candidates)))

        options = [GameAnswer(text=correct_value, is_correct=True)] + [
            GameAnswer(text=text, is_correct=False) for text in incorrect
        ]
        self.rng.shuffle(options)
        return options
