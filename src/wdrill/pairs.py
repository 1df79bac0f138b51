from typing import Iterable, Iterator, List, Mapping, Union

from .exceptions import ConfigurationError, EmptyListError
from .models import WordPair

SEPARATORS = frozenset(" -")


class PairSet:
    """Read-only, ordered view of the word pairs drilled in one session."""

    def __init__(self, pairs: Iterable[Union[WordPair, Mapping[str, str]]]):
        self._pairs: List[WordPair] = [
            p if isinstance(p, WordPair) else WordPair(**p) for p in pairs
        ]
        if not self._pairs:
            raise EmptyListError()
        for index, pair in enumerate(self._pairs):
            if not any(ch not in SEPARATORS for ch in pair.value):
                raise ConfigurationError(
                    f"Pair {index} has no letters to study: {pair.value!r}"
                )

    def __len__(self) -> int:
        return len(self._pairs)

    def __getitem__(self, index: int) -> WordPair:
        return self._pairs[index]

    def __iter__(self) -> Iterator[WordPair]:
        return iter(self._pairs)

    @property
    def count(self) -> int:
        return len(self._pairs)
