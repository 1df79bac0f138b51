import glob
import logging
import os
from collections import Counter
from typing import Dict, List, Mapping, Sequence

import pandas as pd

from .config import settings
from .exceptions import NotFoundError
from .models import ListInfo, WordPair

logger = logging.getLogger(__name__)

DEMO_LIST = [
    {"word": "Hund", "translation": "dog"},
    {"word": "Katze", "translation": "cat"},
    {"word": "Baum", "translation": "tree"},
    {"word": "Haus", "translation": "house"},
    {"word": "Wasser", "translation": "water"},
]


def validate_pairs(
    rows: Sequence[Mapping[str, str]], min_size: int = settings.MIN_LIST_SIZE
) -> List[str]:
    """Return the problems that keep `rows` from being a playable list (empty when fine)."""
    problems = []
    filled = []
    for index, row in enumerate(rows):
        word = (row.get("word") or "").strip()
        translation = (row.get("translation") or "").strip()
        if bool(word) != bool(translation):
            problems.append(f"Row {index + 1} needs both a word and a translation.")
        elif word:
            filled.append(word.lower())

    if len(filled) < min_size:
        problems.append(f"A list needs at least {min_size} word pairs.")

    duplicates = sorted(w for w, n in Counter(filled).items() if n > 1)
    if duplicates:
        problems.append(f"Duplicate words: {', '.join(duplicates)}")
    return problems


def _clean_rows(df: pd.DataFrame) -> List[Dict[str, str]]:
    df = df[["word", "translation"]].fillna("").astype(str)
    df = df.apply(lambda col: col.str.strip())
    df = df[(df["word"] != "") | (df["translation"] != "")]
    return df.to_dict("records")


# --- Service Layer: Vocabulary Management ---
class VocabularyManager:
    """Manages loading and accessing word lists."""

    def __init__(self, directory: str):
        self.directory = directory
        self.vocab_sets: Dict[str, List[Dict[str, str]]] = {}

    def load_all(self):
        self.vocab_sets = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")

        csv_files = glob.glob(os.path.join(self.directory, "*.csv"))
        for file_path in sorted(csv_files):
            file_name = os.path.splitext(os.path.basename(file_path))[0]
            try:
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            if "word" not in df.columns or "translation" not in df.columns:
                logger.error(f"Skipping {file_name}: Missing columns.")
                continue

            rows = _clean_rows(df)
            problems = validate_pairs(rows)
            if problems:
                logger.error(f"Skipping {file_name}: {' '.join(problems)}")
                continue
            self.vocab_sets[file_name] = rows
            logger.info(f"Loaded {len(rows)} words from {file_name}")

        if not self.vocab_sets:
            logger.warning("No CSV files found. Loading demo list.")
            self.vocab_sets["default_demo"] = list(DEMO_LIST)

    def load_pairs(self, list_id: str) -> List[WordPair]:
        rows = self.vocab_sets.get(list_id)
        if rows is None:
            raise NotFoundError(f"Word list {list_id!r} not found.")
        return [WordPair(value=r["word"], translation=r["translation"]) for r in rows]

    def get_lists(self) -> List[ListInfo]:
        lists = [
            ListInfo(id=key, name=key.replace("_", " ").title(), count=len(words))
            for key, words in self.vocab_sets.items()
        ]
        lists.sort(key=lambda x: x.name)
        return lists
