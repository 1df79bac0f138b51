from typing import List, Optional

from pydantic import BaseModel, ConfigDict


# --- Domain ---
class WordPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    translation: str


class GameAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    is_correct: bool


class SlotView(BaseModel):
    letter: Optional[str] = None
    separator: bool = False
    error: bool = False


class SessionSnapshot(BaseModel):
    active_stage: int
    current_pair_index: Optional[int]
    total_pairs: int
    studied: List[List[int]]
    completed: bool
    pending: Optional[str] = None
    prompt: Optional[str] = None
    answers: List[GameAnswer] = []
    slots: List[SlotView] = []
    available_letters: List[str] = []
    revealed_answer: Optional[str] = None


class Feedback(BaseModel):
    is_correct: bool
    pair_finished: bool
    pair_correct: Optional[bool] = None
    correct_answer: Optional[str] = None


# --- API ---
class ListInfo(BaseModel):
    id: str
    name: str
    count: int


class StartSessionRequest(BaseModel):
    list_id: str
    user_id: str


class ChoiceRequest(BaseModel):
    answer: str


class LetterRequest(BaseModel):
    letter: str


class TextRequest(BaseModel):
    text: str


class SessionResponse(BaseModel):
    session_id: str
    state: SessionSnapshot


class SubmitResponse(BaseModel):
    feedback: Optional[Feedback] = None
    state: SessionSnapshot


class StatisticPoint(BaseModel):
    label: str
    value: int
