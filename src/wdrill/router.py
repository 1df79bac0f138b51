import logging
import random
from typing import Callable, List, Literal

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .database import fetch_completions
from .engine import StageEngine
from .exceptions import ConfigurationError, InvalidInputError, NotFoundError
from .globals import reporter, session_store, vocab_manager
from .models import (
    ChoiceRequest,
    Feedback,
    LetterRequest,
    ListInfo,
    SessionResponse,
    SessionSnapshot,
    StartSessionRequest,
    StatisticPoint,
    SubmitResponse,
    TextRequest,
)
from .reporter import SessionReporter
from .sessions import DrillSession, SessionStore
from .statistics import progress_chart
from .timers import AsyncioScheduler, Scheduler
from .vocabulary import VocabularyManager

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_vocab_manager() -> VocabularyManager:
    return vocab_manager


def get_session_store() -> SessionStore:
    return session_store


def get_scheduler() -> Scheduler:
    return AsyncioScheduler()


def get_reporter() -> SessionReporter:
    return reporter


def get_rng() -> random.Random:
    return random.Random()


def _error(e: Exception, status_code: int) -> JSONResponse:
    return JSONResponse({"error": str(e)}, status_code=status_code)


def _submit(
    store: SessionStore, session_id: str, action: Callable[[StageEngine], Feedback]
):
    try:
        session = store.get(session_id)
    except NotFoundError as e:
        return _error(e, 404)
    try:
        feedback = action(session.engine)
    except InvalidInputError as e:
        logger.debug(f"Rejected input for {session_id}: {e}")
        return _error(e, 409)
    return SubmitResponse(feedback=feedback, state=session.engine.get_state())


# --- Routes ---
@router.get("/api/lists", response_model=List[ListInfo])
async def get_lists(vocab: VocabularyManager = Depends(get_vocab_manager)):
    return vocab.get_lists()


@router.post("/api/sessions", response_model=SessionResponse, status_code=201)
async def start_session(
    body: StartSessionRequest,
    vocab: VocabularyManager = Depends(get_vocab_manager),
    store: SessionStore = Depends(get_session_store),
    scheduler: Scheduler = Depends(get_scheduler),
    session_reporter: SessionReporter = Depends(get_reporter),
    rng: random.Random = Depends(get_rng),
):
    try:
        pairs = vocab.load_pairs(body.list_id)
    except NotFoundError as e:
        return _error(e, 404)

    engine = StageEngine(rng=rng, scheduler=scheduler, reporter=session_reporter)
    try:
        state = engine.start(pairs, user_id=body.user_id)
    except ConfigurationError as e:
        return _error(e, 422)

    session_id = store.add(DrillSession(engine, body.list_id, body.user_id))
    return SessionResponse(session_id=session_id, state=state)


@router.get("/api/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session_state(
    session_id: str, store: SessionStore = Depends(get_session_store)
):
    try:
        session = store.get(session_id)
    except NotFoundError as e:
        return _error(e, 404)
    return session.engine.get_state()


@router.delete("/api/sessions/{session_id}")
async def abandon_session(
    session_id: str, store: SessionStore = Depends(get_session_store)
):
    store.discard(session_id)
    return {"status": "success"}


@router.post("/api/sessions/{session_id}/choice", response_model=SubmitResponse)
async def submit_choice(
    session_id: str,
    body: ChoiceRequest,
    store: SessionStore = Depends(get_session_store),
):
    return _submit(store, session_id, lambda engine: engine.submit_choice(body.answer))


@router.post("/api/sessions/{session_id}/letter", response_model=SubmitResponse)
async def submit_letter(
    session_id: str,
    body: LetterRequest,
    store: SessionStore = Depends(get_session_store),
):
    return _submit(store, session_id, lambda engine: engine.submit_letter(body.letter))


@router.post("/api/sessions/{session_id}/text", response_model=SubmitResponse)
async def submit_text(
    session_id: str,
    body: TextRequest,
    store: SessionStore = Depends(get_session_store),
):
    return _submit(store, session_id, lambda engine: engine.submit_text(body.text))


@router.post("/api/sessions/{session_id}/advance", response_model=SubmitResponse)
async def acknowledge_and_advance(
    session_id: str, store: SessionStore = Depends(get_session_store)
):
    try:
        session = store.get(session_id)
    except NotFoundError as e:
        return _error(e, 404)
    try:
        state = session.engine.acknowledge_and_advance()
    except InvalidInputError as e:
        return _error(e, 409)
    return SubmitResponse(state=state)


@router.get("/api/statistics/{user_id}", response_model=List[StatisticPoint])
def get_statistics(user_id: str, period: Literal["month", "year"] = "month"):
    return progress_chart(fetch_completions(user_id), period)
