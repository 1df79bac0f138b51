from .config import settings
from .database import record_completion
from .reporter import SessionReporter
from .sessions import SessionStore
from .vocabulary import VocabularyManager

vocab_manager = VocabularyManager(f"{settings.VOCAB_DIR}")
session_store = SessionStore()
reporter = SessionReporter(record_completion)
