import os


class Settings:
    PROJECT_NAME: str = "wdrill"
    DEBUG: bool = os.environ.get("WDRILL_DEBUG", "") == "1"
    LOG_DIR: str = "log"
    LOG_FILE: str = "wdrill.log"
    LOG_TO_DB: bool = os.environ.get("WDRILL_LOG_TO_DB", "1") == "1"
    DB_DIR: str = "db"
    DB_FILE: str = "wdrill.db"
    VOCAB_DIR: str = os.environ.get("WDRILL_VOCAB_DIR", "vocabulary")
    MIN_LIST_SIZE: int = 4
    DISTRACTOR_COUNT: int = 3
    ANSWER_DELAY_MS: int = 1000
    SUCCESS_PULSE_MS: int = 600
    LETTER_ERROR_MS: int = 500
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
