import os


class Settings:
    PROJECT_NAME: str = "hemaquiz"
    DEBUG: bool = False
    LOG_DIR: str = "log"
    LOG_FILE: str = "hemaquiz.log"
    LOG_TO_FILE: bool = os.getenv("HEMAQUIZ_LOG_TO_FILE", "") == "1"
    QUESTION_BANK_DIR: str = os.getenv("HEMAQUIZ_QUESTION_BANK_DIR", "question_bank")
    DEFAULT_SUBJECT: str = "hematology"
    TEST_SIZE: int = 10
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    SESSION_BACKEND: str = os.getenv("HEMAQUIZ_SESSION_BACKEND", "memory")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    SCORER_URL: str = os.getenv("HEMAQUIZ_SCORER_URL", "")
    SCORER_TIMEOUT_SECONDS: float = 10.0
    KEEP_ALIVE_URL: str = os.getenv("KEEP_ALIVE_PING_URL", "")
    KEEP_ALIVE_INTERVAL_SECONDS: float = float(
        os.getenv("KEEP_ALIVE_INTERVAL_SECONDS", "120")
    )


settings = Settings()
