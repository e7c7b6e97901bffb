"""Application settings."""
from pathlib import Path


class Settings:
    PROJECT_NAME: str = "netquiz"
    DEBUG: bool = False
    DATA_DIR: str = str(Path.home() / ".netquiz")
    DB_FILE: str = "netquiz.db"
    LOG_DIR: str = str(Path.home() / ".netquiz" / "log")
    LOG_FILE: str = "netquiz.log"
    SESSION_KEY: str = "netquiz_current_session"
    HISTORY_KEY: str = "netquiz_history"
    EXAM_DURATION_SECONDS: int = 600
    HISTORY_LIMIT: int = 50
    TREND_LIMIT: int = 20
    RECENT_RESULTS: int = 3

    @property
    def DB_PATH(self) -> str:
        return str(Path(self.DATA_DIR) / self.DB_FILE)


settings = Settings()
