from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".notemate" / "data"
    sqlite_filename: str = "notemate.db"
    host: str = "127.0.0.1"
    port: int = 0  # 0 = pick a free port and announce it on stdout
    due_limit: int = 100  # max cards returned by one due query
    review_max_attempts: int = 5
    log_level: str = "warning"
    cors_origins: list[str] = ["*"]

    model_config = {"env_prefix": "NOTEMATE_"}


settings = Settings()
