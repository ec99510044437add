# EduFam Access - configuration
from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    database_url: str = "sqlite+aiosqlite:///./edufam_access.db"
    audit_log_file: Path | None = Path("./data/access_audit.jsonl")
    audit_sample_size: int = 200
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "EDUFAM_"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
