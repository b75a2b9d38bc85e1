import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASS: str = os.getenv("DB_PASS", "postgres")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    RENTAL_DB_NAME: str = os.getenv("RENTAL_DB_NAME", "rental")
    DB_SSLMODE: Optional[str] = os.getenv("DB_SSLMODE")
    # full URL wins over the DB_* parts when set
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")

    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", 5))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(cfg: Settings = settings) -> str:
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL
    url = (
        f"postgresql+psycopg2://{cfg.DB_USER}:{cfg.DB_PASS}@{cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.RENTAL_DB_NAME}"
    )
    if cfg.DB_SSLMODE:
        url = f"{url}?sslmode={cfg.DB_SSLMODE}"
    return url


RENTAL_DATABASE_URL = build_database_url()
