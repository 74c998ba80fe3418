from typing import Literal

from pydantic_settings import BaseSettings,SettingsConfigDict


_base_config = SettingsConfigDict(
    env_file="course_admin/.env",
    extra="ignore",
    env_ignore_empty=True
)
class DataBaseSettings(BaseSettings):
    DB_HOST:str = "localhost"
    DB_PORT:int = 5432
    DB_USERNAME:str = "postgres"
    DB_PASSWORD:str = ""
    DB_NAME:str = "courses"

    # full SQLAlchemy URL, wins over the DB_* parts (e.g. sqlite+aiosqlite for local runs)
    DB_URL:str | None = None

    model_config  = _base_config

    @property
    def ASYNC_DB_URL(self):
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql+asyncpg://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"


class AppSettings(BaseSettings):
    CORS_ORIGINS:list[str] = ["http://localhost:3000"]
    DELETE_MODE:Literal["soft","hard"] = "soft"
    LOG_LEVEL:str = "INFO"
    SQL_ECHO:bool = False

    model_config = _base_config


db_settings = DataBaseSettings()
app_settings = AppSettings()
