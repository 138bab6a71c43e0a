from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    STORE_BACKEND: Literal["local", "remote"] = "local"
    LOCAL_STORE_PATH: str = "./roster_storage.json"
    LOCAL_STORE_KEY: str = "students"
    DATABASE_URL: str = "sqlite:///./roster.db"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
