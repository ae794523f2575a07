from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    passkey: str | None = None
    use_s3: bool = False
    s3_bucket: str | None = None
    aws_region: str = "us-east-1"
    storage_key: str = "recipes.json"
    local_data_file: Path = Path("recipes-data.json")
    openai_api_key: str | None = None
    llm_model: str = "gpt-4o"
    llm_max_tokens: int = 1024
    host: str = "127.0.0.1"
    port: int = 3001
