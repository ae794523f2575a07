from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KH_", env_file=".env", extra="ignore")

    api_base: str = "http://127.0.0.1:3001/api"
    cache_dir: Path = Path.home() / ".khrecipes"
    timeout: float = 60 * 2
