"""Application configuration via pydantic-settings with TAGSCRIBE_ env prefix."""

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load .env into os.environ as well, for anything that reads the environment directly.
load_dotenv(override=False)


class Settings(BaseSettings):
    repository_url: str = ""
    tag_prefix: str = ""
    destination: str = "CHANGELOG.md"
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    page_size: int = 100
    request_timeout: float = 30.0
    max_concurrent_requests: int = 20
    skip_invalid_tags: bool = False

    model_config = {"env_prefix": "TAGSCRIBE_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
