from enum import Enum
from functools import lru_cache
from typing import Annotated, Any

from pydantic import ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)


class ThreadUrlMode(str, Enum):
    STRICT = "strict"   # parse, force host, drop query
    NAIVE = "naive"     # plain ".json" suffixing


class BlockPolicy(str, Enum):
    ABORT = "abort"
    SKIP = "skip"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    port: int = 3000
    reddit_force_host: str = "old.reddit.com"   # empty disables forcing
    thread_url_mode: ThreadUrlMode = ThreadUrlMode.STRICT
    amazon_host: str = "www.amazon.com"
    block_policy: BlockPolicy = BlockPolicy.ABORT
    nav_timeout_ms: int = 60000
    page_delay_min: float = 1.0
    page_delay_max: float = 2.5
    max_review_cards: int = 10
    proxy_urls: Annotated[tuple[str, ...], NoDecode] = ()   # PROXY_URLS=http://a:1,http://b:2
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    browser_locale: str = "en-US"
    browser_timezone: str = "America/New_York"

    @field_validator("proxy_urls", mode="before")
    @classmethod
    def split_proxies(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return value

    @field_validator("thread_url_mode", "block_policy", mode="before")
    @classmethod
    def lower_choice(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("*", mode="wrap")
    @classmethod
    def default_on_bad_value(cls, value: Any, handler, info: ValidationInfo) -> Any:
        """A malformed environment value falls back to the field default."""
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].default


@lru_cache()
def get_settings() -> Settings:
    return Settings()
