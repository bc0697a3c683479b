"""Factory settings, read from ``BEANFACTORY_`` environment variables or a ``.env`` file."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from beanfactory.cache import DEFAULT_KEY_PREFIX, CacheConfig, CacheType

__all__ = ["LoggingConfig", "BeanFactorySettings"]


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"

    @field_validator("level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {v}")
        return level


class BeanFactorySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BEANFACTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cache_key_prefix: str = DEFAULT_KEY_PREFIX
    debug: bool = False
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def effective_cache(self) -> CacheConfig:
        """The cache configuration to use; debug mode always uses the unbounded array cache."""
        if self.debug:
            return CacheConfig(cache_type=CacheType.ARRAY)
        return self.cache
