import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Authentication
    cookie: str = Field(default="", alias="ROBLOX_COOKIE")

    # HTTP Configuration
    request_timeout: float = Field(default=30.0, alias="WRAPBLOX_REQUEST_TIMEOUT")
    rate_limit_max_retries: int = Field(default=3, alias="WRAPBLOX_RATE_LIMIT_RETRIES")
    rate_limit_default_delay: float = Field(
        default=1.0, alias="WRAPBLOX_RATE_LIMIT_DELAY"
    )

    # Cache Configuration
    cache_ttl_seconds: float = Field(default=300, alias="WRAPBLOX_CACHE_TTL")
    cache_max_size: int = Field(default=1000, alias="WRAPBLOX_CACHE_MAX_SIZE")

    # Pagination
    page_size: int = Field(default=100, alias="WRAPBLOX_PAGE_SIZE")

    debug: bool = Field(default=False, alias="WRAPBLOX_DEBUG")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment variables named by each alias."""
        values = {
            field.alias: os.environ[field.alias]
            for field in cls.model_fields.values()
            if field.alias and field.alias in os.environ
        }
        return cls.model_validate(values)


global_settings = Settings.from_env()
