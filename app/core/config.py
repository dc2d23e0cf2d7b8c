# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Env vars (.env supported, all optional):
      - DATABASE_URL (defaults to a local SQLite file)
      - CART_CREATE_IF_MISSING (add-item creates the cart when absent)
      - CART_WORKER_POOL_SIZE (max workers for offloaded mutations)
      - CART_SERIALIZE_PER_USER (per-user lock around mutations)
    """

    PROJECT_NAME: str = "Cart Service"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./carts.db"

    # Add-item policy: True => create cart on first add, False => 404
    CART_CREATE_IF_MISSING: bool = True

    # None => ThreadPoolExecutor default size
    CART_WORKER_POOL_SIZE: int | None = None

    # Off by default: concurrent mutations for one user may lose updates
    CART_SERIALIZE_PER_USER: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
