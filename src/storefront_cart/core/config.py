import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from dotenv import load_dotenv


@dataclass
class DatabaseConfig:
    """Durable cart storage settings"""
    url: str
    echo: bool = False  # Log SQL queries


@dataclass
class CatalogConfig:
    """Product catalog service the cart validates against"""
    base_url: str
    timeout_seconds: float = 10.0
    product_path: str = "/api/v1/product/get-product"
    token_path: str = "/api/v1/product/braintree/token"
    payment_path: str = "/api/v1/product/braintree/payment"


@dataclass
class AppConfig:
    """Application configuration"""
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"
    session_limit: int = 1000  # Cart sessions kept in memory per process


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "t", "yes", "y", "on")


class Config:
    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        env = os.environ if environ is None else environ
        self.environment = env.get("ENVIRONMENT", "development")

        self.database = DatabaseConfig(
            url=env.get("DATABASE_URL", "sqlite:///storefront_cart.db"),
            echo=_as_bool(env.get("DB_ECHO", "false")),
        )

        self.catalog = CatalogConfig(
            base_url=env.get("CATALOG_BASE_URL", "http://localhost:6060"),
            timeout_seconds=float(env.get("CATALOG_TIMEOUT_SECONDS", "10")),
        )

        self.app = AppConfig(
            debug=_as_bool(env.get("DEBUG", "false")),
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "5000")),
            environment=self.environment,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            session_limit=int(env.get("CART_SESSION_LIMIT", "1000")),
        )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """Validate critical configuration"""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if not self.catalog.base_url:
            raise ValueError("CATALOG_BASE_URL is required")

        if self.catalog.timeout_seconds <= 0:
            raise ValueError("CATALOG_TIMEOUT_SECONDS must be positive")

        if self.app.session_limit < 1:
            raise ValueError("CART_SESSION_LIMIT must be at least 1")

        if self.is_production and self.database.url.startswith("sqlite"):
            raise ValueError("DATABASE_URL must point to a server database in production")


@lru_cache()
def get_config() -> Config:
    """Load .env once and return the validated process configuration"""
    load_dotenv()
    config = Config()
    config.validate()
    return config
