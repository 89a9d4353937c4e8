from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_SIGNING_SECRET = "storefront-dev-token-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SHOP_", extra="ignore")

    app_name: str = "Storefront API"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    database_url: str = "sqlite+pysqlite:///./storefront.db"
    test_database_url: str = "sqlite+pysqlite:///:memory:"

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    token_signing_secret: str = DEFAULT_TOKEN_SIGNING_SECRET
    access_token_ttl_seconds: int = Field(default=24 * 60 * 60, ge=1)

    # Lets /auth/register?admin=true create admin accounts.
    allow_admin_signup: bool = False
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return

        if self.token_signing_secret == DEFAULT_TOKEN_SIGNING_SECRET:
            raise ValueError(
                "insecure default secrets are not allowed outside dev mode; set env vars: "
                "SHOP_TOKEN_SIGNING_SECRET"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
