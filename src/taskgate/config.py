"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with TASKGATE_ prefix
(a local .env file is read too). The database URL and the signing secret
have no defaults: constructing Settings without them raises, so a
misconfigured process fails at startup instead of on the first request.

Learn: Settings is built once by the entrypoint and passed into
create_app(). Nothing imports a module-level singleton, so tests can
build an app per test with their own database and secret.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via TASKGATE_* env vars."""

    # Database
    database_url: str
    create_tables: bool = True  # metadata.create_all on startup

    # Auth
    jwt_secret: str = Field(min_length=16)
    jwt_algorithm: str = "HS256"
    cookie_secure: bool = True
    remember_me_days: int = 30

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_prefix": "TASKGATE_", "env_file": ".env", "extra": "ignore"}

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_symmetric_algorithm(cls, value: str) -> str:
        """Tokens are signed with one shared secret, so only HMAC algorithms fit."""
        if value not in ("HS256", "HS384", "HS512"):
            raise ValueError("TASKGATE_JWT_ALGORITHM must be one of HS256, HS384, HS512")
        return value
