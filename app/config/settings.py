from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

DEV_JWT_SECRET = "dev-secret-key-change-in-production-min-32-chars"
DEV_ENCRYPTION_KEY = "dev-supabase-encryption-key-change-in-production"


class Settings(BaseSettings):
    # Platform database (Supabase / PostgREST)
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Preferred over supabase_key when set

    # Sessions
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "oto-reach-agents"
    jwt_audience: str = "oto-reach-agents-users"
    session_ttl_hours: int = 24
    session_cleanup_interval_seconds: int = 0  # 0 disables the sweeper

    # Per-user Supabase credentials are encrypted with this secret
    encryption_key: Optional[str] = None

    # Webhooks
    agent_webhook_url: str = ""
    agent_webhook_timeout_seconds: float = 120.0
    webhook_test_timeout_seconds: float = 10.0
    user_webhook_timeout_seconds: float = 30.0
    user_webhook_max_attempts: int = 3

    # App
    app_name: str = "oto-reach-dashboard"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    login_rate_limit: str = "10/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_jwt_secret(self) -> str:
        """Signing secret; refuses the development fallback in production."""
        if self.jwt_secret:
            return self.jwt_secret
        if self.is_production:
            raise RuntimeError("JWT_SECRET environment variable must be set in production")
        return DEV_JWT_SECRET

    def get_encryption_key(self) -> str:
        if self.encryption_key:
            return self.encryption_key
        if self.is_production:
            raise RuntimeError("ENCRYPTION_KEY environment variable must be set in production")
        return DEV_ENCRYPTION_KEY

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
