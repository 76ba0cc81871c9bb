from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Bypasses RLS; needed to read other users' grants

    # Role resolution
    role_cache_ttl_sec: float = Field(0.0, ge=0, le=300)  # 0 disables caching; capped so revocations apply within minutes
    role_cache_max_size: int = 500
    enforce_grant_expiry: bool = True  # Treat grants past expires_at as inactive

    # App
    app_name: str = "community-access"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:8081,http://localhost:19006,http://127.0.0.1:8081"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def role_cache_enabled(self) -> bool:
        return self.role_cache_ttl_sec > 0 and self.role_cache_max_size > 0

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
