from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Bus SG Route API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    # CORS: "*" for dev; in production set to comma-separated origins
    cors_origins: str = "*"
    catalog_path: str = "data/catalog.json"  # Stops + service routes JSON, relative to backend root or absolute
    bus_api_base_url: str = ""  # When set, stops and routes come from the bus API instead of catalog_path
    bus_api_timeout_seconds: float = 10.0
    lookup_max_workers: int = 8  # Shared thread pool size for per-service lookups

    # Optional API key auth. When enabled, requests must include X-API-Key or Authorization: Bearer <key>.
    api_key_required: bool = False
    api_keys: str = ""  # Comma-separated list of valid keys (no spaces). Example: API_KEYS=key1,key2


def get_settings() -> Settings:
    return Settings()
