"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "BMA Map"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream data (relative source locations are joined onto data_base_url)
    data_base_url: str = "https://raw.githubusercontent.com/Pongpisud1998/bmamap/main/geodata/"
    icon_base_url: str = "https://raw.githubusercontent.com/Pongpisud1998/bmamap/main/images/"
    basemap_base_url: str = "https://raw.githubusercontent.com/Pongpisud1998/bmamap/main/basemap/"

    # Fetching
    fetch_timeout: float = 10.0     # seconds per request
    fetch_retries: int = 1          # connection-level retries
    max_in_flight: int = 4          # concurrent source fetches

    # Live API polling (Air4Thai)
    live_poll_enabled: bool = True
    live_poll_interval: float = 300.0   # seconds

    # Selection defaults (fall back to built-ins when unrecognized)
    default_basemap: str = "google_hybrid"
    default_quantity: str = "AQI"

    # Initial camera
    map_center_lng: float = 100.5
    map_center_lat: float = 13.75
    initial_zoom: int = 10


settings = Settings()
