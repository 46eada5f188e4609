import os
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_SEED_PATH = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "data", "seed_places.json")
)


class Settings(BaseSettings):
    PROJECT_NAME: str = "WayGuard"
    VERSION: str = "0.2.0"
    BRIEF_DESCRIPTION: str = "Location-based safety intelligence for travellers: nearby places, area safety scores and emergency dispatch."

    ENV: str = Field("development", description="Application environment (e.g., production, development)")

    # --- Persistence ---
    ENABLE_REDIS: bool = Field(False, description="Feature flag for the Redis record store")
    REDIS_URL: Optional[str] = Field(None, description="Redis URL for the record store")
    SEED_PLACES_PATH: str = Field(_DEFAULT_SEED_PATH, description="JSON file of places loaded into an empty place set")

    # --- Identity provider ---
    AUTH_USER_URL: Optional[str] = Field(None, description="Identity provider endpoint returning the user for a bearer token")
    AUTH_API_KEY: Optional[str] = Field(None, description="API key sent alongside the bearer token")
    AUTH_TIMEOUT: float = 5.0  # seconds
    DEV_IDENTITY_TOKEN: str = Field("mock_identity_token_for_testing", description="Accepted as a dev user when ENV=development")
    DEV_USER_ID: str = "dev-user"

    # --- Search radii (meters) ---
    DEFAULT_PLACE_RADIUS_M: float = 5000
    AREA_SAFETY_RADIUS_M: float = 1000
    EMERGENCY_SEARCH_RADIUS_M: float = 10000
    EMERGENCY_NEAREST_LIMIT: int = 3

    # --- Safety scoring ---
    SAFETY_DISPLAY_LIMIT: int = 5
    AUTO_ZONE_MIN_SEVERITY: int = 4
    AUTO_ZONE_RADIUS_M: float = 200

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )


settings = Settings()
