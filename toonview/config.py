from pydantic_settings import BaseSettings, SettingsConfigDict

# Page sizes accepted by the remote character endpoint
ALLOWED_PAGE_SIZES = (12, 24, 50, 100)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Remote character source
    DISNEY_API_URL: str = "https://api.disneyapi.dev/character"
    REQUEST_TIMEOUT: float = 10.0
    USER_AGENT: str = "toonview/0.1 (+https://api.disneyapi.dev)"

    # Catalog defaults
    DEFAULT_PAGE_SIZE: int = 50
    PLACEHOLDER_IMAGE: str = "https://placehold.co/600x400/png?text=No+Image"

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()
