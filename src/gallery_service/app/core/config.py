from functools import lru_cache
from pathlib import Path

from pixelvault_imaging import DerivativeSettings
from pydantic import Field
from pydantic_settings import BaseSettings


def get_project_root() -> Path:
    current_path = Path(__file__).parent
    while current_path != current_path.parent:
        if (current_path / "pyproject.toml").exists():
            return current_path
        current_path = current_path.parent
    return Path(".")


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = Field(default="PixelVault Gallery Service")
    DEBUG: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8001)

    # CORS Settings
    ALLOWED_ORIGINS: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"]
    )

    # DB Settings
    DATABASE_URL: str = Field(default="sqlite:///./storage/databases/pixelvault.db")

    # Public identifier settings
    HASHIDS_SALT: str = Field(default="pixelvault-secret-salt-change-in-production")
    HASHIDS_MIN_LENGTH: int = Field(default=6)

    # Derivative settings
    THUMBNAIL_SIZE: int = Field(default=150)
    THUMBNAIL_QUALITY: int = Field(default=85)
    FULL_IMAGE_QUALITY: int = Field(default=92)
    FULL_IMAGE_MAX_SIZE: int | None = Field(default=None)
    WEBP_METHOD: int = Field(default=4)
    BLURHASH_GRID_SIZE: int = Field(default=32)
    BLURHASH_COMPONENTS_X: int = Field(default=4, ge=1, le=9)
    BLURHASH_COMPONENTS_Y: int = Field(default=4, ge=1, le=9)

    # Upload settings
    MAX_FILE_SIZE: int = Field(default=50 * 1024 * 1024)  # 50MB

    # Download presets: name -> (width, height)
    DOWNLOAD_PRESETS: dict[str, tuple[int, int]] = Field(
        default={"16x9": (1920, 1080), "9x16": (1080, 1920)}
    )

    # Serving settings
    PUBLIC_CACHE_CONTROL: str = Field(default="public, max-age=31536000, immutable")
    PRIVATE_CACHE_CONTROL: str = Field(default="private, no-cache, must-revalidate")

    # Session settings
    SESSION_COOKIE_NAME: str = Field(default="session_token")
    SESSION_TTL_SECONDS: int = Field(default=86400)  # 24 hours

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="./logs/pixelvault.log")

    model_config = {
        "env_file": get_project_root() / ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def absolute_database_url(self) -> str:
        """Get absolute database URL based on project root."""
        if self.DATABASE_URL.startswith("sqlite:///./"):
            relative_path = self.DATABASE_URL.replace("sqlite:///./", "")
            absolute_path = get_project_root() / relative_path
            return f"sqlite:///{absolute_path}"
        return self.DATABASE_URL

    @property
    def absolute_log_file(self) -> str:
        return str(get_project_root() / self.LOG_FILE)

    @property
    def derivative_settings(self) -> DerivativeSettings:
        return DerivativeSettings(
            thumbnail_size=self.THUMBNAIL_SIZE,
            thumbnail_quality=self.THUMBNAIL_QUALITY,
            full_quality=self.FULL_IMAGE_QUALITY,
            full_max_size=self.FULL_IMAGE_MAX_SIZE,
            webp_method=self.WEBP_METHOD,
            placeholder_grid_size=self.BLURHASH_GRID_SIZE,
            placeholder_components_x=self.BLURHASH_COMPONENTS_X,
            placeholder_components_y=self.BLURHASH_COMPONENTS_Y,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
