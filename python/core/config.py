"""
Application configuration via Pydantic Settings.
Loads from environment variables with validation and defaults.

v2.0: Face pipeline settings (remote recognizer, detection, crop margins)
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache

from core.exceptions import InvalidModelError
from models.domain.face import RecognitionModel

VERSION = "2.0.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Server ===
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8001, alias="SERVER_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # === CORS ===
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # === Remote recognition service ===
    face_api_base_url: str = Field(default="http://192.168.2.242:8000", alias="FACE_API_BASE_URL")
    face_api_timeout: float = Field(default=30.0, alias="FACE_API_TIMEOUT")
    default_model: str = Field(default="magface", alias="FACE_DEFAULT_MODEL")
    default_threshold: float = Field(default=0.5, alias="FACE_DEFAULT_THRESHOLD")
    default_min_quality: Optional[int] = Field(default=1, alias="FACE_DEFAULT_MIN_QUALITY")

    # === Detection / cropping ===
    margin_horizontal: float = Field(default=0.2, ge=0, alias="FACE_MARGIN_HORIZONTAL")
    margin_vertical: float = Field(default=0.3, ge=0, alias="FACE_MARGIN_VERTICAL")
    min_face_size: int = Field(default=80, ge=1, alias="FACE_MIN_SIZE")
    scale_factor: float = Field(default=1.1, gt=1.0, alias="FACE_SCALE_FACTOR")
    min_neighbors: int = Field(default=3, ge=0, alias="FACE_MIN_NEIGHBORS")
    cascade_dir: Optional[str] = Field(default=None, alias="CASCADE_DIR")
    jpeg_quality: int = Field(default=95, ge=1, le=100, alias="JPEG_QUALITY")

    # === Uploads ===
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    crop_output_dir: str = Field(default="images", alias="CROP_OUTPUT_DIR")

    # === JWT (for auth) ===
    auth_enabled: bool = Field(default=True, alias="AUTH_ENABLED")
    jwt_secret: Optional[str] = Field(default=None, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    @field_validator("default_model")
    @classmethod
    def _normalize_default_model(cls, value: str) -> str:
        # A bad default must fail at startup, not on the first request
        try:
            return RecognitionModel.normalize(value, None)
        except InvalidModelError as e:
            raise ValueError(e.message) from e

    @property
    def cors_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
