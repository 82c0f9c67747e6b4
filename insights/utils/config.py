# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class HeatmapSettings(BaseSettings):
    """Spatial heatmap rendering settings."""

    model_config = SettingsConfigDict(env_prefix="HEATMAP_")

    radius: int = Field(default=28, description="Radial gradient radius in pixels")
    intensity: float = Field(default=0.65, description="Gradient center opacity (0-1)")
    default_viewport_width: int = Field(
        default=1440, description="Reference viewport width when no samples exist"
    )
    default_doc_height: int = Field(
        default=3000, description="Document height when no samples exist"
    )
    canvas_width: int = Field(default=800, description="Rendered canvas width")
    canvas_height: int = Field(default=600, description="Rendered canvas height")
    export_scale: int = Field(default=2, description="Upscale factor for exported images")


class SessionSettings(BaseSettings):
    """Session reconstruction settings."""

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    bounce_seconds: int = Field(
        default=10,
        description="Single-page sessions shorter than this (raw elapsed) are bounces",
    )


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for snapshot history."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class SnapshotSettings(BaseSettings):
    """Heatmap snapshot history settings."""

    model_config = SettingsConfigDict(env_prefix="SNAPSHOT_")

    backend: Literal["memory", "valkey"] = Field(
        default="memory", description="Snapshot store backend (memory, valkey)"
    )
    retention: int = Field(default=30, description="Maximum number of snapshots kept")
    key: str = Field(
        default="insights:heatmap:snapshots", description="Valkey list key for snapshots"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    heatmap: HeatmapSettings = Field(default_factory=HeatmapSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
