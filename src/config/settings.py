"""
Configuration management for planner-press.

Uses Pydantic for type-safe, validated configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

import constants


class PlannerPressSettings(BaseSettings):
    """Main configuration for planner-press.

    Settings can be overridden via:
    1. Environment variables (prefixed with PP_)
    2. .env file in project root
    3. Programmatic overrides

    Example:
        export PP_GRAYSCALE_API_KEY=secret
        export PP_PREVIEW_WEEK_CAP=2
    """

    # === Planner & Preview ===
    lead_in_days: int = Field(
        default=constants.LEAD_IN_DAYS,
        ge=0,
        le=31,
        description="Days the planner starts before the period start",
    )
    preview_week_cap: int = Field(
        default=constants.PREVIEW_WEEK_CAP,
        ge=1,
        description="Maximum planner weeks rendered in preview builds",
    )
    preview_page_cap: int = Field(
        default=constants.PREVIEW_PAGE_CAP,
        ge=1,
        description="Maximum pages copied per content fragment in preview builds",
    )
    book_format: Literal["A4", "A5", "A6"] = Field(
        default="A4", description="Trim format used for alignment blank pages"
    )

    # === Grayscale Conversion ===
    grayscale_strategy: Literal["remote", "local"] = Field(
        default="remote",
        description="Default grayscale strategy for fragments in grayscale mode",
    )
    grayscale_endpoint: str = Field(
        default="https://api.ghost.miomideal.com/api/process/grayscale",
        description="Grayscale conversion service endpoint (requires API key)",
    )
    grayscale_proxy_url: Optional[str] = Field(
        default=None,
        description="Trusted same-origin proxy for grayscale conversion (no API key)",
    )
    grayscale_api_key: Optional[str] = Field(
        default=None, description="API key sent as X-API-Key to the endpoint"
    )
    grayscale_cache_entries: int = Field(
        default=32, ge=1, le=1024, description="Converted documents kept in memory"
    )
    grayscale_max_concurrency: int = Field(
        default=2, ge=1, le=16, description="Concurrent grayscale uploads"
    )
    grayscale_shrink_threshold_bytes: int = Field(
        default=4 * 1024 * 1024,
        ge=0,
        description="Payloads above this size are shrunk before upload",
    )
    grayscale_shrink_target_ratio: float = Field(
        default=0.85,
        gt=0.0,
        le=1.0,
        description="Compressed re-save must reach this fraction of the original",
    )

    # === Holidays ===
    holiday_api_base: str = Field(
        default="https://openholidaysapi.org",
        description="Base URL of the public/school holiday service",
    )
    holiday_language: str = Field(
        default="DE", description="Preferred language for holiday labels"
    )

    # === Fragments & HTTP ===
    cdn_base_url: Optional[str] = Field(
        default=None, description="Prefix for relative fragment URLs"
    )
    http_timeout: int = Field(
        default=30, ge=5, le=300, description="HTTP request timeout in seconds"
    )

    # === Finishing ===
    watermark_path: Optional[Path] = Field(
        default=None, description="PNG overlaid on every page of watermarked builds"
    )
    watermark_scale: float = Field(
        default=1.4, gt=0.0, description="Scale applied to the watermark image"
    )
    watermark_opacity: float = Field(
        default=0.75, ge=0.0, le=1.0, description="Watermark opacity"
    )
    page_number_font_size: int = Field(
        default=9, ge=4, le=48, description="Page number font size in points"
    )
    page_number_margin: int = Field(
        default=20, ge=0, le=200, description="Page number margin in points"
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_rotation: str = Field(default="10 MB", description="Log file rotation size")
    log_retention: str = Field(
        default="10 days", description="Log file retention period"
    )
    log_to_file: bool = Field(default=False, description="Enable file logging")
    logs_dir: Path = Field(default=Path("logs"), description="Log files directory")

    @field_validator("cdn_base_url", "grayscale_proxy_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalise base URLs so paths can be appended with a single slash."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            return v or None
        return v

    model_config = {
        "env_prefix": "PP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Global settings instance
settings = PlannerPressSettings()



def reload_settings() -> PlannerPressSettings:
    """Reload settings from environment and .env file.

    Modules that imported ``settings`` by name keep the previous instance.
    """
    global settings
    settings = PlannerPressSettings()
    return settings
