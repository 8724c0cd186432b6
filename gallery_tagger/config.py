"""
Configuration management for the Gallery Tagger.
"""

import json
from pathlib import Path
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineConfig(BaseModel):
    """Everything the tagging pipeline needs, passed in explicitly."""
    input_dir: Path
    output_dir: Path
    output_doc_path: Path
    model_identifier: str
    max_attempts: int = Field(default=3, gt=0)
    backoff_base_ms: int = Field(default=1000, ge=0)
    temperature: float = 0.2
    max_output_tokens: int = 300


class OptimizerConfig(BaseModel):
    """Settings for the responsive image optimizer."""
    input_dir: Path
    output_dir: Path
    sizes: Tuple[int, ...] = (1600, 1200, 768, 480)
    formats: Tuple[str, ...] = ("avif", "webp", "jpg")
    jpeg_quality: int = 78
    webp_quality: int = 78
    avif_quality: int = 45
    overwrite: bool = False


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Inference service
    openai_api_key: str = Field(default="")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    model: str = Field(default="gpt-4o")  # or gpt-4o-mini
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=300, gt=0)
    request_timeout: float = Field(default=60.0, gt=0.0)

    # Retry behaviour
    max_attempts: int = Field(default=3, gt=0)
    backoff_base_ms: int = Field(default=1000, ge=0)

    # Paths
    input_dir: Path = Field(default=Path("images/gallery"))
    output_dir: Path = Field(default=Path("images/processed_gallery"))
    output_html: Path = Field(default=Path("images/gallery.html"))

    # Optimizer
    optimizer_input_dir: Optional[Path] = Field(default=None)  # defaults to output_dir
    optimizer_output_dir: Path = Field(default=Path("images/optimized_gallery"))
    optimizer_sizes: List[int] = Field(default=[1600, 1200, 768, 480])
    jpeg_quality: int = Field(default=78, ge=1, le=100)
    webp_quality: int = Field(default=78, ge=1, le=100)
    avif_quality: int = Field(default=45, ge=1, le=100)
    optimizer_overwrite: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    debug_log_file: Path = Field(default=Path("debug.log"))

    @field_validator("openai_base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Ensure the service URL is properly formatted."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("OPENAI_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("optimizer_sizes", mode="before")
    @classmethod
    def parse_sizes(cls, v):
        """Accept a JSON array or a comma-separated list of widths."""
        if isinstance(v, str):
            if not v:
                return []
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    raise ValueError("Invalid JSON format for OPTIMIZER_SIZES")
            return [int(size.strip()) for size in v.split(",") if size.strip()]
        return v

    @field_validator("optimizer_sizes")
    @classmethod
    def validate_sizes(cls, v):
        if any(size <= 0 for size in v):
            raise ValueError("OPTIMIZER_SIZES must be positive widths")
        return v

    def pipeline_config(self) -> PipelineConfig:
        """Build the explicit tagging pipeline configuration."""
        return PipelineConfig(
            input_dir=self.input_dir,
            output_dir=self.output_dir,
            output_doc_path=self.output_html,
            model_identifier=self.model,
            max_attempts=self.max_attempts,
            backoff_base_ms=self.backoff_base_ms,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

    def optimizer_config(self) -> OptimizerConfig:
        """Build the optimizer configuration."""
        return OptimizerConfig(
            input_dir=self.optimizer_input_dir or self.output_dir,
            output_dir=self.optimizer_output_dir,
            sizes=tuple(self.optimizer_sizes),
            jpeg_quality=self.jpeg_quality,
            webp_quality=self.webp_quality,
            avif_quality=self.avif_quality,
            overwrite=self.optimizer_overwrite,
        )


# Global settings instance
settings = Settings()
