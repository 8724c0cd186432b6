"""
Logging configuration for the Gallery Tagger.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional
from rich.logging import RichHandler
from .config import settings


def setup_logging(level: Optional[str] = None, debug_log_file: Optional[Path] = None) -> None:
    """Configure console logging, plus an append-only file log when debugging."""
    handlers = [RichHandler(
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
        show_level=False,
        markup=False
    )]

    if debug_log_file is not None:
        debug_log_file = Path(debug_log_file)
        debug_log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(debug_log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, (level or settings.log_level).upper()),
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str):
    """Get a standard logger instance."""
    return logging.getLogger(name)


class RunMetrics:
    """Counters for a single tagging run."""

    def __init__(self):
        self.logger = get_logger("metrics")
        self.metrics: Dict[str, Any] = {
            "images_found": 0,
            "images_tagged": 0,
            "images_skipped": 0,
            "images_failed": 0,
            "processing_time": 0.0,
        }

    def log_image_tagged(self, source: str, dest: str, processing_time: float) -> None:
        """Record an image that was identified and copied."""
        self.metrics["images_tagged"] += 1
        self.metrics["processing_time"] += processing_time
        self.logger.debug(f"Image tagged: {source} -> {dest} | Time: {processing_time:.3f}s")

    def log_image_skipped(self, source: str, reason: str) -> None:
        """Record an image the model could not identify."""
        self.metrics["images_skipped"] += 1
        self.logger.info(f"⚠️  Skipped unknown vehicle: {source} ({reason})")

    def log_image_failure(self, source: str, error: str) -> None:
        """Record an image that raised while being processed."""
        self.metrics["images_failed"] += 1
        self.logger.warning(f"Image processing failed: {source} | Error: {error}")

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics."""
        return self.metrics.copy()
