#!/usr/bin/env python3
"""
Basic tests for the Gallery Tagger.
These check imports, configuration, models and logging without calling any
external service.
"""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def test_imports():
    """Test that all modules can be imported."""
    from gallery_tagger import config, logging, models, scanner, vision_client, tagger, gallery, processor, optimizer, main
    assert main.main is not None


def test_config(monkeypatch):
    """Test configuration loading from the environment."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-api-key")
    monkeypatch.setenv("MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPTIMIZER_SIZES", "[800, 400]")

    from gallery_tagger.config import Settings
    settings = Settings(_env_file=None)

    assert settings.openai_api_key == "test-api-key"
    assert settings.model == "gpt-4o-mini"
    assert settings.max_attempts == 3
    assert settings.backoff_base_ms == 1000
    assert settings.optimizer_sizes == [800, 400]

    pipeline = settings.pipeline_config()
    assert pipeline.model_identifier == "gpt-4o-mini"
    assert pipeline.output_doc_path == Path("images/gallery.html")
    assert pipeline.temperature == 0.2
    assert pipeline.max_output_tokens == 300

    optimizer = settings.optimizer_config()
    assert optimizer.input_dir == settings.output_dir
    assert optimizer.sizes == (800, 400)


def test_config_validation():
    """Invalid values are rejected."""
    import pytest
    from pydantic import ValidationError
    from gallery_tagger.config import Settings

    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="CHATTY")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, openai_base_url="api.openai.com")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, max_attempts=0)

    settings = Settings(_env_file=None, log_level="debug", openai_base_url="http://localhost:8080/v1/")
    assert settings.log_level == "DEBUG"
    assert settings.openai_base_url == "http://localhost:8080/v1"


def test_missing_credential(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    from gallery_tagger.config import Settings

    assert Settings(_env_file=None).openai_api_key == ""


def test_models():
    """Test data models."""
    from gallery_tagger.models import GalleryEntry, TagResult, TagStatus

    result = TagResult.empty(TagStatus.EXHAUSTED)
    assert result.is_empty
    assert result.status is TagStatus.EXHAUSTED

    entry = GalleryEntry(year="1969", make="Chevrolet", model="Camaro", image_path=Path("x.jpg"))
    assert entry.title == "1969 Chevrolet Camaro"

    entry = GalleryEntry(year="", make="Ford", model="Mustang", image_path=Path("x.jpg"))
    assert entry.title == "Ford Mustang"


def test_logging(tmp_path):
    """Test logging setup and run counters."""
    from gallery_tagger.logging import setup_logging, get_logger, RunMetrics

    log_file = tmp_path / "debug.log"
    setup_logging("DEBUG", log_file)
    logger = get_logger("test")
    logger.info("Test log message")
    logger.info("Second message")

    assert "Test log message" in log_file.read_text(encoding="utf-8")

    setup_logging("DEBUG", log_file)
    get_logger("test").info("After reconfigure")
    content = log_file.read_text(encoding="utf-8")
    assert "Second message" in content
    assert "After reconfigure" in content

    metrics = RunMetrics()
    metrics.log_image_tagged("a.jpg", "chevrolet_camaro_1969.jpg", 1.0)
    metrics.log_image_skipped("b.jpg", "exhausted")
    metrics.log_image_failure("c.jpg", "boom")

    current = metrics.get_metrics()
    assert current["images_tagged"] == 1
    assert current["images_skipped"] == 1
    assert current["images_failed"] == 1

    setup_logging("INFO")


def main():
    """Run the smoke tests through pytest."""
    import pytest
    return pytest.main([__file__, "-q"])


if __name__ == "__main__":
    sys.exit(main())
