"""
Data models for the Gallery Tagger.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FilenameHints(BaseModel):
    """Weak priors pulled out of a source filename."""
    model_config = ConfigDict(frozen=True)

    year: str = ""
    words: List[str] = []


class ImageRecord(BaseModel):
    """An input image found by the directory scan."""
    model_config = ConfigDict(frozen=True)

    source_path: Path
    hints: FilenameHints = Field(default_factory=FilenameHints)

    @property
    def filename(self) -> str:
        return self.source_path.name


class TagStatus(str, Enum):
    """How a classification call ended."""
    OK = "ok"                  # decoded the four fields
    EMPTY = "empty"            # service answered without any text
    MALFORMED = "malformed"    # text was not a JSON object
    FAILED = "failed"          # non-retryable transport/service error
    EXHAUSTED = "exhausted"    # still rate limited after the last attempt


class TagResult(BaseModel):
    """Vehicle metadata extracted by the inference service."""
    year: str = ""
    make: str = ""
    model: str = ""
    description: str = ""
    raw_text: str = ""
    status: TagStatus = TagStatus.OK

    @classmethod
    def empty(cls, status: TagStatus, raw_text: str = "") -> "TagResult":
        """An all-empty result for one of the failure outcomes."""
        return cls(status=status, raw_text=raw_text)

    @property
    def is_empty(self) -> bool:
        return not (self.year or self.make or self.model or self.description)


class GalleryEntry(BaseModel):
    """A recognised vehicle, copied and ready to be rendered."""
    year: str
    make: str
    model: str
    description: str = ""
    image_path: Path
    src: str = ""  # image path relative to the HTML document

    @property
    def title(self) -> str:
        return " ".join(part for part in (self.year, self.make, self.model) if part)


class RunSummary(BaseModel):
    """Result of one tagging run."""
    found: int = 0
    tagged: int = 0
    skipped: int = 0
    failed: int = 0
    processing_time: float = 0.0
    html_path: Optional[Path] = None
    entries: List[GalleryEntry] = []


class Variant(BaseModel):
    """One resized/re-encoded output of the optimizer."""
    format: str
    width: int
    path: str


class ManifestItem(BaseModel):
    """All variants produced from one original image."""
    original: str
    variants: List[Variant] = []
