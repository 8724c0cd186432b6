"""Input directory scanning and filename hints."""

import os
import re
from pathlib import Path
from typing import List

from .models import FilenameHints, ImageRecord


IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

_SEPARATORS = re.compile(r"[_\s\-.]+")
_YEAR = re.compile(r"^\d{4}$")


class ScanError(Exception):
    """Raised when the input directory cannot be scanned."""
    pass


def is_image(filename: str) -> bool:
    """Check if a file is a supported raster image based on extension."""
    return Path(filename).suffix.lower() in IMAGE_EXTENSIONS


def derive_hints(filename: str) -> FilenameHints:
    """
    Pull a candidate year and free-text words out of a filename.

    "1969_Camaro_SS.jpg" -> year "1969", words ["Camaro", "SS"]. The first
    four-digit token wins; every token other than the year is a word hint.
    """
    stem = Path(filename).stem
    parts = [part for part in _SEPARATORS.split(stem) if part]
    year = next((part for part in parts if _YEAR.match(part)), "")
    words = [part for part in parts if part != year]
    return FilenameHints(year=year, words=words)


def scan_inputs(input_dir: Path) -> List[ImageRecord]:
    """List supported images in input_dir, in directory order."""
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise ScanError(f"Input folder not found: {input_dir}")

    records = []
    for name in os.listdir(input_dir):
        path = input_dir / name
        if is_image(name) and path.is_file():
            records.append(ImageRecord(source_path=path, hints=derive_hints(name)))
    return records
