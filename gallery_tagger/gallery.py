"""
Output placement and HTML rendering for recognised vehicles.
"""

import os
import re
import shutil
from pathlib import Path
from typing import Iterable

from jinja2 import Environment

from .logging import get_logger
from .models import GalleryEntry, TagResult


logger = get_logger("gallery")

_jinja_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
Template = _jinja_env.from_string

UNKNOWN_MAKE = "unknown"
UNKNOWN_MODEL = "vehicle"

_NON_ALNUM = re.compile(r"[^a-z0-9]+", re.IGNORECASE)


GALLERY_TEMPLATE = Template("""\
<section id="gallery" class="py-5 bg-dark text-white">
  <div class="container">
    <h2 class="text-center mb-5">Vehicle Gallery</h2>
    <div id="grid" class="row g-4">
{% for entry in entries %}
      <article class="col-md-6 col-lg-4 gallery-item"
               data-year="{{ entry.year }}" data-make="{{ entry.make }}" data-model="{{ entry.model }}"
               data-desc="{{ entry.description }}">
        <div class="card bg-secondary text-white h-100 border-0 shadow-sm">
          <img src="{{ entry.src }}" class="card-img-top" alt="{{ entry.title }}" loading="lazy">
          <div class="card-body">
            <h5 class="card-title">{{ entry.title }}</h5>
            <p class="card-text">{{ entry.description }}</p>
          </div>
        </div>
      </article>
{% endfor %}
    </div>
  </div>
</section>
""")


def is_valid(result: TagResult) -> bool:
    """True when the model named both a make and a model it was sure about."""
    make = result.make.strip()
    model = result.model.strip()
    if not make or not model:
        return False
    return make.lower() != UNKNOWN_MAKE and model.lower() != UNKNOWN_MODEL


def safe_name(value: str) -> str:
    """Lower-case a value and squash anything non-alphanumeric into underscores."""
    return _NON_ALNUM.sub("_", value).strip("_").lower()


def base_name(result: TagResult) -> str:
    """Normalised output name (without extension) for a result."""
    return f"{safe_name(result.make)}_{safe_name(result.model)}_{safe_name(result.year)}"


def place_output(source_path: Path, result: TagResult, output_dir: Path) -> Path:
    """Copy a recognised image into output_dir under a unique normalised name.

    Existing files are never overwritten: "name.jpg" becomes "name_1.jpg",
    "name_2.jpg", ... The source file is left in place.
    """
    source_path = Path(source_path)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    base = base_name(result)
    ext = source_path.suffix
    dest = output_dir / f"{base}{ext}"
    counter = 1
    while dest.exists():
        dest = output_dir / f"{base}_{counter}{ext}"
        counter += 1

    shutil.copy2(source_path, dest)
    logger.info(f"✅ Copied recognized image as {dest.name}")
    return dest


def relative_src(image_path: Path, html_path: Path) -> str:
    """Image path as referenced from the HTML document, with forward slashes."""
    rel = os.path.relpath(Path(image_path).resolve(), Path(html_path).resolve().parent)
    return Path(rel).as_posix()


def make_entry(result: TagResult, image_path: Path, html_path: Path) -> GalleryEntry:
    """Fold a valid result and its copied file into a gallery entry."""
    return GalleryEntry(
        year=result.year,
        make=result.make,
        model=result.model,
        description=result.description,
        image_path=image_path,
        src=relative_src(image_path, html_path),
    )


def render_gallery(entries: Iterable[GalleryEntry]) -> str:
    """Render the gallery section, entries in the order given."""
    return GALLERY_TEMPLATE.render(entries=list(entries)).strip() + "\n"


def write_gallery(entries: Iterable[GalleryEntry], html_path: Path) -> Path:
    """Render and write the gallery document, replacing any previous one."""
    html_path = Path(html_path)
    html_path.parent.mkdir(parents=True, exist_ok=True)
    html_path.write_text(render_gallery(entries), encoding="utf-8")
    return html_path
