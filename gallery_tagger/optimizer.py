"""
Responsive image variants for the processed gallery.

Every processed photo is resized to a fixed set of widths (never upscaled)
and re-encoded as AVIF, WebP and JPEG. A manifest.json mapping each original
to its variants is written next to the outputs.
"""

import json
import os
from pathlib import Path
from typing import List, Optional
from PIL import Image, ImageOps, UnidentifiedImageError
from .config import OptimizerConfig, settings
from .logging import get_logger
from .models import ManifestItem, Variant


OPTIMIZABLE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".avif"}

MANIFEST_NAME = "manifest.json"


class OptimizerError(Exception):
    """Raised when a single variant cannot be produced."""
    pass


class GalleryOptimizer:
    """Builds AVIF/WebP/JPEG size variants for each processed image."""

    def __init__(self, config: Optional[OptimizerConfig] = None):
        self.logger = get_logger("optimizer")
        self.config = config or settings.optimizer_config()

    def output_path(self, stem: str, width: int, fmt: str) -> Path:
        return self.config.output_dir / f"{stem}-{width}.{fmt}"

    def target_widths(self, original_width: int) -> List[int]:
        """Configured widths that fit the original, or the original width alone."""
        widths = [width for width in self.config.sizes if width <= original_width]
        return widths or [original_width]

    def encode(self, image: Image.Image, width: int, fmt: str, out_file: Path) -> None:
        """Resize (keeping aspect ratio) and save one variant."""
        if width < image.width:
            height = max(1, round(image.height * width / image.width))
            image = image.resize((width, height), Image.LANCZOS)

        try:
            if fmt == "avif":
                image.save(out_file, format="AVIF", quality=self.config.avif_quality)
            elif fmt == "webp":
                image.save(out_file, format="WEBP", quality=self.config.webp_quality, method=6)
            elif fmt == "jpg":
                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")
                image.save(
                    out_file,
                    format="JPEG",
                    quality=self.config.jpeg_quality,
                    optimize=True,
                    progressive=True,
                )
            else:
                raise OptimizerError(f"Unsupported output format: {fmt}")
        except (OSError, KeyError, ValueError) as e:
            # A half-written file would be picked up as "existing" on the next run
            if out_file.exists():
                out_file.unlink()
            raise OptimizerError(f"Failed writing {out_file.name}: {e}")

    def encode_widths(self, input_path: Path, image: Image.Image, widths: List[int]) -> List[Variant]:
        """Encode every configured format at each width; failed variants are left out."""
        variants = []
        for width in widths:
            for fmt in self.config.formats:
                out_file = self.output_path(input_path.stem, width, fmt)
                if not self.config.overwrite and out_file.exists():
                    variants.append(Variant(format=fmt, width=width, path=str(out_file)))
                    continue
                try:
                    self.encode(image, width, fmt, out_file)
                except OptimizerError as e:
                    self.logger.error(f"❌ {e}")
                    continue
                variants.append(Variant(format=fmt, width=width, path=str(out_file)))
                self.logger.info(f"✅ {input_path.name} -> {out_file.name}")
        return variants

    def process_one(self, input_path: Path) -> Optional[ManifestItem]:
        """Produce every variant for one image; None if it cannot be opened."""
        try:
            with Image.open(input_path) as opened:
                image = ImageOps.exif_transpose(opened)
                image.load()
        except (OSError, UnidentifiedImageError) as e:
            self.logger.error(f"❌ Could not open {input_path.name}: {e}")
            return None

        if not image.width:
            self.logger.warning(f"⚠️  No width for {input_path.name}. Skipping.")
            return None

        widths = self.target_widths(image.width)
        variants = self.encode_widths(input_path, image, widths)
        if not variants and widths != [image.width]:
            # every resized encode failed, try once more without resizing
            self.logger.warning(f"⚠️  No resized variants for {input_path.name}; keeping original width")
            variants = self.encode_widths(input_path, image, [image.width])

        return ManifestItem(original=str(input_path), variants=variants)

    def run(self) -> List[ManifestItem]:
        """Optimize every image in the input folder and write the manifest."""
        self.config.input_dir.mkdir(parents=True, exist_ok=True)
        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        files = [
            name for name in os.listdir(self.config.input_dir)
            if Path(name).suffix.lower() in OPTIMIZABLE_EXTENSIONS
            and (self.config.input_dir / name).is_file()
        ]
        if not files:
            self.logger.info(f"No images found in {self.config.input_dir}")
            return []

        self.logger.info(f"📁 Input:  {self.config.input_dir}")
        self.logger.info(f"📦 Output: {self.config.output_dir}")
        self.logger.info(f"🖼️  Images: {len(files)}")
        self.logger.info(f"🔧 Sizes: {', '.join(str(size) for size in self.config.sizes)} (px)")

        manifest = []
        for name in files:
            item = self.process_one(self.config.input_dir / name)
            if item is not None:
                manifest.append(item)

        manifest_path = self.config.output_dir / MANIFEST_NAME
        manifest_path.write_text(
            json.dumps([item.model_dump() for item in manifest], indent=2),
            encoding="utf-8",
        )
        self.logger.info(f"📝 Wrote manifest: {manifest_path}")
        self.logger.info("✅ Optimization complete!")
        return manifest
