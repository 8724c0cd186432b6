"""
Main processor for the Gallery Tagger.
"""

import time
from typing import List, Optional
from .config import PipelineConfig, settings
from .gallery import is_valid, make_entry, place_output, write_gallery
from .logging import get_logger, RunMetrics
from .models import GalleryEntry, ImageRecord, RunSummary
from .scanner import ScanError, scan_inputs
from .tagger import VehicleTagger
from .vision_client import VisionClient


class ProcessorError(Exception):
    """Custom exception for fatal processor errors."""
    pass


class GalleryProcessor:
    """Tags a directory of vehicle photos and writes the gallery fragment."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        tagger: Optional[VehicleTagger] = None,
        api_key: Optional[str] = None,
    ):
        self.logger = get_logger("processor")
        self.metrics = RunMetrics()
        self.config = config or settings.pipeline_config()
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self._tagger = tagger

    @property
    def tagger(self) -> VehicleTagger:
        if self._tagger is None:
            self._tagger = VehicleTagger(self.config, client=VisionClient(api_key=self.api_key))
        return self._tagger

    def check_startup(self) -> List[ImageRecord]:
        """Fail fast on a missing credential or input folder, then scan."""
        if not self.api_key.strip():
            raise ProcessorError("Missing OPENAI_API_KEY. Set it and re-run.")

        try:
            records = scan_inputs(self.config.input_dir)
        except ScanError as e:
            raise ProcessorError(str(e))

        self.logger.info(f"📁 Input folder: {self.config.input_dir}")
        self.logger.info(f"🖼️  Found {len(records)} image(s).")
        if not records:
            self.logger.warning(f"⚠️  No images found. Put files into {self.config.input_dir} and re-run.")
        return records

    def process_image(self, record: ImageRecord) -> Optional[GalleryEntry]:
        """Classify one image; copy it and return its entry if recognised."""
        start_time = time.time()
        result = self.tagger.classify(record.source_path, record.hints)

        if not is_valid(result):
            self.metrics.log_image_skipped(record.filename, result.status.value)
            return None

        dest = place_output(record.source_path, result, self.config.output_dir)
        entry = make_entry(result, dest, self.config.output_doc_path)
        self.metrics.log_image_tagged(record.filename, dest.name, time.time() - start_time)
        self.logger.info(f"✅ Processed: {record.filename} → {entry.title}")
        return entry

    def run(self) -> RunSummary:
        """Process every image once, in scan order, and write the gallery."""
        start_time = time.time()
        records = self.check_startup()
        self.metrics.metrics["images_found"] = len(records)

        entries: List[GalleryEntry] = []
        for record in records:
            try:
                entry = self.process_image(record)
            except Exception as e:
                self.metrics.log_image_failure(record.filename, str(e))
                continue
            if entry is not None:
                entries.append(entry)

        html_path = write_gallery(entries, self.config.output_doc_path)

        metrics = self.metrics.get_metrics()
        summary = RunSummary(
            found=metrics["images_found"],
            tagged=metrics["images_tagged"],
            skipped=metrics["images_skipped"],
            failed=metrics["images_failed"],
            processing_time=time.time() - start_time,
            html_path=html_path,
            entries=entries,
        )

        self.logger.info(
            f"🏁 Done! {summary.tagged} tagged, {summary.skipped} skipped, {summary.failed} failed "
            f"of {summary.found} image(s) in {summary.processing_time:.1f}s"
        )
        self.logger.info(f"📝 HTML: {html_path}")
        self.logger.info(f"📦 Images: {self.config.output_dir}")
        return summary

    def close(self):
        """Clean up resources."""
        if self._tagger is not None:
            self._tagger.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
