"""
Vehicle identification through a vision-capable language model.
"""

import base64
import json
import re
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from .config import PipelineConfig
from .logging import get_logger
from .models import FilenameHints, TagResult, TagStatus
from .vision_client import VisionAPIError, VisionClient, extract_output_text


SYSTEM_PROMPT = """
You are a precise automotive identifier. Look at the image and provide:
- year (4-digit or empty if unknown)
- make (brand)
- model
- description (a short, neutral sentence)

Return ONLY strict JSON:
{"year":"YYYY or empty","make":"...","model":"...","description":"..."}
If uncertain, leave fields empty. No extra keys.
""".strip()

TAG_FIELDS = ("year", "make", "model", "description")

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def to_data_url(image_path: Path) -> str:
    """Encode an image file as an inline data URL."""
    image_path = Path(image_path)
    mime = MIME_TYPES.get(image_path.suffix.lower(), "application/octet-stream")
    encoded = base64.b64encode(image_path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def build_user_prompt(hints: FilenameHints) -> str:
    """User instruction carrying the filename hints as weak priors."""
    lines = ["Detect year, make, model from this car photo."]
    if hints.year:
        lines.append(f"Filename hint year: {hints.year}")
    if hints.words:
        lines.append(f"Filename hint words: {' '.join(hints.words)}")
    lines.append("Return strict JSON only.")
    return "\n".join(lines)


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapped around a reply, if present."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


def decode_tag_response(text: str) -> TagResult:
    """Decode the model's reply into a TagResult.

    Anything that is not a JSON object is MALFORMED. Inside an object, a
    field that is missing or not a string decodes as "".
    """
    cleaned = strip_code_fence(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        return TagResult.empty(TagStatus.MALFORMED, raw_text=cleaned)

    if not isinstance(parsed, dict):
        return TagResult.empty(TagStatus.MALFORMED, raw_text=cleaned)

    fields: Dict[str, str] = {}
    for name in TAG_FIELDS:
        value = parsed.get(name)
        fields[name] = value.strip() if isinstance(value, str) else ""
    return TagResult(raw_text=cleaned, status=TagStatus.OK, **fields)


class VehicleTagger:
    """Classifies one image at a time, retrying only on rate limits."""

    def __init__(
        self,
        config: PipelineConfig,
        client: Optional[VisionClient] = None,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.logger = get_logger("tagger")
        self.config = config
        self.client = client or VisionClient()
        self.sleep = sleep

    def backoff_seconds(self, attempt: int) -> float:
        """Delay before retrying after the given (1-based) attempt."""
        return self.config.backoff_base_ms * attempt ** 2 / 1000.0

    def classify(self, image_path: Path, hints: Optional[FilenameHints] = None) -> TagResult:
        """Identify the vehicle in an image.

        Always returns a TagResult; service errors never propagate.
        """
        hints = hints or FilenameHints()
        image_url = to_data_url(image_path)
        user_prompt = build_user_prompt(hints)
        max_attempts = self.config.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                response = self.client.create_response(
                    model=self.config.model_identifier,
                    system_prompt=SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                    image_url=image_url,
                    temperature=self.config.temperature,
                    max_output_tokens=self.config.max_output_tokens,
                )
            except VisionAPIError as e:
                code = e.status_code or ""
                self.logger.error(f"❌ API error (attempt {attempt}) {code}: {e}")

                if not e.is_rate_limited:
                    return TagResult.empty(TagStatus.FAILED)
                if attempt >= max_attempts:
                    break

                wait = self.backoff_seconds(attempt)
                self.logger.warning(f"⏳ Rate limited; retrying in {wait * 1000:.0f}ms...")
                self.sleep(wait)
                continue

            return self._parse_response(image_path, response)

        self.logger.error(f"❌ Still rate limited after {max_attempts} attempts: {Path(image_path).name}")
        return TagResult.empty(TagStatus.EXHAUSTED)

    def _parse_response(self, image_path: Path, response: Dict[str, Any]) -> TagResult:
        raw_text = extract_output_text(response)
        if not raw_text:
            self.logger.warning("⚠️  Empty response from model. Full response follows:")
            self.logger.warning(json.dumps(response, indent=2, default=str))
            return TagResult.empty(TagStatus.EMPTY)

        result = decode_tag_response(raw_text)
        if result.status is TagStatus.MALFORMED:
            self.logger.warning(f"❗ JSON parse failed for {Path(image_path).name}. Raw model output:")
            self.logger.warning(result.raw_text)
            return result

        self.logger.info(
            f"✅ Parsed -> year:\"{result.year}\", make:\"{result.make}\", model:\"{result.model}\""
        )
        return result
