"""
Client for the hosted multimodal inference service.
"""

import re
import time
from typing import Any, Dict, Optional
import httpx
from .config import settings
from .logging import get_logger


_RATE_LIMIT_PATTERN = re.compile(r"rate", re.IGNORECASE)


class VisionAPIError(Exception):
    """Raised when a request to the inference service fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        """True for HTTP 429 or an error message that mentions a rate limit."""
        return self.status_code == 429 or bool(_RATE_LIMIT_PATTERN.search(str(self)))


class VisionClient:
    """Thin client for an OpenAI-compatible Responses endpoint.

    One call submits one system instruction, one user instruction and one
    inline image. Retrying is left to the caller.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.logger = get_logger("vision_client")
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.timeout = timeout or settings.request_timeout
        self._setup_http_client(transport)

    def _setup_http_client(self, transport: Optional[httpx.BaseTransport] = None):
        """Setup HTTP client with the service credential."""
        self.client = httpx.Client(
            timeout=self.timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            }
        )

    def create_response(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
        temperature: float = 0.2,
        max_output_tokens: int = 300,
    ) -> Dict[str, Any]:
        """Submit one image plus instructions and return the decoded response body."""
        payload = {
            "model": model,
            "input": [
                {
                    "role": "system",
                    "content": [{"type": "input_text", "text": system_prompt}],
                },
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": user_prompt},
                        {"type": "input_image", "image_url": image_url},
                    ],
                },
            ],
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        }

        url = f"{self.base_url}/responses"
        request_start = time.time()
        try:
            response = self.client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise VisionAPIError(
                f"HTTP {e.response.status_code}: {_error_message(e.response)}",
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise VisionAPIError(f"Request failed: {e}")

        self.logger.debug(f"Response from {model} in {time.time() - request_start:.2f}s")

        try:
            return response.json()
        except ValueError:
            raise VisionAPIError(
                f"Response body is not JSON: {response.text[:200]}",
                status_code=response.status_code,
            )

    def close(self):
        """Clean up resources."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text


def extract_output_text(response: Dict[str, Any]) -> str:
    """Pull the model's text out of a Responses payload.

    Prefers the flattened ``output_text`` field, falling back to the first
    ``output_text`` block found in the structured ``output`` items.
    """
    if not isinstance(response, dict):
        return ""

    flattened = response.get("output_text")
    if isinstance(flattened, str) and flattened.strip():
        return flattened.strip()

    output = response.get("output")
    if not isinstance(output, list):
        return ""

    for item in output:
        if not isinstance(item, dict) or not isinstance(item.get("content"), list):
            continue
        for block in item["content"]:
            if isinstance(block, dict) and block.get("type") == "output_text":
                text = block.get("text")
                if isinstance(text, str) and text.strip():
                    return text.strip()
    return ""
