"""
OpenRouter image provider.

Talks to OpenRouter's chat/completions endpoint with an image-capable model.
The prompt text goes first, followed by one image_url part per attachment in
the caller's order.
"""

import base64
import binascii
import json
import time
from typing import Any

import requests

from logoforge.core.config import Config
from logoforge.core.image_gen import GenerationResult, ensure_decodable
from logoforge.core.models import ImageArtifact
from logoforge.logging_config import get_logger, log_prompts
from logoforge.utils.exceptions import (
    AuthenticationError,
    NetworkError,
    NoImageProduced,
    RequestTimeoutError,
    ServiceError,
    TransientServiceError,
    ValidationError,
)

logger = get_logger(__name__)

_PROMPT_LOG_MAX = 50_000
_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "content", "message"})


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64/data URL strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        if obj.startswith("data:"):
            return f"<data URL, {len(obj)} chars>"
        return f"<string, {len(obj)} chars>"
    return obj


def _mime_from_content_type(content_type: str) -> str:
    """Return the image MIME type from a Content-Type header ('image/png' when not an image)."""
    mime = content_type.split(";")[0].strip().lower()
    return mime if mime.startswith("image/") else "image/png"


def _message_text(message: dict[str, Any]) -> str | None:
    """Extract assistant text from message.content (string or list of text parts)."""
    content = message.get("content")
    if isinstance(content, str):
        return content.strip() or None
    if isinstance(content, list):
        texts = [
            p.get("text", "") for p in content if isinstance(p, dict) and p.get("type") == "text"
        ]
        joined = "\n".join(t for t in texts if t).strip()
        return joined or None
    return None


class OpenRouterProvider:
    """Image provider for the OpenRouter API."""

    supports_attachments: bool = True

    def _api_key(self, config: Config, api_key_override: str | None) -> str:
        """Return the credential; a missing one is an authentication failure."""
        api_key = api_key_override if api_key_override is not None else config.openrouter_api_key
        if not api_key:
            raise AuthenticationError(
                "OpenRouter API key is required. Set OPENROUTER_API_KEY or provide it explicitly."
            )
        return api_key

    def _build_payload(
        self,
        prompt: str,
        attachments: list[ImageArtifact],
        model: str,
        aspect_ratio: str,
    ) -> dict[str, Any]:
        """Build the chat/completions payload."""
        content_parts: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        for attachment in attachments:
            content_parts.append(
                {"type": "image_url", "image_url": {"url": attachment.to_data_url()}}
            )
        return {
            "model": model,
            "modalities": ["image", "text"],
            "image_config": {"aspect_ratio": aspect_ratio},
            "messages": [{"role": "user", "content": content_parts}],
        }

    def _raise_for_status(self, response: requests.Response, model: str) -> None:
        """Map non-200 statuses onto the error taxonomy."""
        status = response.status_code
        if status == 200:
            return
        if status in (401, 403):
            raise AuthenticationError(
                "Authentication failed. Please check your OpenRouter API key.",
                status_code=status,
                response=response.text,
            )
        if status == 429:
            raise TransientServiceError(
                "Rate limit exceeded. Please wait before making more requests.",
                status_code=status,
                response=response.text,
            )
        if status >= 500:
            raise TransientServiceError(
                f"OpenRouter service error: {status}",
                status_code=status,
                response=response.text,
            )
        if status == 404:
            raise ServiceError(
                f"Model not found or endpoint unavailable: {model}",
                status_code=status,
                response=response.text,
            )
        raise ServiceError(
            f"API request failed with status {status}: {response.text}",
            status_code=status,
            response=response.text,
        )

    def _parse_response(self, response: requests.Response) -> tuple[ImageArtifact, str | None]:
        """Extract (image, assistant text). Raises NoImageProduced when there is no image."""
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("image/"):
            try:
                image = ImageArtifact(
                    data=response.content, mime_type=_mime_from_content_type(content_type)
                )
            except ValidationError as e:
                raise NoImageProduced(
                    f"Service returned an empty image: {str(e)}", status_code=response.status_code
                ) from e
            return ensure_decodable(image), None

        try:
            result = response.json()
        except ValueError as e:
            raise ServiceError(
                f"Failed to parse API response as JSON: {str(e)}",
                status_code=response.status_code,
                response=response.text,
            ) from e

        choices = result.get("choices") if isinstance(result, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise NoImageProduced("Unexpected API response shape: no choices", response=str(result))
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise NoImageProduced("Unexpected API response shape: no message", response=str(result))

        text = _message_text(message)
        images = message.get("images") or []
        if not isinstance(images, list) or not images:
            raise NoImageProduced(
                "No image in API response. The model may not support image output.",
                response=str(result),
            )
        first = images[0]
        image_url = first.get("image_url") if isinstance(first, dict) else None
        url = image_url.get("url") if isinstance(image_url, dict) else None
        if not isinstance(url, str) or not url:
            raise NoImageProduced("No image URL in response", response=str(result))
        try:
            if url.startswith("data:"):
                image = ImageArtifact.from_data_url(url)
            else:
                image = ImageArtifact(data=base64.b64decode(url), mime_type="image/png")
        except (ValidationError, binascii.Error, ValueError) as e:
            raise NoImageProduced(
                f"Failed to decode image from API response: {str(e)}", response=str(result)
            ) from e
        return ensure_decodable(image, response=str(result)), text

    def _log_debug_payload(self, label: str, obj: Any) -> None:
        truncated = _truncate_image_data_for_log(obj)
        logger.info("%s (image data truncated): %s", label, json.dumps(truncated, indent=2, default=str))

    def generate(
        self,
        prompt: str,
        attachments: list[ImageArtifact],
        model: str,
        timeout: int,
        config: Config,
        *,
        api_key_override: str | None = None,
    ) -> GenerationResult:
        """Generate or edit an image via the OpenRouter API."""
        api_key = self._api_key(config, api_key_override)
        url = f"{config.openrouter_base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = self._build_payload(prompt, attachments, model, config.aspect_ratio)

        logger.info("Requesting image model=%s attachments=%d", model, len(attachments))
        if log_prompts():
            truncated = (
                prompt if len(prompt) <= _PROMPT_LOG_MAX else prompt[:_PROMPT_LOG_MAX] + "..."
            )
            logger.info("Prompt (used): %s", truncated)
        if config.debug_api:
            self._log_debug_payload("API request payload", payload)

        start_time = time.time()
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request timed out after {timeout} seconds. "
                "The forge may be taking longer than expected."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to OpenRouter API. Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e
        generation_time = time.time() - start_time

        logger.debug(
            "API response status=%s content_type=%s time=%.2fs",
            response.status_code,
            response.headers.get("content-type", ""),
            generation_time,
        )
        self._raise_for_status(response, model)
        image, text = self._parse_response(response)
        if config.debug_api and not response.headers.get("content-type", "").startswith("image/"):
            self._log_debug_payload("API response", response.json())

        logger.info("Image received in %.1fs model=%s", generation_time, model)
        return GenerationResult(
            image=image,
            assistant_text=text,
            generation_time=generation_time,
            model_used=model,
            prompt_used=prompt,
            attachment_count=len(attachments),
        )
