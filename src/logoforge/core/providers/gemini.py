"""
Gemini image provider (google-genai SDK).

Attachments are sent as inline image parts before the text part, in the
caller's order, and the model is asked for both IMAGE and TEXT modalities so
edits can return a short confirmation alongside the new image.
"""

import base64
import time
from typing import Any

import httpx
from google import genai
from google.genai import errors, types

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
)

logger = get_logger(__name__)

_PROMPT_LOG_MAX = 50_000


def _classify_api_error(e: errors.APIError, model: str) -> ServiceError:
    """Map an SDK error onto the taxonomy by its reported status code."""
    code = getattr(e, "code", 0) or 0
    detail = getattr(e, "message", None) or str(e)
    if code in (401, 403):
        return AuthenticationError(
            f"Authentication failed. Please check your Gemini API key. ({detail})",
            status_code=code,
            response=str(e),
        )
    if code == 429 or code >= 500 or isinstance(e, errors.ServerError):
        return TransientServiceError(
            f"Gemini service unavailable ({code}): {detail}",
            status_code=code,
            response=str(e),
        )
    if code == 404:
        return ServiceError(
            f"Model not found or endpoint unavailable: {model}",
            status_code=code,
            response=str(e),
        )
    return ServiceError(f"Gemini request failed ({code}): {detail}", status_code=code, response=str(e))


def _response_parts(response: Any) -> list[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


class GeminiProvider:
    """Image provider for the Gemini API."""

    supports_attachments: bool = True

    def _api_key(self, config: Config, api_key_override: str | None) -> str:
        api_key = api_key_override if api_key_override is not None else config.gemini_api_key
        if not api_key:
            raise AuthenticationError(
                "Gemini API key is required. Set GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY)."
            )
        return api_key

    def _client(self, api_key: str, timeout: int) -> genai.Client:
        # HttpOptions.timeout is in milliseconds
        return genai.Client(
            api_key=api_key, http_options=types.HttpOptions(timeout=timeout * 1000)
        )

    def _build_contents(self, prompt: str, attachments: list[ImageArtifact]) -> list[types.Content]:
        parts = [types.Part.from_bytes(data=a.data, mime_type=a.mime_type) for a in attachments]
        parts.append(types.Part.from_text(text=prompt))
        return [types.Content(role="user", parts=parts)]

    def _parse_response(self, response: Any) -> tuple[ImageArtifact, str | None]:
        image: ImageArtifact | None = None
        texts: list[str] = []
        for part in _response_parts(response):
            if getattr(part, "thought", False):
                continue
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                data = inline.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                image = ImageArtifact(data=data, mime_type=inline.mime_type or "image/png")
            elif getattr(part, "text", None):
                texts.append(part.text)

        text = "\n".join(texts).strip() or None
        if image is None:
            feedback = getattr(response, "prompt_feedback", None)
            raise NoImageProduced(
                "The forge failed to materialize the image. Try again.",
                response=text or str(feedback or ""),
            )
        return ensure_decodable(image, response=text or ""), text

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
        """Generate or edit an image via the Gemini API."""
        client = self._client(self._api_key(config, api_key_override), timeout)
        contents = self._build_contents(prompt, attachments)
        generate_config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            image_config=types.ImageConfig(aspect_ratio=config.aspect_ratio),
        )

        logger.info("Requesting image model=%s attachments=%d", model, len(attachments))
        if log_prompts():
            truncated = (
                prompt if len(prompt) <= _PROMPT_LOG_MAX else prompt[:_PROMPT_LOG_MAX] + "..."
            )
            logger.info("Prompt (used): %s", truncated)

        start_time = time.time()
        try:
            response = client.models.generate_content(
                model=model, contents=contents, config=generate_config
            )
        except errors.APIError as e:
            raise _classify_api_error(e, model) from e
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"Request timed out after {timeout} seconds. "
                "The forge may be taking longer than expected."
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(
                "Failed to connect to the Gemini API. Please check your internet connection.",
                original_error=e,
            ) from e
        generation_time = time.time() - start_time
        logger.debug("API response time=%.2fs", generation_time)

        image, text = self._parse_response(response)
        if config.debug_api:
            logger.info(
                "API response: image=%s (%d bytes) text=%r",
                image.mime_type,
                len(image.data),
                text,
            )

        logger.info("Image received in %.1fs model=%s", generation_time, model)
        return GenerationResult(
            image=image,
            assistant_text=text,
            generation_time=generation_time,
            model_used=model,
            prompt_used=prompt,
            attachment_count=len(attachments),
        )
