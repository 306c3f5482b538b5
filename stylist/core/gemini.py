import json
from typing import Any, Dict, List, Optional

import httpx

from stylist import config
from stylist.config import logger
from stylist.core.errors import (
    ConfigurationError,
    MalformedResponseError,
    TransportError,
)

_RATE_LIMIT_MARKERS = ("RESOURCE_EXHAUSTED", "quota")


def require_api_key() -> str:
    """Return the configured API key or fail before any network attempt."""
    api_key = config.get_api_key()
    if not api_key:
        raise ConfigurationError("API_KEY environment variable is not set.")
    return api_key


def build_generation_config(
    temperature: float,
    *,
    aspect_ratio: Optional[str] = None,
    response_mime_type: Optional[str] = None,
    response_schema: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    generation_config: Dict[str, Any] = {"temperature": temperature}
    if response_mime_type:
        generation_config["responseMimeType"] = response_mime_type
    if response_schema:
        generation_config["responseSchema"] = response_schema
    if aspect_ratio:
        generation_config["imageConfig"] = {"aspectRatio": aspect_ratio}
    return generation_config


async def generate_content(
    model: str,
    parts: List[Dict[str, Any]],
    generation_config: Dict[str, Any],
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    Call Gemini ``generateContent`` and return the decoded JSON response.

    Args:
        model: Model identifier, e.g. ``gemini-2.5-flash-image``
        parts: Content parts (inline images and text), in order
        generation_config: Payload for ``generationConfig``
        http_client: Optional client to reuse; a short-lived one is created otherwise

    Raises:
        ConfigurationError: If the API key is not set
        TransportError: If the request fails or is rejected by the API
        MalformedResponseError: If the API answers with something other than JSON
    """
    api_key = require_api_key()

    url = f"{config.GEMINI_API_BASE}/{model}:generateContent"
    payload = {
        "contents": [{"parts": parts}],
        "generationConfig": generation_config,
    }
    headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}

    logger.info(
        "Calling Gemini generateContent",
        extra={"model": model, "part_count": len(parts)},
    )

    try:
        if http_client is not None:
            response = await http_client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        else:
            async with httpx.AsyncClient(timeout=config.GEMINI_TIMEOUT_SECONDS) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        body = exc.response.text
        rate_limited = status_code == 429 or any(
            marker in body for marker in _RATE_LIMIT_MARKERS
        )
        logger.error(
            "Gemini API HTTP error",
            extra={"status_code": status_code, "rate_limited": rate_limited},
        )
        raise TransportError(
            f"Gemini API HTTP error: {status_code} - {body}",
            status_code=status_code,
            rate_limited=rate_limited,
        ) from exc
    except httpx.RequestError as exc:
        logger.error("Network error calling Gemini API", extra={"error": str(exc)})
        raise TransportError(f"Network error calling Gemini API: {exc}") from exc

    try:
        result = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedResponseError(
            f"Gemini API returned a non-JSON body: {response.text[:200]}"
        ) from exc

    if not isinstance(result, dict):
        raise MalformedResponseError(
            f"Gemini API returned unexpected JSON: {type(result).__name__}"
        )
    return result


def response_parts(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return the content parts of the first candidate, or an empty list."""
    candidates = response.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []


def response_text(response: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    return "".join(
        part["text"] for part in response_parts(response) if isinstance(part.get("text"), str)
    )


__all__ = [
    "require_api_key",
    "build_generation_config",
    "generate_content",
    "response_parts",
    "response_text",
]
