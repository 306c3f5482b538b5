"""Turn a raw Gemini response into an image data URL or a descriptive failure."""

import json
from typing import Any, Dict, Optional

from stylist.config import logger
from stylist.core.errors import MalformedResponseError, SafetyBlockError
from stylist.core.gemini import response_parts, response_text

BLOCK_REASON_LABELS = {
    "SAFETY": "sera za usalama",
    "OTHER": "sababu nyingine",
}
UNKNOWN_BLOCK_REASON_LABEL = "sababu isiyojulikana"


def _inline_image(part: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    # Check both camelCase and snake_case formats
    for key in ("inlineData", "inline_data"):
        inline = part.get(key)
        if isinstance(inline, dict) and inline.get("data"):
            return inline
    return None


def extract_image_data_url(response: Dict[str, Any]) -> str:
    """
    Return the first inline image of ``response`` as a ``data:`` URL.

    Failures are checked in order: safety block, then image parts, then any
    text the model sent instead of an image, then a generic error.

    Raises:
        SafetyBlockError: If the prompt was blocked
        MalformedResponseError: If no image was produced
    """
    block_reason = (response.get("promptFeedback") or {}).get("blockReason")
    if block_reason:
        logger.error(
            "Request was blocked by safety settings",
            extra={"block_reason": block_reason},
        )
        label = BLOCK_REASON_LABELS.get(block_reason, UNKNOWN_BLOCK_REASON_LABEL)
        raise SafetyBlockError(
            f"Ombi lako limezuiwa kwa sababu za {label}. Jaribio la kuondoa nguo "
            "au kutumia picha isiyofaa linaweza kusababisha hili. "
            "Tafadhali jaribu picha tofauti.",
            block_reason=block_reason,
        )

    for part in response_parts(response):
        inline = _inline_image(part)
        if inline is None:
            continue
        mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
        return f"data:{mime_type};base64,{inline['data']}"

    text_feedback = response_text(response).strip()
    if text_feedback:
        logger.error(
            "Gemini API returned text instead of an image",
            extra={"feedback": text_feedback[:500]},
        )
        raise MalformedResponseError(
            f'AI haikuweza kutengeneza picha. Jibu la AI: "{text_feedback}"',
            feedback=text_feedback,
        )

    logger.error(f"Empty response from Gemini API: {json.dumps(response)[:1000]}")
    raise MalformedResponseError(
        "AI imeshindwa kutengeneza picha. Tafadhali jaribu picha tofauti."
    )


__all__ = ["extract_image_data_url", "BLOCK_REASON_LABELS"]
