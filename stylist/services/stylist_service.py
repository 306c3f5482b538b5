"""Services calling the Gemini image model for dress-up, suggestion and enhancement."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from stylist import config
from stylist.config import logger
from stylist.core.codec import ImageFile, file_to_model_part
from stylist.core.gemini import build_generation_config, generate_content, require_api_key
from stylist.core.person_analyzer import analyze_person
from stylist.core.prompt_templates import (
    build_dress_up_prompt,
    build_enhance_prompt,
    build_suggestion_prompt,
)
from stylist.core.response_parser import extract_image_data_url
from stylist.models import WorkflowOptions


def _log(level: int, message: str, **context: Any) -> None:
    """Helper to emit structured logs with contextual metadata."""
    logger.log(level, "%s | context=%s", message, context)


def _log_prompt(title: str, prompt: str) -> None:
    logger.debug("=" * 80)
    logger.debug(f"{title}:")
    logger.debug(prompt)
    logger.debug("=" * 80)


async def dress_up_person(
    person_file: ImageFile,
    clothing_file: ImageFile,
    options: WorkflowOptions,
    aspect_ratio: str,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Dress the person in the garment and return the result as a data URL.

    Args:
        person_file: Photo of the person
        clothing_file: Photo of the garment
        options: Style, material, gender and background choices
        aspect_ratio: Supported ratio label the output must keep
        http_client: Optional client shared with the analysis call

    Raises:
        ConfigurationError: If the API key is not set
        StylistError: If the call fails or no image is returned
    """
    require_api_key()
    start_time = time.time()

    analysis = await analyze_person(person_file, http_client=http_client)
    prompt = build_dress_up_prompt(analysis, options)
    _log_prompt("DRESS-UP PROMPT", prompt)

    # Order: person image, garment image, then text prompt
    parts = [
        file_to_model_part(person_file),
        file_to_model_part(clothing_file),
        {"text": prompt},
    ]

    response = await generate_content(
        config.IMAGE_MODEL,
        parts,
        build_generation_config(options.temperature, aspect_ratio=aspect_ratio),
        http_client=http_client,
    )
    result_url = extract_image_data_url(response)

    _log(
        logging.INFO,
        "dress_up_complete",
        composition=analysis.composition,
        aspect_ratio=aspect_ratio,
        background=options.background_option,
        processing_time_ms=int((time.time() - start_time) * 1000),
    )
    return result_url


async def suggest_clothing(
    person_file: ImageFile,
    options: WorkflowOptions,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Generate a flat-lay garment image suited to the person in the photo."""
    require_api_key()

    analysis = await analyze_person(person_file, http_client=http_client)
    prompt = build_suggestion_prompt(analysis, options)
    _log_prompt("CLOTHING SUGGESTION PROMPT", prompt)

    response = await generate_content(
        config.IMAGE_MODEL,
        [{"text": prompt}],
        build_generation_config(options.temperature),
        http_client=http_client,
    )
    result_url = extract_image_data_url(response)

    _log(
        logging.INFO,
        "clothing_suggestion_complete",
        gender=analysis.gender,
        age_group=analysis.age_group,
    )
    return result_url


async def enhance_image(
    image_file: ImageFile,
    aspect_ratio: str,
    *,
    temperature: float = config.DEFAULT_TEMPERATURE,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Improve resolution and lighting of a generated image without changing its content."""
    require_api_key()

    parts = [
        file_to_model_part(image_file),
        {"text": build_enhance_prompt()},
    ]

    response = await generate_content(
        config.IMAGE_MODEL,
        parts,
        build_generation_config(temperature, aspect_ratio=aspect_ratio),
        http_client=http_client,
    )
    result_url = extract_image_data_url(response)

    _log(logging.INFO, "enhance_complete", aspect_ratio=aspect_ratio)
    return result_url


__all__ = ["dress_up_person", "suggest_clothing", "enhance_image"]
