"""Best-effort analysis of the person photo (gender, age group, framing)."""

from typing import Any, Dict, Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from stylist import config
from stylist.config import logger
from stylist.core.codec import ImageFile, file_to_model_part
from stylist.core.gemini import (
    build_generation_config,
    generate_content,
    require_api_key,
    response_text,
)
from stylist.core.prompt_templates import build_analysis_prompt

GENDERS = ["man", "woman", "boy", "girl", "person"]
AGE_GROUPS = ["child", "teenager", "young adult", "adult", "senior"]
COMPOSITIONS = ["full-body", "upper-body", "portrait"]

ANALYSIS_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "gender": {"type": "STRING", "enum": GENDERS},
        "ageGroup": {"type": "STRING", "enum": AGE_GROUPS},
        "composition": {"type": "STRING", "enum": COMPOSITIONS},
    },
    "required": ["gender", "ageGroup", "composition"],
}


class PersonAnalysis(BaseModel):
    """Attributes of the person photo used to shape the prompts."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    gender: Literal["man", "woman", "boy", "girl", "person"]
    age_group: Literal["child", "teenager", "young adult", "adult", "senior"] = Field(
        ..., alias="ageGroup"
    )
    composition: Literal["full-body", "upper-body", "portrait"]

    @classmethod
    def fallback(cls) -> "PersonAnalysis":
        return cls(gender="person", age_group="adult", composition="full-body")


def _strip_code_fence(raw_text: str) -> str:
    cleaned = raw_text.strip()

    # Remove markdown code block delimiters
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        if first_newline > 0:
            cleaned = cleaned[first_newline + 1 :]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        cleaned = cleaned.strip()

    return cleaned


async def analyze_person(
    person_file: ImageFile,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> PersonAnalysis:
    """
    Ask the analysis model for the person's gender, age group and composition.

    A missing API key still raises ConfigurationError. Every other failure is
    logged and degraded to ``PersonAnalysis.fallback()`` so that the
    dress-up and suggestion flows are never blocked by the analysis step.
    """
    require_api_key()

    parts = [
        file_to_model_part(person_file),
        {"text": build_analysis_prompt()},
    ]
    generation_config = build_generation_config(
        config.DEFAULT_TEMPERATURE,
        response_mime_type="application/json",
        response_schema=ANALYSIS_RESPONSE_SCHEMA,
    )

    try:
        response = await generate_content(
            config.ANALYSIS_MODEL,
            parts,
            generation_config,
            http_client=http_client,
        )
        analysis = PersonAnalysis.model_validate_json(
            _strip_code_fence(response_text(response))
        )
    except Exception as exc:
        logger.warning(
            "Could not analyze person from image, using default values.",
            extra={"error": str(exc)},
        )
        return PersonAnalysis.fallback()

    logger.info(
        "Person analysis complete",
        extra=analysis.model_dump(by_alias=True),
    )
    return analysis


__all__ = ["PersonAnalysis", "ANALYSIS_RESPONSE_SCHEMA", "analyze_person"]
