"""Prompt templates and builders for the virtual stylist Gemini flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from stylist.models import ANY_OPTION, AUTO_GENDER, WorkflowOptions

if TYPE_CHECKING:
    from stylist.core.person_analyzer import PersonAnalysis


# --- ANALYSIS PROMPT ---

ANALYSIS_PROMPT = (
    "Analyze the person in this image. Determine their likely gender (man, woman, boy, girl), "
    "age group (child, teenager, young adult, adult, senior), and the image composition "
    "(is it a 'full-body' shot, an 'upper-body' shot from the waist up, or a 'portrait' "
    "showing only head and shoulders?). Respond ONLY with a JSON object."
)


# --- DRESS-UP PROMPT ---

DRESS_UP_PROMPT_TEMPLATE = """You are an expert virtual stylist. Your primary goal is to seamlessly dress the person from the first image with the clothing from the second image. Your main task is to change the clothing ONLY.

**Core Rules (Strictly follow):**
1. **PRESERVE THE PERSON'S IDENTITY - THIS IS THE MOST IMPORTANT RULE.**
   - **Face and Hair:** The person's face, facial features, expression, and hairstyle MUST remain absolutely identical to the original image. Do NOT change the face.
   - **Body and Pose:** The person's body shape, skin tone, and pose must be preserved exactly as they are in the original photo.
{BACKGROUND_INSTRUCTION}
3. **Preserve Framing:** The output image MUST have the same aspect ratio and framing as the original person's image. Do not crop the person.

**Task Details:**
- The person image is a **{COMPOSITION} shot**. You must apply the clothing to the entire visible area appropriate for the garment. For a full-body shot, this means dressing the entire body. For an upper-body shot, dress the torso. For a portrait, dress the visible shoulder area.
- Adapt the clothing to fit the person's body and pose realistically.
- Integrate the clothing by matching the lighting, shadows, and textures from the person's original photo (or the new background if one is generated).
- The person is a {PERSON_DESCRIPTION}.
{STYLE_QUALIFIER}

**Output Format:**
- Generate ONLY the final image. Do not include any text, descriptions, or explanations.
"""


@dataclass(frozen=True)
class BackgroundInstructions:
    """Background rules, one of which is placed as rule 2 of the dress-up prompt."""

    preserve: str = (
        "2. **Preserve Background:** The background of the person's original image must be kept exactly the same."
    )
    generate: str = (
        "2. **Generate New Background:** Remove the person from their original background and place them onto "
        "a new, photorealistic, high-quality, and detailed background described as: \"{BACKGROUND_PROMPT}\". "
        "The lighting, shadows, and reflections on the person and their new clothing must be adjusted to "
        "perfectly match the new background's environment."
    )
    suggest: str = (
        "2. **Generate a Relevant Background:** Remove the person from their original background. Generate a new, "
        "photorealistic, high-quality, and detailed background that contextually and aesthetically complements "
        "{CLOTHING_CONTEXT}. For example, formal wear would suit an elegant event or studio, while casual wear "
        "fits a relaxed urban or natural setting. The final scene must be cohesive. The lighting, shadows, and "
        "reflections on the person and their new clothing must be perfectly adjusted to match the new "
        "background's environment."
    )


BACKGROUNDS = BackgroundInstructions()


# --- SUGGESTION PROMPT ---

SUGGESTION_PROMPT_TEMPLATE = (
    "Generate an image of a single, stylish clothing item suitable for a {PERSON_DESCRIPTION}.{STYLE_QUALIFIER} "
    "The clothing item should be displayed flat on a plain, neutral white background, as if for an "
    "e-commerce website. Do not show any people or mannequins. Only generate the clothing item."
)


# --- ENHANCEMENT PROMPT ---

ENHANCE_PROMPT = """Enhance the provided image.
- Increase the resolution and sharpness.
- Improve the lighting and color vibrancy to make it look more professional.
- Do NOT change the subject, clothing, or background in any way. Only improve the quality.
- The output image MUST have the same aspect ratio as the input image.
- Output ONLY the final image.
"""


def describe_person(analysis: "PersonAnalysis", gender: str) -> str:
    """Return '<age group> <gender>', honouring an explicit gender override."""
    final_gender = analysis.gender if gender == AUTO_GENDER else gender
    return f"{analysis.age_group} {final_gender}"


def build_style_qualifier(material: str, style: str, *, for_garment_item: bool = False) -> str:
    """Sentence asking for a given style and/or material; empty when both are 'any'."""
    has_style = style != ANY_OPTION
    has_material = material != ANY_OPTION

    if for_garment_item:
        if has_style and has_material:
            return f" The item should be in a '{style}' style and made of '{material}'."
        if has_style:
            return f" The item should be in a '{style}' style."
        if has_material:
            return f" The item should look like it's made of '{material}'."
        return ""

    if has_style and has_material:
        return (
            f" Pay close attention to rendering the clothing in a '{style}' style, "
            f"using a '{material}' material."
        )
    if has_style:
        return f" The clothing should be in a '{style}' style."
    if has_material:
        return f" The clothing should appear to be made of '{material}'."
    return ""


def build_background_instruction(options: WorkflowOptions) -> str:
    if options.background_option == "generate" and options.background_prompt.strip():
        return BACKGROUNDS.generate.format(BACKGROUND_PROMPT=options.background_prompt)

    if options.background_option == "suggest":
        clothing_context = "the clothing provided"
        if options.style != ANY_OPTION:
            clothing_context = f"the '{options.style}' style clothing"
        return BACKGROUNDS.suggest.format(CLOTHING_CONTEXT=clothing_context)

    # A 'generate' request without a description keeps the original background
    return BACKGROUNDS.preserve


def build_analysis_prompt() -> str:
    return ANALYSIS_PROMPT


def build_dress_up_prompt(analysis: "PersonAnalysis", options: WorkflowOptions) -> str:
    """Render the dress-up prompt for the analyzed person and the chosen options."""
    return DRESS_UP_PROMPT_TEMPLATE.format(
        BACKGROUND_INSTRUCTION=build_background_instruction(options),
        COMPOSITION=analysis.composition,
        PERSON_DESCRIPTION=describe_person(analysis, options.gender),
        STYLE_QUALIFIER=build_style_qualifier(options.material, options.style),
    )


def build_suggestion_prompt(analysis: "PersonAnalysis", options: WorkflowOptions) -> str:
    """Render the prompt asking for a flat-lay garment suited to the person."""
    return SUGGESTION_PROMPT_TEMPLATE.format(
        PERSON_DESCRIPTION=describe_person(analysis, options.gender),
        STYLE_QUALIFIER=build_style_qualifier(
            options.material, options.style, for_garment_item=True
        ),
    )


def build_enhance_prompt() -> str:
    """Return the fixed enhancement prompt."""
    return ENHANCE_PROMPT


__all__ = [
    "ANALYSIS_PROMPT",
    "DRESS_UP_PROMPT_TEMPLATE",
    "SUGGESTION_PROMPT_TEMPLATE",
    "ENHANCE_PROMPT",
    "BACKGROUNDS",
    "BackgroundInstructions",
    "describe_person",
    "build_style_qualifier",
    "build_background_instruction",
    "build_analysis_prompt",
    "build_dress_up_prompt",
    "build_suggestion_prompt",
    "build_enhance_prompt",
]
