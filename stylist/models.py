"""Pydantic models shared by the session controller and the HTTP layer."""

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stylist.config import DEFAULT_TEMPERATURE
from stylist.core.errors import ErrorKind

ANY_OPTION = "any"
AUTO_GENDER = "auto"

BackgroundOption = Literal["original", "generate", "suggest"]
GenderOption = Literal["auto", "man", "woman", "boy", "girl", "person"]

_DATA_URL_PATTERN = re.compile(r"^data:[^;,]+;base64,")


class WorkflowOptions(BaseModel):
    """Options chosen by the user, read when a workflow starts."""

    material: str = Field(
        default=ANY_OPTION, description="Garment material, or 'any' to leave it to the model"
    )
    style: str = Field(
        default=ANY_OPTION, description="Garment style, or 'any' to leave it to the model"
    )
    gender: GenderOption = Field(
        default=AUTO_GENDER, description="Gender override; 'auto' uses the detected gender"
    )
    background_option: BackgroundOption = Field(
        default="original", description="How to treat the background of the person photo"
    )
    background_prompt: str = Field(
        default="", description="Scene description used when background_option is 'generate'"
    )
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)


class GeneratedImage(BaseModel):
    """A generated result. Never mutated once created."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="data: URL with an embedded MIME type")
    downloadable: bool = True

    @field_validator("url")
    @classmethod
    def _must_be_data_url(cls, value: str) -> str:
        if not _DATA_URL_PATTERN.match(value):
            raise ValueError("Generated image url must be a base64 data URL with a MIME type")
        return value


class ErrorLink(BaseModel):
    label: str
    url: str


class ErrorDisplay(BaseModel):
    """An error as shown to the user."""

    kind: Optional[ErrorKind] = None
    title: Optional[str] = None
    message: str
    links: List[ErrorLink] = Field(default_factory=list)


class SessionState(BaseModel):
    """Snapshot of the session rendered by the UI."""

    person_image: Optional[str] = Field(None, description="Preview data URL of the person")
    clothing_image: Optional[str] = Field(None, description="Preview data URL of the garment")
    generated_image: Optional[GeneratedImage] = None
    history: List[GeneratedImage] = Field(
        default_factory=list, description="Generated results, most recent first"
    )
    result_title: str
    aspect_ratio: str
    options: WorkflowOptions
    is_loading: bool
    is_enhancing: bool
    is_suggesting_clothing: bool
    is_processing: bool
    progress: int = Field(..., ge=0, le=100)
    loading_message: str
    error: Optional[ErrorDisplay] = None
