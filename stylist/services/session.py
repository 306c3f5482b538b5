"""In-memory session controller driving the three stylist workflows.

All state lives on a single ``StylistSession``. Only one workflow may run at
a time; the busy flags are raised before the first await, so a second trigger
on the same event loop is rejected rather than raced.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

import httpx

from stylist import config
from stylist.config import logger
from stylist.core import messages
from stylist.core.codec import (
    DEFAULT_ASPECT_RATIO,
    ImageFile,
    UploadedImage,
    closest_aspect_ratio,
    data_url_to_file,
)
from stylist.core.errors import ValidationError, WorkflowBusyError
from stylist.models import ErrorDisplay, GeneratedImage, SessionState, WorkflowOptions
from stylist.services import stylist_service
from stylist.services.progress import ProgressSimulator


def _log(level: int, message: str, **context: Any) -> None:
    logger.log(level, "%s | context=%s", message, context)


class StylistSession:
    def __init__(
        self,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        progress: Optional[ProgressSimulator] = None,
        pacing_delay: float = config.PACING_DELAY_SECONDS,
    ) -> None:
        self.http_client = http_client
        self.progress = progress or ProgressSimulator()
        self.pacing_delay = pacing_delay

        self.person: Optional[UploadedImage] = None
        self.clothing: Optional[UploadedImage] = None
        self.generated: Optional[GeneratedImage] = None
        self.history: List[GeneratedImage] = []
        self.options = WorkflowOptions()
        self.aspect_ratio = DEFAULT_ASPECT_RATIO

        self.is_loading = False
        self.is_enhancing = False
        self.is_suggesting_clothing = False
        self.error: Optional[ErrorDisplay] = None
        self.loading_message = ""

    @property
    def is_processing(self) -> bool:
        return self.is_loading or self.is_enhancing or self.is_suggesting_clothing

    # -------------------------
    # Inputs
    # -------------------------
    def set_person_image(self, file: ImageFile) -> None:
        self._ensure_idle()
        self.person = UploadedImage.from_file(file)
        self.aspect_ratio = closest_aspect_ratio(file)
        self.generated = None
        self.error = None
        _log(logging.INFO, "person_image_set", aspect_ratio=self.aspect_ratio)

    def set_clothing_image(self, file: ImageFile) -> None:
        self._ensure_idle()
        self.clothing = UploadedImage.from_file(file)
        self.generated = None
        self.error = None
        _log(logging.INFO, "clothing_image_set", mime_type=file.mime_type)

    def update_options(self, options: WorkflowOptions) -> None:
        self._ensure_idle()
        self.options = options

    def select_history(self, index: int) -> GeneratedImage:
        """Show a previous result in the main panel."""
        self._ensure_idle()
        if index < 0 or index >= len(self.history):
            raise IndexError(f"History index out of range: {index}")
        self.generated = self.history[index]
        return self.generated

    # -------------------------
    # Workflows
    # -------------------------
    async def suggest_and_dress_up(self) -> Optional[GeneratedImage]:
        """Generate a garment for the person, then dress them in it."""
        self._ensure_idle()
        if self.person is None:
            self._fail_validation(messages.MISSING_PERSON_FOR_SUGGESTION)
            return None

        person_file = self.person.file
        options = self.options
        aspect_ratio = self.aspect_ratio

        self.is_suggesting_clothing = True
        self.error = None
        self.clothing = None
        self.generated = None
        self.loading_message = messages.LOADING_SUGGESTING
        self.progress.start()

        try:
            suggested_url = await stylist_service.suggest_clothing(
                person_file, options, http_client=self.http_client
            )
            suggested_file = data_url_to_file(suggested_url, "suggested-clothing.png")
            self.clothing = UploadedImage(file=suggested_file, data_url=suggested_url)
            self.is_suggesting_clothing = False
            # Hand over to the dress-up step under the same busy guard
            self.is_loading = True

            if self.pacing_delay > 0:
                await asyncio.sleep(self.pacing_delay)

            self.loading_message = messages.LOADING_DRESSING
            result_url = await stylist_service.dress_up_person(
                person_file,
                suggested_file,
                options,
                aspect_ratio,
                http_client=self.http_client,
            )
            return self._record_result(GeneratedImage(url=result_url, downloadable=True))

        except Exception as exc:
            self._fail(exc, "suggest_and_dress_up")
            return None
        finally:
            self.progress.stop()
            self.is_suggesting_clothing = False
            self.is_loading = False

    async def generate(self) -> Optional[GeneratedImage]:
        """Dress the uploaded person in the uploaded garment."""
        self._ensure_idle()
        if self.person is None or self.clothing is None:
            self._fail_validation(messages.MISSING_IMAGES_FOR_GENERATION)
            return None

        person_file = self.person.file
        clothing_file = self.clothing.file

        self.is_loading = True
        self.error = None
        self.generated = None
        self.loading_message = messages.LOADING_GENERATING
        self.progress.start()

        try:
            result_url = await stylist_service.dress_up_person(
                person_file,
                clothing_file,
                self.options,
                self.aspect_ratio,
                http_client=self.http_client,
            )
            return self._record_result(GeneratedImage(url=result_url, downloadable=True))

        except Exception as exc:
            self._fail(exc, "generate")
            return None
        finally:
            self.progress.stop()
            self.is_loading = False

    async def enhance(self) -> Optional[GeneratedImage]:
        """Improve the quality of the current result."""
        self._ensure_idle()
        if self.generated is None:
            self._fail_validation(messages.MISSING_RESULT_FOR_ENHANCE)
            return None

        source = self.generated

        self.is_enhancing = True
        self.error = None
        self.loading_message = messages.LOADING_ENHANCING
        self.progress.start()

        try:
            image_file = data_url_to_file(source.url, "generated-image.png")
            enhanced_url = await stylist_service.enhance_image(
                image_file,
                self.aspect_ratio,
                temperature=self.options.temperature,
                http_client=self.http_client,
            )
            return self._record_result(
                GeneratedImage(url=enhanced_url, downloadable=source.downloadable)
            )

        except Exception as exc:
            self._fail(exc, "enhance")
            return None
        finally:
            self.progress.stop()
            self.is_enhancing = False

    # -------------------------
    # State helpers
    # -------------------------
    def snapshot(self) -> SessionState:
        return SessionState(
            person_image=self.person.data_url if self.person else None,
            clothing_image=self.clothing.data_url if self.clothing else None,
            generated_image=self.generated,
            history=list(self.history),
            result_title=(
                messages.RESULT_TITLE_NEW if self.generated else messages.RESULT_TITLE_EMPTY
            ),
            aspect_ratio=self.aspect_ratio,
            options=self.options,
            is_loading=self.is_loading,
            is_enhancing=self.is_enhancing,
            is_suggesting_clothing=self.is_suggesting_clothing,
            is_processing=self.is_processing,
            progress=self.progress.value,
            loading_message=self.loading_message,
            error=self.error,
        )

    def _ensure_idle(self) -> None:
        if self.is_processing:
            raise WorkflowBusyError(messages.WORKFLOW_BUSY)

    def _record_result(self, image: GeneratedImage) -> GeneratedImage:
        self.generated = image
        self.history.insert(0, image)
        _log(logging.INFO, "result_recorded", history_size=len(self.history))
        return image

    def _fail_validation(self, message: str) -> None:
        self._fail(ValidationError(message), "input_validation")

    def _fail(self, exc: Exception, workflow: str) -> None:
        self.error = messages.present_error(exc)
        _log(
            logging.ERROR,
            "workflow_failed",
            workflow=workflow,
            kind=self.error.kind.value if self.error.kind else "unknown",
            error=str(exc),
        )


__all__ = ["StylistSession"]
