"""FastAPI router exposing the stylist session to the UI."""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from stylist import __version__
from stylist.config import logger
from stylist.core.codec import data_url_to_file
from stylist.core.errors import DecodeError, WorkflowBusyError
from stylist.models import SessionState, WorkflowOptions
from stylist.services.session import StylistSession

from .dependencies import get_session
from .models import ErrorResponse, HealthResponse
from .utils import read_upload

router = APIRouter(prefix="/api/v1", tags=["Virtual Stylist"])

BUSY_RESPONSES = {409: {"model": ErrorResponse, "description": "Another workflow is running"}}


def _busy(exc: WorkflowBusyError) -> HTTPException:
    logger.warning("Workflow trigger rejected while busy")
    return HTTPException(status_code=409, detail=exc.message)


@router.get("/session", response_model=SessionState)
async def get_session_state(
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Return the current session state."""
    return session.snapshot()


@router.post("/session/person", response_model=SessionState, responses=BUSY_RESPONSES)
async def upload_person_image(
    person_image: UploadFile = File(..., description="Photo of the person to dress"),
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Replace the person photo; clears the current result."""
    image_file = await read_upload(person_image, "person_image")
    try:
        session.set_person_image(image_file)
    except WorkflowBusyError as exc:
        raise _busy(exc)
    return session.snapshot()


@router.post("/session/clothing", response_model=SessionState, responses=BUSY_RESPONSES)
async def upload_clothing_image(
    clothing_image: UploadFile = File(..., description="Photo of the garment"),
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Replace the garment photo; clears the current result."""
    image_file = await read_upload(clothing_image, "clothing_image")
    try:
        session.set_clothing_image(image_file)
    except WorkflowBusyError as exc:
        raise _busy(exc)
    return session.snapshot()


@router.put("/session/options", response_model=SessionState, responses=BUSY_RESPONSES)
async def update_options(
    options: WorkflowOptions,
    session: StylistSession = Depends(get_session),
) -> SessionState:
    try:
        session.update_options(options)
    except WorkflowBusyError as exc:
        raise _busy(exc)
    return session.snapshot()


@router.post(
    "/session/suggest-and-dress", response_model=SessionState, responses=BUSY_RESPONSES
)
async def suggest_and_dress_up(
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Let the model pick a garment for the person, then dress them in it."""
    try:
        await session.suggest_and_dress_up()
    except WorkflowBusyError as exc:
        raise _busy(exc)
    return session.snapshot()


@router.post("/session/generate", response_model=SessionState, responses=BUSY_RESPONSES)
async def generate_look(
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Dress the uploaded person in the uploaded garment."""
    try:
        await session.generate()
    except WorkflowBusyError as exc:
        raise _busy(exc)
    return session.snapshot()


@router.post("/session/enhance", response_model=SessionState, responses=BUSY_RESPONSES)
async def enhance_result(
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Improve the quality of the current result."""
    try:
        await session.enhance()
    except WorkflowBusyError as exc:
        raise _busy(exc)
    return session.snapshot()


@router.post("/session/history/{index}/select", response_model=SessionState)
async def select_history_entry(
    index: int,
    session: StylistSession = Depends(get_session),
) -> SessionState:
    """Show a previous result in the main panel."""
    try:
        session.select_history(index)
    except WorkflowBusyError as exc:
        raise _busy(exc)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"History entry not found: {index}")
    return session.snapshot()


@router.get("/session/history/{index}/image")
async def download_history_image(
    index: int,
    session: StylistSession = Depends(get_session),
) -> Response:
    """Return the raw bytes of a generated image for download."""
    if index < 0 or index >= len(session.history):
        raise HTTPException(status_code=404, detail=f"History entry not found: {index}")

    image = session.history[index]
    if not image.downloadable:
        raise HTTPException(status_code=403, detail="This image is not downloadable")

    try:
        image_file = data_url_to_file(image.url, f"stylist-{index}")
    except DecodeError as exc:
        logger.error("Stored image could not be decoded", extra={"index": index})
        raise HTTPException(status_code=500, detail=exc.message)

    extension = image_file.mime_type.split("/")[-1]
    return Response(
        content=image_file.data,
        media_type=image_file.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="stylist-{index}.{extension}"'
        },
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Simple health check endpoint."""
    return HealthResponse(status="healthy", service="virtual-stylist", version=__version__)
