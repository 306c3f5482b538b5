import base64
import io
import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from PIL import Image

from stylist import config
from stylist.core.codec import ImageFile
from stylist.services.progress import ProgressSimulator
from stylist.services.session import StylistSession

RESULT_PAYLOAD = base64.b64encode(b"generated-image-bytes").decode("utf-8")

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


def make_png(width: int = 64, height: int = 64) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 120, 80)).save(buffer, format="PNG")
    return buffer.getvalue()


def image_response(data: str = RESULT_PAYLOAD, mime_type: str = "image/png") -> Dict[str, Any]:
    return {
        "candidates": [
            {"content": {"parts": [{"inlineData": {"mimeType": mime_type, "data": data}}]}}
        ]
    }


def text_response(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def analysis_response(
    gender: str = "woman", age_group: str = "young adult", composition: str = "upper-body"
) -> Dict[str, Any]:
    return text_response(
        json.dumps({"gender": gender, "ageGroup": age_group, "composition": composition})
    )


class FakeGemini:
    """Mock transport handler answering analysis and image calls separately."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.analysis_reply: Reply = httpx.Response(200, json=analysis_response())
        self.image_replies: List[Reply] = []

    def queue_image(self, reply: Optional[Reply] = None) -> None:
        self.image_replies.append(reply or httpx.Response(200, json=image_response()))

    def _answer(self, reply: Reply, request: httpx.Request) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if config.ANALYSIS_MODEL in str(request.url):
            return self._answer(self.analysis_reply, request)
        if not self.image_replies:
            return httpx.Response(500, json={"error": {"message": "unexpected call"}})
        return self._answer(self.image_replies.pop(0), request)

    @property
    def image_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if config.IMAGE_MODEL in str(r.url)]

    def payload(self, request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def http_client(gemini) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(gemini))


@pytest.fixture
def person_file() -> ImageFile:
    return ImageFile(filename="person.png", mime_type="image/png", data=make_png(300, 400))


@pytest.fixture
def clothing_file() -> ImageFile:
    return ImageFile(filename="shirt.png", mime_type="image/png", data=make_png(100, 100))


@pytest.fixture
def session(http_client) -> StylistSession:
    return StylistSession(
        http_client=http_client,
        progress=ProgressSimulator(tick_seconds=0.001, reset_seconds=0.01),
        pacing_delay=0,
    )
