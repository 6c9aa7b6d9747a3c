import json
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config.settings import (
    Environment,
    SecuritySettings,
    Settings,
    TranslationApiSettings,
    VisionSettings,
)
from app.core.dependencies import ServiceContainer
from app.core.security import issue_token
from app.main import create_app
from app.services.translation_task_client import TranslationTaskClient
from app.services.vision_client import BaseVisionClient, VisionOutput

TEST_SECRET = "menu-lens-test-secret-with-32-plus-bytes"
UPSTREAM_URL = "https://translate.test"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


class FakeVisionClient(BaseVisionClient):
    """Returns a canned output (or raises) and records every call."""

    def __init__(self, output: Optional[VisionOutput] = None, error: Optional[Exception] = None):
        self.output = output or VisionOutput(image_mime_type="image/png", image_base64="aW1n", text=None)
        self.error = error
        self.calls: List[dict] = []

    async def generate(self, image: bytes, mime_type: str, prompt: str) -> VisionOutput:
        self.calls.append({"image": image, "mime_type": mime_type, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.output

    async def health_check(self) -> bool:
        return True


class FakeUpstream:
    """httpx MockTransport handler standing in for the translation task API."""

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={"taskId": "t-1", "status": "pending"}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def json_response(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body), headers={"Content-Type": "application/json"})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment=Environment.TESTING,
        log_format="text",
        vision=VisionSettings(api_key=None),
        translation_api=TranslationApiSettings(base_url=UPSTREAM_URL, api_key="server-key"),
        security=SecuritySettings(jwt_secret=TEST_SECRET),
    )


@pytest.fixture
def token() -> str:
    return issue_token(TEST_SECRET, "user-42")


@pytest.fixture
def auth_headers(token) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(settings, vision_client, upstream):
    """Build a TestClient around an app wired to the fakes."""

    def _make(vision: Optional[BaseVisionClient] = None, app_settings: Optional[Settings] = None) -> TestClient:
        app_settings = app_settings or settings
        container = ServiceContainer(
            app_settings,
            vision_client=vision or vision_client,
            task_client=TranslationTaskClient(app_settings.translation_api, transport=upstream.transport),
        )
        return TestClient(create_app(app_settings, container))

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
