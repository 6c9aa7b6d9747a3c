import asyncio
import io

import httpx
import pytest
from PIL import Image

from app.client.api_client import MenuLensAPIError, MenuLensClient
from app.client.imaging import ImageCompressionError, compress_image
from app.client.poller import TaskPoller
from app.client.session import (
    CaptureMode,
    CaptureSession,
    InvalidTransitionError,
    SessionState,
)
from app.schemas.task import TaskCreated, TaskStatus, TranslationTask
from app.schemas.translation import VisionResult


async def no_wait(seconds: float) -> None:
    await asyncio.sleep(0)


async def settle(rounds: int = 50) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeApiClient:
    def __init__(self, statuses=None, upload_error=None):
        self.statuses = list(statuses or [])
        self.upload_error = upload_error
        self.uploads = []
        self.translations = []
        self.polls = []

    async def translate(self, image, to_lang, from_lang=None, content_type="image/jpeg"):
        self.translations.append((image, to_lang, from_lang, content_type))
        return VisionResult(image_data_url="data:image/png;base64,aW1n", text_response="OK")

    async def recognize(self, image, to_lang, content_type="image/jpeg"):
        return VisionResult(image_data_url="data:image/png;base64,aW1n", food_list=["Apple", "Rice"])

    async def upload(self, image, to_lang, from_lang=None, content_type="image/jpeg"):
        self.uploads.append(image)
        if self.upload_error is not None:
            raise self.upload_error
        return TaskCreated(task_id="task-9", status=TaskStatus.PENDING)

    async def get_task(self, task_id):
        self.polls.append(task_id)
        status = self.statuses.pop(0) if self.statuses else TaskStatus.PROCESSING
        return TranslationTask(
            task_id=task_id,
            status=status,
            translated_file_url="https://cdn.test/out.pdf" if status == TaskStatus.COMPLETED else None,
        )


class GatedUploadApiClient(FakeApiClient):
    """Holds ``upload`` open until ``release`` is set."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.upload_started = asyncio.Event()
        self.release = asyncio.Event()

    async def upload(self, image, to_lang, from_lang=None, content_type="image/jpeg"):
        self.upload_started.set()
        await self.release.wait()
        return await super().upload(image, to_lang, from_lang, content_type)


def make_session(api, max_polls=30):
    poller = TaskPoller(api.get_task, max_polls=max_polls, sleep=no_wait)
    return CaptureSession(api, to_lang="fr", poller=poller)


@pytest.mark.asyncio
async def test_translate_flow_reaches_results():
    api = FakeApiClient()
    session = make_session(api)
    assert session.state == SessionState.IDLE

    session.open()
    result = await session.submit(b"photo", "image/jpeg", CaptureMode.TRANSLATE)

    assert session.state == SessionState.RESULTS
    assert result.succeeded
    assert result.text_response == "OK"
    assert api.translations == [(b"photo", "fr", None, "image/jpeg")]


@pytest.mark.asyncio
async def test_recognize_flow_returns_food_list():
    session = make_session(FakeApiClient())
    session.open()
    result = await session.submit(b"photo", mode=CaptureMode.RECOGNIZE)
    assert result.food_list == ["Apple", "Rice"]


@pytest.mark.asyncio
async def test_document_flow_polls_until_completed():
    api = FakeApiClient(statuses=[TaskStatus.PROCESSING, TaskStatus.PROCESSING, TaskStatus.COMPLETED])
    session = make_session(api)
    session.open()

    result = await session.submit(b"page", mode=CaptureMode.DOCUMENT)

    assert result.translated_file_url == "https://cdn.test/out.pdf"
    assert session.task.status == TaskStatus.COMPLETED
    assert api.polls == ["task-9"] * 3
    assert not session.poller.active
    assert session.state == SessionState.RESULTS


@pytest.mark.asyncio
async def test_document_flow_not_supported_is_an_error():
    api = FakeApiClient(statuses=[TaskStatus.NOT_SUPPORTED])
    session = make_session(api)
    session.open()

    result = await session.submit(b"page", mode=CaptureMode.DOCUMENT)

    assert not result.succeeded
    assert result.error == "Translation not supported"


@pytest.mark.asyncio
async def test_poll_timeout_lands_in_results():
    api = FakeApiClient()
    session = make_session(api, max_polls=4)
    session.open()

    result = await session.submit(b"page", mode=CaptureMode.DOCUMENT)

    assert session.state == SessionState.RESULTS
    assert "timed out" in result.error
    assert len(api.polls) == 4


@pytest.mark.asyncio
async def test_upload_error_lands_in_results_without_polling():
    api = FakeApiClient(upload_error=MenuLensAPIError(500, "Server configuration error: Missing API key"))
    session = make_session(api)
    session.open()

    result = await session.submit(b"page", mode=CaptureMode.DOCUMENT)

    assert result.error == "Server configuration error: Missing API key"
    assert api.polls == []


@pytest.mark.asyncio
async def test_retry_replays_last_capture():
    api = FakeApiClient(upload_error=MenuLensAPIError(502, "Translation service unreachable"))
    session = make_session(api)
    session.open()
    await session.submit(b"page", mode=CaptureMode.DOCUMENT)

    api.upload_error = None
    api.statuses = [TaskStatus.COMPLETED]
    result = await session.retry()

    assert api.uploads == [b"page", b"page"]
    assert result.succeeded


@pytest.mark.asyncio
async def test_retake_and_exit_transitions():
    session = make_session(FakeApiClient())
    session.open()
    await session.submit(b"photo")

    session.retake()
    assert session.state == SessionState.ACTIVE
    assert session.result is None

    session.exit()
    assert session.state == SessionState.IDLE


@pytest.mark.asyncio
async def test_exit_while_polling_discards_the_result():
    api = FakeApiClient()
    session = make_session(api, max_polls=1000)
    session.open()

    pending = asyncio.ensure_future(session.submit(b"page", mode=CaptureMode.DOCUMENT))
    while not api.polls:
        await asyncio.sleep(0)
    session.exit()

    assert await pending is None
    assert session.state == SessionState.IDLE
    assert session.result is None
    assert not session.poller.active
    polls_at_exit = len(api.polls)
    await settle()
    assert len(api.polls) == polls_at_exit


@pytest.mark.asyncio
async def test_exit_during_upload_never_starts_polling():
    api = GatedUploadApiClient()
    session = make_session(api)
    session.open()

    pending = asyncio.ensure_future(session.submit(b"page", mode=CaptureMode.DOCUMENT))
    await api.upload_started.wait()
    session.exit()
    api.release.set()

    assert await pending is None
    await settle()
    assert api.uploads == [b"page"]
    assert api.polls == []
    assert session.task is None
    assert session.state == SessionState.IDLE
    assert not session.poller.active


@pytest.mark.asyncio
async def test_new_capture_after_exit_during_upload_is_not_disturbed():
    api = GatedUploadApiClient(statuses=[TaskStatus.COMPLETED])
    session = make_session(api)
    session.open()

    stale = asyncio.ensure_future(session.submit(b"old", mode=CaptureMode.DOCUMENT))
    await api.upload_started.wait()
    session.exit()
    session.open()

    api.release.set()
    result = await session.submit(b"new", mode=CaptureMode.DOCUMENT)

    assert await stale is None
    assert result.translated_file_url == "https://cdn.test/out.pdf"
    assert api.polls == ["task-9"]
    assert session.state == SessionState.RESULTS


@pytest.mark.asyncio
async def test_unreadable_success_body_lands_in_results():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>proxy</html>"))
    session = CaptureSession(MenuLensClient("http://menu.test", token="t", transport=transport), to_lang="fr")
    session.open()

    result = await session.submit(b"photo")

    assert session.state == SessionState.RESULTS
    assert not result.succeeded
    assert "Unexpected response" in result.error


@pytest.mark.asyncio
async def test_malformed_task_body_lands_in_results_without_polling():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"status": "pending"})

    client = MenuLensClient("http://menu.test", token="t", transport=httpx.MockTransport(handler))
    session = CaptureSession(client, to_lang="fr", poller=TaskPoller(client.get_task, sleep=no_wait))
    session.open()

    result = await session.submit(b"page", mode=CaptureMode.DOCUMENT)

    assert session.state == SessionState.RESULTS
    assert "Unexpected response" in result.error
    assert [r.url.path for r in requests] == ["/api/upload"]


@pytest.mark.asyncio
async def test_client_reports_invalid_response_code():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"unexpected": True}))
    client = MenuLensClient("http://menu.test", transport=transport)

    with pytest.raises(MenuLensAPIError) as exc_info:
        await client.get_task("task-9")

    assert exc_info.value.status_code == 200
    assert exc_info.value.error_code == "INVALID_RESPONSE"


def test_invalid_transitions_rejected():
    session = make_session(FakeApiClient())
    with pytest.raises(InvalidTransitionError):
        session.retake()
    session.open()
    with pytest.raises(InvalidTransitionError):
        session.open()


def _png(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), (200, 30, 30, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_compress_image_limits_longest_side():
    compressed = compress_image(_png(800, 400), max_dimension=200)
    image = Image.open(io.BytesIO(compressed))
    assert image.format == "JPEG"
    assert image.size == (200, 100)


def test_compress_image_rejects_non_images():
    with pytest.raises(ImageCompressionError):
        compress_image(b"definitely not an image")
