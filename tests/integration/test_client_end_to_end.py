import asyncio

import httpx
import pytest

from app.client import CaptureMode, CaptureSession, MenuLensAPIError, MenuLensClient, TaskPoller
from app.core.dependencies import ServiceContainer
from app.main import create_app
from app.services.translation_task_client import TranslationTaskClient

from conftest import PNG_BYTES, json_response


async def no_wait(seconds: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def app(settings, vision_client, upstream):
    container = ServiceContainer(
        settings,
        vision_client=vision_client,
        task_client=TranslationTaskClient(settings.translation_api, transport=upstream.transport),
    )
    return create_app(settings, container)


def api_client(app, token=None) -> MenuLensClient:
    return MenuLensClient("http://testserver", token=token, transport=httpx.ASGITransport(app=app))


@pytest.mark.asyncio
async def test_document_translation_through_the_api(app, token, upstream):
    statuses = iter(["Analyzing", "Processing", "Processing", "Completed"])

    def handler(request):
        if request.method == "POST":
            return json_response(200, {"taskId": "t-1", "status": "Waiting"})
        status = next(statuses)
        body = {"taskId": "t-1", "status": status, "progress": 0.5}
        if status == "Completed":
            body["translatedFileUrl"] = "https://cdn.test/t-1.pdf"
        return json_response(200, body)

    upstream.handler = handler
    client = api_client(app, token)
    session = CaptureSession(client, to_lang="vi", poller=TaskPoller(client.get_task, sleep=no_wait))

    session.open()
    result = await session.submit(PNG_BYTES, "image/png", CaptureMode.DOCUMENT)

    assert result.succeeded, result.error
    assert result.translated_file_url == "https://cdn.test/t-1.pdf"
    gets = [r for r in upstream.requests if r.method == "GET"]
    assert len(gets) == 4


@pytest.mark.asyncio
async def test_client_raises_api_error_with_envelope_message(app):
    client = api_client(app)
    with pytest.raises(MenuLensAPIError) as exc_info:
        await client.translate(PNG_BYTES, "fr")
    assert exc_info.value.status_code == 401
    assert exc_info.value.error_code == "MISSING_AUTHORIZATION"


@pytest.mark.asyncio
async def test_client_recognize_and_languages(app, token, vision_client):
    client = api_client(app, token)

    result = await client.recognize(PNG_BYTES, "en")
    languages = await client.languages()

    assert result.image_data_url == "data:image/png;base64,aW1n"
    assert result.food_list == []
    assert any(lang.code == "en" for lang in languages)
    assert len(vision_client.calls) == 1
