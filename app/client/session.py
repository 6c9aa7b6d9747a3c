"""
Capture session state machine: idle -> active -> processing -> results.

A session drives one capture at a time. ``translate`` and ``recognize``
captures complete in a single request; ``document`` captures create a
translation task and follow it with a ``TaskPoller`` until it finishes.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import List, Optional

import httpx

from app.client.api_client import MenuLensAPIError, MenuLensClient
from app.client.imaging import ImageCompressionError, compress_image
from app.client.poller import PollError, TaskPoller
from app.schemas.task import TaskStatus, TranslationTask

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    PROCESSING = "processing"
    RESULTS = "results"


class CaptureMode(str, Enum):
    TRANSLATE = "translate"
    RECOGNIZE = "recognize"
    DOCUMENT = "document"


class InvalidTransitionError(Exception):
    def __init__(self, action: str, state: SessionState):
        super().__init__(f"Cannot {action} while {state.value}")
        self.action = action
        self.state = state


@dataclass
class SessionResult:
    mode: CaptureMode
    image_data_url: Optional[str] = None
    text_response: Optional[str] = None
    food_list: Optional[List[str]] = None
    translated_file_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class _Capture:
    image: bytes
    content_type: str
    mode: CaptureMode


class CaptureSession:
    """
    Client-side session for capturing an image and showing its result.

    Args:
        client: API client used for every request
        to_lang: Target language code or name
        from_lang: Optional source language
        poller: Poller for document tasks (defaults to one polling ``client.get_task``)
        compress: Shrink images with ``compress_image`` before sending
    """

    def __init__(
        self,
        client: MenuLensClient,
        to_lang: str,
        from_lang: Optional[str] = None,
        poller: Optional[TaskPoller] = None,
        compress: bool = False,
    ):
        self.client = client
        self.to_lang = to_lang
        self.from_lang = from_lang
        self.poller = poller or TaskPoller(client.get_task)
        self.compress = compress

        self.state = SessionState.IDLE
        self.task: Optional[TranslationTask] = None
        self.result: Optional[SessionResult] = None
        self._last: Optional[_Capture] = None
        self._generation = 0

    def open(self) -> None:
        """Open the camera or picker."""
        self._require("open", SessionState.IDLE)
        self.state = SessionState.ACTIVE

    async def submit(
        self,
        image: bytes,
        content_type: str = "image/jpeg",
        mode: CaptureMode = CaptureMode.TRANSLATE,
    ) -> Optional[SessionResult]:
        """Process a captured image; returns None if the session was exited meanwhile."""
        self._require("submit", SessionState.ACTIVE)
        capture = _Capture(image=image, content_type=content_type, mode=CaptureMode(mode))
        self._last = capture
        return await self._process(capture)

    async def retry(self) -> Optional[SessionResult]:
        """Replay the last captured image through the same flow."""
        self._require("retry", SessionState.RESULTS)
        if self._last is None:
            raise InvalidTransitionError("retry without a previous capture", self.state)
        return await self._process(self._last)

    def retake(self) -> None:
        self._require("retake", SessionState.RESULTS)
        self.poller.cancel()
        self.task = None
        self.result = None
        self.state = SessionState.ACTIVE

    def exit(self) -> None:
        """Leave the session from any state, stopping any poll in progress."""
        self.poller.cancel()
        self._generation += 1
        self.task = None
        self.result = None
        self._last = None
        self.state = SessionState.IDLE

    def _require(self, action: str, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidTransitionError(action, self.state)

    async def _process(self, capture: _Capture) -> Optional[SessionResult]:
        self._generation += 1
        generation = self._generation
        self.state = SessionState.PROCESSING
        self.task = None
        self.result = None

        try:
            image, content_type = capture.image, capture.content_type
            if self.compress:
                image, content_type = compress_image(image), "image/jpeg"

            if capture.mode == CaptureMode.DOCUMENT:
                result = await self._translate_document(image, content_type, generation)
            else:
                result = await self._run_vision(capture.mode, image, content_type)
        except (MenuLensAPIError, PollError, ImageCompressionError, httpx.HTTPError) as e:
            logger.warning(f"{capture.mode.value} capture failed: {e}")
            result = SessionResult(mode=capture.mode, error=str(e))

        if generation != self._generation:
            # exited or restarted while the request was in flight
            return None

        self.result = result
        self.state = SessionState.RESULTS
        return result

    async def _run_vision(self, mode: CaptureMode, image: bytes, content_type: str) -> SessionResult:
        if mode == CaptureMode.RECOGNIZE:
            vision = await self.client.recognize(image, self.to_lang, content_type=content_type)
        else:
            vision = await self.client.translate(
                image, self.to_lang, self.from_lang, content_type=content_type
            )
        return SessionResult(
            mode=mode,
            image_data_url=vision.image_data_url,
            text_response=vision.text_response,
            food_list=vision.food_list,
        )

    async def _translate_document(self, image: bytes, content_type: str, generation: int) -> SessionResult:
        created = await self.client.upload(image, self.to_lang, self.from_lang, content_type=content_type)
        if generation != self._generation:
            return SessionResult(mode=CaptureMode.DOCUMENT, error="Translation cancelled")
        self.task = TranslationTask(task_id=created.task_id, status=created.status)

        stream = self.poller.start(created.task_id)
        try:
            async for snapshot in stream:
                if generation != self._generation:
                    break
                self.task = snapshot
        finally:
            if generation == self._generation:
                self.poller.cancel()

        if generation != self._generation:
            return SessionResult(mode=CaptureMode.DOCUMENT, error="Translation cancelled")

        task = self.task
        if task.status == TaskStatus.COMPLETED:
            return SessionResult(mode=CaptureMode.DOCUMENT, translated_file_url=task.translated_file_url)
        if task.status.is_terminal:
            error = task.error or f"Translation {task.status.value.replace('_', ' ')}"
        else:
            error = "Translation cancelled"
        return SessionResult(mode=CaptureMode.DOCUMENT, error=error)
