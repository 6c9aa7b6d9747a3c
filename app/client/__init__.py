# Client-side API access, task polling and capture session

from .api_client import MenuLensAPIError, MenuLensClient
from .imaging import ImageCompressionError, compress_image
from .poller import PollError, PollFailedError, PollTimeoutError, TaskPoller, TaskStream
from .session import CaptureMode, CaptureSession, InvalidTransitionError, SessionResult, SessionState

__all__ = [
    "MenuLensAPIError",
    "MenuLensClient",
    "ImageCompressionError",
    "compress_image",
    "PollError",
    "PollFailedError",
    "PollTimeoutError",
    "TaskPoller",
    "TaskStream",
    "CaptureMode",
    "CaptureSession",
    "InvalidTransitionError",
    "SessionResult",
    "SessionState",
]
