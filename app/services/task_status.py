"""
Normalization of upstream translation task payloads.

The upstream API has used several status vocabularies (``Analyzing``/
``Terminated`` and ``pending``/``failed``) and two progress scales (0-1 and
0-100). Everything is mapped onto TaskStatus and an integer percentage.
"""

import logging
from typing import Any, Dict, Optional

from app.schemas.task import TaskStatus, TranslationTask

logger = logging.getLogger(__name__)

_STATUS_MAP: Dict[str, TaskStatus] = {
    "analyzing": TaskStatus.PENDING,
    "waiting": TaskStatus.PENDING,
    "pending": TaskStatus.PENDING,
    "queued": TaskStatus.PENDING,
    "created": TaskStatus.PENDING,
    "processing": TaskStatus.PROCESSING,
    "running": TaskStatus.PROCESSING,
    "translating": TaskStatus.PROCESSING,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
    "success": TaskStatus.COMPLETED,
    "succeeded": TaskStatus.COMPLETED,
    "terminated": TaskStatus.FAILED,
    "failed": TaskStatus.FAILED,
    "error": TaskStatus.FAILED,
    "cancelled": TaskStatus.FAILED,
    "canceled": TaskStatus.FAILED,
    "notsupported": TaskStatus.NOT_SUPPORTED,
    "not_supported": TaskStatus.NOT_SUPPORTED,
}

_RESULT_URL_KEYS = ("translatedFileUrl", "translatedImageUrl", "resultUrl", "translated_file_url")


def normalize_status(raw: Optional[str]) -> TaskStatus:
    """Map an upstream status string onto TaskStatus; unknown values count as processing."""
    if not raw:
        return TaskStatus.PENDING
    key = str(raw).strip().replace(" ", "").replace("-", "_").lower()
    status = _STATUS_MAP.get(key) or _STATUS_MAP.get(key.replace("_", ""))
    if status is None:
        logger.warning(f"Unknown upstream task status {raw!r}; treating as processing")
        return TaskStatus.PROCESSING
    return status


def normalize_progress(raw: Any, status: TaskStatus) -> int:
    """
    Convert upstream progress to an integer percentage in [0, 100].

    Floats within [0, 1] are fractions; any other number is a percentage.
    A completed task always reports 100.
    """
    if status == TaskStatus.COMPLETED:
        return 100
    if isinstance(raw, bool) or raw is None:
        return 0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0
    if isinstance(raw, float) and 0.0 <= value <= 1.0:
        value *= 100
    return max(0, min(100, int(round(value))))


def normalize_task(payload: Dict[str, Any], task_id: Optional[str] = None) -> TranslationTask:
    """Build a TranslationTask from an upstream task payload."""
    status = normalize_status(payload.get("status"))
    result_url = next((payload[k] for k in _RESULT_URL_KEYS if payload.get(k)), None)

    error = payload.get("error") or payload.get("errorMessage")
    if error is not None and not isinstance(error, str):
        error = error.get("message") if isinstance(error, dict) else str(error)
    if error is None and status.is_terminal and status != TaskStatus.COMPLETED:
        error = payload.get("message")

    return TranslationTask(
        task_id=str(payload.get("taskId") or payload.get("id") or task_id or ""),
        status=status,
        progress=normalize_progress(payload.get("progress"), status),
        translated_file_url=result_url,
        error=error,
    )
