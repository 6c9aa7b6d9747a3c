from enum import Enum
from pydantic import Field
from typing import Optional

from app.schemas.base import CamelModel


class TaskStatus(str, Enum):
    """Canonical translation task status, independent of the upstream vocabulary."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_SUPPORTED = "not_supported"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.NOT_SUPPORTED})


class TaskCreated(CamelModel):
    task_id: str = Field(alias="taskId")
    status: TaskStatus
    correlation_id: Optional[str] = Field(default=None, alias="correlationId")


class TranslationTask(CamelModel):
    task_id: str = Field(alias="taskId")
    status: TaskStatus
    progress: int = Field(default=0, ge=0, le=100, description="Percent complete")
    translated_file_url: Optional[str] = Field(default=None, alias="translatedFileUrl")
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
