from typing import Any, Optional


class BosonNLPError(Exception):
    """Base exception for BosonNLP client errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class MissingTokenError(BosonNLPError):
    """No API token configured; raised before any request is sent."""


class TransportError(BosonNLPError):
    """Network failure or timeout talking to the API."""


class HTTPError(BosonNLPError):
    """The API answered with a non-2xx status."""

    def __str__(self) -> str:
        return f"{self.message} (status_code={self.status_code}, reason={self.detail!r})"


class DecodeError(BosonNLPError):
    """The response body is not valid JSON or does not match the expected shape."""


class TaskError(BosonNLPError):
    """A cluster/comments task finished in the error state."""
    def __init__(self, message: str, task_id: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.task_id = task_id


class TaskNotFoundError(TaskError):
    """The server does not know the task id."""


class TaskTimeoutError(TaskError):
    """The task did not finish within the allotted time."""
