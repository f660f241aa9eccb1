# bosonnlp/services/tasks.py
import abc
import uuid
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Type, Union

from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, stop_before_delay, stop_never

from bosonnlp.core.config import get_settings
from bosonnlp.core.logging_config import get_logger
from bosonnlp.core.exceptions import BosonNLPError, DecodeError, TaskError, TaskNotFoundError, TaskTimeoutError
from bosonnlp.core.metrics import TASK_DOCUMENTS_PUSHED_TOTAL
from bosonnlp.domain.models import ClusterContent, CommentsCluster, TaskStatus, TextCluster

if TYPE_CHECKING:
    from bosonnlp.services.bosonnlp_client import BosonNLP

log = get_logger(__name__)

MAX_POLL_INTERVAL_SECONDS = 64

ContentItem = Union[str, ClusterContent, Dict[str, Any]]


def _poll_interval(retry_state: RetryCallState) -> float:
    """1s between polls, doubled every third poll, capped at 64s."""
    return min(MAX_POLL_INTERVAL_SECONDS, 2 ** ((retry_state.attempt_number - 1) // 3))


def _check_timeout(timeout: Optional[float]) -> None:
    if timeout is not None and timeout < 0:
        raise ValueError(f"timeout must be >= 0, got {timeout}")


class Task(abc.ABC):
    """
    Server-side text clustering job.

    The service keeps pushed documents and results under ``task_id`` until
    :meth:`clear` is called. A typical run is push -> analysis ->
    wait_until_complete -> result -> clear.
    """

    kind: str
    result_model: Type[Any]

    def __init__(self, nlp: "BosonNLP", task_id: Optional[str] = None):
        self.nlp = nlp
        self.task_id = task_id or uuid.uuid4().hex
        self.contents: List[ClusterContent] = []
        self.log = log.bind(task_kind=self.kind, task_id=self.task_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(task_id={self.task_id!r}, pushed={len(self.contents)})"

    def _endpoint(self, action: str) -> str:
        return f"/{self.kind}/{action}/{self.task_id}"

    def _metric_endpoint(self, action: str) -> str:
        return f"/{self.kind}/{action}"

    def _to_contents(self, contents: Union[ContentItem, Iterable[ContentItem]]) -> List[ClusterContent]:
        if isinstance(contents, (str, dict, ClusterContent)):
            contents = [contents]
        items: List[Union[str, ClusterContent]] = []
        for item in contents:
            if isinstance(item, dict):
                if "_id" not in item or "text" not in item:
                    raise ValueError(f"Document dicts need '_id' and 'text' keys, got {sorted(item)}")
                item = ClusterContent(id=str(item["_id"]), text=item["text"])
            elif not isinstance(item, (str, ClusterContent)):
                raise TypeError(f"Unsupported document type: {type(item).__name__}")
            items.append(item)

        # Cluster members refer back to documents by id, so ids must stay unique within the task.
        used_ids = {doc.id for doc in self.contents}
        for item in items:
            if isinstance(item, ClusterContent):
                if item.id in used_ids:
                    raise ValueError(f"Duplicate document id '{item.id}' in {self.kind} task {self.task_id}")
                used_ids.add(item.id)

        docs: List[ClusterContent] = []
        next_id = len(self.contents)
        for item in items:
            if isinstance(item, str):
                while str(next_id) in used_ids:
                    next_id += 1
                item = ClusterContent(id=str(next_id), text=item)
                used_ids.add(item.id)
            docs.append(item)
            next_id += 1
        return docs

    def push(self, contents: Union[ContentItem, Iterable[ContentItem]]) -> bool:
        """Uploads documents in batches; returns False when there is nothing to push."""
        docs = self._to_contents(contents)
        if not docs:
            self.log.warning("push called with no documents.")
            return False

        batch_size = get_settings().TASK_PUSH_BATCH_SIZE
        for start in range(0, len(docs), batch_size):
            parts = docs[start:start + batch_size]
            self.nlp.post(
                self._endpoint("push"),
                [doc.to_payload() for doc in parts],
                metric_endpoint=self._metric_endpoint("push"),
            )
            self.contents.extend(parts)
            TASK_DOCUMENTS_PUSHED_TOTAL.labels(task_kind=self.kind).inc(len(parts))
            self.log.info("Pushed documents", pushed=start + len(parts), total=len(docs))
        return True

    def analysis(self, alpha: Optional[float] = None, beta: Optional[float] = None) -> None:
        """Starts the analysis of the pushed documents."""
        params = {}
        if alpha is not None:
            params["alpha"] = alpha
        if beta is not None:
            params["beta"] = beta
        self.nlp.get(self._endpoint("analysis"), params=params, metric_endpoint=self._metric_endpoint("analysis"))
        self.log.info("Task analysis started", alpha=alpha, beta=beta)

    def status(self) -> TaskStatus:
        payload = self.nlp.get(self._endpoint("status"), metric_endpoint=self._metric_endpoint("status"))
        if not isinstance(payload, dict) or not isinstance(payload.get("status"), str):
            raise DecodeError(message="Invalid task status response.", detail=payload)

        raw_status = payload["status"].strip().lower()
        self.log.debug("Task status", status=raw_status)
        if raw_status == "not found":
            raise TaskNotFoundError(f"{self.kind} task {self.task_id} not found", task_id=self.task_id)
        try:
            return TaskStatus.parse(raw_status)
        except ValueError as e:
            raise DecodeError(message=f"Unknown task status '{raw_status}'.", detail=payload) from e

    def _check_status(self) -> TaskStatus:
        status = self.status()
        if status is TaskStatus.ERROR:
            raise TaskError(f"{self.kind} task {self.task_id} failed on the server", task_id=self.task_id)
        return status

    def wait_until_complete(self, timeout: Optional[float] = None) -> None:
        """Polls :meth:`status` until the task is done.


        The deadline is checked before every sleep, so the wait never runs
        past ``timeout``; ``timeout=0`` gives up after the first poll.

        Raises:
            TaskError: the server reported the error state.
            TaskNotFoundError: the task id is unknown.
            TaskTimeoutError: still unfinished after ``timeout`` seconds.
        """
        _check_timeout(timeout)
        retrying = Retrying(
            retry=retry_if_result(lambda status: status is not TaskStatus.DONE),
            wait=_poll_interval,
            stop=stop_before_delay(timeout) if timeout is not None else stop_never,
            before_sleep=lambda retry_state: self.log.debug(
                "Task not finished, polling again",
                status=retry_state.outcome.result().value,
                attempt_number=retry_state.attempt_number,
                wait_time=retry_state.next_action.sleep,
            ),
        )
        try:
            retrying(self._check_status)
        except RetryError as e:
            self.log.error("Task timed out", timeout=timeout)
            raise TaskTimeoutError(
                f"{self.kind} task {self.task_id} timed out after {timeout}s", task_id=self.task_id
            ) from e
        self.log.info("Task completed")

    def result(self) -> List[Any]:
        payload = self.nlp.get(self._endpoint("result"), metric_endpoint=self._metric_endpoint("result"))
        return self.nlp._decode(payload, List[self.result_model])

    def clear(self) -> None:
        """Drops the documents and results cached on the server."""
        try:
            self.nlp.get(self._endpoint("clear"), metric_endpoint=self._metric_endpoint("clear"))
        except BosonNLPError as e:
            self.log.warning("Failed to clear task", error=str(e))
            return
        self.log.info("Task cleared")

    def run(
        self,
        contents: Union[ContentItem, Iterable[ContentItem]],
        alpha: Optional[float] = None,
        beta: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> List[Any]:
        """push -> analysis -> wait -> result, always clearing the task afterwards."""
        _check_timeout(timeout)
        try:
            if not self.push(contents):
                return []
            self.analysis(alpha, beta)
            self.wait_until_complete(timeout)
            return self.result()
        finally:
            if self.contents:
                self.clear()


class ClusterTask(Task):
    """文本聚类任务"""
    kind = "cluster"
    result_model = TextCluster


class CommentsTask(Task):
    """典型意见任务"""
    kind = "comments"
    result_model = CommentsCluster
