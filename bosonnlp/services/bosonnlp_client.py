# bosonnlp/services/bosonnlp_client.py
import datetime
from typing import Iterable, List, Optional, Union

import httpx

from bosonnlp.core.config import get_settings
from bosonnlp.domain.models import (
    CommentsCluster,
    Dependency,
    Keyword,
    NamedEntityResult,
    SentimentScore,
    Suggestion,
    TaggedText,
    TextCluster,
    TimeConversion,
)
from bosonnlp.services.base_client import BaseServiceClient
from bosonnlp.services.tasks import ClusterTask, CommentsTask, ContentItem

SENTIMENT_MODELS = ("general", "auto", "kitchen", "food", "news", "weibo")
MAX_TOP_K = 100

Texts = Union[str, Iterable[str]]


def _as_list(contents: Texts) -> List[str]:
    if isinstance(contents, str):
        return [contents]
    contents = list(contents)
    if not all(isinstance(c, str) for c in contents):
        raise TypeError("contents must be a string or a sequence of strings")
    return contents


def _check_top_k(top_k: Optional[int]) -> None:
    if top_k is not None and not 1 <= top_k <= MAX_TOP_K:
        raise ValueError(f"top_k must be between 1 and {MAX_TOP_K}, got {top_k}")


class BosonNLP(BaseServiceClient):
    """
    Client for the BosonNLP HTTP API.

    Arguments left as ``None`` fall back to the ``BOSONNLP_*`` settings.

        >>> nlp = BosonNLP('YOUR_API_TOKEN')
        >>> nlp.sentiment('这家味道还不错')
        [SentimentScore(positive=0.87..., negative=0.12...)]
    """

    def __init__(
        self,
        token: Optional[str] = None,
        bosonnlp_url: Optional[str] = None,
        compress: Optional[bool] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        settings = get_settings()
        if token is None and settings.API_TOKEN is not None:
            token = settings.API_TOKEN.get_secret_value()
        super().__init__(
            base_url=bosonnlp_url or settings.API_URL,
            service_name="BosonNLP",
            token=token,
            timeout=timeout if timeout is not None else settings.TIMEOUT_SECONDS,
            compress=settings.COMPRESS if compress is None else compress,
            client=http_client,
        )

    def sentiment(self, contents: Texts, model: str = "general") -> List[SentimentScore]:
        """情感分析: positive/negative probabilities for each text.

        ``model`` picks the corpus the classifier was trained on.
        """
        if model not in SENTIMENT_MODELS:
            raise ValueError(f"Unknown sentiment model '{model}'. Must be one of {SENTIMENT_MODELS}")
        payload = self.post(f"/sentiment/analysis?{model}", _as_list(contents), metric_endpoint="/sentiment/analysis")
        return self._decode(payload, List[SentimentScore])

    def classify(self, contents: Texts) -> List[int]:
        """新闻分类: one category code per text, see :class:`~bosonnlp.domain.models.NewsCategory`."""
        payload = self.post("/classify/analysis", _as_list(contents))
        return self._decode(payload, List[int])

    def suggest(self, word: str, top_k: int = 10) -> List[Suggestion]:
        """语义联想: words related to ``word``, best first."""
        _check_top_k(top_k)
        payload = self.post("/suggest/analysis", word, params={"top_k": top_k})
        return self._decode(payload, List[Suggestion])

    def extract_keywords(self, text: str, top_k: Optional[int] = None, segmented: bool = False) -> List[Keyword]:
        """关键词提取.

        ``segmented`` means ``text`` is already split by spaces and is not
        segmented again by the service.
        """
        _check_top_k(top_k)
        params = {}
        if top_k is not None:
            params["top_k"] = top_k
        if segmented:
            params["segmented"] = 1
        payload = self.post("/keywords/analysis", text, params=params)
        return self._decode(payload, List[Keyword])

    def depparser(self, contents: Texts) -> List[Dependency]:
        """依存文法分析"""
        payload = self.post("/depparser/analysis", _as_list(contents))
        return self._decode(payload, List[Dependency])

    def ner(self, contents: Texts, sensitivity: Optional[int] = None, segmented: bool = False) -> List[NamedEntityResult]:
        """命名实体识别.

        ``sensitivity`` (1-5) trades precision for recall; higher finds more entities.
        """
        params = {}
        if sensitivity is not None:
            if not 1 <= sensitivity <= 5:
                raise ValueError(f"sensitivity must be between 1 and 5, got {sensitivity}")
            params["sensitivity"] = sensitivity
        if segmented:
            params["segmented"] = 1
        payload = self.post("/ner/analysis", _as_list(contents), params=params)
        return self._decode(payload, List[NamedEntityResult])

    def tag(
        self,
        contents: Texts,
        space_mode: int = 0,
        oov_level: int = 3,
        t2s: bool = False,
        special_char_conv: bool = False,
    ) -> List[TaggedText]:
        """分词与词性标注

        Args:
            contents: text or texts to segment.
            space_mode: whitespace handling, 0-3.
            oov_level: out-of-vocabulary word merging, 0-4.
            t2s: convert traditional to simplified Chinese.
            special_char_conv: convert special characters such as emoticons.
        """
        if not 0 <= space_mode <= 3:
            raise ValueError(f"space_mode must be between 0 and 3, got {space_mode}")
        if not 0 <= oov_level <= 4:
            raise ValueError(f"oov_level must be between 0 and 4, got {oov_level}")
        params = {
            "space_mode": space_mode,
            "oov_level": oov_level,
            "t2s": int(t2s),
            "special_char_conv": int(special_char_conv),
        }
        payload = self.post("/tag/analysis", _as_list(contents), params=params)
        return self._decode(payload, List[TaggedText])

    def summary(self, title: str, content: str, word_limit: float = 0.3, not_exceed: bool = False) -> str:
        """新闻摘要.

        ``word_limit`` below 1 is a ratio of the content length, otherwise a
        character count. ``not_exceed`` makes the limit strict.
        """
        if word_limit <= 0:
            raise ValueError(f"word_limit must be positive, got {word_limit}")
        data = {
            "title": title or "",
            "content": content,
            "percentage": word_limit,
            "not_exceed": int(not_exceed),
        }
        payload = self.post("/summary/analysis", data)
        return self._decode(payload, str)

    def convert_time(
        self,
        content: str,
        basetime: Union[None, int, float, str, datetime.datetime] = None,
    ) -> TimeConversion:
        """时间转换: resolves a time expression relative to ``basetime`` (default: now)."""
        params = {"pattern": content}
        if isinstance(basetime, datetime.datetime):
            params["basetime"] = basetime.isoformat()
        elif basetime is not None:
            params["basetime"] = basetime
        payload = self.post("/time/analysis", None, params=params)
        return self._decode(payload, TimeConversion)

    def cluster(
        self,
        contents: Iterable[ContentItem],
        task_id: Optional[str] = None,
        alpha: Optional[float] = None,
        beta: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> List[TextCluster]:
        """文本聚类: runs a whole :class:`ClusterTask` and returns its clusters."""
        if timeout is None:
            timeout = get_settings().TASK_TIMEOUT_SECONDS
        return ClusterTask(self, task_id).run(contents, alpha=alpha, beta=beta, timeout=timeout)

    def comments(
        self,
        contents: Iterable[ContentItem],
        task_id: Optional[str] = None,
        alpha: Optional[float] = None,
        beta: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> List[CommentsCluster]:
        """典型意见: runs a whole :class:`CommentsTask` and returns its opinions."""
        if timeout is None:
            timeout = get_settings().TASK_TIMEOUT_SECONDS
        return CommentsTask(self, task_id).run(contents, alpha=alpha, beta=beta, timeout=timeout)
