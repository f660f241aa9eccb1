"""
bosonnlp
========

Client for the `BosonNLP`_ HTTP API.

    >>> from bosonnlp import BosonNLP
    >>> nlp = BosonNLP('YOUR_API_TOKEN')
    >>> nlp.sentiment('这家味道还不错')
    [SentimentScore(positive=0.8758192096636473, negative=0.12418079033635264)]

The token may also come from the ``BOSONNLP_API_TOKEN`` environment variable.

.. _BosonNLP: http://docs.bosonnlp.com/
"""
import logging

__version__ = '0.1.0'

from bosonnlp.core.exceptions import (
    BosonNLPError,
    DecodeError,
    HTTPError,
    MissingTokenError,
    TaskError,
    TaskNotFoundError,
    TaskTimeoutError,
    TransportError,
)
from bosonnlp.domain.models import (
    ClusterContent,
    CommentsCluster,
    Dependency,
    EntitySpan,
    Keyword,
    NamedEntityResult,
    NewsCategory,
    SentimentScore,
    Suggestion,
    TaggedText,
    TaskStatus,
    TextCluster,
    TimeConversion,
)
from bosonnlp.services.bosonnlp_client import BosonNLP
from bosonnlp.services.tasks import ClusterTask, CommentsTask

# Avoid "No handler found" warnings when the application does not configure logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())
