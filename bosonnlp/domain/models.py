# bosonnlp/domain/models.py
from enum import Enum, IntEnum
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class _PairValue(_ValueObject):
    """Value object the API encodes as a positional JSON array."""

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            names = list(cls.model_fields)
            if len(data) != len(names):
                raise ValueError(f"expected {len(names)} items, got {len(data)}")
            return dict(zip(names, data))
        return data


class SentimentScore(_PairValue):
    """Probabilities that a text is positive / negative."""
    positive: float
    negative: float


class Suggestion(_PairValue):
    """A semantically related word returned by the suggest API."""
    score: float
    word: str


class Keyword(_PairValue):
    """An extracted keyword and its weight."""
    weight: float
    word: str


class EntitySpan(_PairValue):
    """Named entity covering ``word[start:end]``."""
    start: int
    end: int
    entity_type: str


class Dependency(_ValueObject):
    """Dependency parse of one sentence. ``head[i]`` is the index of the parent of ``word[i]`` (-1 for root)."""
    word: List[str]
    tag: List[str]
    head: List[int]
    role: List[str]


class NamedEntityResult(_ValueObject):
    word: List[str]
    tag: List[str]
    entity: List[EntitySpan]


class TaggedText(_ValueObject):
    word: List[str]
    tag: List[str]


class TimeConversion(_ValueObject):
    """Result of converting a time expression.

    ``type`` is one of ``timestamp``, ``timedelta``, ``timespan_0`` or
    ``timespan_1``; only the matching field is populated.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    type: str
    timestamp: Optional[str] = None
    timespan: Optional[List[Any]] = None
    timedelta: Optional[str] = None


class ClusterContent(_ValueObject):
    """A document pushed to a cluster or comments task."""
    id: str = Field(alias="_id")
    text: str

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class TextCluster(_ValueObject):
    id: int = Field(alias="_id")
    members: List[Union[int, str]] = Field(alias="list", description="Ids of the documents in the cluster.")
    num: int


class CommentsCluster(_ValueObject):
    id: int = Field(alias="_id")
    members: List[Tuple[str, Union[int, str]]] = Field(
        alias="list", description="(opinion text, document id) pairs backing the opinion."
    )
    num: int
    opinion: str


class TaskStatus(str, Enum):
    RECEIVED = "received"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @classmethod
    def parse(cls, value: str) -> "TaskStatus":
        return cls(value.strip().lower())


class NewsCategory(IntEnum):
    """Category codes returned by the classify API."""
    SPORTS = 0
    EDUCATION = 1
    FINANCE = 2
    SOCIETY = 3
    ENTERTAINMENT = 4
    MILITARY = 5
    DOMESTIC = 6
    TECHNOLOGY = 7
    INTERNET = 8
    REAL_ESTATE = 9
    INTERNATIONAL = 10
    WOMEN = 11
    AUTOMOBILE = 12
    GAMES = 13
