"""
Data models for match records, knowledge-graph nodes and links, and search results.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

KEYWORD_TO_CONCEPT = "keyword_to_concept"


class MatchStage(str, Enum):
    STAGE1 = "Stage1"
    STAGE2 = "Stage2"
    STAGE3 = "Stage3"
    UNKNOWN = "Unknown"

    @property
    def weight(self) -> float:
        return STAGE_WEIGHTS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["MatchStage"]:
        """
        Map a raw feed value to a stage. Empty values mean "no stage";
        anything unrecognised is UNKNOWN rather than an error.
        """
        if value is None or isinstance(value, cls):
            return value
        text = str(value).strip()
        if not text:
            return None
        if text in STAGE_LABELS:
            return STAGE_LABELS[text]
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN


STAGE_WEIGHTS: Dict[MatchStage, float] = {
    MatchStage.STAGE1: 1.0,
    MatchStage.STAGE2: 0.85,
    MatchStage.STAGE3: 0.7,
    MatchStage.UNKNOWN: 0.6,
}

# Labels used by the upstream matching pipeline.
STAGE_LABELS: Dict[str, MatchStage] = {
    "第一階段": MatchStage.STAGE1,
    "第二階段": MatchStage.STAGE2,
    "第三階段": MatchStage.STAGE3,
}


class NodeType(str, Enum):
    CONCEPT = "concept"
    KEYWORD = "keyword"
    DATASET = "dataset"


class MatchRecord(BaseModel):
    """
    One piece of evidence that a keyword relates to a dataset.
    """

    model_config = ConfigDict(frozen=True)

    keyword: str = Field(validation_alias=AliasChoices("keyword", "關鍵字"))
    dataset_name: str = Field(
        validation_alias=AliasChoices("datasetName", "dataset_name", "資料集名稱"),
        serialization_alias="datasetName",
    )
    match_stage: Optional[MatchStage] = Field(
        default=None,
        validation_alias=AliasChoices("matchStage", "match_stage", "匹配階段"),
        serialization_alias="matchStage",
    )
    relevance_score: float = Field(
        default=5.0,
        ge=0,
        validation_alias=AliasChoices("relevanceScore", "relevance_score", "相關性分數"),
        serialization_alias="relevanceScore",
    )
    match_method: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("matchMethod", "match_method", "匹配方式"),
        serialization_alias="matchMethod",
    )
    match_reason: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("matchReason", "match_reason", "匹配原因"),
        serialization_alias="matchReason",
    )

    @field_validator("match_stage", mode="before")
    @classmethod
    def _parse_stage(cls, value: Any) -> Optional[MatchStage]:
        return MatchStage.parse(value)

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _default_score(cls, value: Any) -> Any:
        return 5.0 if value is None or value == "" else value


class StagedModel(BaseModel):
    """
    Graph element carrying a matching stage.

    `stage` is the parsed stage used for weighting and filtering; `stage_label`
    keeps the feed's own text so that two different unrecognised labels never
    compare equal.
    """

    model_config = ConfigDict(frozen=True)

    stage: Optional[MatchStage] = None
    stage_label: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _keep_stage_label(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("stage_label") is None:
            raw = data.get("stage")
            if raw is not None and not isinstance(raw, MatchStage) and str(raw).strip():
                data = {**data, "stage_label": str(raw).strip()}
        return data

    @field_validator("stage", mode="before")
    @classmethod
    def _parse_stage(cls, value: Any) -> Optional[MatchStage]:
        return MatchStage.parse(value)

    @property
    def stage_key(self) -> Optional[str]:
        if self.stage is None:
            return None
        if self.stage is MatchStage.UNKNOWN:
            return self.stage_label or self.stage.value
        return self.stage.value


class GraphNode(StagedModel):
    id: str
    label: str
    type: NodeType
    category: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def _empty_category(cls, value: Any) -> Any:
        return "" if value is None else value


class GraphLink(StagedModel):
    """
    Directed edge between two nodes. Endpoints are always plain node ids.
    """

    source: str
    target: str
    type: str = ""

    @field_validator("source", "target", mode="before")
    @classmethod
    def _endpoint_id(cls, value: Any) -> Any:
        # a renderer may hand back links whose endpoints were resolved in place
        if isinstance(value, dict):
            return value.get("id")
        if isinstance(value, GraphNode):
            return value.id
        return value

    def other_end(self, node_id: str) -> Optional[str]:
        """
        Return the opposite endpoint when `node_id` is on this link.
        """
        if self.source == node_id:
            return self.target
        if self.target == node_id:
            return self.source
        return None


class KnowledgeGraph(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)


class Situation(BaseModel):
    name: str
    description: str = ""
    icon: str = ""
    concepts: List[str] = Field(default_factory=list)


class FAQQuestion(BaseModel):
    question: str
    related_datasets: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    answer_hint: str = ""


class FAQCategory(BaseModel):
    category: str
    icon: str = ""
    description: str = ""
    questions: List[FAQQuestion] = Field(default_factory=list)


class SearchResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    dataset_name: str
    relevance: float
    stage: Optional[MatchStage] = None
    method: str
    keywords: List[str] = Field(default_factory=list)
    match_reason: str = ""
