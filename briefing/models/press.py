"""
Press-related Pydantic models (wire format).

Fields are snake_case in Python and camelCase on the wire.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .sections import (
    ApiConfig,
    ConfigSnapshot,
    ConfigSource,
    SearchMode,
    SectionOverride,
    SectionResult,
    StatusRecord,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionInput(CamelModel):
    id: str
    prompt: Optional[str] = None
    duration_minutes: Optional[float] = Field(default=None, ge=0)

    def to_override(self) -> SectionOverride:
        return SectionOverride(
            id=self.id,
            prompt=self.prompt,
            duration_minutes=self.duration_minutes,
        )


class GenerationRequest(CamelModel):
    sections: Optional[List[SectionInput]] = None
    search_mode: Optional[SearchMode] = None


class ReferenceModel(CamelModel):
    title: str
    url: str
    snippet: Optional[str] = None


class SectionResultModel(CamelModel):
    id: str
    title: str
    duration_minutes: float
    target_words: int
    content: str
    references: List[ReferenceModel]
    used_queries: List[str]

    @classmethod
    def from_result(cls, result: SectionResult) -> "SectionResultModel":
        return cls(
            id=result.id,
            title=result.title,
            duration_minutes=result.duration_minutes,
            target_words=result.target_words,
            content=result.content,
            references=[
                ReferenceModel(title=r.title, url=r.url, snippet=r.snippet)
                for r in result.references
            ],
            used_queries=list(result.used_queries),
        )


class GenerationResponse(CamelModel):
    sections: List[SectionResultModel]
    search_mode: SearchMode


class ApiConfigModel(CamelModel):
    serp_api_key: Optional[str] = None
    reader_api_key: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    deepseek_api_base: Optional[str] = None
    deepseek_model: Optional[str] = None
    updated_at: Optional[int] = None

    def to_config(self) -> ApiConfig:
        return ApiConfig(
            serp_api_key=self.serp_api_key,
            reader_api_key=self.reader_api_key,
            deepseek_api_key=self.deepseek_api_key,
            deepseek_api_base=self.deepseek_api_base,
            deepseek_model=self.deepseek_model,
        )

    @classmethod
    def from_config(cls, config: ApiConfig) -> "ApiConfigModel":
        return cls(**config.as_dict())


class ConfigSnapshotModel(CamelModel):
    config: Optional[ApiConfigModel] = None
    source: ConfigSource
    db_exists: bool

    @classmethod
    def from_snapshot(cls, snapshot: ConfigSnapshot) -> "ConfigSnapshotModel":
        return cls(
            config=ApiConfigModel.from_config(snapshot.config) if snapshot.config else None,
            source=snapshot.source,
            db_exists=snapshot.db_exists,
        )


class StatusRecordModel(CamelModel):
    id: str
    label: str
    ok: bool
    latency_ms: Optional[int] = None
    checked_at: int
    message: str

    @classmethod
    def from_record(cls, record: StatusRecord) -> "StatusRecordModel":
        return cls(
            id=record.id,
            label=record.label,
            ok=record.ok,
            latency_ms=record.latency_ms,
            checked_at=record.checked_at,
            message=record.message,
        )


class StatusResponse(CamelModel):
    source: ConfigSource
    statuses: List[StatusRecordModel]


class NewsItemModel(CamelModel):
    id: str
    title: str
    url: str
    mobile_url: Optional[str] = None
    pub_date: Optional[int] = None


class FeedResponse(CamelModel):
    id: str
    status: str
    updated_time: int
    items: List[NewsItemModel]


class FeedEntireRequest(CamelModel):
    sources: List[str]
