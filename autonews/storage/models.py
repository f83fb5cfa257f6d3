import uuid
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from autonews.taxonomy import NewsType, Sentiment


class PendingItem(BaseModel):
    """Artigo raspado e ainda não estruturado (fila de pendentes)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str  # token aleatório, único dentro da fila
    url: str
    title: str
    text: str
    source: str  # hostname da url
    scraped_at: str = Field(alias="scrapedAt")  # YYYY-MM-DD

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class NewsRecord(BaseModel):
    id: str
    title: str
    summary: str = ""
    brand: str
    type: NewsType = NewsType.other
    date: str
    url: str = ""
    source: str = ""
    image: str
    sentiment: Optional[Sentiment] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("image")
    @classmethod
    def _image_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("image must not be empty")
        return v.strip()

    def to_json(self) -> dict:
        return self.model_dump(mode="json")


class AnalyzerCandidate(BaseModel):
    """
    Saída crua do Analyzer. Tudo opcional e sem tipo na fronteira: a
    coerção/defaults acontece no pipeline antes de virar NewsRecord.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[Any] = None
    summary: Optional[Any] = None
    brand: Optional[Any] = None
    type: Optional[Any] = None
    date: Optional[Any] = None
    url: Optional[Any] = None
    image_keywords: Optional[Any] = None
    sentiment: Optional[Any] = None
    tags: Optional[Any] = None


class ManualRecordInput(BaseModel):
    title: str
    summary: str = ""
    brand: Optional[str] = None
    type: Optional[str] = None
    date: Optional[str] = None
    url: str = ""
    source: str = "Manual entry"
    image: Optional[str] = None
    sentiment: Optional[str] = None
    tags: Optional[List[str]] = None


class IngestRequest(BaseModel):
    url: Optional[str] = None


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    pending_id: Optional[str] = Field(default=None, alias="pendingId")
    image: Optional[str] = None
    url: Optional[str] = None


def new_item_id() -> str:
    return uuid.uuid4().hex[:8]
