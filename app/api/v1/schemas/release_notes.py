"""릴리스 노트 API 스키마."""

import uuid

from pydantic import BaseModel, Field

from app.domain.release_notes.schemas import ChangeRecord


class AnalyzeRequest(BaseModel):
    """diff 분석 요청.

    diffContent 누락은 엔드포인트에서 400으로 처리한다.
    """

    diff_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8], alias="diffId")
    diff_content: str | None = Field(default=None, alias="diffContent")
    description: str = ""
    source_url: str = Field(default="", alias="url")

    class Config:
        populate_by_name = True

    def to_change_record(self) -> ChangeRecord:
        return ChangeRecord(
            id=self.diff_id,
            description=self.description,
            diff_text=self.diff_content or "",
            source_url=self.source_url,
        )


class SampleDiff(BaseModel):
    """샘플 diff 항목."""

    id: str
    description: str
    diff: str
    url: str

    @classmethod
    def from_record(cls, record: ChangeRecord) -> "SampleDiff":
        return cls(
            id=record.id,
            description=record.description,
            diff=record.diff_text,
            url=record.source_url,
        )


class SampleDiffsResponse(BaseModel):
    """샘플 diff 목록 응답."""

    owner: str
    repo: str
    page: int
    per_page: int = Field(alias="perPage")
    diffs: list[SampleDiff]
    has_more: bool = Field(alias="hasMore")

    class Config:
        populate_by_name = True
