from pydantic import BaseModel, ConfigDict, Field


class ChangeRecord(BaseModel):
    """분석 대상 변경 단위 - PR 하나에 대응"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    description: str = ""
    diff_text: str = Field(alias="diff")
    source_url: str = Field(default="", alias="url")


class ReleaseNotes(BaseModel):
    """개발자용/마케팅용 릴리스 노트"""

    developer: str
    marketing: str


class RelevanceDecision(BaseModel):
    """관련성 판단 결과"""

    relevant: bool
    score: int
    reason: str
