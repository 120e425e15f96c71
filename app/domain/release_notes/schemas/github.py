from pydantic import BaseModel


class PRInfo(BaseModel):
    """Merged PR 기본 정보"""

    number: int
    title: str
    url: str
    html_url: str
    merged_at: str
