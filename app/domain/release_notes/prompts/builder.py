from app.core.config import settings
from app.domain.release_notes.prompts.generation import RELEASE_NOTES_HUMAN

TRUNCATION_MARKER = "\n\n... [content truncated] ...\n\n"
HEAD_RATIO = 0.7
MAX_SENTENCE_LENGTH = 200


def truncate_diff(diff_text: str, max_length: int | None = None) -> str:
    """입력 크기 제한을 넘는 diff를 앞 70%, 뒤 30%만 남기고 자름

    마커 길이까지 포함해 결과 길이가 max_length를 넘지 않는다.

    Args:
        diff_text: 원본 diff
        max_length: 최대 길이, 없으면 설정값 사용

    Returns:
        잘린 diff, 제한 이하면 원본 그대로
    """
    if max_length is None:
        max_length = settings.diff_max_length
    if len(diff_text) <= max_length:
        return diff_text

    budget = max(max_length - len(TRUNCATION_MARKER), 0)
    head_length = int(budget * HEAD_RATIO)
    tail_length = budget - head_length

    head = diff_text[:head_length]
    tail = diff_text[len(diff_text) - tail_length :] if tail_length else ""
    return f"{head}{TRUNCATION_MARKER}{tail}"


def build_prompt(diff_text: str, description: str, max_length: int | None = None) -> str:
    """릴리스 노트 생성용 프롬프트 렌더링"""
    return RELEASE_NOTES_HUMAN.format(
        description=description.replace('"', "'"),
        diff=truncate_diff(diff_text, max_length),
        max_sentence_length=MAX_SENTENCE_LENGTH,
    )
