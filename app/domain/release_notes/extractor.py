"""누적되는 LLM 출력에서 릴리스 노트 JSON 추출

스트리밍 중에는 try_extract를 청크마다 호출하고,
스트림 종료 후 한 번도 성공하지 못했으면 finalize_notes로 최종 fallback을 적용한다.
파싱 실패는 예외로 올리지 않고 None으로 처리한다.
"""

import json
import re
from typing import Any

from app.core.logging import get_logger
from app.domain.release_notes.schemas import ReleaseNotes

logger = get_logger(__name__)

# 중첩 한 단계까지만 허용하는 중괄호 패턴 - 평평한 출력 형식이면 충분
JSON_CANDIDATE_PATTERN = re.compile(r"\{(?:[^{}]|\{[^{}]*\})*\}")
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")

MIN_SENTENCE_LENGTH = 10

DEVELOPER_KEYS = ("developer", "developerNotes", "developer_notes", "devNotes", "dev")
MARKETING_KEYS = ("marketing", "marketingNotes", "marketing_notes", "userNotes", "user")

DEVELOPER_PLACEHOLDER = "No developer notes generated."
MARKETING_PLACEHOLDER = "No marketing notes generated."


def has_balanced_braces(text: str) -> bool:
    """여는/닫는 중괄호 수가 같고 한 쌍 이상 있는지 확인"""
    opening = text.count("{")
    return opening > 0 and opening == text.count("}")


def _coerce_text(value: Any) -> str:
    """문자열 또는 문자열 배열을 하나의 문자열로 변환"""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return " ".join(item.strip() for item in value if isinstance(item, str)).strip()
    return ""


def _resolve_field(data: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        text = _coerce_text(data.get(key))
        if text:
            return text
    return ""


def resolve_notes(data: Any) -> ReleaseNotes | None:
    """파싱된 값에서 developer/marketing 필드 해석

    대체 키 이름과 문자열 배열도 허용하며,
    둘 중 하나라도 있으면 나머지는 placeholder로 채운다.

    Returns:
        두 필드 모두 찾지 못하면 None
    """
    if not isinstance(data, dict):
        return None

    developer = _resolve_field(data, DEVELOPER_KEYS)
    marketing = _resolve_field(data, MARKETING_KEYS)
    if not developer and not marketing:
        return None

    return ReleaseNotes(
        developer=developer or DEVELOPER_PLACEHOLDER,
        marketing=marketing or MARKETING_PLACEHOLDER,
    )


def _scan_candidates(text: str) -> ReleaseNotes | None:
    """JSON 후보 부분 문자열을 왼쪽부터 파싱 시도"""
    for match in JSON_CANDIDATE_PATTERN.finditer(text):
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
        notes = resolve_notes(parsed)
        if notes:
            return notes
    return None


def try_extract(accumulated_text: str) -> ReleaseNotes | None:
    """스트리밍 중 누적 버퍼에서 노트 추출 시도

    중괄호 균형이 맞지 않으면 파싱을 시도하지 않는다.
    """
    if not has_balanced_braces(accumulated_text):
        return None
    return _scan_candidates(accumulated_text)


def _strict_parse(text: str) -> ReleaseNotes | None:
    """버퍼 전체를 JSON으로 파싱 - 코드 펜스는 제거"""
    stripped = CODE_FENCE_PATTERN.sub("", text.strip())
    try:
        return resolve_notes(json.loads(stripped))
    except json.JSONDecodeError:
        return None


def extract_sentence_fallback(text: str) -> ReleaseNotes | None:
    """문장 단위로 나눠 첫 두 문장을 노트로 사용

    Returns:
        10자 초과 문장이 2개 미만이면 None
    """
    sentences = [
        fragment.strip()
        for fragment in SENTENCE_SPLIT_PATTERN.split(text)
        if len(fragment.strip()) > MIN_SENTENCE_LENGTH
    ]
    if len(sentences) < 2:
        return None
    return ReleaseNotes(developer=f"{sentences[0]}.", marketing=f"{sentences[1]}.")


def finalize_notes(accumulated_text: str) -> ReleaseNotes:
    """스트림 종료 시 최종 fallback 적용

    전체 파싱 -> 후보 스캔 -> 문장 분리 -> placeholder 순서로 시도하며
    항상 두 필드가 채워진 노트를 반환한다.
    """
    notes = _strict_parse(accumulated_text)
    if notes:
        logger.debug("최종 추출 성공 method=strict")
        return notes

    notes = _scan_candidates(accumulated_text)
    if notes:
        logger.debug("최종 추출 성공 method=candidate")
        return notes

    notes = extract_sentence_fallback(accumulated_text)
    if notes:
        logger.info("JSON 추출 실패, 문장 분리 fallback 사용 length=%d", len(accumulated_text))
        return notes

    logger.warning("노트 추출 실패, placeholder 사용 length=%d", len(accumulated_text))
    return ReleaseNotes(developer=DEVELOPER_PLACEHOLDER, marketing=MARKETING_PLACEHOLDER)
