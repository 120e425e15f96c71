"""PR 관련성 판단 및 랭킹

두 단계의 필터를 제공한다.
- should_include_pr: 요청 시점에 쓰는 빠른 키워드 필터, 기본값은 포함
- is_relevant / filter_relevant_prs: 여러 PR을 고를 때 쓰는 정밀 필터,
  제목 패턴 -> 파일 영향도 -> 변경 규모 순으로 판단

규칙은 모두 (패턴, 판정/가중치) 순서 테이블로 표현하고
first-match / sum-all 방식으로 평가한다.
"""

import re
from collections.abc import Iterable

from app.core.logging import get_logger
from app.domain.release_notes.schemas import ChangeRecord, RelevanceDecision

logger = get_logger(__name__)

MIN_CHANGED_LINES = 10

Rule = tuple[str, re.Pattern[str]]


def _rules(category: str, *patterns: str) -> list[Rule]:
    return [(category, re.compile(p, re.IGNORECASE)) for p in patterns]


EXCLUDE_RULES: list[Rule] = [
    *_rules("docs", r"^(docs?|documentation):", r"^update readme", r"^fix typo", r"readme\.md$"),
    *_rules("dependency", r"^bump .+ from .+ to .+", r"^chore\(deps\)"),
    *_rules("ci", r"^\[release\]", r"^\[ci\]", r"^ci:", r"github.?actions", r"\.github/"),
    *_rules("test", r"^\[test\]", r"^tests?:", r"unflake"),
    *_rules("refactor", r"^refactor\(internal\)", r"remove.+wrapper", r"replace uses of"),
    *_rules("formatting", r"^style:", r"^lint:", r"prettier", r"eslint"),
]

INCLUDE_RULES: list[Rule] = [
    *_rules("performance", r"^perf", r"performance", r"optimi[sz]e", r"faster", r"speed"),
    *_rules("feature", r"^feat", r"add(?:ed)?.+support", r"new.+method", r"implement"),
    *_rules("bugfix", r"^fix", r"bug", r"issue", r"error"),
    *_rules("breaking", r"breaking", r"deprecate", r"remove(?:d)?.+api"),
    *_rules("dx", r"typescript", r"dx:", r"developer.experience", r"improve.+error"),
    *_rules("api", r"api", r"endpoint", r"client", r"sdk"),
    *_rules("streaming", r"stream", r"websocket", r"sse", r"real.?time"),
]

RELEVANT_FILE_PATTERNS = [
    re.compile(p)
    for p in (r"\.ts$", r"\.js$", r"\.py$", r"src/", r"lib/", r"api/", r"client", r"index\.")
]

IRRELEVANT_FILE_PATTERNS = [
    re.compile(p)
    for p in (
        r"\.md$",
        r"\.ya?ml$",
        r"\.json$",
        r"tests?/",
        r"__tests__/",
        r"\.spec\.",
        r"\.test\.",
    )
]

SCORE_RULES: list[tuple[re.Pattern[str], int]] = [
    (re.compile(r"breaking", re.IGNORECASE), 100),
    (re.compile(r"security", re.IGNORECASE), 90),
    (re.compile(r"^feat", re.IGNORECASE), 80),
    (re.compile(r"^fix", re.IGNORECASE), 70),
    (re.compile(r"^perf", re.IGNORECASE), 60),
    (re.compile(r"api", re.IGNORECASE), 50),
    (re.compile(r"stream", re.IGNORECASE), 40),
    (re.compile(r"refactor", re.IGNORECASE), 20),
    (re.compile(r"update", re.IGNORECASE), 10),
]

# 빠른 필터: 확신도가 높은 키워드만 검사
FAST_EXCLUDE_KEYWORDS = ("[test]", "[ci]", "readme")
FAST_EXCLUDE_PREFIXES = ("bump ",)
FAST_INCLUDE_KEYWORDS = ("fix", "feat", "perf", "breaking", "api")


def _first_match(rules: list[Rule], text: str) -> str | None:
    """처음 매칭되는 규칙의 카테고리 반환"""
    for category, pattern in rules:
        if pattern.search(text):
            return category
    return None


def _file_paths(diff_text: str) -> list[str]:
    """diff의 +++/--- 헤더 라인 추출"""
    return [
        line
        for line in diff_text.lower().split("\n")
        if line.startswith("+++") or line.startswith("---")
    ]


def count_file_impact(diff_text: str) -> tuple[int, int]:
    """관련/비관련 파일 경로 수 반환"""
    relevant = 0
    irrelevant = 0
    for line in _file_paths(diff_text):
        path = line[3:].strip()
        if any(p.search(path) for p in RELEVANT_FILE_PATTERNS):
            relevant += 1
        if any(p.search(path) for p in IRRELEVANT_FILE_PATTERNS):
            irrelevant += 1
    return relevant, irrelevant


def count_changed_lines(diff_text: str) -> int:
    """추가/삭제된 줄 수 계산, 파일 헤더 제외"""
    total = 0
    for line in diff_text.split("\n"):
        if line.startswith("+++") or line.startswith("---"):
            continue
        if line.startswith("+") or line.startswith("-"):
            total += 1
    return total


def calculate_pr_score(record: ChangeRecord) -> int:
    """제목 키워드 가중치 합산 - 랭킹 전용"""
    title = record.description
    return sum(weight for pattern, weight in SCORE_RULES if pattern.search(title))


def evaluate_relevance(record: ChangeRecord) -> RelevanceDecision:
    """정밀 필터로 관련성 판단

    Args:
        record: 판단 대상 PR

    Returns:
        포함 여부, 점수, 판단 근거
    """
    title = record.description.strip()
    score = calculate_pr_score(record)

    excluded = _first_match(EXCLUDE_RULES, title)
    if excluded:
        return RelevanceDecision(relevant=False, score=score, reason=f"exclude:{excluded}")

    included = _first_match(INCLUDE_RULES, title)
    if included:
        return RelevanceDecision(relevant=True, score=score, reason=f"include:{included}")

    relevant_files, irrelevant_files = count_file_impact(record.diff_text)
    if irrelevant_files > relevant_files:
        return RelevanceDecision(relevant=False, score=score, reason="files:irrelevant")

    changed = count_changed_lines(record.diff_text)
    if changed < MIN_CHANGED_LINES and "fix" not in title.lower():
        return RelevanceDecision(relevant=False, score=score, reason="size:too_small")

    return RelevanceDecision(relevant=True, score=score, reason="default")


def is_relevant(record: ChangeRecord) -> bool:
    return evaluate_relevance(record).relevant


def filter_relevant_prs(records: Iterable[ChangeRecord]) -> list[ChangeRecord]:
    """정밀 필터 통과 PR만 반환, 입력 순서 유지"""
    kept = []
    for record in records:
        decision = evaluate_relevance(record)
        if decision.relevant:
            kept.append(record)
        else:
            logger.debug("PR 제외 id=%s reason=%s", record.id, decision.reason)
    return kept


def rank_prs(records: Iterable[ChangeRecord]) -> list[ChangeRecord]:
    """점수 내림차순 정렬, 동점은 입력 순서 유지"""
    return sorted(records, key=calculate_pr_score, reverse=True)


def filter_and_rank(records: Iterable[ChangeRecord]) -> list[ChangeRecord]:
    """정밀 필터 적용 후 랭킹"""
    records = list(records)
    ranked = rank_prs(filter_relevant_prs(records))
    logger.info("PR 필터링 완료 total=%d relevant=%d", len(records), len(ranked))
    return ranked


def should_include_pr(record: ChangeRecord) -> bool:
    """요청 시점 빠른 필터 - 파일/규모 휴리스틱 없이 키워드만 검사"""
    title = record.description.lower()

    if any(keyword in title for keyword in FAST_EXCLUDE_KEYWORDS):
        return False
    if title.startswith(FAST_EXCLUDE_PREFIXES):
        return False

    if any(keyword in title for keyword in FAST_INCLUDE_KEYWORDS):
        return True

    return True
