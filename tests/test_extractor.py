from unittest.mock import patch

import pytest

from app.domain.release_notes.extractor import (
    DEVELOPER_PLACEHOLDER,
    MARKETING_PLACEHOLDER,
    extract_sentence_fallback,
    finalize_notes,
    has_balanced_braces,
    resolve_notes,
    try_extract,
)
from app.domain.release_notes.schemas import ReleaseNotes


class TestHasBalancedBraces:
    """중괄호 균형 검사 테스트."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("{}", True),
            ('{"a": {"b": 1}}', True),
            ("", False),
            ("no braces at all", False),
            ('{"developer": "x"', False),
            ('{"a": 1}}', False),
        ],
    )
    def test_cases(self, text, expected):
        """여는/닫는 중괄호 수 비교."""
        assert has_balanced_braces(text) is expected


class TestTryExtract:
    """스트리밍 중 추출 테스트."""

    def test_exact_object(self):
        """정확한 JSON 객체 추출."""
        result = try_extract('{"developer":"fix bug","marketing":"better app"}')

        assert result == ReleaseNotes(developer="fix bug", marketing="better app")

    def test_unbalanced_buffer_skips_parse(self):
        """중괄호 균형이 맞지 않으면 파싱 시도 안 함."""
        with patch("app.domain.release_notes.extractor.json.loads") as mock_loads:
            result = try_extract('{"developer": "fix bug", "marketing": "bet')

        assert result is None
        mock_loads.assert_not_called()

    def test_surrounding_text(self):
        """JSON 앞뒤의 설명 텍스트 무시."""
        text = 'Sure! Here you go:\n{"developer": "d", "marketing": "m"}\nHope this helps.'

        assert try_extract(text) == ReleaseNotes(developer="d", marketing="m")

    def test_skips_invalid_candidate(self):
        """파싱 실패한 후보는 건너뛰고 다음 후보 시도."""
        text = '{not json} {"developer": "d", "marketing": "m"}'

        assert try_extract(text) == ReleaseNotes(developer="d", marketing="m")

    def test_one_level_nesting(self):
        """한 단계 중첩 객체 허용."""
        text = '{"developer": "d", "marketing": "m", "meta": {"model": "x"}}'

        assert try_extract(text) == ReleaseNotes(developer="d", marketing="m")

    def test_object_without_target_fields(self):
        """대상 필드가 없으면 None."""
        assert try_extract('{"summary": "nothing useful"}') is None


class TestResolveNotes:
    """필드 해석 테스트."""

    def test_array_values_joined(self):
        """문자열 배열은 공백으로 연결."""
        result = resolve_notes({"developer": ["Added retries.", "Fixed leak."], "marketing": ["Faster."]})

        assert result.developer == "Added retries. Fixed leak."
        assert result.marketing == "Faster."

    @pytest.mark.parametrize(
        "data",
        [
            {"developerNotes": "d", "marketingNotes": "m"},
            {"devNotes": "d", "userNotes": "m"},
            {"developer_notes": "d", "marketing_notes": "m"},
        ],
    )
    def test_alternate_keys(self, data):
        """대체 키 이름 허용."""
        assert resolve_notes(data) == ReleaseNotes(developer="d", marketing="m")

    def test_prefers_primary_key(self):
        """기본 키가 있으면 대체 키보다 우선."""
        result = resolve_notes({"developer": "primary", "devNotes": "alt", "marketing": "m"})

        assert result.developer == "primary"

    def test_missing_field_uses_placeholder(self):
        """한쪽만 있으면 다른 쪽은 placeholder."""
        result = resolve_notes({"developer": "d"})

        assert result == ReleaseNotes(developer="d", marketing=MARKETING_PLACEHOLDER)

    @pytest.mark.parametrize("data", [[1, 2], "text", None, {"developer": "", "marketing": "  "}])
    def test_unusable_values(self, data):
        """객체가 아니거나 비어 있으면 None."""
        assert resolve_notes(data) is None


class TestSentenceFallback:
    """문장 분리 fallback 테스트."""

    def test_first_two_sentences(self):
        """첫 두 문장을 developer/marketing으로 사용."""
        result = extract_sentence_fallback("Fixed a crash. Improved load time. Extra sentence.")

        assert result == ReleaseNotes(developer="Fixed a crash.", marketing="Improved load time.")

    def test_short_fragments_ignored(self):
        """10자 이하 조각은 무시."""
        result = extract_sentence_fallback("Ok. Yes! Parser no longer crashes? Loading is quicker now.")

        assert result == ReleaseNotes(
            developer="Parser no longer crashes.",
            marketing="Loading is quicker now.",
        )

    def test_not_enough_sentences(self):
        """긴 문장이 두 개 미만이면 None."""
        assert extract_sentence_fallback("Only one meaningful sentence here.") is None


class TestFinalizeNotes:
    """스트림 종료 시 fallback 테스트."""

    def test_code_fenced_json(self):
        """코드 펜스로 감싼 JSON도 파싱."""
        text = '```json\n{"developer": "d1", "marketing": "m1"}\n```'

        assert finalize_notes(text) == ReleaseNotes(developer="d1", marketing="m1")

    def test_deeply_nested_whole_buffer(self):
        """후보 패턴이 놓치는 깊은 중첩도 전체 파싱으로 처리."""
        text = '{"developer": "d", "marketing": "m", "meta": {"a": {"b": 1}}}'

        assert finalize_notes(text) == ReleaseNotes(developer="d", marketing="m")

    def test_sentence_fallback(self):
        """JSON이 없으면 문장 분리 결과 사용."""
        result = finalize_notes("Fixed a crash. Improved load time. Extra sentence.")

        assert result.developer == "Fixed a crash."
        assert result.marketing == "Improved load time."

    @pytest.mark.parametrize("text", ["", "short.", '{"developer": "unterminated'])
    def test_placeholders(self, text):
        """모든 fallback 실패 시 placeholder."""
        result = finalize_notes(text)

        assert result.developer == DEVELOPER_PLACEHOLDER
        assert result.marketing == MARKETING_PLACEHOLDER
