"""
Tests for prompt building
"""

from advice_request import (
    NO_ADDITIONAL_INFO,
    NOT_SPECIFIED,
    build_advice_prompt,
    build_expert_advice_prompt,
    extract_answer_fields,
    missing_required_answers,
)


class TestAnswerFields:

    def test_defaults_for_missing_answers(self):
        fields = extract_answer_fields({})

        assert fields['incidentDate'] == NOT_SPECIFIED
        assert fields['amount'] == NOT_SPECIFIED
        assert fields['attempts'] == NOT_SPECIFIED
        assert fields['desiredOutcome'] == NOT_SPECIFIED
        assert fields['additionalInfo'] == NO_ADDITIONAL_INFO

    def test_empty_string_counts_as_missing(self):
        assert extract_answer_fields({'amount': ''})['amount'] == NOT_SPECIFIED

    def test_answers_not_mutated(self, sample_answers):
        before = dict(sample_answers)
        extract_answer_fields(sample_answers)

        assert sample_answers == before

    def test_missing_required(self):
        assert missing_required_answers({}, {}) == ['incidentDate']
        assert missing_required_answers({'incidentDate': '2024-01-01'}, {}) == []


class TestAdvicePrompt:

    def test_prompt_embeds_fields(self, sample_issue, sample_answers):
        prompt = build_advice_prompt(sample_issue, sample_answers)

        assert f"- 주요 법률 문제: {sample_issue}" in prompt
        assert "- 사건 발생일: 2024-03-15" in prompt
        assert "- 관련 금액: 5천만원" in prompt
        assert f"- 해결 시도: {NOT_SPECIFIED}" in prompt
        assert f"- 추가 정보: {NO_ADDITIONAL_INFO}" in prompt

    def test_prompt_requests_json_schema(self, sample_issue):
        prompt = build_advice_prompt(sample_issue, {})

        assert "JSON 형식으로만 응답" in prompt
        for key in ('"category"', '"summary"', '"legalAnalysis"', '"recommendations"', '"nextSteps"'):
            assert key in prompt

    def test_prompt_is_deterministic(self, sample_issue, sample_answers):
        assert build_advice_prompt(sample_issue, sample_answers) == build_advice_prompt(sample_issue, sample_answers)

    def test_braces_in_issue_are_kept(self):
        prompt = build_advice_prompt("계약서에 {특약} 조항이 있습니다", {})

        assert "{특약}" in prompt


class TestExpertPrompt:

    def test_expert_prompt(self, sample_issue, sample_advice):
        prompt = build_expert_advice_prompt(sample_issue, sample_advice)

        assert sample_issue in prompt
        assert "- 법률 카테고리: 부동산/임대차" in prompt
        assert "관련 법률 조항: 주택임대차보호법 제3조" in prompt
        assert "법적 대응 방안: 내용증명 발송" in prompt
        assert "성공 가능성과 위험 요소" in prompt
        assert "구체적인 행동 계획" in prompt
        assert "인사말" in prompt
        assert "(**)" in prompt
        assert "JSON" not in prompt
