"""
Advice Request Builder: prompt assembly for the Gemini provider.

Two prompts are produced:
- the analysis prompt, which asks for a single JSON object (RESPONSE_SCHEMA)
- the expert advice prompt, which asks for free prose on five fixed topics

Missing answers are replaced by placeholder text. Nothing downstream is told
which answers were user supplied; the placeholders are the only signal.
"""

import json
from typing import Any, Dict, List, Mapping

from advice_models import StructuredAdvice

# Key of the primary issue inside an answer mapping
MAIN_ISSUE_KEY = "mainIssue"

NOT_SPECIFIED = "명시되지 않음"
NO_ADDITIONAL_INFO = "추가 정보 없음"

# Clarifying questions shown on the analyze page
QUESTIONS: List[Dict[str, Any]] = [
    {
        'id': 'incidentDate',
        'text': '사건이 발생한 날짜는 언제인가요?',
        'required': True,
        'type': 'date'
    },
    {
        'id': 'amount',
        'text': '관련된 금액이 있다면 얼마인가요? (예: 계약금, 손해액 등)',
        'required': False,
        'type': 'text'
    },
    {
        'id': 'attempts',
        'text': '현재까지 어떤 해결 시도를 하셨나요?',
        'required': False,
        'type': 'textarea'
    },
    {
        'id': 'desiredOutcome',
        'text': '원하시는 해결 방향이나 결과는 무엇인가요?',
        'required': False,
        'type': 'textarea'
    },
    {
        'id': 'additionalInfo',
        'text': '추가로 알려주실 정보가 있으신가요?',
        'required': False,
        'type': 'textarea'
    }
]

# Field defaults, in prompt order
ANSWER_DEFAULTS: Dict[str, str] = {
    'incidentDate': NOT_SPECIFIED,
    'amount': NOT_SPECIFIED,
    'attempts': NOT_SPECIFIED,
    'desiredOutcome': NOT_SPECIFIED,
    'additionalInfo': NO_ADDITIONAL_INFO,
}

# Example object embedded in the analysis prompt
RESPONSE_SCHEMA: Dict[str, Any] = {
    "category": "법률 카테고리",
    "summary": "사례 요약",
    "legalAnalysis": [
        {"title": "관련 법률 조항", "content": "법률 조항 설명"},
        {"title": "관련 판례 및 사례", "content": "판례 및 사례 설명"}
    ],
    "recommendations": [
        {"title": "법적 대응 방안", "content": "대응 방안 설명"},
        {"title": "필요 서류 및 증거", "content": "필요 서류 설명"},
        {"title": "전문가 상담 필요성", "content": "전문가 상담 필요성 설명"}
    ],
    "nextSteps": "권장 다음 단계"
}


ADVICE_PROMPT_TEMPLATE = """당신은 전문 법률 조언 시스템입니다. 아래 사용자가 제공한 법률 문제와 관련 정보를 분석하고,
법률적 조언과 해결책을 제시해주세요.

### 사용자 제공 정보:
- 주요 법률 문제: {legal_issue}
- 사건 발생일: {incidentDate}
- 관련 금액: {amount}
- 해결 시도: {attempts}
- 희망 결과: {desiredOutcome}
- 추가 정보: {additionalInfo}

### 중요 지시사항:
반드시 다음 JSON 형식으로만 응답해주세요. 다른 어떤 형식의 응답이나 설명도 포함하지 마세요.
어떤 경우에도 응답은 항상 아래 형식의 유효한 JSON 객체여야 합니다.

### 요청사항:
1. 해당 사례가 어떤 법률 카테고리에 해당하는지 판단해주세요 (예: 계약 관련 분쟁, 부동산/임대차, 노동/근로 관계, 상속/유언 등).
2. 사용자가 제공한 정보를 요약해주세요.
3. 관련 법률 조항과 판례를 분석해주세요.
4. 법적 대응 방안, 필요 서류 및 증거, 전문가 상담 필요성에 대한 구체적인 조언을 제공해주세요.
5. 다음 단계에 대한 추천 사항을 제시해주세요.

### 응답 형식:
{schema}
"""


EXPERT_PROMPT_TEMPLATE = """당신은 법률 전문가 AI입니다. 아래 법률 문제와 이미 수행된 법률 분석을 검토한 후,
더 전문적인 법률 조언을 제공해주세요.

### 의뢰인의 법률 문제:
{legal_issue}

### 이미 제공된 법률 분석 결과:
- 법률 카테고리: {category}
- 사례 요약: {summary}

- 법률 조항 분석: {legal_analysis}

- 권장 대응 방안: {recommendations}

- 권장 다음 단계: {next_steps}

### 요청사항:
위 정보를 검토하시고, 다음 내용을 포함하는 전문적인 법률 조언을 제공해주세요:

1. 이 사례의 성공 가능성과 위험 요소
2. 법원이나 상대방이 어떻게 반응할지에 대한 현실적 예측
3. 전략적 접근법 (협상, 소송, 대안적 분쟁 해결 등)
4. 의뢰인이 놓치고 있을 수 있는 중요한 법적 고려사항
5. 최적의 결과를 얻기 위한 구체적인 행동 계획

중요한 지침:
- 어떤 형태의 도입부나 인사말도 포함하지 마세요. 바로 조언 내용으로 시작하세요.
- 별표(**)나 기타 특수 포맷팅 문자를 사용하지 마세요.
- 각 주제별로 소제목을 사용하되, 번호 매김이나 글머리 기호를 사용하세요.
- 실용적이고 이해하기 쉬운 언어로 설명해주세요.
- 각 섹션은 명확히 구분되어야 하지만 특수 문자 없이 자연스럽게 표현하세요.
"""


def extract_answer_fields(answers: Mapping[str, str]) -> Dict[str, str]:
    """Pick the recognized answers, substituting placeholders for missing ones"""
    return {
        key: (answers.get(key) or default)
        for key, default in ANSWER_DEFAULTS.items()
    }


def build_advice_prompt(legal_issue: str, answers: Mapping[str, str]) -> str:
    """
    Build the analysis prompt.

    The issue is embedded as given; callers validate it is non-empty.
    """
    fields = extract_answer_fields(answers)
    schema = json.dumps(RESPONSE_SCHEMA, ensure_ascii=False, indent=2)
    return ADVICE_PROMPT_TEMPLATE.format(legal_issue=legal_issue, schema=schema, **fields)


def _format_items(items) -> str:
    return "\n".join(f"{item.title}: {item.content}" for item in items)


def build_expert_advice_prompt(legal_issue: str, advice: StructuredAdvice) -> str:
    """Build the follow-up prompt asking for free-form expert advice"""
    return EXPERT_PROMPT_TEMPLATE.format(
        legal_issue=legal_issue,
        category=advice.category,
        summary=advice.summary,
        legal_analysis=_format_items(advice.legalAnalysis),
        recommendations=_format_items(advice.recommendations),
        next_steps=advice.nextSteps,
    )


def missing_required_answers(answers: Mapping[str, str], selected: Mapping[str, bool]) -> List[str]:
    """Ids of required, selected questions that have no answer yet"""
    return [
        q['id'] for q in QUESTIONS
        if q['required'] and selected.get(q['id'], True) and not (answers.get(q['id']) or '').strip()
    ]
