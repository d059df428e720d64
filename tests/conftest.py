"""
Pytest configuration and shared fixtures for the legal advice assistant tests
"""

import json
import os
import sys
from unittest.mock import Mock

import pytest

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from advice_models import StructuredAdvice, TitledItem  # noqa: E402

TEST_API_KEY = "AIzaSyTEST-key-0123456789"

SAMPLE_ISSUE = "전세 계약이 끝났는데 집주인이 보증금 5천만원을 돌려주지 않고 있습니다."

SAMPLE_ANSWERS = {
    'mainIssue': SAMPLE_ISSUE,
    'incidentDate': '2024-03-15',
    'amount': '5천만원',
    'desiredOutcome': '보증금 전액 반환',
}

SAMPLE_ADVICE_JSON = {
    "category": "부동산/임대차",
    "summary": "임대차 계약 종료 후 임대인이 보증금을 반환하지 않는 사례입니다.",
    "legalAnalysis": [
        {"title": "관련 법률 조항", "content": "주택임대차보호법 제3조의3에 따라 임차권등기명령을 신청할 수 있습니다."},
        {"title": "관련 판례 및 사례", "content": "대법원 2018다12345 판결은 보증금 반환 의무를 인정하였습니다."}
    ],
    "recommendations": [
        {"title": "법적 대응 방안", "content": "1. 내용증명 발송 2. 임차권등기명령 신청 3. 보증금 반환 소송 제기"},
        {"title": "필요 서류 및 증거", "content": "임대차 계약서, 보증금 이체 내역, 내용증명 사본"},
        {"title": "전문가 상담 필요성", "content": "소송 전 변호사 상담을 권장합니다."}
    ],
    "nextSteps": "1. 내용증명을 발송하세요. 2. 임차권등기명령을 신청하세요."
}

SAMPLE_EXPERT_ADVICE = """성공 가능성: 높음
계약서와 이체 내역이 있어 보증금 반환 청구가 인정될 가능성이 큽니다.
다만 임대인의 재산 상태에 따라 실제 회수까지 시간이 걸릴 수 있습니다.
위험 요소
임대인이 파산할 경우 회수가 어려울 수 있습니다."""


@pytest.fixture
def sample_issue():
    """Provide sample issue text"""
    return SAMPLE_ISSUE


@pytest.fixture
def sample_answers():
    """Provide a copy of the sample answer mapping"""
    return dict(SAMPLE_ANSWERS)


@pytest.fixture
def sample_advice_json():
    """Provide the provider JSON payload as a string"""
    return json.dumps(SAMPLE_ADVICE_JSON, ensure_ascii=False)


@pytest.fixture
def sample_advice():
    """Provide a normalized StructuredAdvice"""
    return StructuredAdvice(
        category="부동산/임대차",
        summary="보증금 미반환 사례입니다.",
        legalAnalysis=[TitledItem(title="관련 법률 조항", content="주택임대차보호법 제3조")],
        recommendations=[TitledItem(title="법적 대응 방안", content="내용증명 발송")],
        nextSteps="변호사와 상담하세요."
    )


@pytest.fixture
def sample_expert_advice():
    return SAMPLE_EXPERT_ADVICE


def make_gemini_response(text):
    """Mimic the candidates[0].content.parts[0].text shape"""
    part = Mock(text=text)
    content = Mock(parts=[part])
    candidate = Mock(content=content)
    return Mock(candidates=[candidate])


@pytest.fixture
def mock_gemini_model(sample_advice_json):
    """Mock GenerativeModel returning the sample JSON"""
    mock_model = Mock()
    mock_model.generate_content = Mock(return_value=make_gemini_response(sample_advice_json))
    return mock_model


@pytest.fixture
def mock_gemini_client(sample_advice):
    """Mock AdviceGeminiClient for orchestrator tests"""
    mock_client = Mock()
    mock_client.generate_legal_advice = Mock(return_value=sample_advice)
    mock_client.generate_expert_advice = Mock(return_value=SAMPLE_EXPERT_ADVICE)
    return mock_client


@pytest.fixture
def sample_advice_payload():
    """Provide the provider JSON payload as a dict"""
    return json.loads(json.dumps(SAMPLE_ADVICE_JSON))


@pytest.fixture
def gemini_response():
    """Factory for fake generate_content responses"""
    return make_gemini_response
