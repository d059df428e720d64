"""
Response Normalizer: raw provider text -> StructuredAdvice.

The provider is told to answer with a JSON object only, but that is not
guaranteed. This module never raises: well formed JSON is taken field by
field, anything else is synthesized from the text itself.
"""

import json
import re
from typing import Optional

from pydantic import ValidationError

from advice_errors import MalformedResponse
from advice_models import ProviderAdvicePayload, StructuredAdvice, TitledItem
from segmentation import split_blocks

FENCED_BLOCK_PATTERN = re.compile(r'```(?:json)?\s*\n(.*?)\n```', re.DOTALL)
BRACE_SPAN_PATTERN = re.compile(r'(\{.*\})', re.DOTALL)

# Checked in order, first hit wins
CATEGORY_KEYWORDS = [
    ("계약 관련 분쟁", ["계약", "분쟁"]),
    ("부동산/임대차", ["부동산", "임대", "전세"]),
    ("노동/근로 관계", ["노동", "근로", "임금"]),
    ("상속/유언", ["상속", "유언"]),
]
GENERIC_CATEGORY = "법률 자문"

ERROR_MARKERS = ["죄송합니다", "오류"]
SHORT_TEXT_THRESHOLD = 100

# Synthesized-structure defaults
SYNTH_ANALYSIS_TITLE = "법률 분석"
SYNTH_ANALYSIS_DEFAULT = "상세한 법률 분석을 제공할 수 없습니다."
SYNTH_RECOMMENDATION_TITLE = "권장 대응 방안"
SYNTH_RECOMMENDATION_DEFAULT = "현재 시스템은 귀하의 상황에 대한 구체적인 대응 방안을 제시할 수 없습니다."
SYNTH_NEXT_STEPS_DEFAULT = "추가적인 법률 자문을 위해 변호사와 상담하는 것을 권장합니다."


def extract_json_candidate(raw_text: str) -> str:
    """Fenced code block, else the outermost brace span, else the whole text"""
    fenced = FENCED_BLOCK_PATTERN.search(raw_text)
    if fenced and fenced.group(1):
        return fenced.group(1).strip()

    braces = BRACE_SPAN_PATTERN.search(raw_text)
    if braces:
        return braces.group(0).strip()

    return raw_text.strip()


def looks_like_json(candidate: str) -> bool:
    stripped = candidate.strip()
    return stripped.startswith('{') and stripped.endswith('}')


def parse_advice_json(candidate: str) -> StructuredAdvice:
    """
    Parse and validate a JSON candidate.

    Raises:
        MalformedResponse: not JSON, not an object, or wrong field types
    """
    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        raise MalformedResponse(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(parsed).__name__}")

    try:
        payload = ProviderAdvicePayload.model_validate(parsed)
    except ValidationError as e:
        raise MalformedResponse(f"Unexpected advice fields: {e.error_count()} error(s)") from e

    return payload.to_advice()


def infer_category(text: str) -> str:
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return GENERIC_CATEGORY


def is_error_shaped(text: str) -> bool:
    """Apology/error text, or too short to be an analysis"""
    return any(marker in text for marker in ERROR_MARKERS) or len(text) < SHORT_TEXT_THRESHOLD


def could_not_analyze(legal_issue: str) -> StructuredAdvice:
    """Fixed guidance shown when the provider produced no usable analysis"""
    return StructuredAdvice(
        category=GENERIC_CATEGORY,
        summary=f"입력하신 법률 문제({legal_issue})에 대한 분석을 제공할 수 없습니다.",
        legalAnalysis=[
            TitledItem(
                title="처리 오류",
                content="현재 시스템이 법률 분석을 생성하는 데 어려움이 있습니다. 다시 시도해주세요."
            )
        ],
        recommendations=[
            TitledItem(
                title="권장 사항",
                content="질문을 더 구체적으로 작성하거나, 법률 문제의 핵심 사항만 간략하게 설명해 보세요."
            )
        ],
        nextSteps="문제가 지속되면 직접 법률 전문가에게 상담하시는 것을 권장합니다."
    )


def synthesize_from_text(text: str, legal_issue: str) -> StructuredAdvice:
    """
    Build StructuredAdvice from prose.

    Paragraph 0 is the summary, 1 the analysis, 2 the recommendation and
    3 the next steps.
    """
    category = infer_category(text)

    if is_error_shaped(text):
        return could_not_analyze(legal_issue)

    paragraphs = split_blocks(text)

    def paragraph(index: int) -> Optional[str]:
        return paragraphs[index] if len(paragraphs) > index else None

    return StructuredAdvice(
        category=category,
        summary=paragraph(0) or f"귀하의 법률 문제({legal_issue})에 대한 분석입니다.",
        legalAnalysis=[
            TitledItem(title=SYNTH_ANALYSIS_TITLE, content=paragraph(1) or SYNTH_ANALYSIS_DEFAULT)
        ],
        recommendations=[
            TitledItem(title=SYNTH_RECOMMENDATION_TITLE, content=paragraph(2) or SYNTH_RECOMMENDATION_DEFAULT)
        ],
        nextSteps=paragraph(3) or SYNTH_NEXT_STEPS_DEFAULT
    )


def normalize_response(raw_text: Optional[str], legal_issue: str) -> StructuredAdvice:
    """
    Turn raw provider output into a complete StructuredAdvice.

    Args:
        raw_text: text returned by the provider (may be empty)
        legal_issue: the user's issue, quoted in fallback summaries

    Returns:
        StructuredAdvice with every field filled
    """
    raw_text = raw_text or ""
    candidate = extract_json_candidate(raw_text)

    if not looks_like_json(candidate):
        print("⚠️  Provider answered with plain text, synthesizing structure")
        return synthesize_from_text(candidate, legal_issue)

    try:
        return parse_advice_json(candidate)
    except MalformedResponse as e:
        print(f"⚠️  Could not use provider JSON ({e}), synthesizing structure")
        return synthesize_from_text(raw_text, legal_issue)
