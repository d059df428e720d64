import google.generativeai as genai
from typing import Any, Dict, Mapping, Optional
import os

from advice_errors import ConfigurationError, ProviderError
from advice_models import StructuredAdvice
from advice_request import build_advice_prompt, build_expert_advice_prompt
from response_normalizer import normalize_response

DEFAULT_MODEL_NAME = 'gemini-1.5-flash'
PLACEHOLDER_API_KEY = 'your_api_key_here'
MIN_API_KEY_LENGTH = 10

ANALYSIS_GENERATION_CONFIG = {
    'temperature': 0.2,
    'top_k': 40,
    'top_p': 0.95,
    'max_output_tokens': 4096,
}

EXPERT_GENERATION_CONFIG = {
    'temperature': 0.4,
    'top_k': 40,
    'top_p': 0.95,
    'max_output_tokens': 4096,
}

EXPERT_ADVICE_UNAVAILABLE = "전문 변호사 조언을 생성하는 중 오류가 발생했습니다."


def validate_api_key(api_key: Optional[str]) -> str:
    """Return the trimmed key or raise ConfigurationError"""
    if not api_key:
        raise ConfigurationError("Gemini API 키가 설정되지 않았습니다.")

    api_key = api_key.strip()
    if api_key == PLACEHOLDER_API_KEY or len(api_key) < MIN_API_KEY_LENGTH:
        raise ConfigurationError("유효한 Gemini API 키를 설정해주세요.")

    return api_key


def extract_response_text(response: Any) -> str:
    """Text of the first candidate's first part, or '' when absent"""
    try:
        candidates = getattr(response, 'candidates', None) or []
        if not candidates:
            return ""
        content = getattr(candidates[0], 'content', None)
        parts = getattr(content, 'parts', None) or []
        if not parts:
            return ""
        return getattr(parts[0], 'text', "") or ""
    except (AttributeError, IndexError, TypeError):
        return ""


class AdviceGeminiClient:
    def __init__(self, api_key: Optional[str], model: Any = None, model_name: Optional[str] = None):
        self.api_key = validate_api_key(api_key)
        self.model_name = model_name or os.getenv('GEMINI_MODEL', DEFAULT_MODEL_NAME)

        if model is None:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(self.model_name)
        self.model = model

    def fetch_completion(self, prompt: str, generation_config: Optional[Dict[str, Any]] = None) -> str:
        """
        Send one prompt to Gemini and return the generated text.

        No retry and no timeout; a failed call surfaces immediately.

        Raises:
            ProviderError: the request did not succeed
        """
        try:
            response = self.model.generate_content(
                prompt,
                generation_config=generation_config or ANALYSIS_GENERATION_CONFIG
            )
        except Exception as e:
            status_code = getattr(e, 'code', None)
            print(f"❌ Gemini request failed: {e}")
            raise ProviderError(f"API 요청 실패: {e}", status_code=status_code) from e

        return extract_response_text(response)

    def generate_legal_advice(self, legal_issue: str, answers: Mapping[str, str]) -> StructuredAdvice:
        """Analyze the issue and return normalized structured advice"""
        prompt = build_advice_prompt(legal_issue, answers)
        raw_text = self.fetch_completion(prompt, ANALYSIS_GENERATION_CONFIG)
        return normalize_response(raw_text, legal_issue)

    def generate_expert_advice(self, legal_issue: str, advice: StructuredAdvice) -> str:
        """Ask for free-form expert advice on top of an existing analysis"""
        prompt = build_expert_advice_prompt(legal_issue, advice)
        text = self.fetch_completion(prompt, EXPERT_GENERATION_CONFIG)
        return text or EXPERT_ADVICE_UNAVAILABLE


def create_client_from_env(model: Any = None) -> AdviceGeminiClient:
    """Build a client from GEMINI_API_KEY (raises ConfigurationError)"""
    return AdviceGeminiClient(os.getenv('GEMINI_API_KEY'), model=model)
