"""
Data models for structured legal advice.

StructuredAdvice is the only shape the results view ever receives. Every field
is required and non-empty; defaults are filled in by the response normalizer
before a model is built, so each instance is validated exactly once.
"""

from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)


# Defaults used when the provider JSON omits a field
DEFAULT_CATEGORY = "법률 자문"
DEFAULT_SUMMARY = "요약 정보가 제공되지 않았습니다."
DEFAULT_ANALYSIS_TITLE = "법률 분석"
DEFAULT_ANALYSIS_CONTENT = "법률 분석 정보가 제공되지 않았습니다."
DEFAULT_RECOMMENDATION_TITLE = "대응 방안"
DEFAULT_RECOMMENDATION_CONTENT = "대응 방안 정보가 제공되지 않았습니다."
DEFAULT_NEXT_STEPS = "다음 단계 정보가 제공되지 않았습니다."


class TitledItem(BaseModel):
    """A titled entry of the legal analysis or recommendations"""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: str = ""
    content: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_text(cls, data: Any) -> Any:
        # Models sometimes answer with plain strings instead of objects
        if isinstance(data, str):
            return {"title": "", "content": data}
        return data

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class StructuredAdvice(BaseModel):
    """Normalized, always complete legal advice"""

    category: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    legalAnalysis: List[TitledItem] = Field(min_length=1)
    recommendations: List[TitledItem] = Field(min_length=1)
    nextSteps: str = Field(min_length=1)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class AdviceSection(BaseModel):
    """A titled block of expert advice prose; title may be empty"""

    title: str = ""
    content: List[str] = Field(default_factory=list)


class ProviderAdvicePayload(BaseModel):
    """
    Raw JSON object returned by the provider.

    Every field is optional here. Numbers are taken as text, and a field that
    still does not fit its type is dropped on its own so it gets the default
    while the other fields are kept. Unusable entries of the item lists are
    skipped.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    category: Optional[str] = None
    summary: Optional[str] = None
    legalAnalysis: Optional[List[TitledItem]] = None
    recommendations: Optional[List[TitledItem]] = None
    nextSteps: Optional[str] = None

    @field_validator("category", "summary", "nextSteps", mode="wrap")
    @classmethod
    def _drop_bad_text(cls, v: Any, handler: ValidatorFunctionWrapHandler) -> Optional[str]:
        try:
            return handler(v)
        except ValidationError:
            return None

    @field_validator("legalAnalysis", "recommendations", mode="wrap")
    @classmethod
    def _keep_valid_items(cls, v: Any, handler: ValidatorFunctionWrapHandler) -> Optional[List[TitledItem]]:
        try:
            return handler(v)
        except ValidationError:
            if not isinstance(v, list):
                return None

        items = []
        for entry in v:
            try:
                items.append(TitledItem.model_validate(entry))
            except ValidationError:
                continue
        return items or None

    def to_advice(self) -> StructuredAdvice:
        """Fill every missing or empty field with its documented default"""
        return StructuredAdvice(
            category=self.category or DEFAULT_CATEGORY,
            summary=self.summary or DEFAULT_SUMMARY,
            legalAnalysis=self.legalAnalysis or [
                TitledItem(title=DEFAULT_ANALYSIS_TITLE, content=DEFAULT_ANALYSIS_CONTENT)
            ],
            recommendations=self.recommendations or [
                TitledItem(title=DEFAULT_RECOMMENDATION_TITLE, content=DEFAULT_RECOMMENDATION_CONTENT)
            ],
            nextSteps=self.nextSteps or DEFAULT_NEXT_STEPS,
        )
