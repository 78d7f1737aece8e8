"""Request/response contracts for POST /generate-ideas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .idea_schema import BusinessIdea, BusinessModel, CamelModel, ExperienceLevel, IdeaType


def _lower_if_str(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


class BudgetRange(CamelModel):
    """Budget range for the initial investment."""

    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(
        default=None,
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code",
    )

    @model_validator(mode="after")
    def check_order(self) -> "BudgetRange":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("Budget minimum cannot be greater than budget maximum.")
        return self


class GenerationRequest(CamelModel):
    """User preferences for a generation run.

    Built only from payloads that already passed
    ``validate_generate_ideas_request``; the constraints below mirror the
    validator so the model can also be constructed directly in code.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    prompt: str = Field(
        ...,
        min_length=3,
        max_length=1000,
        description="What kind of business ideas the user is looking for",
        examples=["Sustainable packaging for small online retailers"],
    )
    count: Optional[int] = Field(default=None, ge=1, le=10)
    industries: Optional[List[str]] = Field(default=None, max_length=20)
    idea_types: Optional[List[IdeaType]] = None
    business_models: Optional[List[BusinessModel]] = None
    target_market: Optional[str] = Field(default=None, max_length=500)
    budget_range: Optional[BudgetRange] = None
    experience_level: Optional[ExperienceLevel] = None
    geographic_focus: Optional[str] = Field(default=None, max_length=200)
    additional_context: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("idea_types", "business_models", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_lower_if_str(item) for item in v]
        return v

    @field_validator("experience_level", mode="before")
    @classmethod
    def normalize_experience(cls, v: Any) -> Any:
        return _lower_if_str(v)


class QualityMetrics(CamelModel):
    average_score: float
    min_score: float
    max_score: float
    confidence: float = Field(..., ge=0.0, le=1.0)


class GenerationMetadata(CamelModel):
    count: int = Field(..., ge=0)
    generation_time_ms: float = Field(..., ge=0)
    model: Optional[str] = None
    tokens_used: Optional[int] = None
    quality_metrics: Optional[QualityMetrics] = None


class GenerateIdeasResponse(CamelModel):
    """Envelope returned by POST /generate-ideas."""

    ideas: List[BusinessIdea]
    metadata: GenerationMetadata
    request_id: str
    generated_at: datetime


class ErrorResponse(CamelModel):
    error: str
    details: Optional[List[str]] = None
