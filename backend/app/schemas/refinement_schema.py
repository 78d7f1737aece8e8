"""Request/response contracts for POST /refine-idea."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import Field, field_validator

from .idea_schema import BusinessIdea, CamelModel


class RefinementFocusArea(str, Enum):
    """Areas of an idea the user can ask to improve."""

    TITLE = "title"
    DESCRIPTION = "description"
    PROBLEM_STATEMENT = "problem"
    SOLUTION = "solution"
    TARGET_MARKET = "target_market"
    BUSINESS_MODEL = "business_model"
    REVENUE_STREAMS = "revenue_streams"
    COMPETITIVE_ADVANTAGE = "competitive_advantage"
    MARKETING_STRATEGY = "marketing_strategy"
    PRICING = "pricing"
    FULL_REDESIGN = "full_redesign"


class RefinementRequest(CamelModel):
    idea_id: str
    refinement_prompt: str = Field(..., min_length=3, max_length=1000)
    focus_areas: Optional[List[RefinementFocusArea]] = None
    create_new_version: bool = Field(
        default=False,
        description="Keep the original idea intact and return a new version",
    )
    additional_context: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("refinement_prompt")
    @classmethod
    def strip_prompt(cls, v: str) -> str:
        stripped = v.strip()
        if len(stripped) < 3:
            raise ValueError("Refinement prompt must be at least 3 characters.")
        return stripped


class RefineIdeaPayload(CamelModel):
    """Body of POST /refine-idea; the idea travels with the request."""

    idea: BusinessIdea
    refinement: RefinementRequest


class RefinementChange(CamelModel):
    field: str
    old_value: Any = None
    new_value: Any = None
    reason: Optional[str] = None


class RefinementMetadata(CamelModel):
    refinement_time_ms: float = Field(..., ge=0)
    model: Optional[str] = None
    tokens_used: Optional[int] = None
    change_count: int = Field(..., ge=0)
    improvement_score: Optional[float] = None


class RefinementResponse(CamelModel):
    idea: BusinessIdea
    changes_summary: str
    changes: List[RefinementChange]
    metadata: RefinementMetadata
    request_id: str
    refined_at: datetime
