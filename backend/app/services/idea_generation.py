"""Idea generation orchestrator.

Flow (generate):
  1. Validate the raw payload (all errors collected)
  2. Build GenerationRequest, merge profile preferences
  3. Render system + user prompts
  4. Call the model client (single attempt)
  5. Format raw text → BusinessIdea records
  6. Compute quality metrics, assemble the response envelope

Flow (refine):
  1. Render the refinement prompt for an existing idea
  2. Call the model client, format exactly one record (no placeholders)
  3. Merge onto the original idea, diff the changed fields

Everything is synchronous and call-local; nothing is shared between calls.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from ..agents.idea_generator.formatter import UNSPECIFIED_VALUES, FormatOptions, format_business_ideas
from ..agents.idea_generator.prompts import build_refine_prompt, build_system_prompt, build_user_prompt
from ..config import Settings
from ..constants import DEFAULT_CURRENCY, DEFAULT_IDEA_COUNT, DEFAULT_INDUSTRY, DEFAULT_USER_ID
from ..schemas.generate_schema import (
    GenerateIdeasResponse,
    GenerationMetadata,
    GenerationRequest,
    QualityMetrics,
)
from ..schemas.idea_schema import BusinessIdea, UserProfile
from ..schemas.refinement_schema import (
    RefinementChange,
    RefinementMetadata,
    RefinementRequest,
    RefinementResponse,
)
from .model_client import ModelClient
from .request_validator import ValidationOptions, validate_generate_ideas_request

logger = logging.getLogger(__name__)

# Fields compared when building a refinement change list, in report order.
_REFINED_FIELDS = (
    "title",
    "description",
    "problem",
    "solution",
    "target_market",
    "business_model",
    "idea_type",
    "initial_investment",
    "estimated_revenue",
    "ai_score",
)


class IdeaRequestInvalid(Exception):
    """Raised when a generate-ideas payload fails validation."""

    def __init__(self, errors: Sequence[str]) -> None:
        super().__init__("Validation failed")
        self.errors = list(errors)


# ── Pure helpers ─────────────────────────────────────────────────────────

def merge_profile_preferences(
    request: GenerationRequest,
    profile: Optional[UserProfile],
) -> GenerationRequest:
    """Fill industries/idea types from the profile when the request has none."""
    if profile is None or profile.preferences is None:
        return request

    prefs = profile.preferences
    return request.model_copy(
        update={
            "industries": request.industries if request.industries is not None else prefs.industry_interests,
            "idea_types": request.idea_types if request.idea_types is not None else prefs.preferred_idea_types,
        }
    )


def build_format_options(request: GenerationRequest, profile: Optional[UserProfile]) -> FormatOptions:
    options = FormatOptions(
        user_id=profile.id if profile else DEFAULT_USER_ID,
        default_industry=request.industries[0] if request.industries else DEFAULT_INDUSTRY,
        default_currency=(
            request.budget_range.currency
            if request.budget_range and request.budget_range.currency
            else DEFAULT_CURRENCY
        ),
    )
    if request.idea_types:
        options.default_idea_type = request.idea_types[0]
    if request.business_models:
        options.default_business_model = request.business_models[0]
    return options


def compute_quality_metrics(ideas: List[BusinessIdea], confidence: float) -> Optional[QualityMetrics]:
    """Mean/min/max of idea scores; a missing score counts as 0."""
    if not ideas:
        return None

    scores = [idea.ai_score if idea.ai_score is not None else 0 for idea in ideas]
    return QualityMetrics(
        average_score=sum(scores) / len(scores),
        min_score=min(scores),
        max_score=max(scores),
        confidence=confidence,
    )


def new_request_id() -> str:
    return f"req-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Enum):
        return value.value
    return value


def diff_ideas(original: BusinessIdea, refined: BusinessIdea, reason: Optional[str] = None) -> List[RefinementChange]:
    changes: List[RefinementChange] = []
    for name in _REFINED_FIELDS:
        old, new = getattr(original, name), getattr(refined, name)
        if old != new:
            changes.append(
                RefinementChange(field=name, old_value=_plain(old), new_value=_plain(new), reason=reason)
            )
    return changes


def _pick(new: Any, old: Any) -> Any:
    """Prefer the refined value unless it is missing or a formatter default."""
    if new is None or (isinstance(new, str) and new in UNSPECIFIED_VALUES):
        return old
    return new


# ── Service ──────────────────────────────────────────────────────────────

class IdeaGenerationService:
    def __init__(self, settings: Settings, client: ModelClient) -> None:
        self.settings = settings
        self.client = client

    def _to_request(
        self,
        payload: Union[GenerationRequest, Any],
        options: Optional[ValidationOptions],
    ) -> GenerationRequest:
        if isinstance(payload, GenerationRequest):
            return payload

        result = validate_generate_ideas_request(payload, options)
        if not result.valid:
            logger.info("[GENERATE] Validation failed with %d error(s)", len(result.errors))
            raise IdeaRequestInvalid(result.errors)

        try:
            return GenerationRequest.model_validate(payload)
        except ValidationError as exc:
            raise IdeaRequestInvalid([err["msg"] for err in exc.errors()]) from exc

    def generate(
        self,
        payload: Union[GenerationRequest, Any],
        profile: Optional[UserProfile] = None,
        options: Optional[ValidationOptions] = None,
    ) -> GenerateIdeasResponse:
        """Run one generation call end to end.

        Raises
        ------
        IdeaRequestInvalid
            Payload failed validation.
        ParseError
            Model output could not be recovered (effectively unreachable
            while placeholders are enabled).
        ModelClientError
            The model provider call failed.
        """
        start = time.perf_counter()
        request = merge_profile_preferences(self._to_request(payload, options), profile)
        count = request.count or DEFAULT_IDEA_COUNT
        logger.info("[GENERATE] Generating %d idea(s) with %s", count, self.client.model_name)

        raw_text = self.client.complete(build_system_prompt(), build_user_prompt(request))
        logger.info("[GENERATE] Raw output length: %d chars", len(raw_text or ""))

        ideas = format_business_ideas(raw_text, count, build_format_options(request, profile))

        elapsed_ms = (time.perf_counter() - start) * 1000
        response = GenerateIdeasResponse(
            ideas=ideas,
            metadata=GenerationMetadata(
                count=len(ideas),
                generation_time_ms=round(elapsed_ms, 2),
                model=self.client.model_name,
                tokens_used=None,
                quality_metrics=compute_quality_metrics(ideas, self.settings.confidence),
            ),
            request_id=new_request_id(),
            generated_at=datetime.now(timezone.utc),
        )
        logger.info("[GENERATE] Done: %d idea(s) in %.0fms", len(ideas), elapsed_ms)
        return response

    def refine(self, idea: BusinessIdea, refinement: RefinementRequest) -> RefinementResponse:
        """Refine an existing idea into a new record plus a change list."""
        start = time.perf_counter()
        logger.info("[REFINE] Refining idea %s", idea.id)

        raw_text = self.client.complete(build_system_prompt(), build_refine_prompt(idea, refinement))
        options = FormatOptions(
            user_id=idea.user_id,
            default_industry=idea.industry,
            default_idea_type=idea.idea_type,
            default_business_model=idea.business_model,
            default_currency=(
                idea.initial_investment.currency if idea.initial_investment else DEFAULT_CURRENCY
            ),
            allow_placeholders=False,
        )
        parsed = format_business_ideas(raw_text, 1, options)[0]

        now = datetime.now(timezone.utc)
        refined = idea.model_copy(
            update={
                "id": parsed.id if refinement.create_new_version else idea.id,
                "title": _pick(parsed.title, idea.title),
                "description": _pick(parsed.description, idea.description),
                "problem": _pick(parsed.problem, idea.problem),
                "solution": _pick(parsed.solution, idea.solution),
                "target_market": _pick(parsed.target_market, idea.target_market),
                "business_model": parsed.business_model,
                "idea_type": parsed.idea_type,
                "initial_investment": _pick(parsed.initial_investment, idea.initial_investment),
                "estimated_revenue": _pick(parsed.estimated_revenue, idea.estimated_revenue),
                "ai_score": _pick(parsed.ai_score, idea.ai_score),
                "created_at": now if refinement.create_new_version else idea.created_at,
                "updated_at": now,
            }
        )

        changes = diff_ideas(idea, refined, reason=refinement.refinement_prompt)
        if changes:
            summary = f"{len(changes)} field(s) changed: {', '.join(c.field for c in changes)}"
        else:
            summary = "No changes were made."

        improvement = None
        if idea.ai_score is not None and refined.ai_score is not None:
            improvement = refined.ai_score - idea.ai_score

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("[REFINE] Done: %s", summary)
        return RefinementResponse(
            idea=refined,
            changes_summary=summary,
            changes=changes,
            metadata=RefinementMetadata(
                refinement_time_ms=round(elapsed_ms, 2),
                model=self.client.model_name,
                change_count=len(changes),
                improvement_score=improvement,
            ),
            request_id=new_request_id(),
            refined_at=now,
        )
