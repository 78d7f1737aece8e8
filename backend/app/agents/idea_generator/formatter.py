"""Business Idea Formatter: raw model text → structured BusinessIdea records.

Strategy cascade (first non-empty result wins, results are never mixed):
  1. JSON: fenced or bare JSON, i.e. {"ideas": [...]}, {"data": [...]},
     a bare list, or a single object
  2. Structured text: markdown or numbered sections with "Keyword: value" lines
  3. Placeholders: exactly ``expected_count`` records previewing the raw text

Individual malformed elements or sections are logged and dropped; only the
top-level ``format_business_ideas`` raises, and only ``ParseError``.
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from ...constants import (
    BUSINESS_MODEL_TO_REVENUE_TYPE,
    DEFAULT_BUSINESS_MODEL,
    DEFAULT_CURRENCY,
    DEFAULT_IDEA_TYPE,
    DEFAULT_INDUSTRY,
    DEFAULT_INVESTMENT_MAX,
    DEFAULT_INVESTMENT_MIN,
    DEFAULT_INVESTMENT_TIMEFRAME,
    DEFAULT_USER_ID,
    MAX_SCORE,
    MIN_SCORE,
    PLACEHOLDER_PREVIEW_LENGTH,
)
from ...schemas.idea_schema import (
    BusinessIdea,
    BusinessModel,
    IdeaStatus,
    IdeaType,
    InvestmentRange,
    RevenueProjection,
    RevenueStream,
    RevenueType,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class ParseError(Exception):
    """Raised when model output cannot be recovered into any business idea."""


@dataclass
class FormatOptions:
    """Defaults substituted for fields the model output leaves out.

    ``allow_placeholders=False`` disables the placeholder strategy so that
    unrecoverable text raises ``ParseError`` instead of yielding stubs.
    """

    user_id: str = DEFAULT_USER_ID
    default_industry: str = DEFAULT_INDUSTRY
    default_idea_type: IdeaType = DEFAULT_IDEA_TYPE
    default_business_model: BusinessModel = DEFAULT_BUSINESS_MODEL
    default_currency: str = DEFAULT_CURRENCY
    allow_placeholders: bool = True


Strategy = Callable[[str, int, FormatOptions], List[BusinessIdea]]

# Filler text substituted for missing fields; callers merging parsed output
# onto an existing record treat these as "not provided".
UNSPECIFIED_VALUES = frozenset({
    "Description not provided",
    "Problem statement not provided",
    "Solution not provided",
    "General market",
    "Unique value proposition",
    "To be specified",
    "Unique value proposition to be refined",
})


# ── Scalar coercion helpers ──────────────────────────────────────────────

def coerce_enum(value: Any, enum_cls: Type[E], default: E) -> E:
    """Match ``value`` case-insensitively against ``enum_cls`` values.

    Anything that is not a matching string falls back to ``default``.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == normalized:
                return member
    return default


def _clamp_score(value: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def parse_score(value: Any) -> Optional[float]:
    """Parse a 0-100 quality score from a number or a numeric string.

    Out-of-range values are clamped; anything unparseable yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return _clamp_score(value)
    if isinstance(value, str):
        match = re.match(r"\s*([+-]?\d+)", value)
        if match:
            return _clamp_score(int(match.group(1)))
    return None


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.replace(",", "").strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def parse_tags(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [tag for tag in value if isinstance(tag, str)]
    return []


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the value of the first alias key present (non-null) in ``data``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _first_text(data: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


# ── Nested structures ────────────────────────────────────────────────────

def default_revenue_stream(business_model: BusinessModel) -> RevenueStream:
    """Primary revenue stream implied by a business model."""
    return RevenueStream(
        type=BUSINESS_MODEL_TO_REVENUE_TYPE.get(business_model, RevenueType.RECURRING_SUBSCRIPTION),
        description=f"Primary {business_model.value} revenue stream",
    )


def parse_revenue_streams(value: Any) -> List[RevenueStream]:
    if not isinstance(value, list):
        return []

    streams: List[RevenueStream] = []
    for stream in value:
        if not isinstance(stream, Mapping):
            continue
        streams.append(
            RevenueStream(
                type=coerce_enum(stream.get("type"), RevenueType, RevenueType.RECURRING_SUBSCRIPTION),
                description=_first_text(stream, "description") or "Revenue stream",
                estimated_monthly_revenue=_to_number(
                    _first(stream, "estimatedMonthlyRevenue", "estimated_monthly_revenue")
                ),
                estimated_annual_revenue=_to_number(
                    _first(stream, "estimatedAnnualRevenue", "estimated_annual_revenue")
                ),
            )
        )
    return streams


def parse_investment_range(value: Any, default_currency: str) -> Optional[InvestmentRange]:
    """Only a mapping yields a range; scalars and missing values yield None."""
    if not isinstance(value, Mapping):
        return None

    low = _to_number(value.get("min"))
    high = _to_number(value.get("max"))
    return InvestmentRange(
        min=low if low is not None else DEFAULT_INVESTMENT_MIN,
        max=high if high is not None else DEFAULT_INVESTMENT_MAX,
        currency=_first_text(value, "currency") or default_currency,
        timeframe=_first_text(value, "timeframe") or DEFAULT_INVESTMENT_TIMEFRAME,
    )


def parse_revenue_projection(value: Any, default_currency: str) -> Optional[RevenueProjection]:
    if not isinstance(value, Mapping):
        return None

    return RevenueProjection(
        year1=_to_number(value.get("year1")),
        year2=_to_number(value.get("year2")),
        year3=_to_number(value.get("year3")),
        year5=_to_number(value.get("year5")),
        currency=_first_text(value, "currency") or default_currency,
        notes=_first_text(value, "notes"),
    )


# ── Record construction ──────────────────────────────────────────────────

def _new_id(index: int) -> str:
    return f"idea-{int(time.time() * 1000)}-{index + 1}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def reconcile_idea(data: Any, index: int, options: FormatOptions) -> Optional[BusinessIdea]:
    """Map one loosely-typed JSON element onto a BusinessIdea.

    Each field is resolved independently from its accepted alias keys.
    Returns None when the element is not a mapping or carries no title.
    """
    if not isinstance(data, Mapping):
        return None

    title = _first_text(data, "title", "name", "heading")
    if not title:
        return None

    industry = _first_text(data, "industry") or options.default_industry
    business_model = coerce_enum(
        _first(data, "businessModel", "business_model"),
        BusinessModel,
        options.default_business_model,
    )
    idea_type = coerce_enum(
        _first(data, "ideaType", "idea_type", "type"),
        IdeaType,
        options.default_idea_type,
    )

    raw_tags = _first(data, "tags", "categories")
    now = _now()

    return BusinessIdea(
        id=_new_id(index),
        user_id=options.user_id,
        title=title,
        description=_first_text(data, "description", "overview") or "Description not provided",
        problem=(
            _first_text(data, "problem", "problemStatement", "problem_statement")
            or "Problem statement not provided"
        ),
        solution=_first_text(data, "solution") or "Solution not provided",
        target_market=(
            _first_text(data, "targetMarket", "target_market", "targetAudience", "target_audience")
            or "General market"
        ),
        business_model=business_model,
        revenue_streams=(
            parse_revenue_streams(_first(data, "revenueStreams", "revenue_streams"))
            or [default_revenue_stream(business_model)]
        ),
        competitive_advantage=(
            _first_text(data, "competitiveAdvantage", "competitive_advantage", "differentiation")
            or "Unique value proposition"
        ),
        initial_investment=parse_investment_range(
            _first(data, "initialInvestment", "initial_investment"), options.default_currency
        ),
        estimated_revenue=parse_revenue_projection(
            _first(data, "estimatedRevenue", "estimated_revenue"), options.default_currency
        ),
        industry=industry,
        tags=parse_tags(raw_tags if raw_tags is not None else industry),
        idea_type=idea_type,
        status=IdeaStatus.GENERATED,
        created_at=now,
        updated_at=now,
        ai_score=parse_score(
            _first(data, "aiScore", "ai_score", "score", "qualityScore", "quality_score")
        ),
    )


def _idea_from_fields(
    fields: Mapping[str, str],
    index: int,
    options: FormatOptions,
    *,
    competitive_advantage: str,
) -> BusinessIdea:
    """Build a record from extracted text fields plus option defaults."""
    business_model = options.default_business_model
    now = _now()
    return BusinessIdea(
        id=_new_id(index),
        user_id=options.user_id,
        title=fields["title"],
        description=fields["description"],
        problem=fields["problem"],
        solution=fields["solution"],
        target_market=fields["target_market"],
        business_model=business_model,
        revenue_streams=[default_revenue_stream(business_model)],
        competitive_advantage=competitive_advantage,
        industry=options.default_industry,
        tags=[options.default_industry],
        idea_type=options.default_idea_type,
        status=IdeaStatus.GENERATED,
        created_at=now,
        updated_at=now,
    )


# ── Strategy 1: JSON ─────────────────────────────────────────────────────

_FENCE_OPEN = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```/```json fence and its closing ``` marker."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_ideas(text: str, expected_count: int, options: FormatOptions) -> List[BusinessIdea]:
    parsed = json.loads(strip_code_fence(text))

    if isinstance(parsed, dict):
        items = parsed.get("ideas") or parsed.get("data") or [parsed]
    elif isinstance(parsed, list):
        items = parsed
    else:
        return []

    if not isinstance(items, list):
        return []

    ideas: List[BusinessIdea] = []
    for index, element in enumerate(items[:expected_count]):
        try:
            idea = reconcile_idea(element, index, options)
        except Exception as exc:
            logger.warning("[FORMATTER] Dropping JSON element %d: %s", index, exc)
            continue
        if idea is not None:
            ideas.append(idea)
    return ideas


# ── Strategy 2: structured text ──────────────────────────────────────────

_SECTION_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"##\s*Idea\s+\d+", re.IGNORECASE),  # ## Idea 1
    re.compile(r"##\s*\d+\."),                      # ## 1.
    re.compile(r"\n\n(?=\d+\.\s+[A-Z])"),           # blank line, then "1. Title"
    re.compile(r"\n(?:-{3,}|={3,})[ \t]*\n"),       # --- or === separator line
)
_BLANK_LINES = re.compile(r"\n\s*\n")

_FIELD_KEYWORDS: Sequence[Tuple[str, Sequence[str]]] = (
    ("title", ("title", "name")),
    ("description", ("description", "overview")),
    ("problem", ("problem", "problem statement")),
    ("solution", ("solution",)),
    ("target_market", ("target market", "target audience")),
)


def split_into_sections(text: str, expected_count: int) -> List[str]:
    """Split text into per-idea sections.

    Uses the first delimiter that splits the text into at least
    ``expected_count`` chunks, counting the leading intro chunk, and then
    drops that intro chunk. Otherwise splits on blank lines (keeping every
    chunk).
    """
    for pattern in _SECTION_PATTERNS:
        sections = pattern.split(text)
        if len(sections) > 1 and len(sections) >= expected_count:
            return sections[1:]
    return [chunk for chunk in _BLANK_LINES.split(text) if chunk.strip()]


def extract_field(section: str, keywords: Sequence[str]) -> Optional[str]:
    """Find ``keyword: value`` (case-insensitive) and return the rest of the line."""
    for keyword in keywords:
        pattern = re.compile(
            rf"\b{re.escape(keyword)}\**[ \t]*:[ \t]*(.+)$",
            re.IGNORECASE | re.MULTILINE,
        )
        match = pattern.search(section)
        if match:
            value = match.group(1).strip().strip("*_").strip()
            if value:
                return value
    return None


def _idea_from_section(section: str, index: int, options: FormatOptions) -> Optional[BusinessIdea]:
    fields = {name: extract_field(section, keywords) for name, keywords in _FIELD_KEYWORDS}
    if not fields["title"] or not fields["description"]:
        return None

    fields["problem"] = fields["problem"] or "To be specified"
    fields["solution"] = fields["solution"] or "To be specified"
    fields["target_market"] = fields["target_market"] or "General market"
    return _idea_from_fields(
        fields,
        index,
        options,
        competitive_advantage="Unique value proposition to be refined",
    )


def parse_structured_text(text: str, expected_count: int, options: FormatOptions) -> List[BusinessIdea]:
    ideas: List[BusinessIdea] = []
    for index, section in enumerate(split_into_sections(text, expected_count)[:expected_count]):
        try:
            idea = _idea_from_section(section, index, options)
        except Exception as exc:
            logger.warning("[FORMATTER] Failed to parse idea %d from structured text: %s", index + 1, exc)
            continue
        if idea is not None:
            ideas.append(idea)
    return ideas


# ── Strategy 3: placeholders ─────────────────────────────────────────────

def build_placeholder_ideas(text: str, expected_count: int, options: FormatOptions) -> List[BusinessIdea]:
    preview = text[:PLACEHOLDER_PREVIEW_LENGTH]
    return [
        _idea_from_fields(
            {
                "title": f"Business Idea {index + 1}",
                "description": f"Business idea extracted from AI response. Preview: {preview}...",
                "problem": "Problem statement requires refinement",
                "solution": "Solution details require refinement",
                "target_market": "Target market to be specified",
            },
            index,
            options,
            competitive_advantage="To be determined",
        )
        for index in range(expected_count)
    ]


# ── Public entry point ───────────────────────────────────────────────────

def _strategy_chain(options: FormatOptions) -> List[Tuple[str, Strategy]]:
    chain: List[Tuple[str, Strategy]] = [
        ("json", parse_json_ideas),
        ("structured_text", parse_structured_text),
    ]
    if options.allow_placeholders:
        chain.append(("placeholder", build_placeholder_ideas))
    return chain


def format_business_ideas(
    raw_text: str,
    expected_count: int = 3,
    options: Optional[FormatOptions] = None,
) -> List[BusinessIdea]:
    """Recover structured ideas from raw model output.

    Raises
    ------
    ParseError
        If the text is empty/blank, or no strategy produced a record
        (only reachable with ``allow_placeholders=False``).
    """
    if not raw_text or not raw_text.strip():
        raise ParseError("Empty AI response received")

    options = options or FormatOptions()
    expected_count = max(expected_count, 1)

    for name, strategy in _strategy_chain(options):
        try:
            ideas = strategy(raw_text, expected_count, options)
        except Exception as exc:
            logger.info("[FORMATTER] Strategy '%s' failed: %s", name, exc)
            continue
        if ideas:
            logger.info("[FORMATTER] Strategy '%s' produced %d idea(s)", name, len(ideas))
            return ideas
        logger.info("[FORMATTER] Strategy '%s' produced no ideas", name)

    raise ParseError(
        "Failed to parse AI response into business ideas. "
        "The response format may not match expected structure."
    )
