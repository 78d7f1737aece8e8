"""Prompt templates for business idea generation and refinement.

Every builder here is a pure function of its input: no timestamps, no
randomness. The same request always renders byte-identical text.
"""

from __future__ import annotations

from typing import List, Union

from ...constants import DEFAULT_CURRENCY, DEFAULT_IDEA_COUNT
from ...schemas.generate_schema import BudgetRange, GenerationRequest
from ...schemas.idea_schema import BusinessIdea, ExperienceLevel
from ...schemas.refinement_schema import RefinementFocusArea, RefinementRequest


# ── System prompt ────────────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You are an expert business consultant and startup advisor with extensive experience
in analyzing markets, identifying opportunities, and developing viable business concepts.
You specialize in helping entrepreneurs and innovators transform ideas into actionable
business plans.

Your expertise includes:
- Market analysis and opportunity identification
- Business model design and optimization
- Revenue stream development
- Competitive analysis and differentiation strategies
- Target market segmentation
- Feasibility assessment and risk evaluation

When generating business ideas, you should:
1. Focus on practical, actionable concepts with real market potential
2. Provide specific, detailed information rather than vague suggestions
3. Consider market viability, competition, and scalability
4. Suggest realistic investment requirements and revenue projections
5. Identify clear target markets and customer segments
6. Highlight unique value propositions and competitive advantages
7. Be creative but grounded in business reality

Always structure your responses clearly and provide comprehensive, well-researched insights.
Your goal is to help users make informed decisions about their business ventures."""


def build_system_prompt() -> str:
    """Return the fixed role/instruction text used as the system message."""
    return SYSTEM_PROMPT


# ── Generation prompt ────────────────────────────────────────────────────

_OUTPUT_FIELDS = """\
For each business idea, provide:
1. A compelling, clear title
2. A comprehensive description (2-3 paragraphs)
3. A specific problem statement that this idea addresses
4. A detailed solution explanation
5. Target market segmentation (be specific about demographics, psychographics, etc.)
6. Recommended business model with rationale
7. Primary revenue streams with estimated projections
8. Competitive advantage and differentiation strategy
9. Realistic initial investment range (specify currency and timeframe)
10. Revenue projections for years 1, 2, 3, and 5
11. Relevant industry tags
12. An assessment score (0-100) indicating the idea's potential"""

_QUALITY_DIRECTIVES = """\
Ensure each idea is:
- Unique and differentiated from the others
- Actionable and feasible
- Well-researched and market-aware
- Aligned with the user's specified preferences and constraints

Make the ideas practical, innovative, and tailored to the user's request."""

_EXPERIENCE_NOTES = {
    ExperienceLevel.BEGINNER: (
        "Note: Focus on ideas that are accessible to entrepreneurs with limited experience. "
        "Prioritize lower-risk, simpler concepts."
    ),
    ExperienceLevel.ADVANCED: (
        "Note: User has advanced business experience - consider more complex, "
        "scalable opportunities."
    ),
}


def _format_amount(value: Union[int, float]) -> str:
    """Render a money amount with thousands separators (50000 → '50,000')."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}"


def _join(values: List[object]) -> str:
    return ", ".join(getattr(v, "value", str(v)) for v in values)


def _budget_section(budget: BudgetRange) -> str:
    currency = budget.currency or DEFAULT_CURRENCY
    # A zero bound is a real bound; only absent ones are left out.
    if budget.min is not None and budget.max is not None:
        return (
            f"BUDGET CONSTRAINT: {_format_amount(budget.min)} - "
            f"{_format_amount(budget.max)} {currency}"
        )
    if budget.min is not None:
        return f"MINIMUM BUDGET: {_format_amount(budget.min)} {currency}"
    if budget.max is not None:
        return f"MAXIMUM BUDGET: {_format_amount(budget.max)} {currency}"
    return ""


def build_user_prompt(request: GenerationRequest) -> str:
    """Render the per-request instruction text.

    Optional fields are appended as labeled sections in a fixed order and
    left out entirely when absent.
    """
    count = request.count or DEFAULT_IDEA_COUNT
    sections: List[str] = [
        f"Generate {count} innovative business ideas based on the following request:\n\n"
        f'USER REQUEST: "{request.prompt}"'
    ]

    if request.industries:
        sections.append(f"INDUSTRIES TO FOCUS ON: {_join(request.industries)}")

    if request.idea_types:
        sections.append(f"PREFERRED IDEA TYPES: {_join(request.idea_types)}")

    if request.business_models:
        sections.append(f"PREFERRED BUSINESS MODELS: {_join(request.business_models)}")

    if request.target_market:
        sections.append(f"TARGET MARKET: {request.target_market}")

    if request.budget_range:
        budget = _budget_section(request.budget_range)
        if budget:
            sections.append(budget)

    if request.experience_level:
        level = request.experience_level
        text = f"USER EXPERIENCE LEVEL: {level.value}"
        note = _EXPERIENCE_NOTES.get(level)
        if note:
            text += f"\n{note}"
        sections.append(text)

    if request.geographic_focus:
        sections.append(f"GEOGRAPHIC FOCUS: {request.geographic_focus}")

    if request.additional_context:
        sections.append(f"ADDITIONAL CONTEXT: {request.additional_context}")

    sections.append(_OUTPUT_FIELDS)
    sections.append(_QUALITY_DIRECTIVES)

    return "\n\n".join(sections)


# ── Refinement prompt ────────────────────────────────────────────────────

_FOCUS_AREA_LABELS = {
    RefinementFocusArea.TITLE: "Title",
    RefinementFocusArea.DESCRIPTION: "Description",
    RefinementFocusArea.PROBLEM_STATEMENT: "Problem Statement",
    RefinementFocusArea.SOLUTION: "Solution",
    RefinementFocusArea.TARGET_MARKET: "Target Market",
    RefinementFocusArea.BUSINESS_MODEL: "Business Model",
    RefinementFocusArea.REVENUE_STREAMS: "Revenue Streams",
    RefinementFocusArea.COMPETITIVE_ADVANTAGE: "Competitive Advantage",
    RefinementFocusArea.MARKETING_STRATEGY: "Marketing Strategy",
    RefinementFocusArea.PRICING: "Pricing",
    RefinementFocusArea.FULL_REDESIGN: "Complete Redesign",
}

_REFINEMENT_GUIDELINES = """\
REFINEMENT GUIDELINES:
1. Maintain the core essence and market focus of the original idea
2. Address the user's specific concerns and requests
3. Enhance clarity, specificity, and market viability
4. Improve any weak points while preserving strengths
5. Ensure all refined aspects work cohesively together
6. Keep the idea practical and actionable
7. Provide clear rationale for significant changes

For each area you modify, explain:
- What was changed and why
- How the change improves the idea
- How it maintains or enhances market viability

If the refinement significantly changes key aspects, provide an updated assessment score (0-100) for the refined idea."""


def _projection_value(value) -> str:
    return _format_amount(value) if value is not None else "N/A"


def build_refine_prompt(idea: BusinessIdea, refinement: RefinementRequest) -> str:
    """Render the instruction text for refining an existing idea."""
    streams = "; ".join(f"{s.type.value}: {s.description}" for s in idea.revenue_streams)
    lines = [
        "Refine and improve the following business idea based on the user's feedback:",
        "",
        "ORIGINAL BUSINESS IDEA:",
        f"Title: {idea.title}",
        f"Description: {idea.description}",
        f"Problem Statement: {idea.problem}",
        f"Solution: {idea.solution}",
        f"Target Market: {idea.target_market}",
        f"Business Model: {idea.business_model.value}",
        f"Revenue Streams: {streams}",
        f"Competitive Advantage: {idea.competitive_advantage}",
        f"Industry: {idea.industry}",
        f"Idea Type: {idea.idea_type.value}",
    ]

    inv = idea.initial_investment
    if inv:
        lines.append(
            f"Initial Investment: {_format_amount(inv.min)} - {_format_amount(inv.max)} "
            f"{inv.currency} ({inv.timeframe})"
        )

    rev = idea.estimated_revenue
    if rev:
        lines.append(
            f"Revenue Projections: Year 1: {_projection_value(rev.year1)}, "
            f"Year 2: {_projection_value(rev.year2)}"
        )

    text = "\n".join(lines)
    text += f'\n\nUSER REFINEMENT REQUEST: "{refinement.refinement_prompt}"'

    if refinement.focus_areas:
        labels = [_FOCUS_AREA_LABELS.get(area, area.value) for area in refinement.focus_areas]
        text += f"\n\nAREAS TO FOCUS ON: {', '.join(labels)}"
        if RefinementFocusArea.FULL_REDESIGN in refinement.focus_areas:
            text += (
                "\nNote: User requested a complete redesign - you may significantly alter "
                "the idea while maintaining core market focus."
            )
        else:
            text += (
                "\nNote: Focus improvements primarily on these areas, but ensure all "
                "aspects remain coherent."
            )

    if refinement.additional_context:
        text += f"\n\nADDITIONAL CONTEXT: {refinement.additional_context}"

    text += f"\n\n{_REFINEMENT_GUIDELINES}"
    return text
