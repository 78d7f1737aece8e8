"""Centralized constants shared across the generator, validator and routes.

This module is the SINGLE SOURCE OF TRUTH for request limits, parser
defaults and the business-model → revenue-type mapping. Reused by:
  - Generate Ideas Validator
  - Idea Generator (prompts + formatter)
  - Mock model client
"""

from __future__ import annotations

from .schemas.idea_schema import BusinessModel, IdeaType, RevenueType

# ── Request limits ──────────────────────────────────────────────────────
# Mirrored in the frontend form; keep both in sync.

PROMPT_MIN_LENGTH: int = 3
PROMPT_MAX_LENGTH: int = 1000

DEFAULT_IDEA_COUNT: int = 3
MIN_IDEA_COUNT: int = 1
MAX_IDEA_COUNT: int = 10

MAX_INDUSTRIES: int = 20
MAX_INDUSTRY_LENGTH: int = 100
MAX_IDEA_TYPES: int = 10
MAX_BUSINESS_MODELS: int = 10

TARGET_MARKET_MAX_LENGTH: int = 500
GEOGRAPHIC_FOCUS_MAX_LENGTH: int = 200
ADDITIONAL_CONTEXT_MAX_LENGTH: int = 2000

MAX_MONETARY_AMOUNT: float = 100_000_000
CURRENCY_CODE_LENGTH: int = 3

MIN_AGE: int = 13
MAX_AGE: int = 120

# ── Formatter defaults ──────────────────────────────────────────────────
# Used whenever the model output omits a field.

DEFAULT_USER_ID: str = "anonymous-user"
DEFAULT_INDUSTRY: str = "Technology"
DEFAULT_IDEA_TYPE: IdeaType = IdeaType.SAAS
DEFAULT_BUSINESS_MODEL: BusinessModel = BusinessModel.SUBSCRIPTION
DEFAULT_CURRENCY: str = "USD"

DEFAULT_INVESTMENT_MIN: float = 10_000
DEFAULT_INVESTMENT_MAX: float = 50_000
DEFAULT_INVESTMENT_TIMEFRAME: str = "3-6 months"

PLACEHOLDER_PREVIEW_LENGTH: int = 100
MIN_SCORE: float = 0.0
MAX_SCORE: float = 100.0

# ── Business model → primary revenue type ───────────────────────────────
# Drives the synthesized revenue stream when the model returns none.

BUSINESS_MODEL_TO_REVENUE_TYPE: dict[BusinessModel, RevenueType] = {
    BusinessModel.SUBSCRIPTION: RevenueType.RECURRING_SUBSCRIPTION,
    BusinessModel.MARKETPLACE: RevenueType.COMMISSION,
    BusinessModel.ADVERTISING: RevenueType.ADVERTISING,
    BusinessModel.LICENSING: RevenueType.LICENSING,
    BusinessModel.COMMISSION: RevenueType.COMMISSION,
    BusinessModel.FREEMIUM: RevenueType.RECURRING_SUBSCRIPTION,
    BusinessModel.B2C: RevenueType.ONE_TIME_PAYMENT,
    BusinessModel.B2B: RevenueType.RECURRING_SUBSCRIPTION,
    BusinessModel.B2B2C: RevenueType.RECURRING_SUBSCRIPTION,
    BusinessModel.HYBRID: RevenueType.RECURRING_SUBSCRIPTION,
}

# ── Generation metadata ─────────────────────────────────────────────────

DEFAULT_CONFIDENCE: float = 0.85
