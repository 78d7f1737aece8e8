"""Business idea data model: enums, records, and user profile.

Python attributes are snake_case; the JSON wire format is camelCase
(``targetMarket``, ``aiScore`` …). Both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Enumerations ─────────────────────────────────────────────────────────

class IdeaType(str, Enum):
    """Category of business concept."""

    PRODUCT = "product"
    SERVICE = "service"
    PLATFORM = "platform"
    MARKETPLACE = "marketplace"
    SAAS = "saas"
    ECOMMERCE = "ecommerce"
    CONSULTING = "consulting"
    CONTENT = "content"
    OTHER = "other"


class BusinessModel(str, Enum):
    """Monetization structure."""

    B2C = "b2c"
    B2B = "b2b"
    B2B2C = "b2b2c"
    FREEMIUM = "freemium"
    SUBSCRIPTION = "subscription"
    MARKETPLACE = "marketplace"
    COMMISSION = "commission"
    ADVERTISING = "advertising"
    LICENSING = "licensing"
    HYBRID = "hybrid"


class RevenueType(str, Enum):
    """Income mechanism of a single revenue stream."""

    ONE_TIME_PAYMENT = "one_time_payment"
    RECURRING_SUBSCRIPTION = "recurring_subscription"
    USAGE_BASED = "usage_based"
    COMMISSION = "commission"
    ADVERTISING = "advertising"
    LICENSING = "licensing"
    DATA_MONETIZATION = "data_monetization"
    FRANCHISE = "franchise"


class IdeaStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"
    REFINING = "refining"
    VALIDATED = "validated"
    PLANNING = "planning"
    ARCHIVED = "archived"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RiskAppetite(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


# ── Business idea record ─────────────────────────────────────────────────

class RevenueStream(CamelModel):
    type: RevenueType
    description: str
    estimated_monthly_revenue: Optional[float] = None
    estimated_annual_revenue: Optional[float] = None


class InvestmentRange(CamelModel):
    min: float
    max: float
    currency: str = Field(..., description="ISO 4217 currency code")
    timeframe: str = Field(..., description="e.g. '3-6 months', 'First year'")


class RevenueProjection(CamelModel):
    year1: Optional[float] = None
    year2: Optional[float] = None
    year3: Optional[float] = None
    year5: Optional[float] = None
    currency: str
    notes: Optional[str] = None


class BusinessIdea(CamelModel):
    """A single AI-generated business idea.

    ``revenue_streams`` is never empty on records produced by the formatter;
    a default stream derived from ``business_model`` is attached when the
    model output carries none.
    """

    id: str
    user_id: str
    title: str
    description: str
    problem: str
    solution: str
    target_market: str
    business_model: BusinessModel
    revenue_streams: List[RevenueStream]
    competitive_advantage: str
    initial_investment: Optional[InvestmentRange] = None
    estimated_revenue: Optional[RevenueProjection] = None
    industry: str
    tags: List[str] = Field(default_factory=list)
    idea_type: IdeaType
    status: IdeaStatus = IdeaStatus.GENERATED
    created_at: datetime
    updated_at: datetime
    ai_score: Optional[float] = Field(
        default=None,
        ge=0,
        le=100,
        description="Confidence/quality score from the model (0-100)",
    )


# ── User profile ─────────────────────────────────────────────────────────

class UserPreferences(CamelModel):
    industry_interests: Optional[List[str]] = None
    preferred_idea_types: Optional[List[IdeaType]] = None


class UserProfile(CamelModel):
    """Profile used to personalize generation defaults."""

    id: str
    email: EmailStr
    name: str
    preferences: Optional[UserPreferences] = None
