# Schemas package
from .idea_schema import (
    BusinessIdea,
    BusinessModel,
    ExperienceLevel,
    IdeaStatus,
    IdeaType,
    InvestmentRange,
    RevenueProjection,
    RevenueStream,
    RevenueType,
    RiskAppetite,
    UserPreferences,
    UserProfile,
)
from .generate_schema import (
    BudgetRange,
    ErrorResponse,
    GenerateIdeasResponse,
    GenerationMetadata,
    GenerationRequest,
    QualityMetrics,
)
from .refinement_schema import (
    RefineIdeaPayload,
    RefinementChange,
    RefinementFocusArea,
    RefinementMetadata,
    RefinementRequest,
    RefinementResponse,
)

__all__ = [
    "BusinessIdea",
    "BusinessModel",
    "ExperienceLevel",
    "IdeaStatus",
    "IdeaType",
    "InvestmentRange",
    "RevenueProjection",
    "RevenueStream",
    "RevenueType",
    "RiskAppetite",
    "UserPreferences",
    "UserProfile",
    "BudgetRange",
    "ErrorResponse",
    "GenerateIdeasResponse",
    "GenerationMetadata",
    "GenerationRequest",
    "QualityMetrics",
    "RefineIdeaPayload",
    "RefinementChange",
    "RefinementFocusArea",
    "RefinementMetadata",
    "RefinementRequest",
    "RefinementResponse",
]
