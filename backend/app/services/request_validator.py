"""Generate Ideas request validator.

Validates the raw JSON body of POST /generate-ideas before it is turned into
a ``GenerationRequest``. Unlike pydantic, this never raises and never stops
at the first problem: every applicable error is collected so the client can
fix them all in one round trip.

Keys are read in camelCase (wire format) with a snake_case fallback.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Type

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..constants import (
    ADDITIONAL_CONTEXT_MAX_LENGTH,
    CURRENCY_CODE_LENGTH,
    GEOGRAPHIC_FOCUS_MAX_LENGTH,
    MAX_AGE,
    MAX_BUSINESS_MODELS,
    MAX_IDEA_COUNT,
    MAX_IDEA_TYPES,
    MAX_INDUSTRIES,
    MAX_INDUSTRY_LENGTH,
    MAX_MONETARY_AMOUNT,
    MIN_AGE,
    MIN_IDEA_COUNT,
    PROMPT_MAX_LENGTH,
    PROMPT_MIN_LENGTH,
    TARGET_MARKET_MAX_LENGTH,
)
from ..schemas.idea_schema import BusinessModel, ExperienceLevel, IdeaType, RiskAppetite


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


@dataclass
class ValidationOptions:
    """Extra inputs validated alongside the request body."""

    age: Any = None
    capital: Any = None
    interests: Any = None
    risk_appetite: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ValidationOptions":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            age=_read(payload, "age"),
            capital=_read(payload, "capital"),
            interests=_read(payload, "interests"),
            risk_appetite=_read(payload, "risk_appetite"),
        )


# ── Helpers ──────────────────────────────────────────────────────────────

def _read(payload: Mapping[str, Any], name: str) -> Any:
    """Read ``name`` from the payload, preferring its camelCase spelling."""
    camel = to_camel(name)
    if camel in payload:
        return payload[camel]
    return payload.get(name)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite_number(value: Any) -> bool:
    return _is_number(value) and math.isfinite(value)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def _legal_values(enum_cls: Type[Enum]) -> List[str]:
    return [member.value for member in enum_cls]


def _matches_enum(value: str, enum_cls: Type[Enum]) -> bool:
    return value.strip().lower() in _legal_values(enum_cls)


# ── Field validators ─────────────────────────────────────────────────────

def _validate_prompt(prompt: Any, errors: List[str]) -> None:
    if not prompt:
        errors.append(
            "Prompt is required. Please describe what kind of business ideas you are looking for."
        )
        return

    if not isinstance(prompt, str):
        errors.append("Prompt must be a text string.")
        return

    trimmed = prompt.strip()
    if not trimmed:
        errors.append(
            "Prompt cannot be empty. Please provide a description of the business ideas you want."
        )
    elif len(trimmed) < PROMPT_MIN_LENGTH:
        errors.append(f"Prompt is too short. Please provide at least {PROMPT_MIN_LENGTH} characters.")
    elif len(trimmed) > PROMPT_MAX_LENGTH:
        errors.append(
            f"Prompt is too long. Please limit your description to {PROMPT_MAX_LENGTH} characters."
        )


def _validate_count(count: Any, errors: List[str]) -> None:
    if count is None:
        return

    if not _is_number(count):
        errors.append("Count must be a number.")
    elif not _is_integer(count):
        errors.append("Count must be a whole number.")
    elif count < MIN_IDEA_COUNT:
        errors.append(f"Count must be at least {MIN_IDEA_COUNT}.")
    elif count > MAX_IDEA_COUNT:
        errors.append(f"Count cannot exceed {MAX_IDEA_COUNT} ideas per request.")


def _validate_age(age: Any, errors: List[str]) -> None:
    if not _is_number(age):
        errors.append("Age must be a number.")
    elif not _is_integer(age):
        errors.append("Age must be a whole number.")
    elif age < MIN_AGE:
        errors.append(f"Age must be at least {MIN_AGE} years old.")
    elif age > MAX_AGE:
        errors.append("Please enter a valid age.")


def _validate_amount(value: Any, label: str, errors: List[str]) -> bool:
    """Validate a single monetary amount. Returns True when usable."""
    if not _is_number(value):
        errors.append(f"{label} must be a number.")
        return False
    if not math.isfinite(value):
        errors.append(f"{label} must be a finite number.")
        return False
    if value < 0:
        errors.append(f"{label} cannot be negative.")
        return False
    if value > MAX_MONETARY_AMOUNT:
        errors.append(f"{label} exceeds maximum allowed value.")
        return False
    return True


def _validate_budget_range(budget_range: Any, errors: List[str]) -> None:
    if not isinstance(budget_range, Mapping):
        errors.append("Budget range must be an object with min, max and currency.")
        return

    currency = budget_range.get("currency")
    if currency is not None:
        if not isinstance(currency, str):
            errors.append("Currency must be a string (e.g., USD, EUR, GBP).")
        elif len(currency) != CURRENCY_CODE_LENGTH:
            errors.append("Currency must be a 3-letter ISO code (e.g., USD, EUR, GBP).")

    low = budget_range.get("min")
    high = budget_range.get("max")
    if low is not None:
        _validate_amount(low, "Budget minimum", errors)
    if high is not None:
        _validate_amount(high, "Budget maximum", errors)

    # Order is checked whenever both bounds are finite numbers, even if one
    # of them already failed a range check.
    if _is_finite_number(low) and _is_finite_number(high) and low > high:
        errors.append("Budget minimum cannot be greater than budget maximum.")


def _validate_capital(budget_range: Any, capital: Any, errors: List[str]) -> None:
    # A budget range wins over a bare capital amount.
    if budget_range is not None:
        _validate_budget_range(budget_range, errors)
        return

    if capital is not None:
        _validate_amount(capital, "Capital amount", errors)


def _validate_interests(industries: Any, interests: Any, errors: List[str]) -> None:
    values = industries if industries is not None else interests
    if values is None:
        return

    if not isinstance(values, list):
        errors.append("Interests/industries must be an array.")
        return
    if not values:
        errors.append(
            "Interests/industries array cannot be empty. If provided, it must contain at least one item."
        )
        return
    if len(values) > MAX_INDUSTRIES:
        errors.append(
            f"Too many interests/industries specified. Please limit to {MAX_INDUSTRIES} items."
        )
        return

    for index, interest in enumerate(values):
        if not isinstance(interest, str):
            errors.append(f"Interest/industry at index {index} must be a string.")
        elif not interest.strip():
            errors.append(f"Interest/industry at index {index} cannot be empty.")
        elif len(interest.strip()) > MAX_INDUSTRY_LENGTH:
            errors.append(
                f"Interest/industry at index {index} is too long. "
                f"Please limit to {MAX_INDUSTRY_LENGTH} characters."
            )


def _validate_tag_list(
    values: Any,
    enum_cls: Type[Enum],
    label: str,
    limit: int,
    errors: List[str],
) -> None:
    """Validate an optional list of enum tags (idea types, business models)."""
    if values is None:
        return

    plural = f"{label}s"
    if not isinstance(values, list):
        errors.append(f"{plural.capitalize()} must be an array.")
        return
    if not values:
        errors.append(
            f"{plural.capitalize()} array cannot be empty. If provided, it must contain at least one item."
        )
        return
    if len(values) > limit:
        errors.append(f"Too many {plural} specified. Please limit to {limit} {plural}.")
        return

    for index, value in enumerate(values):
        if not isinstance(value, str):
            errors.append(f"{label.capitalize()} at index {index} must be a string.")
        elif not _matches_enum(value, enum_cls):
            errors.append(
                f"{label.capitalize()} at index {index} must be one of: "
                f"{', '.join(_legal_values(enum_cls))}. Received: {value}"
            )


def _validate_choice(value: Any, enum_cls: Type[Enum], label: str, errors: List[str]) -> None:
    """Case-insensitive single-choice check that lists legal values on failure."""
    if value is None:
        return

    if not isinstance(value, str):
        errors.append(f"{label} must be a string.")
        return

    if not _matches_enum(value, enum_cls):
        errors.append(
            f"{label} must be one of: {', '.join(_legal_values(enum_cls))}. Received: {value}"
        )


def _validate_optional_text(value: Any, label: str, max_length: int, errors: List[str]) -> None:
    if value is None:
        return

    if not isinstance(value, str):
        errors.append(f"{label} must be a string.")
        return

    trimmed = value.strip()
    if not trimmed:
        errors.append(f"{label} cannot be empty if provided.")
    elif len(trimmed) > max_length:
        errors.append(f"{label} is too long. Please limit to {max_length} characters.")


# ── Public API ───────────────────────────────────────────────────────────

def validate_generate_ideas_request(
    payload: Any,
    options: Optional[ValidationOptions] = None,
) -> ValidationResult:
    """Validate a generate-ideas payload and collect every error.

    Never raises. ``options`` carries the extra profile inputs (age,
    capital, interests, risk appetite) that are not part of the request
    model itself.
    """
    if not isinstance(payload, Mapping):
        return ValidationResult(valid=False, errors=["Request body must be a JSON object."])

    options = options or ValidationOptions()
    errors: List[str] = []

    _validate_prompt(_read(payload, "prompt"), errors)
    _validate_count(_read(payload, "count"), errors)

    if options.age is not None:
        _validate_age(options.age, errors)

    _validate_capital(_read(payload, "budget_range"), options.capital, errors)
    _validate_interests(_read(payload, "industries"), options.interests, errors)
    _validate_choice(options.risk_appetite, RiskAppetite, "Risk appetite", errors)

    _validate_tag_list(_read(payload, "idea_types"), IdeaType, "idea type", MAX_IDEA_TYPES, errors)
    _validate_tag_list(
        _read(payload, "business_models"),
        BusinessModel,
        "business model",
        MAX_BUSINESS_MODELS,
        errors,
    )
    _validate_optional_text(
        _read(payload, "target_market"), "Target market", TARGET_MARKET_MAX_LENGTH, errors
    )
    _validate_choice(_read(payload, "experience_level"), ExperienceLevel, "Experience level", errors)
    _validate_optional_text(
        _read(payload, "geographic_focus"), "Geographic focus", GEOGRAPHIC_FOCUS_MAX_LENGTH, errors
    )
    _validate_optional_text(
        _read(payload, "additional_context"),
        "Additional context",
        ADDITIONAL_CONTEXT_MAX_LENGTH,
        errors,
    )

    return ValidationResult(valid=not errors, errors=errors)
