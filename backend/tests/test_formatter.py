"""Formatter tests: JSON → structured text → placeholder cascade and field reconciliation."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json

import pytest

from app.agents.idea_generator.formatter import (
    FormatOptions,
    ParseError,
    coerce_enum,
    extract_field,
    format_business_ideas,
    parse_investment_range,
    parse_score,
    reconcile_idea,
    split_into_sections,
    strip_code_fence,
)
from app.schemas.idea_schema import BusinessModel, IdeaType, RevenueType


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------

class TestScoreParsing:
    @pytest.mark.parametrize("raw,expected", [
        (-10, 0),
        (150, 100),
        (57, 57),
        (72.5, 72.5),
        ("85", 85),
        ("85/100", 85),
        ("  42 points", 42),
    ])
    def test_valid_scores(self, raw, expected):
        assert parse_score(raw) == expected

    @pytest.mark.parametrize("raw", [None, "high", True, float("nan"), {"value": 3}])
    def test_unparseable_scores(self, raw):
        assert parse_score(raw) is None


class TestEnumCoercion:
    def test_case_insensitive_match(self):
        assert coerce_enum("SaaS", IdeaType, IdeaType.OTHER) is IdeaType.SAAS

    def test_unknown_falls_back(self):
        assert coerce_enum("rocket", BusinessModel, BusinessModel.HYBRID) is BusinessModel.HYBRID
        assert coerce_enum(7, BusinessModel, BusinessModel.HYBRID) is BusinessModel.HYBRID


class TestInvestmentRange:
    def test_scalar_is_not_a_range(self):
        assert parse_investment_range(50000, "USD") is None

    def test_missing_keys_use_defaults(self):
        rng = parse_investment_range({"max": "75,000"}, "GBP")
        assert rng.min == 10000
        assert rng.max == 75000
        assert rng.currency == "GBP"
        assert rng.timeframe == "3-6 months"


# ---------------------------------------------------------------------------
# Strategy 1: JSON
# ---------------------------------------------------------------------------

class TestJsonStrategy:
    def test_minimal_idea_gets_defaults(self):
        ideas = format_business_ideas('{"ideas":[{"title":"A","description":"B"}]}', 1)

        assert len(ideas) == 1
        idea = ideas[0]
        assert idea.title == "A"
        assert idea.description == "B"
        assert idea.problem == "Problem statement not provided"
        assert idea.solution == "Solution not provided"
        assert idea.target_market == "General market"
        assert idea.business_model is BusinessModel.SUBSCRIPTION
        assert idea.idea_type is IdeaType.SAAS
        assert idea.industry == "Technology"
        assert idea.tags == ["Technology"]
        assert idea.user_id == "anonymous-user"
        assert idea.ai_score is None
        assert len(idea.revenue_streams) == 1
        assert idea.revenue_streams[0].type is RevenueType.RECURRING_SUBSCRIPTION
        assert idea.revenue_streams[0].description == "Primary subscription revenue stream"

    def test_fenced_json_with_aliases(self):
        payload = {
            "data": [
                {
                    "name": "ShopBot",
                    "overview": "Chat commerce assistant",
                    "problem_statement": "Stores lose buyers",
                    "target_audience": "Small shops",
                    "business_model": "Marketplace",
                    "idea_type": "platform",
                    "categories": ["retail", "ai"],
                    "quality_score": "91",
                    "initial_investment": {"min": 2000, "max": 8000},
                },
                {"title": "Second", "description": "Another", "score": 150},
            ]
        }
        raw = "```json\n" + json.dumps(payload) + "\n```"
        ideas = format_business_ideas(raw, 2, FormatOptions(default_currency="EUR"))

        assert [i.title for i in ideas] == ["ShopBot", "Second"]
        first = ideas[0]
        assert first.description == "Chat commerce assistant"
        assert first.problem == "Stores lose buyers"
        assert first.target_market == "Small shops"
        assert first.business_model is BusinessModel.MARKETPLACE
        assert first.idea_type is IdeaType.PLATFORM
        assert first.tags == ["retail", "ai"]
        assert first.ai_score == 91
        assert first.revenue_streams[0].type is RevenueType.COMMISSION
        assert first.initial_investment.currency == "EUR"
        assert ideas[1].ai_score == 100

    def test_bare_list_truncated_to_expected_count(self):
        raw = json.dumps([{"title": f"Idea {n}", "description": "d"} for n in range(5)])
        ideas = format_business_ideas(raw, 3)
        assert [i.title for i in ideas] == ["Idea 0", "Idea 1", "Idea 2"]

    def test_single_object(self):
        ideas = format_business_ideas('{"title": "Solo", "description": "Only one"}', 3)
        assert len(ideas) == 1
        assert ideas[0].title == "Solo"

    def test_elements_without_title_are_dropped(self):
        raw = json.dumps({"ideas": [{"description": "no title"}, "junk", {"title": "Kept"}]})
        ideas = format_business_ideas(raw, 3)
        assert [i.title for i in ideas] == ["Kept"]

    def test_provided_revenue_streams_kept(self):
        raw = json.dumps({"ideas": [{
            "title": "Ads",
            "businessModel": "advertising",
            "revenueStreams": [
                {"type": "advertising", "description": "Banner ads", "estimatedMonthlyRevenue": 1200},
            ],
        }]})
        idea = format_business_ideas(raw, 1)[0]
        assert len(idea.revenue_streams) == 1
        assert idea.revenue_streams[0].description == "Banner ads"
        assert idea.revenue_streams[0].estimated_monthly_revenue == 1200

    def test_options_fill_defaults(self):
        options = FormatOptions(
            user_id="user-9",
            default_industry="Fintech",
            default_idea_type=IdeaType.SERVICE,
            default_business_model=BusinessModel.B2B,
        )
        idea = reconcile_idea({"title": "Ledger"}, 0, options)
        assert idea.user_id == "user-9"
        assert idea.industry == "Fintech"
        assert idea.idea_type is IdeaType.SERVICE
        assert idea.business_model is BusinessModel.B2B
        assert idea.id.startswith("idea-")
        assert idea.id.endswith("-1")

    def test_strip_code_fence(self):
        assert strip_code_fence("```json\n[1]\n```") == "[1]"
        assert strip_code_fence("```\n{}\n```") == "{}"
        assert strip_code_fence("  plain  ") == "plain"


# ---------------------------------------------------------------------------
# Strategy 2: structured text
# ---------------------------------------------------------------------------

MARKDOWN_RESPONSE = """Here are your ideas:

## Idea 1
**Title:** GreenBox
**Description:** Reusable shipping boxes for online stores
**Problem:** Packaging waste
**Solution:** Deposit-based box returns
**Target Market:** E-commerce brands

## Idea 2
Title: RepairHub
Description: Marketplace for local repair shops
Target Audience: Urban households
"""


class TestStructuredTextStrategy:
    def test_markdown_sections(self):
        ideas = format_business_ideas(MARKDOWN_RESPONSE, 2)

        assert [i.title for i in ideas] == ["GreenBox", "RepairHub"]
        assert ideas[0].description == "Reusable shipping boxes for online stores"
        assert ideas[0].problem == "Packaging waste"
        assert ideas[0].target_market == "E-commerce brands"
        assert ideas[1].problem == "To be specified"
        assert ideas[1].solution == "To be specified"
        assert ideas[1].target_market == "Urban households"
        assert ideas[1].competitive_advantage == "Unique value proposition to be refined"

    def test_fewer_headed_sections_than_requested(self):
        text = (
            "## Idea 1\nTitle: Alpha\n\nDescription: First\n\n"
            "## Idea 2\nTitle: Beta\n\nDescription: Second\n"
        )
        ideas = format_business_ideas(text, 3)
        assert [(i.title, i.description) for i in ideas] == [("Alpha", "First"), ("Beta", "Second")]

    def test_fewer_headed_sections_without_blank_lines(self):
        text = "## Idea 1\nTitle: Alpha\nDescription: First\n## Idea 2\nTitle: Beta\nDescription: Second"
        assert len(split_into_sections(text, 3)) == 2
        ideas = format_business_ideas(text, 3)
        assert [i.title for i in ideas] == ["Alpha", "Beta"]

    def test_section_missing_description_is_skipped(self):
        text = "## Idea 1\nTitle: Only title\n\n## Idea 2\nTitle: Full\nDescription: Has both\n"
        ideas = format_business_ideas(text, 2)
        assert [i.title for i in ideas] == ["Full"]

    def test_numbered_list_sections(self):
        text = (
            "Ideas below.\n\n"
            "1. Title: Alpha\nDescription: First idea\n\n"
            "2. Title: Beta\nDescription: Second idea"
        )
        sections = split_into_sections(text, 2)
        assert len(sections) == 2
        ideas = format_business_ideas(text, 2)
        assert [i.title for i in ideas] == ["Alpha", "Beta"]

    def test_separator_sections(self):
        text = "Intro\n---\nTitle: One\nDescription: d1\n---\nTitle: Two\nDescription: d2"
        ideas = format_business_ideas(text, 2)
        assert [i.title for i in ideas] == ["One", "Two"]

    def test_extract_field(self):
        section = "**Target Market**: Students\nName: Tutorly"
        assert extract_field(section, ("target market",)) == "Students"
        assert extract_field(section, ("title", "name")) == "Tutorly"
        assert extract_field(section, ("solution",)) is None


# ---------------------------------------------------------------------------
# Strategy 3: placeholders
# ---------------------------------------------------------------------------

class TestPlaceholderStrategy:
    def test_prose_yields_placeholders(self):
        text = "I think you should consider several directions in the wellness space. " * 3
        ideas = format_business_ideas(text, 3)

        assert len(ideas) == 3
        assert [i.title for i in ideas] == ["Business Idea 1", "Business Idea 2", "Business Idea 3"]
        for idea in ideas:
            assert text[:100] in idea.description
            assert idea.description.startswith("Business idea extracted from AI response. Preview: ")
            assert len(idea.revenue_streams) == 1

    def test_placeholders_disabled_raises(self):
        with pytest.raises(ParseError):
            format_business_ideas("just some prose", 1, FormatOptions(allow_placeholders=False))


class TestEmptyInput:
    @pytest.mark.parametrize("raw", ["", "   \n\t "])
    def test_empty_raises(self, raw):
        with pytest.raises(ParseError, match="Empty AI response received"):
            format_business_ideas(raw, 3)
