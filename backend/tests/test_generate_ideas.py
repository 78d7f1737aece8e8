"""Generate-ideas tests: orchestrator service and POST /generate-ideas route.

The model is always replaced: either the deterministic MockModelClient or a
canned-text stub, injected through ``app.dependency_overrides``.
"""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import re
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.agents.idea_generator.formatter import ParseError
from app.config import Settings
from app.main import app
from app.routes.ideas import get_generation_service
from app.schemas.generate_schema import GenerationRequest
from app.schemas.idea_schema import IdeaType, UserPreferences, UserProfile
from app.services.idea_generation import (
    IdeaGenerationService,
    IdeaRequestInvalid,
    compute_quality_metrics,
    merge_profile_preferences,
)
from app.services.model_client import MockModelClient, ModelClient, ModelClientError

client = TestClient(app)


class StubClient(ModelClient):
    """Returns canned text and records the prompts it was given."""

    model_name = "stub-model"

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.text


def _service(model_client=None, **settings):
    return IdeaGenerationService(Settings(**settings), model_client or MockModelClient())


@pytest.fixture
def use_service():
    """Install a service override for the route; cleared after the test."""

    def install(service):
        app.dependency_overrides[get_generation_service] = lambda: service
        return service

    yield install
    app.dependency_overrides.pop(get_generation_service, None)


# ---------------------------------------------------------------------------
# Service-level
# ---------------------------------------------------------------------------

class TestGenerationService:
    def test_generate_with_mock_model(self):
        response = _service().generate({"prompt": "eco-friendly packaging", "count": 2})

        assert len(response.ideas) == 2
        assert response.metadata.count == 2
        assert response.metadata.model == "placeholder-model"
        assert response.metadata.tokens_used is None
        assert response.metadata.generation_time_ms >= 0
        assert re.fullmatch(r"req-\d+-[0-9a-f]{6}", response.request_id)
        assert response.generated_at.tzinfo is not None

    def test_default_count_is_three(self):
        response = _service().generate({"prompt": "eco-friendly packaging"})
        assert len(response.ideas) == 3

    def test_quality_metrics(self):
        response = _service(confidence=0.5).generate({"prompt": "eco-friendly packaging", "count": 3})
        metrics = response.metadata.quality_metrics
        # Mock scores are 77, 79, 81
        assert metrics.average_score == pytest.approx(79)
        assert metrics.min_score == 77
        assert metrics.max_score == 81
        assert metrics.confidence == 0.5

    def test_invalid_payload_raises_with_all_errors(self):
        stub = StubClient("unused")
        with pytest.raises(IdeaRequestInvalid) as exc_info:
            _service(stub).generate({"count": 0})
        assert len(exc_info.value.errors) == 2
        assert stub.calls == []

    def test_accepts_built_request(self):
        stub = StubClient('{"ideas": [{"title": "Direct", "description": "Built in code"}]}')
        response = _service(stub).generate(GenerationRequest(prompt="direct call", count=1))
        assert response.ideas[0].title == "Direct"
        assert 'USER REQUEST: "direct call"' in stub.calls[0][1]

    def test_request_preferences_become_parse_defaults(self):
        stub = StubClient('{"ideas": [{"title": "Bare", "description": "No extras"}]}')
        response = _service(stub).generate({
            "prompt": "local tourism",
            "count": 1,
            "industries": ["Travel"],
            "ideaTypes": ["service"],
            "businessModels": ["commission"],
            "budgetRange": {"min": 100, "max": 200, "currency": "JPY"},
        })
        idea = response.ideas[0]
        assert idea.industry == "Travel"
        assert idea.idea_type is IdeaType.SERVICE
        assert idea.business_model.value == "commission"
        assert idea.revenue_streams[0].type.value == "commission"

    def test_profile_preferences_fill_missing_fields(self):
        profile = UserProfile(
            id="user-42",
            email="founder@example.com",
            name="Founder",
            preferences=UserPreferences(
                industry_interests=["Education"],
                preferred_idea_types=[IdeaType.CONTENT],
            ),
        )
        stub = StubClient('{"ideas": [{"title": "Lessons", "description": "Video courses"}]}')
        response = _service(stub).generate({"prompt": "online tutoring", "count": 1}, profile=profile)

        prompt = stub.calls[0][1]
        assert "INDUSTRIES TO FOCUS ON: Education" in prompt
        assert "PREFERRED IDEA TYPES: content" in prompt
        idea = response.ideas[0]
        assert idea.user_id == "user-42"
        assert idea.industry == "Education"
        assert idea.idea_type is IdeaType.CONTENT

    def test_request_preferences_win_over_profile(self):
        profile = UserProfile(
            id="user-1",
            email="a@example.com",
            name="A",
            preferences=UserPreferences(industry_interests=["Education"]),
        )
        request = GenerationRequest(prompt="online tutoring", industries=["Gaming"])
        merged = merge_profile_preferences(request, profile)
        assert merged.industries == ["Gaming"]
        assert merged.idea_types is None

    def test_empty_model_output_raises_parse_error(self):
        with pytest.raises(ParseError):
            _service(StubClient("   ")).generate({"prompt": "anything at all"})

    def test_missing_score_counts_as_zero(self):
        stub = StubClient(
            '{"ideas": [{"title": "A", "description": "a", "aiScore": 80}, {"title": "B", "description": "b"}]}'
        )
        response = _service(stub).generate({"prompt": "two ideas", "count": 2})
        metrics = response.metadata.quality_metrics
        assert metrics.average_score == 40
        assert metrics.min_score == 0
        assert metrics.max_score == 80

    def test_compute_quality_metrics_empty(self):
        assert compute_quality_metrics([], 0.85) is None


# ---------------------------------------------------------------------------
# Route-level
# ---------------------------------------------------------------------------

class TestGenerateIdeasRoute:
    def test_success_camel_case_body(self, use_service):
        use_service(_service())
        res = client.post("/generate-ideas", json={"prompt": "eco-friendly packaging", "count": 2})

        assert res.status_code == 200, res.text
        data = res.json()
        assert len(data["ideas"]) == 2
        idea = data["ideas"][0]
        for key in ("userId", "targetMarket", "businessModel", "revenueStreams", "ideaType", "aiScore"):
            assert key in idea
        assert data["metadata"]["qualityMetrics"]["confidence"] == 0.85
        assert data["requestId"].startswith("req-")
        assert "generatedAt" in data

    def test_invalid_json(self, use_service):
        use_service(_service())
        res = client.post(
            "/generate-ideas",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid JSON in request body"}

    def test_non_object_body(self, use_service):
        use_service(_service())
        res = client.post("/generate-ideas", json=["prompt"])
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid JSON in request body"}

    def test_validation_failure(self, use_service):
        use_service(_service())
        res = client.post(
            "/generate-ideas",
            json={"prompt": "shop", "budgetRange": {"min": 100, "max": 50}},
        )
        assert res.status_code == 400
        assert res.json() == {
            "error": "Validation failed",
            "details": ["Budget minimum cannot be greater than budget maximum."],
        }

    def test_profile_fields_are_validated(self, use_service):
        use_service(_service())
        res = client.post("/generate-ideas", json={"prompt": "shop", "age": 5, "riskAppetite": "wild"})
        assert res.status_code == 400
        details = res.json()["details"]
        assert "Age must be at least 13 years old." in details
        assert any(d.startswith("Risk appetite must be one of") for d in details)

    def test_parse_error_maps_to_500(self, use_service):
        use_service(_service(StubClient("")))
        res = client.post("/generate-ideas", json={"prompt": "anything at all"})
        assert res.status_code == 500
        assert res.json() == {"error": "Empty AI response received"}

    def test_model_failure_is_not_leaked(self, use_service):
        use_service(_service(StubClient(error=ModelClientError("secret upstream detail"))))
        res = client.post("/generate-ideas", json={"prompt": "anything at all"})
        assert res.status_code == 500
        assert res.json() == {"error": "Internal server error while generating ideas"}

    def test_unexpected_error_is_logged(self, use_service):
        use_service(_service(StubClient(error=RuntimeError("boom"))))
        with patch("app.routes.ideas.logger") as mock_logger:
            res = client.post("/generate-ideas", json={"prompt": "anything at all"})
        assert res.status_code == 500
        mock_logger.exception.assert_called_once()

    def test_prose_output_yields_placeholders(self, use_service):
        prose = "Consider a subscription box for rare teas, or maybe a tasting club in your city."
        use_service(_service(StubClient(prose)))
        res = client.post("/generate-ideas", json={"prompt": "tea business", "count": 3})
        assert res.status_code == 200
        titles = [idea["title"] for idea in res.json()["ideas"]]
        assert titles == ["Business Idea 1", "Business Idea 2", "Business Idea 3"]


class TestGeneralEndpoints:
    def test_root(self):
        res = client.get("/")
        assert res.status_code == 200
        assert "generate" in res.json()["endpoints"]

    def test_health(self):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"
