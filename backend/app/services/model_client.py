"""Generative model clients.

Everything downstream talks to the model through one narrow call:

    client.complete(system_prompt, user_prompt) -> raw text

  - ``MockModelClient``   deterministic templated output (default)
  - ``OpenAIModelClient`` chat completions over httpx, single attempt

No retries anywhere: a failed call raises ``ModelClientError`` and the
route turns it into a 500.
"""

from __future__ import annotations

import abc
import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings
from ..constants import DEFAULT_BUSINESS_MODEL, DEFAULT_CURRENCY, DEFAULT_IDEA_COUNT, DEFAULT_IDEA_TYPE, DEFAULT_INDUSTRY

logger = logging.getLogger(__name__)


class ModelClientError(Exception):
    """Raised when the model provider call fails."""


class ModelClient(abc.ABC):
    model_name: str = "unknown"

    @abc.abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's raw text for the given prompts."""


# ---------------------------------------------------------------------------
# Mock client: parses the rendered prompt back and answers from templates
# ---------------------------------------------------------------------------
_COUNT_RE = re.compile(r"^Generate (\d+) innovative business ideas", re.MULTILINE)
_REQUEST_RE = re.compile(r'USER REQUEST: "(.*?)"(?:\n\n|$)', re.DOTALL)
_REFINE_REQUEST_RE = re.compile(r'USER REFINEMENT REQUEST: "(.*?)"(?:\n\n|$)', re.DOTALL)


def _line_value(text: str, label: str) -> Optional[str]:
    match = re.search(rf"^{re.escape(label)}: (.+)$", text, re.MULTILINE)
    return match.group(1).strip() if match else None


def _first_item(text: str, label: str) -> Optional[str]:
    value = _line_value(text, label)
    return value.split(",")[0].strip() if value else None


class MockModelClient(ModelClient):
    """Deterministic stand-in for the model provider.

    Generation prompts get a fenced JSON ``{"ideas": [...]}`` document;
    refinement prompts get a markdown ``## Idea 1`` section.
    """

    model_name = "placeholder-model"

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        if user_prompt.startswith("Refine and improve"):
            return self._refinement_text(user_prompt)
        return self._generation_text(user_prompt)

    # -- generation -------------------------------------------------------
    def _generation_text(self, prompt: str) -> str:
        count_match = _COUNT_RE.search(prompt)
        count = int(count_match.group(1)) if count_match else DEFAULT_IDEA_COUNT
        request_match = _REQUEST_RE.search(prompt)
        request = request_match.group(1).strip() if request_match else "a new business"

        industry = _first_item(prompt, "INDUSTRIES TO FOCUS ON") or DEFAULT_INDUSTRY
        idea_type = _first_item(prompt, "PREFERRED IDEA TYPES") or DEFAULT_IDEA_TYPE.value
        business_model = _first_item(prompt, "PREFERRED BUSINESS MODELS") or DEFAULT_BUSINESS_MODEL.value
        target_market = _line_value(prompt, "TARGET MARKET")
        currency = self._budget_currency(prompt)

        base_title = " ".join(word[:1].upper() + word[1:] for word in request.split()[:3])

        ideas: List[Dict[str, Any]] = []
        for number in range(1, count + 1):
            ideas.append({
                "title": f"{base_title} - {idea_type.upper()} Solution {number}",
                "description": (
                    f'A comprehensive {idea_type} business idea that addresses the market need for "{request}". '
                    f"This solution leverages modern technology and best practices in the {industry} "
                    "industry to create value for customers."
                ),
                "problem": (
                    f"Current solutions in the {industry} space fail to adequately address the need for "
                    f"{request}. Users struggle with fragmented tools, high costs, or lack of specialized features."
                ),
                "solution": (
                    f"Our {idea_type} platform provides an integrated solution specifically designed for "
                    f"{request}, delivering a streamlined experience that addresses the core pain points."
                ),
                "targetMarket": target_market
                or f"Businesses and individuals in the {industry} sector seeking {request}",
                "businessModel": business_model,
                "revenueStreams": [
                    {
                        "type": "recurring_subscription",
                        "description": f"Primary {business_model} revenue model with tiered pricing",
                        "estimatedMonthlyRevenue": 5000 + number * 1000,
                        "estimatedAnnualRevenue": 60000 + number * 12000,
                    }
                ],
                "competitiveAdvantage": (
                    f"Unique positioning in the {industry} space with specialized focus on {request}."
                ),
                "initialInvestment": {
                    "min": 10000,
                    "max": 50000,
                    "currency": currency,
                    "timeframe": "3-6 months",
                },
                "estimatedRevenue": {
                    "year1": 50000 + number * 10000,
                    "year2": 100000 + number * 20000,
                    "year3": 200000 + number * 40000,
                    "currency": currency,
                },
                "industry": industry,
                "tags": [industry, idea_type, business_model],
                "ideaType": idea_type,
                "aiScore": 75 + number * 2,
            })

        return "```json\n" + json.dumps({"ideas": ideas}, indent=2) + "\n```"

    @staticmethod
    def _budget_currency(prompt: str) -> str:
        for label in ("BUDGET CONSTRAINT", "MINIMUM BUDGET", "MAXIMUM BUDGET"):
            value = _line_value(prompt, label)
            if value:
                return value.split()[-1]
        return DEFAULT_CURRENCY

    # -- refinement -------------------------------------------------------
    def _refinement_text(self, prompt: str) -> str:
        request_match = _REFINE_REQUEST_RE.search(prompt)
        request = request_match.group(1).strip() if request_match else "general improvements"
        title = _line_value(prompt, "Title") or "Refined Idea"
        description = _line_value(prompt, "Description") or ""
        problem = _line_value(prompt, "Problem Statement") or ""
        solution = _line_value(prompt, "Solution") or ""
        target_market = _line_value(prompt, "Target Market") or ""

        lines = [
            "Here is the refined version of the business idea.",
            "",
            "## Idea 1",
            f"Title: {title} (Refined)",
            f"Description: {description} Refined to address: {request}.".strip(),
            f"Problem: {problem}",
            f"Solution: {solution} Updated based on user feedback.".strip(),
            f"Target Market: {target_market}",
        ]
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# OpenAI chat completions, single attempt, raw text out
# ---------------------------------------------------------------------------
class OpenAIModelClient(ModelClient):
    def __init__(self, settings: Settings) -> None:
        if not settings.openai_configured:
            raise ModelClientError("OPENAI_API_KEY environment variable not set")
        self._settings = settings
        self.model_name = settings.openai_model

    def build_payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self._settings.max_completion_tokens,
            "temperature": self._settings.temperature,
        }

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        url = f"{self._settings.openai_base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._settings.openai_api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(system_prompt, user_prompt)

        logger.info("[MODEL] Calling %s", self.model_name)
        t0 = time.time()
        try:
            response = httpx.post(
                url,
                headers=headers,
                json=payload,
                timeout=self._settings.request_timeout,
            )
        except httpx.HTTPError as exc:
            raise ModelClientError(f"Model request failed: {exc}") from exc

        logger.info("[MODEL] HTTP %s (%.1fs)", response.status_code, time.time() - t0)
        if response.status_code != 200:
            raise ModelClientError(
                f"Model provider returned HTTP {response.status_code}: {response.text[:400]}"
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ModelClientError(f"Unexpected model response shape: {exc}") from exc

        usage = data.get("usage")
        if usage:
            logger.info(
                "[MODEL] Tokens used: prompt=%s, completion=%s, total=%s",
                usage.get("prompt_tokens", "?"),
                usage.get("completion_tokens", "?"),
                usage.get("total_tokens", "?"),
            )

        return content.strip()


def build_model_client(settings: Settings) -> ModelClient:
    """Pick the client implementation for the current settings."""
    if settings.use_mock_model:
        return MockModelClient()
    if not settings.openai_configured:
        logger.warning("[MODEL] USE_MOCK_MODEL=false but OPENAI_API_KEY is not set, using mock")
        return MockModelClient()
    return OpenAIModelClient(settings)
