"""
Idea Generation Router

POST /generate-ideas: validate, prompt, call the model, format the ideas.
POST /refine-idea:    refine one existing idea.

All failures are reported as ``{"error": ..., "details"?: [...]}`` bodies.
"""

import logging
import time

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..agents.idea_generator.formatter import ParseError
from ..config import get_settings
from ..schemas.generate_schema import ErrorResponse, GenerateIdeasResponse
from ..schemas.refinement_schema import RefineIdeaPayload, RefinementResponse
from ..services.idea_generation import IdeaGenerationService, IdeaRequestInvalid
from ..services.model_client import build_model_client
from ..services.request_validator import ValidationOptions

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Ideas"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request body"},
        500: {"model": ErrorResponse, "description": "Generation failed"},
    },
)


def get_generation_service() -> IdeaGenerationService:
    """Build a service for the current settings (overridden in tests)."""
    settings = get_settings()
    return IdeaGenerationService(settings, build_model_client(settings))


def _error(status_code: int, message: str, details=None) -> JSONResponse:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


@router.post(
    "/generate-ideas",
    response_model=GenerateIdeasResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Generate Business Ideas",
    response_description="Generated ideas with generation metadata",
)
async def generate_ideas(
    request: Request,
    service: IdeaGenerationService = Depends(get_generation_service),
):
    """
    Generate business ideas from a free-text prompt plus optional preferences.

    The body is read raw so that every validation problem is reported at
    once, in plain language, rather than through FastAPI's 422 schema errors.
    """
    start_time = time.perf_counter()

    try:
        body = await request.json()
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON in request body")

    if not isinstance(body, dict):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON in request body")

    try:
        result = await run_in_threadpool(
            service.generate, body, None, ValidationOptions.from_payload(body)
        )
    except IdeaRequestInvalid as exc:
        return _error(status.HTTP_400_BAD_REQUEST, "Validation failed", exc.errors)
    except ParseError as exc:
        logger.error("[GENERATE] Could not parse model output: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except Exception:
        duration = (time.perf_counter() - start_time) * 1000
        logger.exception("[GENERATE] Failed after %.0fms", duration)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error while generating ideas",
        )

    return result


@router.post(
    "/refine-idea",
    response_model=RefinementResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Refine a Business Idea",
    response_description="The refined idea and a list of changed fields",
)
async def refine_idea(
    payload: RefineIdeaPayload,
    service: IdeaGenerationService = Depends(get_generation_service),
):
    """Refine an existing idea according to the user's feedback."""
    try:
        return await run_in_threadpool(service.refine, payload.idea, payload.refinement)
    except ParseError as exc:
        logger.error("[REFINE] Could not parse model output: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except Exception:
        logger.exception("[REFINE] Refinement failed")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error while refining idea",
        )
