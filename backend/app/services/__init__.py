from .request_validator import ValidationOptions, ValidationResult, validate_generate_ideas_request
from .model_client import MockModelClient, ModelClient, ModelClientError, OpenAIModelClient, build_model_client
from .idea_generation import IdeaGenerationService, IdeaRequestInvalid

__all__ = [
    "ValidationOptions",
    "ValidationResult",
    "validate_generate_ideas_request",
    "MockModelClient",
    "ModelClient",
    "ModelClientError",
    "OpenAIModelClient",
    "build_model_client",
    "IdeaGenerationService",
    "IdeaRequestInvalid",
]
