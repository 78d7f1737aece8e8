import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables from .env file
load_dotenv()

from .config import get_settings  # noqa: E402
from .routes.ideas import router as ideas_router  # noqa: E402

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    print("Starting Business Idea Generator")
    print(f"   Model:       {'Mock (templated output)' if settings.use_mock_model else settings.openai_model}")
    print(f"   OpenAI Key:  {' Configured' if settings.openai_configured else ' Not set (using mock data)'}")
    print("   Ready to generate business ideas!")

    yield

    print("Shutting down Business Idea Generator")


app = FastAPI(
    title="Business Idea Generator",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

app.include_router(ideas_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Business Idea Generator",
        "version": "0.1.0",
        "description": "AI-powered business idea generation",
        "docs": "/docs",
        "endpoints": {
            "generate": "POST /generate-ideas - Generate business ideas from a prompt",
            "refine": "POST /refine-idea - Refine an existing business idea",
            "health": "GET /health - Service health check"
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "business-idea-generator",
        "version": "0.1.0"
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report schema errors with the same 400 body as the generate endpoint."""
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": details},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logging.getLogger(__name__).exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": str(exc) if settings.debug else "Internal server error",
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
