import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .agents.template_engine.registry import build_registry
from .constants import TEMPLATE_DIR
from .routes.sessions import router as sessions_router
from .routes.templates import router as templates_router
from .services.session_service import DocumentSessionStore


# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000,"      # Front-end dev server
    "http://127.0.0.1:3000,"      # Alternative localhost
    "http://localhost:5173"       # Vite dev server
)


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup: a broken template aborts here, before any request is served
    template_dir = Path(os.getenv("TEMPLATE_DATA_DIR", str(TEMPLATE_DIR)))
    print("Starting Document Template Engine")
    print(f"   Templates:   {template_dir}")
    print(f"   OpenAI Key:  {' Configured' if os.getenv('OPENAI_API_KEY') else ' Not set (generation disabled)'}")

    app.state.registry = build_registry(template_dir)
    app.state.sessions = DocumentSessionStore()
    print(f"   Session TTL: {app.state.sessions.ttl}")
    print("   Ready to assemble documents!")

    yield

    print("Shutting down Document Template Engine")


app = FastAPI(
    title="Legal Document Template Engine",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

app.include_router(templates_router)
app.include_router(sessions_router)

@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Legal Document Template Engine",
        "version": "0.1.0",
        "description": "Jurisdiction-aware assembly of criminal motion drafts",
        "docs": "/docs",
        "endpoints": {
            "templates": "GET /templates - Browse document templates",
            "sections": "GET /templates/{id}/sections?jurisdiction= - Sections for a jurisdiction",
            "sessions": "POST /sessions - Start drafting a document",
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
        "service": "document-template-engine",
        "version": "0.1.0"
    }

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG", "false").lower() == "true" else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "true").lower() == "true",
    )
