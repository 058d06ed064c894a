"""
Carousel Studio Server
======================

FastAPI server for the LinkedIn carousel editor engine.

Features:
- Carousel sessions with JSON persistence
- Slide and element editing with undo/redo
- Template browsing, analysis and brand-kit templates
- Gemini LLM for filling template slots
- PNG and PDF export
"""

import os
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Import services
from .services.llm_service import LLMService
from .services.carousel_generator import CarouselGenerator
from .services.export_service import ExportService

# Import canvas manager
from .canvas.state_manager import StateManager

# Import API routers
from .api import ai_routes, canvas_routes, element_routes, export_routes, template_routes

from .models.canvas_models import CANVAS_WIDTH, CANVAS_HEIGHT, MAX_SLIDES, PIXEL_RATIOS, DEFAULT_FONTS
from .templates.registry import get_registry

VERSION = "1.0.0"

# Shared service instances
state_manager: StateManager = None
llm_service: LLMService = None
carousel_generator: CarouselGenerator = None
export_service: ExportService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global state_manager, llm_service, carousel_generator, export_service

    logger.info("[CAROUSEL-STUDIO] Starting up...")

    # Initialize state manager
    sessions_dir = Path(os.getenv("CAROUSEL_SESSIONS_DIR", str(Path(__file__).parent.parent / "sessions")))
    state_manager = StateManager(sessions_dir=sessions_dir)

    # Initialize LLM service and the generator that uses it
    llm_service = LLMService()
    carousel_generator = CarouselGenerator(llm=llm_service)

    # Initialize export pipeline
    export_service = ExportService()

    # Inject into route modules
    canvas_routes.state_manager = state_manager
    element_routes.state_manager = state_manager

    ai_routes.state_manager = state_manager
    ai_routes.carousel_generator = carousel_generator

    export_routes.state_manager = state_manager
    export_routes.export_service = export_service

    logger.info(f"[CAROUSEL-STUDIO] Services initialized, {len(get_registry())} templates available")

    yield

    logger.info("[CAROUSEL-STUDIO] Shutting down...")
    for session_id in state_manager.list_sessions():
        state_manager.save_session(session_id)


# Create FastAPI app
app = FastAPI(
    title="Carousel Studio",
    description="LinkedIn carousel editor engine with templates, AI fill and export",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(canvas_routes.router)
app.include_router(element_routes.router)
app.include_router(template_routes.router)
app.include_router(ai_routes.router)
app.include_router(export_routes.router)


@app.get("/")
async def root():
    """Return API info."""
    return {
        "service": "Carousel Studio",
        "version": VERSION,
        "status": "running",
        "endpoints": {
            "canvas": "/api/canvas/state/{session_id}",
            "elements": "/api/element/{session_id}/{element_id}",
            "templates": "/api/templates",
            "ai": "/api/ai/carousel/{session_id}",
            "export": "/api/export/{session_id}"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "carousel-studio",
        "text_model": llm_service.config.text_model if llm_service else None
    }


@app.get("/api/info")
async def api_info():
    """Get canvas limits, fonts and export settings."""
    return {
        "service": "Carousel Studio",
        "version": VERSION,
        "canvas": {
            "width": CANVAS_WIDTH,
            "height": CANVAS_HEIGHT,
            "max_slides": MAX_SLIDES
        },
        "element_types": ["text", "shape", "image"],
        "shape_types": ["rect", "circle", "line"],
        "fonts": DEFAULT_FONTS,
        "export": {
            "formats": ["png", "pdf"],
            "pixel_ratios": {quality.value: ratio for quality, ratio in PIXEL_RATIOS.items()}
        },
        "template_categories": [c.value for c in get_registry().get_template_categories()]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "carousel_studio.server:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=True
    )
