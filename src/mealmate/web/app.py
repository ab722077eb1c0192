"""
MealMate Recipe Import - FastAPI application.

Serves the recipe extraction engine over HTTP for the meal-planning
frontend.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mealmate import __version__
from mealmate.config import settings
from mealmate.llm.prompt_logger import enable_prompt_logging, is_enabled
from mealmate.web.recipe_import_routes import router as recipe_import_router

logger = logging.getLogger(__name__)

app = FastAPI(title="MealMate Recipe Import", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    if settings.mealmate_log_prompts:
        enable_prompt_logging(True)
    logger.info("MealMate recipe import starting up...")
    logger.info(f"  Environment: {settings.mealmate_env}")
    logger.info(f"  Text extraction model: {settings.openai_model}")
    logger.info(f"  Prompt file logging: {is_enabled()}")
    if not settings.openai_api_key:
        logger.warning("  OPENAI_API_KEY is not set; text parsing will fail")


# CORS middleware for React frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipe_import_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "recipe-parser",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
