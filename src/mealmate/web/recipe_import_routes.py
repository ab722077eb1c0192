"""API endpoints for recipe import from URLs and pasted text."""

import logging
from functools import lru_cache
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from mealmate.recipe_import import (
    TEXT_MODE_SUGGESTION,
    ExtractionError,
    ExtractionErrorKind,
    FetchError,
    RecipeDraft,
    RecipeEngine,
    RecipeEngineError,
    TextExtractionError,
    TextExtractionErrorKind,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recipe-import"])

PARSING_METHODS = [
    "JSON-LD structured data",
    "Microdata",
    "Site-specific selectors",
    "Generic fallback parsing",
]


@lru_cache
def get_engine() -> RecipeEngine:
    """Process-wide engine; its rate limiter is shared by every request."""
    return RecipeEngine.from_settings()


# =============================================================================
# Request/Response Models
# =============================================================================


class ParseOptions(BaseModel):
    include_images: bool = True
    max_images: int | None = Field(default=None, ge=0, le=50)


class ParseRequest(BaseModel):
    """Request to parse a recipe from a URL."""

    url: str
    options: ParseOptions = ParseOptions()


class ParseTextRequest(BaseModel):
    """Request to parse a recipe from pasted text."""

    text: str
    context: Literal["social_media", "general"] = "general"
    source_url: str | None = None


class ValidateUrlRequest(BaseModel):
    url: str | None = None


class IngredientResponse(BaseModel):
    name: str
    amount: str = ""
    unit: str | None = None
    notes: str | None = None


class ImageResponse(BaseModel):
    url: str
    score: int
    classification: str
    alt_text: str | None = None


class RecipeDraftResponse(BaseModel):
    """Extracted recipe for user review."""

    name: str
    instructions: str
    ingredients: list[IngredientResponse] = []
    source_url: str | None = None
    description: str | None = None
    prep_time: str | None = None
    cook_time: str | None = None
    total_time: str | None = None
    servings: int | None = None
    cuisine: str | None = None
    category: str | None = None
    author: str | None = None
    nutrition: dict[str, str] | None = None
    candidate_images: list[ImageResponse] = []
    method: str | None = None

    @classmethod
    def from_draft(cls, draft: RecipeDraft) -> "RecipeDraftResponse":
        return cls(
            name=draft.name,
            instructions=draft.instructions,
            ingredients=[
                IngredientResponse(name=i.name, amount=i.amount, unit=i.unit, notes=i.notes)
                for i in draft.ingredients
            ],
            source_url=draft.source_url,
            description=draft.description,
            prep_time=draft.prep_time,
            cook_time=draft.cook_time,
            total_time=draft.total_time,
            servings=draft.servings,
            cuisine=draft.cuisine,
            category=draft.category,
            author=draft.author,
            nutrition=draft.nutrition,
            candidate_images=[
                ImageResponse(
                    url=img.url,
                    score=img.score,
                    classification=img.classification.value,
                    alt_text=img.alt_text,
                )
                for img in draft.candidate_images
            ],
            method=draft.method.value if draft.method else None,
        )


class ParseResponse(BaseModel):
    success: bool = True
    data: RecipeDraftResponse
    message: str


class ParseTextResponse(ParseResponse):
    confidence: float | None = None


class ValidateUrlResponse(BaseModel):
    valid: bool
    supported: bool
    domain: str | None = None
    message: str


class SupportedSite(BaseModel):
    name: str
    domain: str
    features: list[str]
    quality: str


class SupportedDomainsResponse(BaseModel):
    supported_sites: list[SupportedSite]
    supported_domains: list[str]
    total_sites: int
    parsing_methods: list[str]


# =============================================================================
# Error mapping
# =============================================================================


def _error_status(error: RecipeEngineError) -> int:
    if isinstance(error, FetchError):
        return 503 if error.retryable else 422
    if isinstance(error, ExtractionError):
        return 400 if error.kind == ExtractionErrorKind.INVALID_URL else 422
    if isinstance(error, TextExtractionError):
        if error.kind in (TextExtractionErrorKind.EMPTY_INPUT, TextExtractionErrorKind.TOO_LONG):
            return 400
        if error.kind == TextExtractionErrorKind.PROVIDER_ERROR:
            return 502
        return 422
    return 500


def to_http_exception(error: RecipeEngineError) -> HTTPException:
    """Translate an engine error to an HTTP error, keeping its kind."""
    detail = {"kind": error.kind.value, "message": error.message}

    if isinstance(error, FetchError) and error.retryable:
        detail["message"] = f"{error.message}. The site may be busy; try again later."
    if isinstance(error, ExtractionError) and error.kind == ExtractionErrorKind.UNRECOGNIZED_FORMAT:
        detail["suggestion"] = TEXT_MODE_SUGGESTION
    if isinstance(error, TextExtractionError) and error.limit is not None:
        detail["limit"] = error.limit
        if error.length is not None:
            detail["length"] = error.length

    return HTTPException(status_code=_error_status(error), detail=detail)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/recipes/parse", response_model=ParseResponse)
async def parse_recipe(
    req: ParseRequest,
    engine: RecipeEngine = Depends(get_engine),
) -> ParseResponse:
    """
    Extract a recipe from a URL for preview.

    Tries JSON-LD, microdata, site selectors, then generic heuristics.
    Returns the draft for user review; nothing is saved.
    """
    logger.info(f"Parse request for URL: {req.url}")
    try:
        draft = await engine.parse_from_url(
            req.url,
            include_images=req.options.include_images,
            max_images=req.options.max_images,
        )
    except RecipeEngineError as e:
        logger.warning(f"Recipe parsing failed for {req.url}: {e.kind.value}: {e.message}")
        raise to_http_exception(e) from e

    return ParseResponse(
        data=RecipeDraftResponse.from_draft(draft),
        message="Recipe parsed successfully",
    )


@router.post("/recipes/parse-text", response_model=ParseTextResponse)
async def parse_recipe_text(
    req: ParseTextRequest,
    engine: RecipeEngine = Depends(get_engine),
) -> ParseTextResponse:
    """Extract a recipe from pasted text (social media captions, notes)."""
    try:
        draft = await engine.parse_from_text(req.text, context=req.context, source_url=req.source_url)
    except RecipeEngineError as e:
        logger.warning(f"Recipe text parsing failed: {e.kind.value}: {e.message}")
        raise to_http_exception(e) from e

    return ParseTextResponse(
        data=RecipeDraftResponse.from_draft(draft),
        message="Recipe parsed successfully from text",
        confidence=draft.confidence,
    )


@router.post("/recipes/validate-url", response_model=ValidateUrlResponse)
async def validate_recipe_url(
    req: ValidateUrlRequest,
    engine: RecipeEngine = Depends(get_engine),
) -> ValidateUrlResponse:
    """Check a URL's format and whether the site is known to parse well."""
    if not req.url:
        raise HTTPException(
            status_code=400,
            detail={"kind": ExtractionErrorKind.INVALID_URL.value, "message": "URL is required"},
        )
    return ValidateUrlResponse(**engine.check_url(req.url))


@router.get("/recipes/supported-domains", response_model=SupportedDomainsResponse)
async def supported_domains(
    engine: RecipeEngine = Depends(get_engine),
) -> SupportedDomainsResponse:
    """Sites with dedicated parsing support."""
    sites = [
        SupportedSite(
            name=config.name,
            domain=config.domains[0],
            features=list(config.features),
            quality=config.quality,
        )
        for config in engine.site_registry.configs
    ]
    sites.append(
        SupportedSite(
            name="Generic Recipe Sites",
            domain="various",
            features=["basic-parsing", "fallback-support"],
            quality="fair",
        )
    )
    return SupportedDomainsResponse(
        supported_sites=sites,
        supported_domains=engine.site_registry.supported_domains,
        total_sites=len(sites),
        parsing_methods=PARSING_METHODS,
    )
