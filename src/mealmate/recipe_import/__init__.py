"""Recipe import: turn recipe web pages and pasted text into recipe drafts."""

from .models import (
    ExtractionMethod,
    Fingerprint,
    ImageClassification,
    Ingredient,
    ParseAttempt,
    RecipeDraft,
    ScoredImage,
    Viewport,
)
from .errors import (
    ExtractionError,
    ExtractionErrorKind,
    FetchError,
    FetchErrorKind,
    RecipeEngineError,
    TextExtractionError,
    TextExtractionErrorKind,
)
from .engine import TEXT_MODE_SUGGESTION, RecipeEngine, validate_url
from .fetcher import PageFetcher, fetch_with_retry
from .fingerprints import UserAgentRotator
from .images import ImageScorer, discover_images
from .normalizer import normalize
from .rate_limiter import DomainRateLimiter
from .text_extractor import TextRecipeExtractor

__all__ = [
    "ExtractionMethod",
    "Fingerprint",
    "ImageClassification",
    "Ingredient",
    "ParseAttempt",
    "RecipeDraft",
    "ScoredImage",
    "Viewport",
    "ExtractionError",
    "ExtractionErrorKind",
    "FetchError",
    "FetchErrorKind",
    "RecipeEngineError",
    "TextExtractionError",
    "TextExtractionErrorKind",
    "TEXT_MODE_SUGGESTION",
    "RecipeEngine",
    "validate_url",
    "PageFetcher",
    "fetch_with_retry",
    "UserAgentRotator",
    "ImageScorer",
    "discover_images",
    "normalize",
    "DomainRateLimiter",
    "TextRecipeExtractor",
]
