"""Data models for recipe import."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ExtractionMethod(str, Enum):
    """Path that produced a recipe draft."""

    JSON_LD = "json_ld"
    MICRODATA = "microdata"
    SITE_SPECIFIC = "site_specific"
    GENERIC = "generic"
    TEXT_AI = "text_ai"


class ImageClassification(str, Enum):
    """Role of an image on the recipe page."""

    HERO = "hero"
    STEP = "step"
    INGREDIENT = "ingredient"
    GALLERY = "gallery"


class AttemptOutcome(str, Enum):
    """Result of one fetch attempt."""

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    FATAL_FAILURE = "fatal_failure"


@dataclass
class Ingredient:
    """One ingredient line, split into its parts."""

    name: str
    amount: str = ""
    unit: str | None = None
    notes: str | None = None


@dataclass
class ScoredImage:
    """Candidate recipe image with its quality score."""

    url: str
    score: int
    classification: ImageClassification
    alt_text: str | None = None


@dataclass
class RecipeDraft:
    """
    Extracted recipe ready for user review.

    Optional fields stay None when the source did not provide them so
    callers can tell "unknown" from "empty". ``confidence`` is only set by
    the text path.
    """

    name: str
    instructions: str
    ingredients: list[Ingredient] = field(default_factory=list)
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
    candidate_images: list[ScoredImage] = field(default_factory=list)
    confidence: float | None = None
    method: ExtractionMethod | None = None

    @property
    def is_usable(self) -> bool:
        return bool(self.name.strip()) and bool(self.instructions.strip())


@dataclass
class RawExtraction:
    """
    Loosely-typed fields pulled out of a page or an LLM response.

    Values keep whatever shape the source used (strings, lists, dicts,
    HowToStep objects); the normalizer turns them into a RecipeDraft.
    """

    name: Any = None
    ingredients: Any = None
    instructions: Any = None
    source_url: str | None = None
    description: Any = None
    prep_time: Any = None
    cook_time: Any = None
    total_time: Any = None
    servings: Any = None
    cuisine: Any = None
    category: Any = None
    author: Any = None
    nutrition: Any = None
    candidate_images: list[ScoredImage] = field(default_factory=list)


@dataclass(frozen=True)
class Viewport:
    """Browser window size."""

    width: int
    height: int


@dataclass(frozen=True)
class Fingerprint:
    """Browser identity presented for one page load."""

    user_agent: str
    viewport: Viewport


@dataclass
class ParseAttempt:
    """One fetch cycle. Used for backoff decisions and logging, never persisted."""

    attempt_number: int
    fingerprint: Fingerprint
    delay_before_ms: int = 0
    outcome: AttemptOutcome | None = None
    error_kind: str | None = None

    @property
    def user_agent(self) -> str:
        return self.fingerprint.user_agent

    @property
    def viewport(self) -> Viewport:
        return self.fingerprint.viewport


@dataclass
class FetchResult:
    """Rendered page returned by the fetcher."""

    html: str
    final_url: str
    status_code: int | None = None
