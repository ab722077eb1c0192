"""Error taxonomy for recipe extraction.

Every error carries a ``kind`` so the request layer can tell the user
whether to try again later, switch to text mode, or give up on a site.
"""

from enum import Enum


class FetchErrorKind(str, Enum):
    """Whether a failed page load is worth another attempt."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


class ExtractionErrorKind(str, Enum):
    """Why the URL path could not produce a recipe."""

    UNRECOGNIZED_FORMAT = "unrecognized_format"
    INVALID_URL = "invalid_url"


class TextExtractionErrorKind(str, Enum):
    """Why the text path could not produce a recipe."""

    EMPTY_INPUT = "empty_input"
    TOO_LONG = "too_long"
    UNPARSEABLE = "unparseable"
    PROVIDER_ERROR = "provider_error"


class RecipeEngineError(Exception):
    """Base exception for the recipe extraction engine."""

    def __init__(self, kind: Enum, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


class FetchError(RecipeEngineError):
    """Raised when a page could not be loaded."""

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(kind, message)

    @property
    def retryable(self) -> bool:
        return self.kind == FetchErrorKind.RETRYABLE


class ExtractionError(RecipeEngineError):
    """Raised when no extraction tier recognized the page."""

    def __init__(self, kind: ExtractionErrorKind, message: str, *, url: str | None = None):
        self.url = url
        super().__init__(kind, message)


class TextExtractionError(RecipeEngineError):
    """Raised when free-form text could not be turned into a recipe."""

    def __init__(
        self,
        kind: TextExtractionErrorKind,
        message: str,
        *,
        limit: int | None = None,
        length: int | None = None,
    ):
        self.limit = limit
        self.length = length
        super().__init__(kind, message)
