"""Common interface for HTML extraction tiers."""

import logging
from abc import ABC, abstractmethod

from bs4 import BeautifulSoup, Tag

from ..models import ExtractionMethod, RawExtraction, RecipeDraft
from ..normalizer import normalize

logger = logging.getLogger(__name__)


class ExtractionTier(ABC):
    """
    One strategy for pulling a recipe out of rendered HTML.

    Tiers return None rather than a draft without a name or instructions,
    so the pipeline can move on to the next one.
    """

    method: ExtractionMethod

    @property
    def name(self) -> str:
        return self.method.value

    @abstractmethod
    def try_extract(self, html: str, page_url: str) -> RecipeDraft | None:
        """Extract a usable recipe from ``html`` or return None."""

    def _finish(self, raw: RawExtraction, page_url: str) -> RecipeDraft | None:
        """Normalize a raw extraction, keeping it only if it is usable."""
        raw.source_url = page_url
        draft = normalize(raw, base_url=page_url, method=self.method)
        if not draft.is_usable:
            logger.debug(f"{self.name} tier found data without name or instructions")
            return None
        return draft


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def element_text(element: Tag) -> str:
    """Visible text of an element with whitespace collapsed."""
    return " ".join(element.get_text(" ", strip=True).split())


def select_texts(root: BeautifulSoup | Tag, selector: str) -> list[str]:
    """
    Texts of elements matching ``selector``, skipping containers.

    When a match contains another match (an ``.ingredients`` wrapper around
    ``.ingredient`` items, say) only the innermost elements are kept.
    """
    matches = root.select(selector)
    matched_ids = {id(el) for el in matches}
    texts = []
    for el in matches:
        if any(id(child) in matched_ids for child in el.find_all(True)):
            continue
        text = element_text(el)
        if text:
            texts.append(text)
    return texts


def select_first_text(root: BeautifulSoup | Tag, selector: str) -> str | None:
    element = root.select_one(selector)
    if element is None:
        return None
    text = element_text(element)
    return text or None
