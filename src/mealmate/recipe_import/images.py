"""
Recipe image discovery and quality scoring.

Scans rendered HTML for candidate photos, classifies each by where it sits
on the page (hero, step, ingredient, gallery) and ranks them with a
heuristic quality score so the best photo comes first.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from .models import ImageClassification, ScoredImage
from .normalizer import resolve_url

logger = logging.getLogger(__name__)

# Checked in this order; an <img> takes the first group it matches.
CLASSIFICATION_SELECTORS: list[tuple[ImageClassification, list[str]]] = [
    (
        ImageClassification.HERO,
        [
            ".hero-image img",
            ".featured-image img",
            ".recipe-header img",
            '[class*="hero"] img',
            'img[class*="hero"]',
            'img[class*="featured"]',
        ],
    ),
    (
        ImageClassification.STEP,
        [
            '[class*="step"] img',
            '[class*="instruction"] img',
            '[class*="direction"] img',
            '[class*="method"] img',
            'img[alt*="step"]',
            'img[alt*="Step"]',
        ],
    ),
    (
        ImageClassification.INGREDIENT,
        [
            '[class*="ingredient"] img',
            'img[alt*="ingredient"]',
            'img[alt*="Ingredient"]',
        ],
    ),
    (
        ImageClassification.GALLERY,
        [
            ".recipe-image img",
            ".recipe-photo img",
            '[class*="recipe"] img',
            '[class*="gallery"] img',
            'img[src*="recipe"]',
            'img[alt*="recipe"]',
            "article img",
            "main img",
            "figure img",
        ],
    ),
]

LAZY_SRC_ATTRS = ("data-src", "data-lazy-src", "data-original")

QUALITY_KEYWORDS = ("hd", "hi-res", "hires", "high-res", "highres", "large", "original", "fullsize")
FOOD_KEYWORDS = (
    "recipe", "food", "dish", "meal", "homemade", "baked", "roasted", "grilled",
    "soup", "salad", "pasta", "bread", "cake", "cookie", "chicken", "dessert",
)
THUMBNAIL_KEYWORDS = ("thumb", "thumbnail", "small", "tiny", "icon", "avatar", "sprite")

HIGH_RES_EDGE = 1200

_NUMBER_RE = re.compile(r"\d+")
_DIMENSIONS_HINT_RE = re.compile(r"(?<!\d)(\d{3,4})x(\d{3,4})(?!\d)")
_PARAM_SIZE_HINT_RE = re.compile(r"[?&](?:w|width|h|height|size)=(\d{3,4})(?!\d)")
_SUFFIX_SIZE_HINT_RE = re.compile(r"[-_](\d{3,4})w?(?=[._-]|$)")


@dataclass
class ImageCandidate:
    """An image found on the page, before scoring."""

    url: str
    classification: ImageClassification
    alt_text: str = ""
    long_edge: int | None = None
    css_class: str = ""
    context: str = ""


def _keyword_in(text: str, keywords: Iterable[str]) -> bool:
    return any(re.search(rf"(?<![a-z]){re.escape(k)}(?![a-z])", text) for k in keywords)


def _parse_dimension(value) -> int | None:
    if value is None:
        return None
    match = _NUMBER_RE.search(str(value))
    return int(match.group()) if match else None


def size_hint_from_url(url: str) -> int | None:
    """Largest pixel size suggested by a filename or query string, if any."""
    parsed = urlparse(url)
    haystack = f"{parsed.path}?{parsed.query}"
    sizes = []
    for match in _DIMENSIONS_HINT_RE.finditer(haystack):
        sizes.extend(int(g) for g in match.groups())
    sizes.extend(int(m.group(1)) for m in _PARAM_SIZE_HINT_RE.finditer(haystack))
    sizes.extend(int(m.group(1)) for m in _SUFFIX_SIZE_HINT_RE.finditer(parsed.path))
    return max(sizes) if sizes else None


def parse_srcset(srcset: str) -> list[tuple[str, float, bool]]:
    """
    Parse a srcset attribute into (url, descriptor value, is_width) tuples.

    "a.jpg 480w, b.jpg 1200w" -> [("a.jpg", 480, True), ("b.jpg", 1200, True)]
    An entry without a descriptor counts as 1x.
    """
    entries = []
    for part in re.split(r",\s+", srcset.strip()):
        pieces = part.strip().split()
        if not pieces:
            continue
        url = pieces[0].rstrip(",")
        value, is_width = 1.0, False
        if len(pieces) > 1:
            descriptor = pieces[1].lower()
            try:
                value = float(descriptor[:-1])
                is_width = descriptor.endswith("w")
            except ValueError:
                pass
        entries.append((url, value, is_width))
    return entries


class ImageScorer:
    """
    Scores candidate images 0-100 (bounds configurable).

    Starts at 50 and adjusts for resolution, descriptive alt text, food
    context, file format, and thumbnail hints.
    """

    def __init__(self, min_score: int = 0, max_score: int = 100):
        if min_score > max_score:
            raise ValueError("min_score must not exceed max_score")
        self.min_score = min_score
        self.max_score = max_score

    def score(self, candidate: ImageCandidate) -> int:
        url = candidate.url.lower()
        path = urlparse(url).path
        alt = (candidate.alt_text or "").lower()
        css_class = (candidate.css_class or "").lower()
        context = (candidate.context or "").lower()

        score = 50

        long_edge = candidate.long_edge or size_hint_from_url(url)
        if long_edge and long_edge >= HIGH_RES_EDGE:
            score += 30

        if _keyword_in(alt, QUALITY_KEYWORDS) or _keyword_in(path, QUALITY_KEYWORDS):
            score += 15

        if len(alt.strip()) >= 10:
            score += 10

        if _keyword_in(alt, FOOD_KEYWORDS) or _keyword_in(context, FOOD_KEYWORDS):
            score += 5

        if path.endswith(".webp") or "fm=webp" in url or "format=webp" in url:
            score += 10
        elif path.endswith((".jpg", ".jpeg")):
            score += 5

        if _keyword_in(path, THUMBNAIL_KEYWORDS) or _keyword_in(css_class, THUMBNAIL_KEYWORDS):
            score -= 20

        return max(self.min_score, min(self.max_score, score))


def _is_tracking_pixel(img: Tag) -> bool:
    return _parse_dimension(img.get("width")) == 1 and _parse_dimension(img.get("height")) == 1


def _pick_source(img: Tag) -> tuple[str | None, int | None]:
    """Best URL for an <img> and the width its srcset advertises for it."""
    srcset = img.get("srcset") or img.get("data-srcset")
    if srcset:
        entries = parse_srcset(srcset)
        if entries:
            url, value, is_width = max(entries, key=lambda e: e[1])
            return url, int(value) if is_width else None

    for attr in LAZY_SRC_ATTRS:
        if img.get(attr):
            return img[attr], None

    return img.get("src"), None


def _class_string(element: Tag | None) -> str:
    if element is None:
        return ""
    classes = element.get("class") or []
    return " ".join(classes) if isinstance(classes, list) else str(classes)


def _context_text(img: Tag) -> str:
    """Classes of nearby ancestors plus any figure caption."""
    parts = []
    for ancestor in list(img.parents)[:3]:
        parts.append(_class_string(ancestor))
    figure = img.find_parent("figure")
    if figure is not None:
        caption = figure.find("figcaption")
        if caption is not None:
            parts.append(caption.get_text(" ", strip=True))
    return " ".join(p for p in parts if p)


def _classify(soup: BeautifulSoup, hero_selectors: Sequence[str]) -> dict[int, ImageClassification]:
    classified: dict[int, ImageClassification] = {}
    groups = [(ImageClassification.HERO, list(hero_selectors))] + CLASSIFICATION_SELECTORS
    for classification, selectors in groups:
        for selector in selectors:
            for img in soup.select(selector):
                if img.name == "img":
                    classified.setdefault(id(img), classification)
    return classified


def _og_image(soup: BeautifulSoup, page_url: str) -> ImageCandidate | None:
    meta = soup.find("meta", attrs={"property": "og:image"}) or soup.find(
        "meta", attrs={"name": "og:image"}
    )
    if meta is None:
        return None
    url = resolve_url(meta.get("content"), page_url)
    if url is None:
        return None

    width = soup.find("meta", attrs={"property": "og:image:width"})
    height = soup.find("meta", attrs={"property": "og:image:height"})
    edges = [_parse_dimension(m.get("content")) for m in (width, height) if m is not None]
    alt = soup.find("meta", attrs={"property": "og:image:alt"})

    return ImageCandidate(
        url=url,
        classification=ImageClassification.HERO,
        alt_text=alt.get("content", "") if alt is not None else "",
        long_edge=max((e for e in edges if e), default=None),
    )


def find_candidates(
    html: str,
    page_url: str,
    hero_selectors: Sequence[str] = (),
) -> list[ImageCandidate]:
    """Candidate images in page order, with absolute, de-duplicated URLs."""
    soup = BeautifulSoup(html, "lxml")
    classified = _classify(soup, hero_selectors)

    candidates: list[ImageCandidate] = []
    seen: set[str] = set()

    og = _og_image(soup, page_url)
    if og is not None:
        candidates.append(og)
        seen.add(og.url)

    for img in soup.find_all("img"):
        classification = classified.get(id(img))
        if classification is None or _is_tracking_pixel(img):
            continue

        source, srcset_width = _pick_source(img)
        url = resolve_url(source, page_url)
        if url is None or url in seen:
            continue
        seen.add(url)

        edges = [_parse_dimension(img.get("width")), _parse_dimension(img.get("height")), srcset_width]
        candidates.append(
            ImageCandidate(
                url=url,
                classification=classification,
                alt_text=(img.get("alt") or "").strip(),
                long_edge=max((e for e in edges if e), default=None),
                css_class=_class_string(img),
                context=_context_text(img),
            )
        )

    return candidates


def discover_images(
    html: str,
    page_url: str,
    hero_selectors: Sequence[str] = (),
    scorer: ImageScorer | None = None,
) -> list[ScoredImage]:
    """
    Find, classify and score recipe images on a page.

    Returns images sorted by descending score; equal scores keep page
    order. ``hero_selectors`` are extra CSS selectors whose images count as
    hero shots (used for registered sites).
    """
    scorer = scorer or ImageScorer()
    images = [
        ScoredImage(
            url=candidate.url,
            score=scorer.score(candidate),
            classification=candidate.classification,
            alt_text=candidate.alt_text or None,
        )
        for candidate in find_candidates(html, page_url, hero_selectors)
    ]
    logger.debug(f"Found {len(images)} candidate images on {page_url}")
    return sorted(images, key=lambda image: image.score, reverse=True)
