"""Normalization utilities for recipe data.

Every extraction path (JSON-LD, microdata, CSS selectors, LLM output) hands
its loosely-shaped fields to ``normalize`` and gets back the same
RecipeDraft shape.
"""

import html
import re
from dataclasses import replace
from typing import Any, Iterable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .models import ExtractionMethod, Ingredient, RawExtraction, RecipeDraft, ScoredImage

UNICODE_FRACTIONS = "½⅓⅔¼¾⅕⅖⅗⅘⅙⅚⅛⅜⅝⅞"

UNITS = [
    "fluid ounces", "fluid ounce", "fl. oz", "fl oz",
    "tablespoons", "tablespoon", "tbsp", "tbs", "tbl",
    "teaspoons", "teaspoon", "tsp",
    "cups", "cup",
    "ounces", "ounce", "oz",
    "pounds", "pound", "lbs", "lb",
    "kilograms", "kilogram", "kg",
    "grams", "gram", "g",
    "milliliters", "milliliter", "millilitres", "millilitre", "ml",
    "liters", "liter", "litres", "litre", "l",
    "quarts", "quart", "qt",
    "pints", "pint", "pt",
    "gallons", "gallon", "gal",
    "cloves", "clove",
    "cans", "can",
    "packages", "package", "pkg",
    "sticks", "stick",
    "slices", "slice",
    "pinches", "pinch",
    "dashes", "dash",
    "bunches", "bunch",
    "heads", "head",
    "sprigs", "sprig",
    "handfuls", "handful",
    "pieces", "piece",
]

_NUMBER = rf"(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?(?:\s*[{UNICODE_FRACTIONS}])?|[{UNICODE_FRACTIONS}])"
_QUANTITY = rf"{_NUMBER}(?:\s*(?:-|–|to)\s*{_NUMBER})?"
_UNIT = "|".join(re.escape(u) for u in sorted(UNITS, key=len, reverse=True))

_QUANTIFIED_RE = re.compile(
    rf"^(?P<amount>{_QUANTITY})\s*(?:(?P<unit>{_UNIT})\.?(?=\s|$))?\s*(?:of\s+)?(?P<rest>.*)$",
    re.IGNORECASE,
)
_QUALITATIVE_RE = re.compile(
    r"^(?P<amount>(?:a|an)\s+(?:pinch|dash|handful|splash|sprinkle|few|couple)|pinch|dash|handful|splash)"
    r"\s+(?:of\s+)?(?P<rest>.+)$",
    re.IGNORECASE,
)
_TRAILING_AMOUNT_RE = re.compile(r",?\s*\b(?P<amount>to taste|as needed)\s*$", re.IGNORECASE)
_PARENTHETICAL_RE = re.compile(r"\(([^)]*)\)")

_STEP_PREFIX_RE = re.compile(r"^(?:step\s*)?\d+\s*[.):](?!\d)\s*|^[•\-*–]\s*", re.IGNORECASE)
_INLINE_STEP_MARKER_RE = re.compile(r"(?:^|(?<=\s))(?:step\s*)?(\d+)[.):]\s+", re.IGNORECASE)


def clean_text(value: Any) -> str | None:
    """
    Reduce a scalar-ish value to trimmed plain text.

    Handles:
        - Strings with stray HTML tags or entities
        - Numbers
        - Lists (first non-empty entry)
        - Dicts with 'name', 'text' or '@value'

    Returns None rather than an empty string.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _format_number(value)

    if isinstance(value, list):
        for item in value:
            text = clean_text(item)
            if text:
                return text
        return None

    if isinstance(value, dict):
        if "properties" in value:
            return clean_text(value["properties"].get("name"))
        return clean_text(value.get("name") or value.get("text") or value.get("@value"))

    if not isinstance(value, str):
        return None

    text = _strip_markup(value)
    text = " ".join(text.split())
    return text or None


def _strip_markup(text: str) -> str:
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text("\n")
    return html.unescape(text)


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_servings(yield_value: Any) -> int | None:
    """
    Parse recipe yield/servings to integer.

    Examples:
        "4 servings" -> 4
        "Serves 6" -> 6
        ["4", "4 servings"] -> 4
        "Makes 12 cookies" -> 12
    """
    if yield_value is None or isinstance(yield_value, bool):
        return None

    if isinstance(yield_value, int):
        return yield_value

    if isinstance(yield_value, float):
        return int(yield_value)

    if isinstance(yield_value, list):
        for item in yield_value:
            servings = parse_servings(item)
            if servings is not None:
                return servings
        return None

    match = re.search(r"(\d+)", str(yield_value))
    if match:
        return int(match.group(1))

    return None


def parse_ingredient_line(line: str) -> Ingredient | None:
    """
    Split a raw ingredient line into amount, unit, name and notes.

    Examples:
        "2 cups flour" -> amount "2", unit "cups", name "flour"
        "2 cloves garlic, minced" -> amount "2", unit "cloves", name "garlic", notes "minced"
        "a pinch of salt" -> amount "a pinch", name "salt"
        "salt, to taste" -> amount "to taste", name "salt"
        "taco shells" -> amount "", name "taco shells"

    Returns None when nothing usable is left for the name.
    """
    text = clean_text(line)
    if not text:
        return None

    amount = ""
    unit = None

    match = _QUANTIFIED_RE.match(text)
    if match and match.group("rest").strip():
        amount = " ".join(match.group("amount").split())
        unit = match.group("unit")
        rest = match.group("rest")
    else:
        match = _QUALITATIVE_RE.match(text)
        if match:
            amount = " ".join(match.group("amount").split()).lower()
            rest = match.group("rest")
        else:
            rest = text

    if not amount:
        trailing = _TRAILING_AMOUNT_RE.search(rest)
        if trailing:
            amount = trailing.group("amount").lower()
            rest = rest[: trailing.start()]

    notes = [n.strip() for n in _PARENTHETICAL_RE.findall(rest) if n.strip()]
    rest = _PARENTHETICAL_RE.sub(" ", rest)

    name, _, trailing_notes = rest.partition(",")
    if trailing_notes.strip():
        notes.append(trailing_notes.strip())

    name = " ".join(name.split()).strip(" .;:-")
    if not name:
        return None

    return Ingredient(
        name=name,
        amount=amount,
        unit=unit.lower() if unit else None,
        notes=", ".join(notes) if notes else None,
    )


def _ingredient_from_mapping(item: dict) -> Ingredient | None:
    """Build an Ingredient from a dict (LLM output or HowToSupply-like data)."""
    name = clean_text(item.get("name"))
    if not name:
        text = item.get("text") or item.get("raw")
        return parse_ingredient_line(text) if isinstance(text, str) else None

    amount = item.get("amount", item.get("quantity"))
    return Ingredient(
        name=name,
        amount=clean_text(amount) or "",
        unit=clean_text(item.get("unit")),
        notes=clean_text(item.get("notes")),
    )


def normalize_ingredients(ingredients: Any) -> list[Ingredient]:
    """
    Normalize ingredients to a list of Ingredient, preserving order.

    Handles:
        - List of raw strings ("2 cups flour")
        - List of dicts with 'name'/'amount'/'unit'/'notes' or 'text'
        - A single newline-separated string
        - Existing Ingredient objects (re-trimmed)

    Entries that end up without a name are dropped.
    """
    if not ingredients:
        return []

    if isinstance(ingredients, str):
        ingredients = _strip_markup(ingredients).splitlines()

    if not isinstance(ingredients, list):
        ingredients = [ingredients]

    result = []
    for item in ingredients:
        ingredient = None
        if isinstance(item, str):
            ingredient = parse_ingredient_line(item)
        elif isinstance(item, dict):
            ingredient = _ingredient_from_mapping(item)
        elif isinstance(item, Ingredient):
            name = clean_text(item.name)
            if name:
                ingredient = Ingredient(
                    name=name,
                    amount=clean_text(item.amount) or "",
                    unit=clean_text(item.unit),
                    notes=clean_text(item.notes),
                )
        if ingredient is not None:
            result.append(ingredient)

    return result


def extract_instruction_steps(instructions: Any) -> list[str]:
    """
    Extract instruction steps from various formats.

    Handles:
        - Plain strings (split by newlines or inline "1." markers)
        - List of strings
        - List of HowToStep dicts with 'text' (or 'name') field
        - HowToSection dicts with nested 'itemListElement'
        - extruct microdata items ({'type': ..., 'properties': {...}})
    """
    if not instructions:
        return []

    if isinstance(instructions, str):
        return _split_instruction_text(instructions)

    if isinstance(instructions, list):
        steps = []
        for item in instructions:
            steps.extend(extract_instruction_steps(item))
        return steps

    if isinstance(instructions, dict):
        if "properties" in instructions:
            return extract_instruction_steps(instructions["properties"])
        if "itemListElement" in instructions:
            return extract_instruction_steps(instructions["itemListElement"])
        text = instructions.get("text") or instructions.get("name") or ""
        if isinstance(text, str):
            return _split_instruction_text(text)

    return []


def _split_instruction_text(text: str) -> list[str]:
    text = _strip_markup(text)

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) == 1:
        lines = _split_inline_numbered(lines[0])

    steps = []
    for line in lines:
        step = " ".join(_STEP_PREFIX_RE.sub("", line).split())
        if step:
            steps.append(step)
    return steps


def _split_inline_numbered(text: str) -> list[str]:
    """Split "1. Mix 2. Bake" style text, only when markers count up from 1."""
    markers = list(_INLINE_STEP_MARKER_RE.finditer(text))
    numbers = [int(m.group(1)) for m in markers]
    if len(markers) < 2 or numbers != list(range(1, len(markers) + 1)):
        return [text]

    steps = []
    for index, marker in enumerate(markers):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
        steps.append(text[marker.end():end].strip())
    return steps


def format_instructions(steps: Iterable[str]) -> str:
    """Join steps into one numbered, newline-separated string."""
    return "\n".join(f"{number}. {step}" for number, step in enumerate(steps, start=1))


# Schema.org NutritionInformation property -> draft key
NUTRITION_FIELDS = {
    "calories": "calories",
    "proteinContent": "protein",
    "carbohydrateContent": "carbs",
    "fatContent": "fat",
    "fiberContent": "fiber",
    "sugarContent": "sugar",
    "sodiumContent": "sodium",
}


def normalize_nutrition(nutrition: Any) -> dict[str, str] | None:
    """
    Map a NutritionInformation object to short keys (calories, protein,
    carbs, fat, fiber, sugar, sodium).

    Accepts a JSON-LD dict, an extruct microdata item, or a list holding
    one of those. Already-short keys are kept, so normalized output maps
    to itself. Returns None when no known field has a value.
    """
    if isinstance(nutrition, list):
        nutrition = next((item for item in nutrition if isinstance(item, dict)), None)
    if not isinstance(nutrition, dict):
        return None
    if isinstance(nutrition.get("properties"), dict):
        nutrition = nutrition["properties"]

    result = {}
    for schema_key, key in NUTRITION_FIELDS.items():
        value = clean_text(nutrition.get(schema_key, nutrition.get(key)))
        if value:
            result[key] = value
    return result or None


def resolve_url(url: str | None, base_url: str | None = None) -> str | None:
    """
    Resolve a possibly relative or protocol-relative URL to an absolute one.

    Returns None for anything that does not end up as http(s) with a host
    (data: URIs, javascript:, empty strings).
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    if url.startswith("//"):
        scheme = urlparse(base_url).scheme if base_url else ""
        url = f"{scheme or 'https'}:{url}"
    elif base_url:
        url = urljoin(base_url, url)

    parsed = urlparse(url)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return url
    return None


def resolve_images(images: Iterable[ScoredImage], base_url: str | None) -> list[ScoredImage]:
    """Make every image URL absolute, dropping the ones that cannot be."""
    result = []
    for image in images:
        url = resolve_url(image.url, base_url)
        if url:
            result.append(replace(image, url=url))
    return result


def normalize(
    raw: RawExtraction,
    base_url: str | None = None,
    method: ExtractionMethod | None = None,
) -> RecipeDraft:
    """
    Turn a raw extraction into a RecipeDraft.

    Trims every string, drops nameless ingredients, numbers instruction
    steps, and resolves image URLs against ``base_url``. Missing optional
    fields stay None.
    """
    steps = extract_instruction_steps(raw.instructions)

    return RecipeDraft(
        name=clean_text(raw.name) or "",
        instructions=format_instructions(steps),
        ingredients=normalize_ingredients(raw.ingredients),
        source_url=clean_text(raw.source_url),
        description=clean_text(raw.description),
        prep_time=clean_text(raw.prep_time),
        cook_time=clean_text(raw.cook_time),
        total_time=clean_text(raw.total_time),
        servings=parse_servings(raw.servings),
        cuisine=clean_text(raw.cuisine),
        category=clean_text(raw.category),
        author=clean_text(raw.author),
        nutrition=normalize_nutrition(raw.nutrition),
        candidate_images=resolve_images(raw.candidate_images, base_url),
        method=method,
    )


def attach_images(
    draft: RecipeDraft,
    images: Iterable[ScoredImage],
    base_url: str | None,
) -> RecipeDraft:
    """Return a copy of ``draft`` carrying ``images`` with absolute URLs."""
    return replace(draft, candidate_images=resolve_images(images, base_url))
