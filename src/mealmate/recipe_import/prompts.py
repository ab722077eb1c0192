"""Prompts for extracting recipes from free-form text."""

SYSTEM_PROMPT = """You extract cooking recipes from text that people paste into a meal-planning app.

Return a single JSON object and nothing else, with these keys:

| Key | Type | Notes |
|-----|------|-------|
| name | string | The dish name. Required. |
| ingredients | array | Objects with "name", "amount", "unit", "notes" |
| instructions | array of strings | One entry per step, in order. Required. |
| prep_time | string or null | As written, e.g. "15 minutes" |
| cook_time | string or null | As written |
| servings | integer or null | |
| cuisine | string or null | |

## Rules

1. Only use information present in the text. Never invent ingredients, steps or times.
2. "amount" is the quantity as written ("2", "1/2", "a pinch"); use "" when none is given.
3. "unit" is the measurement unit ("cups", "lb", "tbsp") or null.
4. "notes" holds preparation details ("diced", "room temperature") or null.
5. Split run-on directions into separate steps at sentence or numbering boundaries.
6. If the text does not describe a recipe, return {"name": "", "ingredients": [], "instructions": []}.
"""

GENERAL_CONTEXT = """The text was copied from a blog post, an email, a note or a cookbook page.
It may include a story before the recipe; ignore anything that is not part of the recipe."""

SOCIAL_MEDIA_CONTEXT = """The text was copied from a social media post or video caption.
Expect emoji used as bullets or in place of words, hashtags, @mentions, and loose
punctuation. Drop hashtags, mentions and calls to action ("link in bio", "follow for more").
Emoji next to an ingredient usually stand in for a bullet; keep the ingredient itself."""

CONTEXT_PROMPTS = {
    "general": GENERAL_CONTEXT,
    "social_media": SOCIAL_MEDIA_CONTEXT,
}

USER_PROMPT = """## Source

{context_guidance}

## Text

{text}

Extract the recipe as JSON."""


def build_user_prompt(text: str, context: str = "general") -> str:
    guidance = CONTEXT_PROMPTS.get(context, GENERAL_CONTEXT)
    return USER_PROMPT.format(context_guidance=guidance, text=text.strip())
