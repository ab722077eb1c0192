"""Tests for microdata extraction."""

from mealmate.recipe_import.extractors.microdata import MicrodataTier, find_recipes_in_microdata
from mealmate.recipe_import.models import ExtractionMethod

PAGE_URL = "https://cooks.example.org/pancakes"

MICRODATA_HTML = """
<html><body>
<div itemscope itemtype="https://schema.org/Recipe">
  <h1 itemprop="name">Buttermilk Pancakes</h1>
  <span itemprop="author" itemscope itemtype="https://schema.org/Person">
    <span itemprop="name">Sam Cook</span>
  </span>
  <meta itemprop="prepTime" content="PT5M">
  <span itemprop="recipeYield">Serves 4</span>
  <ul>
    <li itemprop="recipeIngredient">2 cups flour</li>
    <li itemprop="recipeIngredient">1 1/2 cups buttermilk</li>
    <li itemprop="recipeIngredient">2 eggs</li>
  </ul>
  <ol>
    <li itemprop="recipeInstructions">Whisk everything together.</li>
    <li itemprop="recipeInstructions">Cook on a hot griddle.</li>
  </ol>
</div>
</body></html>
"""


class TestFindRecipesInMicrodata:
    def test_nested_recipe(self):
        items = [
            {
                "type": "https://schema.org/WebPage",
                "properties": {
                    "mainEntity": {"type": "https://schema.org/Recipe", "properties": {"name": "Nested"}},
                },
            }
        ]
        assert [p["name"] for p in find_recipes_in_microdata(items)] == ["Nested"]

    def test_no_recipe(self):
        assert list(find_recipes_in_microdata([{"type": "https://schema.org/Article", "properties": {}}])) == []


class TestMicrodataTier:
    def test_extracts_recipe(self):
        draft = MicrodataTier().try_extract(MICRODATA_HTML, PAGE_URL)

        assert draft is not None
        assert draft.method == ExtractionMethod.MICRODATA
        assert draft.name == "Buttermilk Pancakes"
        assert [i.name for i in draft.ingredients] == ["flour", "buttermilk", "eggs"]
        assert draft.ingredients[1].amount == "1 1/2"
        assert draft.instructions == "1. Whisk everything together.\n2. Cook on a hot griddle."
        assert draft.servings == 4
        assert draft.prep_time == "PT5M"
        assert draft.author == "Sam Cook"

    def test_no_microdata(self, plain_html):
        assert MicrodataTier().try_extract(plain_html, PAGE_URL) is None

    def test_nested_nutrition(self):
        html = MICRODATA_HTML.replace(
            '<meta itemprop="prepTime" content="PT5M">',
            '<meta itemprop="prepTime" content="PT5M">'
            '<div itemprop="nutrition" itemscope itemtype="https://schema.org/NutritionInformation">'
            '<span itemprop="calories">240 calories</span>'
            '<span itemprop="fatContent">9 g</span>'
            "</div>",
        )
        draft = MicrodataTier().try_extract(html, PAGE_URL)
        assert draft.nutrition == {"calories": "240 calories", "fat": "9 g"}
