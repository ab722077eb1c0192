"""Tests for the generic fallback extractor."""

from mealmate.recipe_import.extractors.generic import GenericTier
from mealmate.recipe_import.models import ExtractionMethod

PAGE_URL = "https://grandmas-kitchen.example.net/2024/05/lemon-bars"

BLOG_HTML = """
<html><body>
  <header><h1>Grandma's Kitchen</h1></header>
  <article>
    <h2 class="wprm-recipe-title">Lemon Bars</h2>
    <p>These remind me of summer.</p>
    <div class="recipe-ingredients">
      <ul>
        <li>1 cup flour</li>
        <li>1/2 cup butter, melted</li>
        <li>2 lemons</li>
      </ul>
    </div>
    <div class="recipe-instructions">
      <ol>
        <li>Press the crust into a pan.</li>
        <li>Pour over the lemon filling and bake.</li>
      </ol>
    </div>
  </article>
</body></html>
"""


class TestGenericTier:
    def test_extracts_from_class_heuristics(self):
        draft = GenericTier().try_extract(BLOG_HTML, PAGE_URL)

        assert draft is not None
        assert draft.method == ExtractionMethod.GENERIC
        assert draft.name == "Lemon Bars"
        assert [i.name for i in draft.ingredients] == ["flour", "butter", "lemons"]
        assert draft.instructions == (
            "1. Press the crust into a pan.\n2. Pour over the lemon filling and bake."
        )

    def test_falls_back_to_h1(self):
        html = """
        <html><body>
          <h1>Quick Salsa</h1>
          <ul class="ingredients"><li>3 tomatoes</li><li>1 onion</li></ul>
          <ol class="instructions"><li>Chop and mix everything.</li></ol>
        </body></html>
        """
        draft = GenericTier().try_extract(html, PAGE_URL)
        assert draft.name == "Quick Salsa"
        assert len(draft.ingredients) == 2

    def test_page_without_recipe(self, plain_html):
        assert GenericTier().try_extract(plain_html, PAGE_URL) is None

    def test_title_without_instructions(self):
        html = "<html><body><h1>Our Story</h1><p>Founded in 1999.</p></body></html>"
        assert GenericTier().try_extract(html, PAGE_URL) is None

    def test_checkout_page_is_not_a_recipe(self):
        html = """
        <html><body>
          <h1>Checkout your order</h1>
          <ul class="payment-methods"><li>Visa or Mastercard</li><li>PayPal account</li></ul>
          <div class="stepper"><span>Shipping details</span><span>Payment details</span></div>
        </body></html>
        """
        assert GenericTier().try_extract(html, "https://shop.example.com/checkout") is None

    def test_instructions_without_ingredients(self):
        html = """
        <html><body>
          <h1>How to Fold a Napkin</h1>
          <ol class="instructions"><li>Fold it in half.</li><li>Fold it again.</li></ol>
        </body></html>
        """
        assert GenericTier().try_extract(html, PAGE_URL) is None
