"""Tests for site-specific selector extraction."""

from mealmate.recipe_import.extractors.site_specific import (
    SITE_CONFIGS,
    SiteRegistry,
    SiteSpecificTier,
)
from mealmate.recipe_import.models import ExtractionMethod

SERIOUS_EATS_HTML = """
<html><body>
  <h1 class="heading__title">Best Weeknight Chili</h1>
  <ul class="structured-ingredients__list">
    <li class="structured-ingredients__list-item">2 lb ground beef</li>
    <li class="structured-ingredients__list-item">1 can (15 oz) kidney beans, drained</li>
    <li class="structured-ingredients__list-item">2 tbsp chili powder</li>
  </ul>
  <section>
    <p class="recipe-procedure-text">Brown the beef in a large pot.</p>
    <p class="recipe-procedure-text">Add beans and chili powder; simmer 30 minutes.</p>
  </section>
  <div class="recipe-about__item" data-ingredient="prep time">15 mins</div>
</body></html>
"""


class TestSiteRegistry:
    def test_registry_covers_known_sites(self):
        names = {config.name for config in SITE_CONFIGS}
        assert names == {"AllRecipes", "Food Network", "Bon Appétit", "Serious Eats", "Tasty"}

    def test_lookup_exact_and_www(self):
        registry = SiteRegistry()
        assert registry.lookup("https://www.allrecipes.com/recipe/1/x/").name == "AllRecipes"
        assert registry.lookup("https://tasty.co/recipe/y").name == "Tasty"

    def test_lookup_subdomain(self):
        assert SiteRegistry().lookup("https://m.foodnetwork.com/recipes/z").name == "Food Network"

    def test_lookup_does_not_match_lookalike_domains(self):
        registry = SiteRegistry()
        assert registry.lookup("https://nottasty.co/recipe") is None
        assert registry.lookup("https://allrecipes.com.evil.example/recipe") is None

    def test_supported_domains_include_structured_data_sites(self):
        registry = SiteRegistry()
        assert "food.com" in registry.supported_domains
        assert "seriouseats.com" in registry.supported_domains
        assert registry.is_supported("https://www.epicurious.com/recipes/a")
        assert not registry.is_supported("https://example.com/")


class TestSiteSpecificTier:
    def test_extracts_with_site_selectors(self):
        draft = SiteSpecificTier().try_extract(SERIOUS_EATS_HTML, "https://www.seriouseats.com/chili")

        assert draft is not None
        assert draft.method == ExtractionMethod.SITE_SPECIFIC
        assert draft.name == "Best Weeknight Chili"
        assert [i.name for i in draft.ingredients] == ["ground beef", "kidney beans", "chili powder"]
        assert draft.ingredients[1].notes == "15 oz, drained"
        assert draft.instructions.startswith("1. Brown the beef")
        assert draft.prep_time == "15 mins"

    def test_unregistered_domain_is_skipped(self):
        assert SiteSpecificTier().try_extract(SERIOUS_EATS_HTML, "https://blog.example.com/chili") is None

    def test_registered_domain_with_changed_layout(self):
        html = "<html><body><h1>Chili</h1><p>Just a story.</p></body></html>"
        assert SiteSpecificTier().try_extract(html, "https://www.seriouseats.com/chili") is None
