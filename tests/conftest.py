"""
Pytest configuration and fixtures for recipe import tests.
"""

import asyncio
import os

import pytest

# Set test environment before importing mealmate modules
os.environ["MEALMATE_ENV"] = "development"
os.environ["OPENAI_API_KEY"] = "sk-test-key"
os.environ["MEALMATE_LOG_PROMPTS"] = "0"


class FakeClock:
    """Simulated clock: sleeping advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.time = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.time += seconds
        # Let other tasks run, as a real sleep would
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def json_ld_recipe_html():
    """Page with a Recipe in JSON-LD (ingredients as strings, HowToStep instructions)."""
    return """
    <html>
    <head>
        <title>Simple Bread</title>
        <script type="application/ld+json">
        {
            "@context": "https://schema.org",
            "@type": "Recipe",
            "name": "Simple Bread",
            "description": "A basic loaf.",
            "recipeIngredient": ["2 cups flour", "1 tsp salt"],
            "recipeInstructions": [
                {"@type": "HowToStep", "text": "Mix the flour and salt."},
                {"@type": "HowToStep", "text": "Bake for 30 minutes."}
            ],
            "prepTime": "PT10M",
            "cookTime": "PT30M",
            "recipeYield": "1 loaf (8 servings)",
            "recipeCuisine": "American",
            "author": {"@type": "Person", "name": "Jane Baker"}
        }
        </script>
    </head>
    <body><h1>Simple Bread</h1></body>
    </html>
    """


@pytest.fixture
def plain_html():
    """Page with no recipe markup at all."""
    return """
    <html>
    <head><title>About us</title></head>
    <body>
        <nav><a href="/">Home</a></nav>
        <p>We are a small company that sells garden furniture.</p>
    </body>
    </html>
    """
