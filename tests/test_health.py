"""Basic health check tests."""

from typer.testing import CliRunner

from mealmate.main import app

runner = CliRunner()


def test_import_mealmate():
    """Test that mealmate package can be imported."""
    import mealmate
    assert mealmate.__version__ == "1.0.0"


def test_import_engine():
    """Test that the engine and its errors can be imported."""
    from mealmate.recipe_import import (
        RecipeEngine,
        RecipeEngineError,
        ExtractionError,
        FetchError,
        TextExtractionError,
    )

    assert issubclass(ExtractionError, RecipeEngineError)
    assert issubclass(FetchError, RecipeEngineError)
    assert issubclass(TextExtractionError, RecipeEngineError)
    assert callable(RecipeEngine.from_settings)


def test_settings_defaults():
    from mealmate.config import get_settings

    settings = get_settings()
    assert settings.fetch_max_attempts == 3
    assert settings.max_text_length == 10_000
    assert settings.image_score_min == 0
    assert settings.image_score_max == 100


def test_version_command():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.stdout


def test_domains_command():
    result = runner.invoke(app, ["domains"])
    assert result.exit_code == 0
    assert "AllRecipes" in result.stdout
    assert "food.com" in result.stdout


def test_parse_text_rejects_unknown_context():
    result = runner.invoke(app, ["parse-text", "Easy tacos", "--context", "email"])
    assert result.exit_code == 2
