"""Tests for recipe normalization."""

from mealmate.recipe_import.models import (
    ExtractionMethod,
    ImageClassification,
    Ingredient,
    RawExtraction,
    ScoredImage,
)
from mealmate.recipe_import.normalizer import (
    attach_images,
    clean_text,
    extract_instruction_steps,
    format_instructions,
    normalize,
    normalize_ingredients,
    normalize_nutrition,
    parse_ingredient_line,
    parse_servings,
    resolve_url,
)


class TestCleanText:
    def test_trims_and_collapses_whitespace(self):
        assert clean_text("  Simple   Bread \n") == "Simple Bread"

    def test_strips_html_and_entities(self):
        assert clean_text("<b>Mac &amp; Cheese</b>") == "Mac & Cheese"

    def test_empty_becomes_none(self):
        assert clean_text("   ") is None
        assert clean_text(None) is None
        assert clean_text([]) is None

    def test_person_dict(self):
        assert clean_text({"@type": "Person", "name": "Jane Baker"}) == "Jane Baker"

    def test_list_takes_first_non_empty(self):
        assert clean_text(["", "Dessert", "Snack"]) == "Dessert"


class TestParseServings:
    """Tests for recipe yield/servings parsing."""

    def test_parse_plain_number(self):
        assert parse_servings("4") == 4
        assert parse_servings(6) == 6

    def test_parse_with_servings_text(self):
        assert parse_servings("4 servings") == 4
        assert parse_servings("Serves 8") == 8

    def test_parse_list(self):
        assert parse_servings(["4", "4 servings"]) == 4

    def test_parse_none_or_empty(self):
        assert parse_servings(None) is None
        assert parse_servings("") is None
        assert parse_servings("a crowd") is None


class TestParseIngredientLine:
    def test_amount_unit_name(self):
        assert parse_ingredient_line("2 cups flour") == Ingredient(name="flour", amount="2", unit="cups")

    def test_abbreviated_unit(self):
        ingredient = parse_ingredient_line("1 tsp salt")
        assert ingredient.amount == "1"
        assert ingredient.unit == "tsp"
        assert ingredient.name == "salt"

    def test_notes_after_comma(self):
        ingredient = parse_ingredient_line("2 cloves garlic, minced")
        assert ingredient == Ingredient(name="garlic", amount="2", unit="cloves", notes="minced")

    def test_parenthetical_notes(self):
        ingredient = parse_ingredient_line("1 cup butter (softened)")
        assert ingredient.name == "butter"
        assert ingredient.notes == "softened"

    def test_fractions(self):
        assert parse_ingredient_line("1/2 cup sugar").amount == "1/2"
        assert parse_ingredient_line("1 1/2 cups milk").amount == "1 1/2"
        assert parse_ingredient_line("½ tsp cumin").amount == "½"

    def test_no_unit(self):
        ingredient = parse_ingredient_line("3 eggs")
        assert ingredient.amount == "3"
        assert ingredient.unit is None
        assert ingredient.name == "eggs"

    def test_no_quantity_leaves_amount_empty(self):
        ingredient = parse_ingredient_line("taco shells")
        assert ingredient == Ingredient(name="taco shells", amount="")

    def test_to_taste(self):
        ingredient = parse_ingredient_line("salt, to taste")
        assert ingredient.name == "salt"
        assert ingredient.amount == "to taste"

    def test_pinch(self):
        ingredient = parse_ingredient_line("a pinch of nutmeg")
        assert ingredient.name == "nutmeg"
        assert ingredient.amount == "a pinch"

    def test_blank_line(self):
        assert parse_ingredient_line("   ") is None


class TestNormalizeIngredients:
    def test_drops_empty_entries(self):
        result = normalize_ingredients(["2 cups flour", "", "  ", "1 tsp salt"])
        assert [i.name for i in result] == ["flour", "salt"]

    def test_dicts_from_llm(self):
        result = normalize_ingredients([
            {"name": "chicken", "amount": "1", "unit": "lb", "notes": None},
            {"name": "  ", "amount": "2"},
            {"name": "taco shells", "amount": None},
        ])
        assert result == [
            Ingredient(name="chicken", amount="1", unit="lb"),
            Ingredient(name="taco shells", amount=""),
        ]

    def test_newline_string(self):
        result = normalize_ingredients("2 cups flour\n1 tsp salt")
        assert len(result) == 2

    def test_preserves_order(self):
        result = normalize_ingredients(["1 egg", "2 cups milk", "3 tbsp butter"])
        assert [i.name for i in result] == ["egg", "milk", "butter"]


class TestExtractInstructionSteps:
    def test_string_list(self):
        assert extract_instruction_steps(["Mix", "Bake"]) == ["Mix", "Bake"]

    def test_howto_steps(self):
        steps = extract_instruction_steps([
            {"@type": "HowToStep", "text": "Mix ingredients"},
            {"@type": "HowToStep", "text": "Bake for 30 minutes"},
        ])
        assert steps == ["Mix ingredients", "Bake for 30 minutes"]

    def test_howto_sections(self):
        steps = extract_instruction_steps([
            {
                "@type": "HowToSection",
                "name": "Dough",
                "itemListElement": [
                    {"@type": "HowToStep", "text": "Knead."},
                    {"@type": "HowToStep", "text": "Rest."},
                ],
            },
            {
                "@type": "HowToSection",
                "name": "Bake",
                "itemListElement": [{"@type": "HowToStep", "text": "Bake."}],
            },
        ])
        assert steps == ["Knead.", "Rest.", "Bake."]

    def test_numbered_lines_lose_their_numbers(self):
        steps = extract_instruction_steps("1. Mix ingredients\n2. Bake for 30 minutes\n3. Serve")
        assert steps == ["Mix ingredients", "Bake for 30 minutes", "Serve"]

    def test_inline_numbering(self):
        steps = extract_instruction_steps("1. Mix well. 2. Bake at 350F. 3. Cool.")
        assert steps == ["Mix well.", "Bake at 350F.", "Cool."]

    def test_temperature_is_not_a_step_marker(self):
        steps = extract_instruction_steps("Bake at 350. Let it cool for 10 minutes.")
        assert len(steps) == 1

    def test_leading_decimal_is_kept(self):
        steps = extract_instruction_steps(["Mix everything.", "1.5 hours later, punch down the dough."])
        assert steps == ["Mix everything.", "1.5 hours later, punch down the dough."]
        assert format_instructions(steps) == (
            "1. Mix everything.\n2. 1.5 hours later, punch down the dough."
        )

    def test_html_string(self):
        steps = extract_instruction_steps("<p>Mix.</p><p>Bake.</p>")
        assert steps == ["Mix.", "Bake."]

    def test_empty(self):
        assert extract_instruction_steps(None) == []
        assert extract_instruction_steps([]) == []
        assert extract_instruction_steps(["", "  "]) == []


class TestFormatInstructions:
    def test_numbers_each_step(self):
        assert format_instructions(["Mix", "Bake"]) == "1. Mix\n2. Bake"

    def test_empty(self):
        assert format_instructions([]) == ""


class TestNormalizeNutrition:
    def test_schema_keys_become_short_keys(self):
        nutrition = normalize_nutrition(
            {"@type": "NutritionInformation", "calories": 250, "fiberContent": " 4 g ", "sugarContent": ""}
        )
        assert nutrition == {"calories": "250", "fiber": "4 g"}

    def test_microdata_item(self):
        item = {"type": "https://schema.org/NutritionInformation", "properties": {"proteinContent": "12 g"}}
        assert normalize_nutrition(item) == {"protein": "12 g"}

    def test_already_normalized(self):
        assert normalize_nutrition({"calories": "250", "fat": "9 g"}) == {"calories": "250", "fat": "9 g"}

    def test_nothing_known(self):
        assert normalize_nutrition({"servingSize": "1 bowl"}) is None
        assert normalize_nutrition("lots") is None
        assert normalize_nutrition(None) is None


class TestResolveUrl:
    def test_absolute(self):
        assert resolve_url("https://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_relative(self):
        assert resolve_url("/img/a.jpg", "https://example.com/recipes/1") == "https://example.com/img/a.jpg"
        assert resolve_url("a.jpg", "https://example.com/recipes/1") == "https://example.com/recipes/a.jpg"

    def test_protocol_relative(self):
        assert resolve_url("//cdn.example.com/a.jpg", "http://example.com/") == "http://cdn.example.com/a.jpg"
        assert resolve_url("//cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_unresolvable(self):
        assert resolve_url("data:image/png;base64,AAAA", "https://example.com/") is None
        assert resolve_url("/img/a.jpg") is None
        assert resolve_url("") is None
        assert resolve_url(None) is None


class TestNormalize:
    def test_full_draft(self):
        raw = RawExtraction(
            name="  Simple Bread ",
            ingredients=["2 cups flour", "", "1 tsp salt"],
            instructions=["Mix.", "Bake."],
            servings="8 servings",
            prep_time="PT10M",
            author={"@type": "Person", "name": "Jane"},
        )
        draft = normalize(raw, method=ExtractionMethod.JSON_LD)

        assert draft.name == "Simple Bread"
        assert len(draft.ingredients) == 2
        assert draft.instructions == "1. Mix.\n2. Bake."
        assert draft.servings == 8
        assert draft.prep_time == "PT10M"
        assert draft.author == "Jane"
        assert draft.method == ExtractionMethod.JSON_LD

    def test_missing_optional_fields_stay_none(self):
        draft = normalize(RawExtraction(name="Toast", instructions="Toast the bread."))
        assert draft.description is None
        assert draft.cook_time is None
        assert draft.servings is None
        assert draft.cuisine is None
        assert draft.confidence is None

    def test_not_usable_without_instructions(self):
        draft = normalize(RawExtraction(name="Toast", ingredients=["1 slice bread"]))
        assert not draft.is_usable

    def test_relative_images_resolved(self):
        raw = RawExtraction(
            name="Toast",
            instructions="Toast it.",
            candidate_images=[
                ScoredImage(url="/a.jpg", score=50, classification=ImageClassification.HERO),
                ScoredImage(url="data:image/gif;base64,R0", score=50, classification=ImageClassification.GALLERY),
            ],
        )
        draft = normalize(raw, base_url="https://example.com/r/toast")
        assert [i.url for i in draft.candidate_images] == ["https://example.com/a.jpg"]

    def test_normalize_is_idempotent_on_its_output(self):
        raw = RawExtraction(name="Toast", ingredients=["1 slice bread"], instructions=["Toast.", "Butter."])
        first = normalize(raw)
        second = normalize(
            RawExtraction(
                name=first.name,
                ingredients=first.ingredients,
                instructions=first.instructions,
            )
        )
        assert second.instructions == first.instructions
        assert second.ingredients == first.ingredients

    def test_attach_images_makes_urls_absolute(self):
        draft = normalize(RawExtraction(name="Toast", instructions="Toast it."))
        images = [ScoredImage(url="img/t.webp", score=60, classification=ImageClassification.HERO)]
        result = attach_images(draft, images, "https://example.com/r/")
        assert result.candidate_images[0].url == "https://example.com/r/img/t.webp"
        assert draft.candidate_images == []
