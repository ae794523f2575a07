PARSE_CATEGORIES = (
    "Breakfast",
    "Mains",
    "Sides",
    "Desserts",
    "Snacks",
    "Drinks",
    "Sauces & Dips",
    "Powders",
    "Temple Recipes",
    "Other",
)


PARSE_RECIPE_PROMPT = """
Parse this dictated recipe into structured JSON. Extract the recipe name,
description, prep time, cook time, servings, ingredients list, step-by-step
instructions, and suggest an appropriate category.

Recipe text:
"{text}"

Categories to choose from: {categories}

Respond ONLY with valid JSON in this exact format:
{{
  "name": "Recipe Name",
  "description": "Brief appetizing description (1-2 sentences)",
  "category": "Category from the list above",
  "prepTime": "X mins",
  "cookTime": "X mins",
  "servings": "X servings",
  "ingredients": ["ingredient 1 with amount", "ingredient 2 with amount"],
  "instructions": ["Step 1 as a complete sentence", "Step 2 as a complete sentence"]
}}

If any field is not mentioned, make a reasonable guess. Clean up the language
to be clear and professional. Make sure ingredients include amounts and
instructions are clear, complete sentences.
""".strip()


class ParseRecipePrompt:
    def __init__(
        self,
        text: str,
        *,
        categories: tuple[str, ...] = PARSE_CATEGORIES,
        template: str | None = None,
    ) -> None:
        self.text = text
        self.categories = categories
        self.template = PARSE_RECIPE_PROMPT if template is None else template

    def __str__(self) -> str:
        return self.template.format(
            text=self.text,
            categories=", ".join(self.categories),
        )
