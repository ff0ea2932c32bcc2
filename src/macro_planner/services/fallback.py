"""Deterministic, rule-based meal suggestions used when the AI cannot help."""

from dataclasses import dataclass
from datetime import date

from macro_planner.domain.errors import InsufficientBudgetError
from macro_planner.domain.ledger import RemainingBudget
from macro_planner.domain.nutrition import (
    MacroProfile,
    MealSlot,
    energy_from_macros,
    floor_grams,
)
from macro_planner.domain.suggestions import MealSuggestion

VEGETARIAN = "vegetarian"
VEGAN = "vegan"
GLUTEN_FREE = "gluten_free"
DAIRY_FREE = "dairy_free"

_RESTRICTION_ALIASES = {
    "vegetarian": VEGETARIAN,
    "veg": VEGETARIAN,
    "vegan": VEGAN,
    "plant_based": VEGAN,
    "gluten_free": GLUTEN_FREE,
    "gluten-free": GLUTEN_FREE,
    "celiac": GLUTEN_FREE,
    "dairy_free": DAIRY_FREE,
    "dairy-free": DAIRY_FREE,
    "lactose_intolerant": DAIRY_FREE,
}


@dataclass(frozen=True)
class MealTemplate:
    """A fallback meal idea; macros are sized to the budget at runtime."""

    name: str
    description: str
    ingredients: tuple[str, ...]
    instructions: str
    tags: frozenset[str]


_GENERIC = MealTemplate(
    name="Balanced Plate",
    description="Lean protein, a whole-grain or starchy side and vegetables.",
    ingredients=("Lean protein of choice", "Whole grains", "Mixed vegetables"),
    instructions="Portion each component to the amounts shown and serve.",
    tags=frozenset({VEGETARIAN, VEGAN, GLUTEN_FREE, DAIRY_FREE}),
)

TEMPLATES: dict[MealSlot, tuple[MealTemplate, ...]] = {
    MealSlot.BREAKFAST: (
        MealTemplate(
            name="Greek Yogurt Parfait",
            description="Yogurt layered with oats, berries and nuts.",
            ingredients=("Greek yogurt", "Rolled oats", "Mixed berries", "Almonds"),
            instructions="Layer yogurt, oats and berries; top with almonds.",
            tags=frozenset({VEGETARIAN}),
        ),
        MealTemplate(
            name="Veggie Egg Scramble",
            description="Eggs scrambled with spinach and peppers, potato side.",
            ingredients=("Eggs", "Spinach", "Bell pepper", "Roasted potatoes"),
            instructions="Saute vegetables, add beaten eggs and stir until set.",
            tags=frozenset({VEGETARIAN, GLUTEN_FREE, DAIRY_FREE}),
        ),
        MealTemplate(
            name="Tofu Breakfast Bowl",
            description="Seasoned tofu crumble over rice with avocado.",
            ingredients=("Firm tofu", "Brown rice", "Avocado", "Cherry tomatoes"),
            instructions="Crumble and pan-fry tofu; serve over rice with toppings.",
            tags=frozenset({VEGETARIAN, VEGAN, GLUTEN_FREE, DAIRY_FREE}),
        ),
    ),
    MealSlot.LUNCH: (
        MealTemplate(
            name="Grilled Chicken Quinoa Bowl",
            description="Lean protein with complex carbs and greens.",
            ingredients=("Chicken breast", "Quinoa", "Cucumber", "Olive oil"),
            instructions="Grill chicken, cook quinoa, combine with vegetables.",
            tags=frozenset({GLUTEN_FREE, DAIRY_FREE}),
        ),
        MealTemplate(
            name="Lentil and Rice Bowl",
            description="Spiced lentils with rice and roasted vegetables.",
            ingredients=("Red lentils", "Basmati rice", "Carrots", "Olive oil"),
            instructions="Simmer lentils with spices; serve over rice.",
            tags=frozenset({VEGETARIAN, VEGAN, GLUTEN_FREE, DAIRY_FREE}),
        ),
        MealTemplate(
            name="Turkey Whole-Wheat Wrap",
            description="Turkey, hummus and crunchy vegetables in a wrap.",
            ingredients=("Turkey breast", "Whole-wheat tortilla", "Hummus", "Lettuce"),
            instructions="Spread hummus, add turkey and vegetables, roll tightly.",
            tags=frozenset({DAIRY_FREE}),
        ),
    ),
    MealSlot.DINNER: (
        MealTemplate(
            name="Baked Salmon with Sweet Potato",
            description="Omega-3 rich fish with roasted sweet potato and greens.",
            ingredients=("Salmon fillet", "Sweet potato", "Green beans"),
            instructions="Bake salmon and sweet potato; steam the green beans.",
            tags=frozenset({GLUTEN_FREE, DAIRY_FREE}),
        ),
        MealTemplate(
            name="Chickpea Vegetable Curry",
            description="Chickpeas and vegetables in a light tomato curry.",
            ingredients=("Chickpeas", "Tomatoes", "Spinach", "Brown rice"),
            instructions="Simmer chickpeas and vegetables in spiced tomato sauce.",
            tags=frozenset({VEGETARIAN, VEGAN, GLUTEN_FREE, DAIRY_FREE}),
        ),
        MealTemplate(
            name="Lean Beef Stir-Fry",
            description="Beef strips with mixed vegetables over noodles.",
            ingredients=("Lean beef", "Broccoli", "Snap peas", "Egg noodles"),
            instructions="Stir-fry beef, add vegetables, toss with noodles.",
            tags=frozenset({DAIRY_FREE}),
        ),
    ),
    MealSlot.SNACK: (
        MealTemplate(
            name="Apple with Peanut Butter",
            description="Crisp apple slices with a spoon of peanut butter.",
            ingredients=("Apple", "Peanut butter"),
            instructions="Slice the apple and serve with peanut butter.",
            tags=frozenset({VEGETARIAN, VEGAN, GLUTEN_FREE, DAIRY_FREE}),
        ),
        MealTemplate(
            name="Cottage Cheese and Fruit",
            description="Cottage cheese topped with pineapple.",
            ingredients=("Cottage cheese", "Pineapple"),
            instructions="Top cottage cheese with fruit.",
            tags=frozenset({VEGETARIAN, GLUTEN_FREE}),
        ),
        MealTemplate(
            name="Roasted Chickpeas",
            description="Crunchy oven-roasted chickpeas.",
            ingredients=("Chickpeas", "Olive oil", "Paprika"),
            instructions="Toss chickpeas with oil and paprika; roast until crisp.",
            tags=frozenset({VEGETARIAN, VEGAN, GLUTEN_FREE, DAIRY_FREE}),
        ),
    ),
}


def fallback_macros(budget: RemainingBudget) -> MacroProfile:
    """Return macros that fill the budget as closely as possible.

    Raises InsufficientBudgetError when a macro is already over budget,
    since no meal can then pass the validator.
    """
    exhausted = {
        name: round(-getattr(budget, name), 2)
        for name in ("calories", "protein_g", "carbs_g", "fat_g")
        if getattr(budget, name) < 0
    }
    if exhausted:
        raise InsufficientBudgetError(
            exhausted,
            f"{budget.slot.value} is already over budget for "
            f"{', '.join(sorted(exhausted))}",
        )
    protein_g = floor_grams(budget.protein_g)
    carbs_g = floor_grams(budget.carbs_g)
    fat_g = floor_grams(budget.fat_g)
    energy = energy_from_macros(protein_g, carbs_g, fat_g)
    if energy > budget.calories:
        factor = budget.calories / energy
        protein_g = floor_grams(protein_g * factor)
        carbs_g = floor_grams(carbs_g * factor)
        fat_g = floor_grams(fat_g * factor)
        energy = energy_from_macros(protein_g, carbs_g, fat_g)
    calories = min(int(energy), int(budget.calories))
    return MacroProfile(
        calories=float(calories), protein_g=protein_g, fat_g=fat_g, carbs_g=carbs_g
    )


def fallback_suggestions(
    budget: RemainingBudget,
    day: date,
    restrictions: list[str],
    count: int = 3,
) -> list[MealSuggestion]:
    """Build ``count`` suggestions sharing the same budget-fitting macros.

    Template choice rotates with the day so repeated calls for the same day
    and slot are stable.
    """
    if count <= 0:
        return []
    macros = fallback_macros(budget)
    templates = _eligible_templates(budget.slot, restrictions)
    offset = day.toordinal() % len(templates)
    suggestions = []
    for index in range(count):
        template = templates[(offset + index) % len(templates)]
        name = template.name
        if index >= len(templates):
            name = f"{template.name} (option {index + 1})"
        suggestions.append(
            MealSuggestion(
                name=name,
                description=template.description,
                calories=int(macros.calories),
                protein_g=macros.protein_g,
                carbs_g=macros.carbs_g,
                fat_g=macros.fat_g,
                ingredients=list(template.ingredients),
                instructions=template.instructions,
                source="fallback",
            )
        )
    return suggestions


def normalize_restrictions(restrictions: list[str]) -> set[str]:
    """Map free-form restriction labels onto known template tags."""
    normalized = set()
    for restriction in restrictions:
        key = restriction.strip().lower().replace(" ", "_")
        tag = _RESTRICTION_ALIASES.get(key)
        if tag:
            normalized.add(tag)
    if VEGAN in normalized:
        normalized.update({VEGETARIAN, DAIRY_FREE})
    return normalized


def _eligible_templates(
    slot: MealSlot, restrictions: list[str]
) -> tuple[MealTemplate, ...]:
    required = normalize_restrictions(restrictions)
    eligible = tuple(
        template for template in TEMPLATES[slot] if required <= template.tags
    )
    return eligible or (_GENERIC,)
