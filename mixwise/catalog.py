import json
import logging
from pathlib import Path
from urllib.parse import quote
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from .classify import categorize_item
from .normalize import group_by_normalized_name, normalize_ingredient
from .schemas import Catalog, Item, Recipe

logger = logging.getLogger(__name__)

# Third-party drink categories -> our categories
CATEGORY_MAP = {
    "Ordinary Drink": "Cocktail",
    "Cocktail": "Cocktail",
    "Milk / Float / Shake": "Rich & Creamy",
    "Cocoa": "Rich & Creamy",
    "Shot": "Shot",
    "Coffee / Tea": "Coffee",
    "Homemade Liqueur": "Liqueur",
    "Punch / Party Drink": "Punch",
    "Beer": "Beer",
    "Soft Drink": "Non-Alcoholic",
    "Other / Unknown": "Other",
}

# Only true basics are staples; spirits stay inventory items.
STAPLES = (
    "Lemon Juice",
    "Lime Juice",
    "Simple Syrup",
    "Sugar",
    "Ice",
    "Water",
)

MAX_DRINK_INGREDIENTS = 15
INGREDIENT_IMAGE_URL = "https://www.thecocktaildb.com/images/ingredients/{name}-Small.png"


def _validated(model, entries: Iterable[Any], kind: str) -> List:
    out = []
    for i, entry in enumerate(entries or []):
        try:
            out.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning("skipping %s #%d: %s", kind, i, e.errors()[0].get("msg", e))
    return out


def catalog_from_dict(data: Dict[str, Any]) -> Catalog:
    """Build a Catalog from plain data, dropping entries that fail validation."""
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"catalog must be a JSON object, got {type(data).__name__}")
    return Catalog(
        items=_validated(Item, data.get("items"), "item"),
        recipes=_validated(Recipe, data.get("recipes"), "recipe"),
    )


def load_catalog(path) -> Catalog:
    """Load a catalog JSON file ({"items": [...], "recipes": [...]}).

    A missing file yields an empty catalog. A "drinks" key is read as a
    third-party drink payload instead.
    """
    p = Path(path)
    if not p.exists():
        logger.warning("catalog file %s not found", p)
        return Catalog()
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and "drinks" in data:
        return parse_drinks(data.get("drinks") or [])
    return catalog_from_dict(data)


def _drink_ingredients(drink: Dict[str, Any]) -> List[Tuple[str, Optional[str]]]:
    out = []
    for i in range(1, MAX_DRINK_INGREDIENTS + 1):
        name = drink.get(f"strIngredient{i}")
        if not name or not str(name).strip():
            continue
        measure = drink.get(f"strMeasure{i}")
        measure = str(measure).strip() if measure else None
        out.append((str(name).strip(), measure or None))
    return out


def _drink_id(drink: Dict[str, Any]) -> Optional[int]:
    try:
        return int(drink.get("idDrink"))
    except (TypeError, ValueError):
        return None


def parse_drinks(drinks: Iterable[Dict[str, Any]], staples: Iterable[str] = STAPLES) -> Catalog:
    """Convert a third-party drink listing into our catalog.

    Items are discovered in drink order and numbered from 1; an item is a
    staple when its exact name is in ``staples``. Drinks without a name are
    skipped. Drinks without a numeric id are numbered past the largest real
    id in the listing.
    """
    drinks = list(drinks or [])
    staple_names = set(staples)
    next_id = max((_drink_id(d) or 0 for d in drinks if isinstance(d, dict)), default=0) + 1
    items: Dict[str, Item] = {}
    recipes: List[Recipe] = []

    for drink in drinks:
        if not isinstance(drink, dict) or not drink.get("strDrink"):
            logger.warning("skipping drink without a name")
            continue
        components = []
        seen = set()
        for name, measure in _drink_ingredients(drink):
            item = items.get(name)
            if item is None:
                item = Item(
                    id=len(items) + 1,
                    name=name,
                    category=categorize_item(name),
                    image_url=INGREDIENT_IMAGE_URL.format(name=quote(name, safe="")),
                    is_staple=name in staple_names,
                )
                items[name] = item
            if item.id in seen:
                continue
            seen.add(item.id)
            components.append({"item_id": item.id, "name": item.name, "amount": measure})

        recipe_id = _drink_id(drink)
        if recipe_id is None:
            recipe_id = next_id
            next_id += 1
        recipes.append(
            Recipe(
                id=recipe_id,
                name=str(drink["strDrink"]).strip(),
                instructions=drink.get("strInstructions") or "",
                category=CATEGORY_MAP.get(drink.get("strCategory"), "Other"),
                image_url=drink.get("strDrinkThumb"),
                vessel_hint=drink.get("strGlass"),
                components=components,
            )
        )

    logger.info("parsed %d drinks with %d unique ingredients", len(recipes), len(items))
    return Catalog(items=list(items.values()), recipes=recipes)


def staple_item_ids(items: Iterable[Item]) -> List[int]:
    return [i.id for i in items or [] if i.is_staple]


def resolve_item_ids(items: Iterable[Item], names: Iterable[str]) -> Tuple[List[int], List[str]]:
    """Map free-text names to item ids by exact name, then normalized key.

    Returns (ids, unknown_names).
    """
    items = list(items or [])
    by_name = {i.name.lower(): i.id for i in items}
    groups = group_by_normalized_name(items)
    ids: List[int] = []
    unknown: List[str] = []
    for name in names or []:
        item_id = by_name.get(str(name).strip().lower())
        if item_id is None:
            group = groups.get(normalize_ingredient(name))
            item_id = group[0].id if group else None
        if item_id is None:
            unknown.append(name)
        elif item_id not in ids:
            ids.append(item_id)
    return ids, unknown
