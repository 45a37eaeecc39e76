import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from . import models, schemas

logger = logging.getLogger(__name__)


def to_item(db_item: models.Item) -> schemas.Item:
    return schemas.Item.model_validate(db_item)


def to_recipe(db_recipe: models.Recipe) -> schemas.Recipe:
    components = [
        schemas.RecipeComponent(
            item_id=c.item_id,
            name=c.item.name if c.item is not None else "",
            amount=c.amount,
            is_optional_hint=c.is_optional_hint,
        )
        for c in db_recipe.components
    ]
    return schemas.Recipe(
        id=db_recipe.id,
        name=db_recipe.name,
        instructions=db_recipe.instructions or "",
        category=db_recipe.category or "Other",
        image_url=db_recipe.image_url,
        vessel_hint=db_recipe.vessel_hint,
        components=components,
    )


def get_item(db: Session, item_id: int):
    return db.query(models.Item).filter(models.Item.id == item_id).first()


def get_item_by_name(db: Session, name: str):
    return db.query(models.Item).filter(models.Item.name == name).first()


def get_items(db: Session) -> List[models.Item]:
    return db.query(models.Item).order_by(models.Item.name).all()


def create_item(db: Session, item: schemas.ItemCreate):
    db_item = models.Item(
        name=item.name,
        category=item.category,
        image_url=item.image_url,
        is_staple=item.is_staple,
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def get_recipe(db: Session, recipe_id: int):
    return db.query(models.Recipe).filter(models.Recipe.id == recipe_id).first()


def get_recipe_by_name(db: Session, name: str):
    return db.query(models.Recipe).filter(models.Recipe.name == name).first()


def _recipe_query(db: Session, q: Optional[str] = None):
    query = db.query(models.Recipe)
    if q:
        query = query.filter(models.Recipe.name.ilike(f"%{q}%"))
    return query


def get_recipes(db: Session, skip: int = 0, limit: int = 100, q: Optional[str] = None):
    return (
        _recipe_query(db, q)
        .order_by(models.Recipe.id)
        .offset(skip)
        .limit(limit)
        .all()
    )


def count_recipes(db: Session, q: Optional[str] = None) -> int:
    return _recipe_query(db, q).count()


def create_recipe(db: Session, recipe: schemas.RecipeCreate):
    db_recipe = models.Recipe(
        name=recipe.name,
        instructions=recipe.instructions,
        category=recipe.category,
        image_url=recipe.image_url,
        vessel_hint=recipe.vessel_hint,
    )
    seen = set()
    for comp in recipe.components:
        if comp.item_id in seen:
            continue
        seen.add(comp.item_id)
        db_recipe.components.append(
            models.RecipeComponent(
                item_id=comp.item_id,
                amount=comp.amount,
                is_optional_hint=comp.is_optional_hint,
            )
        )
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def delete_recipe(db: Session, recipe_id: int):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return False
    db.delete(db_recipe)
    db.commit()
    return True


def load_inventory(db: Session, user_id: str) -> models.Inventory:
    """Return the user's inventory, creating an empty one on first access."""
    inv = db.query(models.Inventory).filter(models.Inventory.user_id == user_id).first()
    if inv is None:
        inv = models.Inventory(user_id=user_id)
        db.add(inv)
        db.commit()
        db.refresh(inv)
    return inv


def inventory_item_ids(inv: models.Inventory) -> List[int]:
    return [row.item_id for row in inv.items]


def save_inventory(db: Session, user_id: str, item_ids: Iterable[int]) -> models.Inventory:
    """Replace the user's inventory with ``item_ids`` (duplicates dropped)."""
    inv = load_inventory(db, user_id)
    inv.items.clear()
    # flush the orphan deletes before re-adding kept ids (unique constraint)
    db.flush()
    seen = set()
    for item_id in item_ids:
        if item_id in seen:
            continue
        seen.add(item_id)
        inv.items.append(models.InventoryItem(item_id=item_id))
    db.add(inv)
    db.commit()
    db.refresh(inv)
    return inv


def favorite_recipe_ids(db: Session, user_id: str) -> List[int]:
    rows = (
        db.query(models.Favorite)
        .filter(models.Favorite.user_id == user_id)
        .order_by(models.Favorite.id)
        .all()
    )
    return [row.recipe_id for row in rows]


def add_favorite(db: Session, user_id: str, recipe_id: int) -> bool:
    """Mark a recipe as a favorite. Returns False if it already was one."""
    if recipe_id in favorite_recipe_ids(db, user_id):
        return False
    db.add(models.Favorite(user_id=user_id, recipe_id=recipe_id))
    db.commit()
    return True


def remove_favorite(db: Session, user_id: str, recipe_id: int) -> bool:
    deleted = (
        db.query(models.Favorite)
        .filter(models.Favorite.user_id == user_id, models.Favorite.recipe_id == recipe_id)
        .delete()
    )
    db.commit()
    return bool(deleted)


def import_catalog(db: Session, catalog: schemas.Catalog) -> Tuple[int, int]:
    """Insert catalog items and recipes that are not stored yet (by name).

    Catalog ids are remapped onto database ids. A recipe is skipped with a
    warning when a component names an item that is not in the catalog or
    repeats an item, since the stored recipe would require different items
    than the catalog one. Returns (items_added, recipes_added).
    """
    id_map: Dict[int, int] = {}
    items_added = 0
    for item in catalog.items:
        existing = get_item_by_name(db, item.name)
        if existing is None:
            existing = models.Item(
                name=item.name,
                category=item.category,
                image_url=item.image_url,
                is_staple=item.is_staple,
            )
            db.add(existing)
            db.flush()
            items_added += 1
        id_map[item.id] = existing.id

    recipes_added = 0
    for recipe in catalog.recipes:
        if get_recipe_by_name(db, recipe.name) is not None:
            continue
        item_ids = [c.item_id for c in recipe.components or []]
        unknown = [i for i in item_ids if i not in id_map]
        if unknown:
            logger.warning("skipping recipe %r: unknown item ids %s", recipe.name, unknown)
            continue
        if len({id_map[i] for i in item_ids}) != len(item_ids):
            logger.warning("skipping recipe %r: repeated item ids %s", recipe.name, item_ids)
            continue
        db_recipe = models.Recipe(
            name=recipe.name,
            instructions=recipe.instructions,
            category=recipe.category,
            image_url=recipe.image_url,
            vessel_hint=recipe.vessel_hint,
        )
        for comp in recipe.components or []:
            db_recipe.components.append(
                models.RecipeComponent(
                    item_id=id_map[comp.item_id],
                    amount=comp.amount,
                    is_optional_hint=comp.is_optional_hint,
                )
            )
        db.add(db_recipe)
        db.flush()
        recipes_added += 1

    db.commit()
    return items_added, recipes_added
