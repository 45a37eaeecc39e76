# flake8: noqa

from fastapi import FastAPI, Depends, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from . import crud, schemas
from .catalog import staple_item_ids
from .config import DEFAULT_SETTINGS
from .db import SessionLocal, init_db
from .logging_utils import init_logging
from .matching import compute_matches, missing_for_recipe
from .normalize import group_by_normalized_name, pick_representative, sorted_variants
from .substitutions import build_rules_from_items

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize logging and DB once at startup
    init_logging(DEFAULT_SETTINGS.log_level)
    init_db()
    logger.info("database ready at %s", DEFAULT_SETTINGS.database_url)
    yield


app = FastAPI(title="MixWise", lifespan=lifespan)

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _catalog_items(db: Session) -> List[schemas.Item]:
    return [crud.to_item(i) for i in crud.get_items(db)]


def _run_matches(db: Session, owned_item_ids: List[int], threshold: Optional[float] = None):
    # The whole catalog is rescored on every call; there is no incremental update.
    items = _catalog_items(db)
    recipes = [crud.to_recipe(r) for r in crud.get_recipes(db, skip=0, limit=None)]
    if threshold is None:
        threshold = DEFAULT_SETTINGS.substitution_threshold
    return compute_matches(
        recipes,
        owned_item_ids,
        staple_item_ids(items),
        build_rules_from_items(items),
        threshold=threshold,
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/items")
def list_items(grouped: bool = False, db: Session = Depends(get_db)):
    items = _catalog_items(db)
    if not grouped:
        return items
    groups = []
    for key, variants in group_by_normalized_name(items).items():
        groups.append(
            schemas.ItemGroup(
                key=key,
                representative=pick_representative(variants),
                variants=sorted_variants(variants),
            )
        )
    groups.sort(key=lambda g: g.representative.name)
    return groups


@app.post("/api/items", response_model=schemas.Item)
def create_item(item: schemas.ItemCreate, db: Session = Depends(get_db)):
    if crud.get_item_by_name(db, item.name):
        raise HTTPException(status_code=400, detail="Item with this name already exists")
    return crud.to_item(crud.create_item(db, item))


@app.get("/api/recipes")
def list_recipes(
    request: Request,
    response: Response,
    q: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    db: Session = Depends(get_db),
):
    page = max(page, 1)
    page_size = max(1, min(page_size, 100))
    total = crud.count_recipes(db, q)
    rows = crud.get_recipes(db, skip=(page - 1) * page_size, limit=page_size, q=q)

    links = []
    if page > 1:
        links.append(f'<{request.url.include_query_params(page=page - 1)}>; rel="prev"')
    if page * page_size < total:
        links.append(f'<{request.url.include_query_params(page=page + 1)}>; rel="next"')
    response.headers["Link"] = ", ".join(links)

    return {
        "items": [crud.to_recipe(r) for r in rows],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@app.get("/api/recipes/{recipe_id}", response_model=schemas.RecipeDetail)
def get_recipe(recipe_id: int, owned: Optional[List[int]] = Query(None), db: Session = Depends(get_db)):
    r = crud.get_recipe(db, recipe_id)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    recipe = crud.to_recipe(r)
    staples = staple_item_ids(_catalog_items(db))
    return schemas.RecipeDetail(
        recipe=recipe,
        missing_item_ids=missing_for_recipe(recipe, owned or [], staples),
    )


@app.post("/api/recipes", response_model=schemas.Recipe)
def create_recipe(recipe: schemas.RecipeCreate, db: Session = Depends(get_db)):
    if crud.get_recipe_by_name(db, recipe.name):
        raise HTTPException(status_code=400, detail="Recipe with this name already exists")
    unknown = [c.item_id for c in recipe.components if not crud.get_item(db, c.item_id)]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown item ids: {unknown}")
    return crud.to_recipe(crud.create_recipe(db, recipe))


@app.delete("/api/recipes/{recipe_id}")
def delete_recipe(recipe_id: int, db: Session = Depends(get_db)):
    if not crud.delete_recipe(db, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"deleted": True}


@app.post("/api/match", response_model=schemas.MatchGroups)
def match(body: schemas.MatchRequest, db: Session = Depends(get_db)):
    return _run_matches(db, body.owned_item_ids, body.threshold)


def _inventory_out(user_id: str, inv) -> schemas.InventoryOut:
    return schemas.InventoryOut(
        user_id=user_id, inventory_id=inv.id, item_ids=crud.inventory_item_ids(inv)
    )


@app.get("/api/inventory/{user_id}", response_model=schemas.InventoryOut)
def get_inventory(user_id: str, db: Session = Depends(get_db)):
    return _inventory_out(user_id, crud.load_inventory(db, user_id))


@app.put("/api/inventory/{user_id}", response_model=schemas.InventoryOut)
def put_inventory(user_id: str, body: schemas.InventoryUpdate, db: Session = Depends(get_db)):
    unknown = [i for i in body.item_ids if not crud.get_item(db, i)]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown item ids: {unknown}")
    return _inventory_out(user_id, crud.save_inventory(db, user_id, body.item_ids))


@app.get("/api/inventory/{user_id}/matches", response_model=schemas.MatchGroups)
def inventory_matches(user_id: str, threshold: Optional[float] = None, db: Session = Depends(get_db)):
    inv = crud.load_inventory(db, user_id)
    return _run_matches(db, crud.inventory_item_ids(inv), threshold)


def _favorites_out(db: Session, user_id: str) -> schemas.FavoritesOut:
    return schemas.FavoritesOut(user_id=user_id, recipe_ids=crud.favorite_recipe_ids(db, user_id))


@app.get("/api/favorites/{user_id}", response_model=schemas.FavoritesOut)
def get_favorites(user_id: str, db: Session = Depends(get_db)):
    return _favorites_out(db, user_id)


@app.put("/api/favorites/{user_id}/{recipe_id}", response_model=schemas.FavoritesOut)
def add_favorite(user_id: str, recipe_id: int, db: Session = Depends(get_db)):
    if not crud.get_recipe(db, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    crud.add_favorite(db, user_id, recipe_id)
    return _favorites_out(db, user_id)


@app.delete("/api/favorites/{user_id}/{recipe_id}", response_model=schemas.FavoritesOut)
def remove_favorite(user_id: str, recipe_id: int, db: Session = Depends(get_db)):
    crud.remove_favorite(db, user_id, recipe_id)
    return _favorites_out(db, user_id)
