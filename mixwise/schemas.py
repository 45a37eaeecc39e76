from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ItemBase(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "Tequila Blanco"})
    category: str = Field(default="Other", json_schema_extra={"example": "Spirit"})
    image_url: Optional[str] = None
    is_staple: bool = False


class ItemCreate(ItemBase):
    pass


class Item(ItemBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class RecipeComponent(BaseModel):
    item_id: int
    name: str
    amount: Optional[str] = Field(default=None, json_schema_extra={"example": "1 1/2 oz"})
    is_optional_hint: Optional[bool] = None


class RecipeComponentCreate(BaseModel):
    item_id: int
    amount: Optional[str] = None
    is_optional_hint: Optional[bool] = None


class RecipeBase(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "Margarita"})
    instructions: str = ""
    category: str = "Other"
    image_url: Optional[str] = None
    vessel_hint: Optional[str] = Field(
        default=None, json_schema_extra={"example": "Cocktail glass"}
    )


class RecipeCreate(RecipeBase):
    components: List[RecipeComponentCreate] = Field(default_factory=list)


class Recipe(RecipeBase):
    id: int
    components: Optional[List[RecipeComponent]] = Field(default_factory=list)


class SubstitutionRule(BaseModel):
    """``to_item_id`` may stand in for a missing ``from_item_id``.

    ``strength`` is deliberately not range-checked here.
    """

    from_item_id: int
    to_item_id: int
    strength: float = 1.0


class MatchResult(BaseModel):
    recipe: Recipe
    score: float
    missing_required_item_ids: List[int] = Field(default_factory=list)
    missing_required_item_names: List[str] = Field(default_factory=list)
    covered_by_substitution: Dict[int, int] = Field(default_factory=dict)
    required_total: int = 0
    required_covered: int = 0


class MatchGroups(BaseModel):
    ready: List[MatchResult] = Field(default_factory=list)
    almost_there: List[MatchResult] = Field(default_factory=list)
    all: List[MatchResult] = Field(default_factory=list)


class MatchRequest(BaseModel):
    owned_item_ids: List[int] = Field(
        default_factory=list, json_schema_extra={"example": [3, 11, 20]}
    )
    threshold: Optional[float] = None


class ItemGroup(BaseModel):
    key: str
    representative: Item
    variants: List[Item]


class RecipeDetail(BaseModel):
    recipe: Recipe
    missing_item_ids: List[int] = Field(default_factory=list)


class InventoryUpdate(BaseModel):
    item_ids: List[int] = Field(default_factory=list)


class InventoryOut(BaseModel):
    user_id: str
    inventory_id: int
    item_ids: List[int]


class Catalog(BaseModel):
    items: List[Item] = Field(default_factory=list)
    recipes: List[Recipe] = Field(default_factory=list)


class FavoritesOut(BaseModel):
    user_id: str
    recipe_ids: List[int]
