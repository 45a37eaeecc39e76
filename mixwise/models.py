from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


class Item(Base):
    __tablename__ = "items"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, index=True, nullable=False)
    category = Column(String(50), nullable=False, default="Other")
    image_url = Column(String(500), nullable=True)
    is_staple = Column(Boolean, nullable=False, default=False)


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, index=True, nullable=False)
    instructions = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, default="Other")
    image_url = Column(String(500), nullable=True)
    vessel_hint = Column(String(100), nullable=True)

    # component order is the order rows were added
    components = relationship(
        "RecipeComponent",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeComponent.id",
    )
    favorites = relationship("Favorite", back_populates="recipe", cascade="all, delete-orphan")


class RecipeComponent(Base):
    __tablename__ = "recipe_components"
    __table_args__ = (UniqueConstraint("recipe_id", "item_id"),)
    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    amount = Column(String(100), nullable=True)
    is_optional_hint = Column(Boolean, nullable=True)

    recipe = relationship("Recipe", back_populates="components")
    item = relationship("Item")


class Inventory(Base):
    __tablename__ = "inventories"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False, default="My Home Bar")

    items = relationship(
        "InventoryItem", back_populates="inventory", cascade="all, delete-orphan"
    )


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (UniqueConstraint("inventory_id", "item_id"),)
    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("inventories.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)

    inventory = relationship("Inventory", back_populates="items")


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), index=True, nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False)

    recipe = relationship("Recipe", back_populates="favorites")
