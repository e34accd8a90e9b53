from datetime import datetime
import enum
import uuid

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tastebox.app.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Difficulty(str, enum.Enum):
    EASY = "Fácil"
    MEDIUM = "Medio"
    HARD = "Difícil"


recipe_tags = Table(
    "recipe_tags",
    Base.metadata,
    Column("recipe_id", ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    alias = Column(String)
    password_hash = Column(String, nullable=False)
    profile_photo = Column(String)
    voice_settings = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    recipes = relationship("Recipe", back_populates="user", cascade="all, delete-orphan")


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    prep_time_minutes = Column(Integer, nullable=False)
    cook_time_minutes = Column(Integer)
    servings = Column(Integer, nullable=False)
    difficulty = Column(Enum(Difficulty, native_enum=False), nullable=False, default=Difficulty.MEDIUM)
    recipe_type = Column(String)
    source_url = Column(String)
    nutrition = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="recipes")
    images = relationship(
        "RecipeImage",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeImage.order",
    )
    ingredients = relationship(
        "Ingredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="Ingredient.order",
    )
    instructions = relationship(
        "Instruction",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="Instruction.step",
    )
    tags = relationship("Tag", secondary=recipe_tags, back_populates="recipes")


class RecipeImage(Base):
    __tablename__ = "recipe_images"
    __table_args__ = (UniqueConstraint("recipe_id", "order", name="uq_recipe_image_order"),)

    id = Column(Integer, primary_key=True)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String, nullable=False)
    local_path = Column(String)
    order = Column(Integer, nullable=False)
    alt_text = Column(String)

    recipe = relationship("Recipe", back_populates="images")


class Ingredient(Base):
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    amount = Column(String, nullable=False)
    unit = Column(String)
    order = Column(Integer, nullable=False)

    recipe = relationship("Recipe", back_populates="ingredients")


class Instruction(Base):
    __tablename__ = "instructions"
    __table_args__ = (UniqueConstraint("recipe_id", "step", name="uq_instruction_step"),)

    id = Column(Integer, primary_key=True)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    step = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)
    # Appliance settings
    time = Column(String)
    temperature = Column(String)
    speed = Column(String)

    recipe = relationship("Recipe", back_populates="instructions")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True, index=True)

    recipes = relationship("Recipe", secondary=recipe_tags, back_populates="tags")
