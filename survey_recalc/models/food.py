"""Модели базы продуктов и их привязки к таблицам состава."""
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from survey_recalc.models.base import BaseModel


class Food(BaseModel):
    """Продукт в локали."""

    __tablename__ = "foods"
    __table_args__ = (UniqueConstraint("code", "locale_id"),)

    code = Column(String(64), nullable=False, index=True)
    locale_id = Column(String(64), nullable=False)
    name = Column(String(256), nullable=False)
    english_name = Column(String(256), nullable=False)

    nutrient_mapping = relationship(
        "FoodNutrient", back_populates="food", uselist=False, cascade="all, delete-orphan"
    )


class FoodNutrient(BaseModel):
    """Привязка продукта ровно к одной записи таблицы состава."""

    __tablename__ = "food_nutrients"

    food_id = Column(Integer, ForeignKey("foods.id"), unique=True, nullable=False)
    nutrient_table_record_id = Column(
        Integer, ForeignKey("nutrient_table_records.id"), nullable=False, index=True
    )

    food = relationship("Food", back_populates="nutrient_mapping")
    # Без обратной ссылки: удаление записи не должно трогать привязки
    nutrient_record = relationship("NutrientTableRecord")
