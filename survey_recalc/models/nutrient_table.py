"""Модели таблиц пищевого состава."""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from survey_recalc.database import Base
from survey_recalc.models.base import BaseModel, TimestampMixin


class NutrientTable(Base, TimestampMixin):
    """Таблица состава (NDNS, USDA и т.п.)."""

    __tablename__ = "nutrient_tables"

    id = Column(String(64), primary_key=True)
    description = Column(String(512), nullable=False)

    records = relationship("NutrientTableRecord", back_populates="nutrient_table")


class NutrientTableRecord(BaseModel):
    """Запись таблицы состава, ключ — (nutrient_table_id, nutrient_table_record_id)."""

    __tablename__ = "nutrient_table_records"
    __table_args__ = (UniqueConstraint("nutrient_table_id", "nutrient_table_record_id"),)

    nutrient_table_id = Column(String(64), ForeignKey("nutrient_tables.id"), nullable=False, index=True)
    nutrient_table_record_id = Column(String(64), nullable=False)
    name = Column(String(512), nullable=False)
    local_name = Column(String(512))

    nutrient_table = relationship("NutrientTable", back_populates="records")
    nutrients = relationship(
        "NutrientTableRecordNutrient", back_populates="record", cascade="all, delete-orphan"
    )
    fields = relationship(
        "NutrientTableRecordField", back_populates="record", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<NutrientTableRecord {self.nutrient_table_id}:{self.nutrient_table_record_id}>"


class NutrientTableRecordNutrient(BaseModel):
    """Содержание нутриента на 100 г."""

    __tablename__ = "nutrient_table_record_nutrients"

    nutrient_table_record_id = Column(
        Integer, ForeignKey("nutrient_table_records.id"), nullable=False, index=True
    )
    nutrient_type_id = Column(String(32), nullable=False)
    units_per_100g = Column(Float, nullable=False)

    record = relationship("NutrientTableRecord", back_populates="nutrients")


class NutrientTableRecordField(BaseModel):
    """Текстовое поле записи (группа продукта и т.п.)."""

    __tablename__ = "nutrient_table_record_fields"

    nutrient_table_record_id = Column(
        Integer, ForeignKey("nutrient_table_records.id"), nullable=False, index=True
    )
    name = Column(String(32), nullable=False)
    value = Column(String(512), nullable=False)

    record = relationship("NutrientTableRecord", back_populates="fields")
