"""Поиск актуальной записи таблицы состава для сохранённого продукта.

Две стратегии:
- values-only — запись по сохранённой ссылке (таблица + код записи);
- values-and-codes — запись по текущей привязке продукта (код + локаль).

Запросы к БД делаются пачкой на страницу (prepare), затем
resolve() отвечает по каждой строке из уже загруженных данных.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload
from survey_recalc.models import (
    Food,
    FoodNutrient,
    NutrientTableRecord,
    SurveySubmissionFood,
)

logger = logging.getLogger(__name__)


class RecalculationMode(str, enum.Enum):
    """Режим пересчёта."""
    NONE = "none"
    VALUES_ONLY = "values-only"
    VALUES_AND_CODES = "values-and-codes"


@dataclass(frozen=True)
class CompositionRecord:
    """Снимок записи таблицы состава."""

    nutrient_table_id: str
    record_code: str
    # {nutrient_type_id: содержание на 100 г}
    nutrients: dict[str, float]
    # {имя поля: значение}
    fields: dict[str, str]

    @classmethod
    def from_model(cls, record: NutrientTableRecord) -> "CompositionRecord":
        return cls(
            nutrient_table_id=record.nutrient_table_id,
            record_code=record.nutrient_table_record_id,
            nutrients={str(n.nutrient_type_id): n.units_per_100g for n in record.nutrients},
            fields={f.name: f.value for f in record.fields},
        )


def load_composition_records(
    db: Session, codes_by_table: dict[str, set[str]]
) -> dict[tuple[str, str], CompositionRecord]:
    """Загрузить записи по ключам {nutrient_table_id: {коды записей}}."""
    if not codes_by_table:
        return {}

    conditions = [
        and_(
            NutrientTableRecord.nutrient_table_id == table_id,
            NutrientTableRecord.nutrient_table_record_id.in_(sorted(codes)),
        )
        for table_id, codes in codes_by_table.items()
    ]

    records = (
        db.query(NutrientTableRecord)
        .options(
            selectinload(NutrientTableRecord.nutrients),
            selectinload(NutrientTableRecord.fields),
        )
        .filter(or_(*conditions))
        .all()
    )

    return {
        (record.nutrient_table_id, record.nutrient_table_record_id): CompositionRecord.from_model(record)
        for record in records
    }


def load_current_mappings(
    db: Session, locale: str, codes: Iterable[str]
) -> dict[str, tuple[Optional[CompositionRecord], Optional[str]]]:
    """Текущие привязки продуктов локали к записям состава.

    Returns:
        {код продукта: (запись, None)} или {код: (None, причина)}
        для каждого запрошенного кода
    """
    codes = sorted(set(codes))
    foods = (
        db.query(Food)
        .options(
            selectinload(Food.nutrient_mapping)
            .selectinload(FoodNutrient.nutrient_record)
            .selectinload(NutrientTableRecord.nutrients),
            selectinload(Food.nutrient_mapping)
            .selectinload(FoodNutrient.nutrient_record)
            .selectinload(NutrientTableRecord.fields),
        )
        .filter(Food.locale_id == locale, Food.code.in_(codes))
        .all()
    )

    result = {code: (None, "Food not found in current database") for code in codes}
    for food in foods:
        mapping = food.nutrient_mapping
        if mapping is None:
            result[food.code] = (None, "Food has no nutrient mapping")
        elif mapping.nutrient_record is None:
            result[food.code] = (None, "Mapped nutrient record not found")
        else:
            result[food.code] = (CompositionRecord.from_model(mapping.nutrient_record), None)

    return result


class StoredReferenceResolver:
    """values-only: запись по сохранённым nutrient_table_id/nutrient_table_code."""

    def __init__(self):
        self._records: dict[tuple[str, str], CompositionRecord] = {}

    def prepare(self, db: Session, foods: list[SurveySubmissionFood]) -> None:
        codes_by_table: dict[str, set[str]] = {}
        for food in foods:
            if food.nutrient_table_id and food.nutrient_table_code:
                codes_by_table.setdefault(food.nutrient_table_id, set()).add(food.nutrient_table_code)

        self._records = load_composition_records(db, codes_by_table)

    def resolve(self, food: SurveySubmissionFood) -> Optional[CompositionRecord]:
        record = self._records.get((food.nutrient_table_id, food.nutrient_table_code))
        if record is None:
            logger.warning(
                f"Nutrient record not found: food #{food.id} {food.code}, "
                f"{food.nutrient_table_id}:{food.nutrient_table_code}"
            )
        return record


class CurrentMappingResolver:
    """values-and-codes: продукт → текущая привязка → запись состава."""

    def __init__(self):
        self._mappings: dict[tuple[str, str], tuple[Optional[CompositionRecord], Optional[str]]] = {}

    def prepare(self, db: Session, foods: list[SurveySubmissionFood]) -> None:
        codes_by_locale: dict[str, set[str]] = {}
        for food in foods:
            codes_by_locale.setdefault(food.locale, set()).add(food.code)

        self._mappings = {}
        for locale, codes in codes_by_locale.items():
            for code, mapping in load_current_mappings(db, locale, codes).items():
                self._mappings[(locale, code)] = mapping

    def resolve(self, food: SurveySubmissionFood) -> Optional[CompositionRecord]:
        record, reason = self._mappings.get(
            (food.locale, food.code), (None, "Food not found in current database")
        )
        if record is None:
            logger.warning(f"{reason}: food #{food.id} {food.code} ({food.locale})")
        return record


def get_resolver(mode: RecalculationMode):
    """Стратегия поиска записи для режима; для none — None."""
    if mode == RecalculationMode.VALUES_ONLY:
        return StoredReferenceResolver()
    if mode == RecalculationMode.VALUES_AND_CODES:
        return CurrentMappingResolver()
    return None
