"""Сверка сохранённого продукта с актуальной записью таблицы состава.

Политика = (режим, sync_fields). На каждый режим своя функция,
sync передаётся параметром:

- none — ничего не считаем;
- у продукта нет ссылки на запись состава — не трогаем;
- запись не найдена — nutrients и fields очищаются, ссылка остаётся;
- sync_fields=False — пересчитываются только уже сохранённые ключи,
  пропавший нутриент обнуляется, пропавшее поле становится "";
- sync_fields=True — полная замена набором ключей из записи.
"""
from dataclasses import dataclass, field
from typing import Callable, Optional
from survey_recalc.models import SurveySubmissionFood
from survey_recalc.services.nutrient_calc import calculate_nutrient_amount, calculate_nutrients
from survey_recalc.services.reference_resolver import CompositionRecord, RecalculationMode

# Значение поля, которого больше нет в записи (без sync_fields)
MISSING_FIELD_VALUE = ""


@dataclass(frozen=True)
class StoredFood:
    """Сохранённое состояние продукта, нужное для пересчёта."""

    nutrient_table_id: Optional[str]
    nutrient_table_code: Optional[str]
    nutrients: dict[str, float]
    fields: dict[str, str]
    serving_weight: float
    leftovers_weight: float

    @classmethod
    def from_model(cls, food: SurveySubmissionFood) -> "StoredFood":
        return cls(
            nutrient_table_id=food.nutrient_table_id,
            nutrient_table_code=food.nutrient_table_code,
            nutrients={str(k): v for k, v in (food.nutrients or {}).items()},
            fields=dict(food.fields or {}),
            serving_weight=food.serving_weight or 0.0,
            leftovers_weight=food.leftovers_weight or 0.0,
        )

    @property
    def has_reference(self) -> bool:
        """Есть ли ссылка на запись состава (у шаблонов рецептов её нет)."""
        return bool(self.nutrient_table_id and self.nutrient_table_code)


@dataclass
class Reconciliation:
    """Новое состояние продукта и что именно поменялось."""

    nutrients: dict[str, float]
    fields: dict[str, str]
    nutrient_table_id: Optional[str]
    nutrient_table_code: Optional[str]
    changed: bool = False
    nutrient_code_changed: bool = False
    reference_lost: bool = False
    nutrients_added: list[str] = field(default_factory=list)
    nutrients_removed: list[str] = field(default_factory=list)
    fields_added: list[str] = field(default_factory=list)
    fields_removed: list[str] = field(default_factory=list)


def _diff(
    stored: StoredFood,
    nutrients: dict[str, float],
    fields: dict[str, str],
    nutrient_table_id: Optional[str],
    nutrient_table_code: Optional[str],
    reference_lost: bool = False,
) -> Reconciliation:
    code_changed = (
        nutrient_table_id != stored.nutrient_table_id
        or nutrient_table_code != stored.nutrient_table_code
    )
    return Reconciliation(
        nutrients=nutrients,
        fields=fields,
        nutrient_table_id=nutrient_table_id,
        nutrient_table_code=nutrient_table_code,
        changed=(
            code_changed
            or nutrients != stored.nutrients
            or fields != stored.fields
        ),
        nutrient_code_changed=code_changed,
        reference_lost=reference_lost,
        nutrients_added=[k for k in nutrients if k not in stored.nutrients],
        nutrients_removed=[k for k in stored.nutrients if k not in nutrients],
        fields_added=[k for k in fields if k not in stored.fields],
        fields_removed=[k for k in stored.fields if k not in fields],
    )


def _recompute(
    stored: StoredFood, record: CompositionRecord, sync: bool
) -> tuple[dict[str, float], dict[str, str]]:
    if sync:
        nutrients = calculate_nutrients(
            record.nutrients, stored.serving_weight, stored.leftovers_weight
        )
        return nutrients, dict(record.fields)

    nutrients = {}
    for nutrient_type_id in stored.nutrients:
        rate = record.nutrients.get(nutrient_type_id)
        nutrients[nutrient_type_id] = (
            calculate_nutrient_amount(rate, stored.serving_weight, stored.leftovers_weight)
            if rate is not None
            else 0
        )

    fields = {
        name: record.fields.get(name, MISSING_FIELD_VALUE)
        for name in stored.fields
    }
    return nutrients, fields


def _reference_lost(stored: StoredFood) -> Reconciliation:
    return _diff(
        stored,
        {},
        {},
        stored.nutrient_table_id,
        stored.nutrient_table_code,
        reference_lost=True,
    )


def reconcile_unchanged(
    stored: StoredFood, record: Optional[CompositionRecord], sync: bool
) -> Reconciliation:
    """none: копия без изменений."""
    return Reconciliation(
        nutrients=dict(stored.nutrients),
        fields=dict(stored.fields),
        nutrient_table_id=stored.nutrient_table_id,
        nutrient_table_code=stored.nutrient_table_code,
    )


def reconcile_values_only(
    stored: StoredFood, record: Optional[CompositionRecord], sync: bool
) -> Reconciliation:
    """values-only: значения из записи по сохранённой ссылке, ссылка не меняется."""
    if not stored.has_reference:
        return reconcile_unchanged(stored, record, sync)
    if record is None:
        return _reference_lost(stored)

    nutrients, fields = _recompute(stored, record, sync)
    return _diff(stored, nutrients, fields, stored.nutrient_table_id, stored.nutrient_table_code)


def reconcile_values_and_codes(
    stored: StoredFood, record: Optional[CompositionRecord], sync: bool
) -> Reconciliation:
    """values-and-codes: значения и ссылка из текущей привязки продукта."""
    if not stored.has_reference:
        return reconcile_unchanged(stored, record, sync)
    if record is None:
        return _reference_lost(stored)

    nutrients, fields = _recompute(stored, record, sync)
    return _diff(stored, nutrients, fields, record.nutrient_table_id, record.record_code)


_RECONCILERS: dict[
    RecalculationMode,
    Callable[[StoredFood, Optional[CompositionRecord], bool], Reconciliation],
] = {
    RecalculationMode.NONE: reconcile_unchanged,
    RecalculationMode.VALUES_ONLY: reconcile_values_only,
    RecalculationMode.VALUES_AND_CODES: reconcile_values_and_codes,
}


@dataclass(frozen=True)
class RecalculationPolicy:
    """Комбинация режима и флага sync_fields."""

    mode: RecalculationMode
    sync_fields: bool = False

    @property
    def is_noop(self) -> bool:
        return self.mode == RecalculationMode.NONE

    def reconcile(
        self, stored: StoredFood, record: Optional[CompositionRecord]
    ) -> Reconciliation:
        return _RECONCILERS[self.mode](stored, record, self.sync_fields)
