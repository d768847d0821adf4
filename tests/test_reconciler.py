"""Тесты матрицы политик сверки (без БД)."""
from survey_recalc.services.reconciler import (
    MISSING_FIELD_VALUE,
    RecalculationPolicy,
    StoredFood,
)
from survey_recalc.services.reference_resolver import CompositionRecord, RecalculationMode


def stored(nutrients=None, fields=None, table_id="NDNS", code="A", serving=100.0, leftovers=0.0):
    return StoredFood(
        nutrient_table_id=table_id,
        nutrient_table_code=code,
        nutrients={"1": 50.0, "2": 150.0} if nutrients is None else nutrients,
        fields={"group": "A"} if fields is None else fields,
        serving_weight=serving,
        leftovers_weight=leftovers,
    )


def record(nutrients, fields=None, table_id="NDNS", code="A"):
    return CompositionRecord(
        nutrient_table_id=table_id,
        record_code=code,
        nutrients=nutrients,
        fields={"group": "A"} if fields is None else fields,
    )


VALUES_ONLY = RecalculationPolicy(RecalculationMode.VALUES_ONLY)
VALUES_ONLY_SYNC = RecalculationPolicy(RecalculationMode.VALUES_ONLY, sync_fields=True)
VALUES_AND_CODES = RecalculationPolicy(RecalculationMode.VALUES_AND_CODES)
VALUES_AND_CODES_SYNC = RecalculationPolicy(RecalculationMode.VALUES_AND_CODES, sync_fields=True)


def test_none_mode_is_unchanged_copy():
    """Режим none возвращает копию без изменений."""
    food = stored()
    result = RecalculationPolicy(RecalculationMode.NONE, sync_fields=True).reconcile(
        food, record({"1": 999.0})
    )

    assert not result.changed
    assert result.nutrients == food.nutrients
    assert result.fields == food.fields
    assert (result.nutrient_table_id, result.nutrient_table_code) == ("NDNS", "A")


def test_missing_nutrient_is_zeroed_without_sync():
    """Нутриент пропал из записи — ключ остаётся со значением 0."""
    result = VALUES_ONLY.reconcile(stored(), record({"1": 60.0}))

    assert result.changed
    assert result.nutrients == {"1": 60.0, "2": 0}
    assert result.nutrients_removed == []


def test_missing_nutrient_is_removed_with_sync():
    """С sync_fields пропавший нутриент удаляется."""
    result = VALUES_ONLY_SYNC.reconcile(stored(), record({"1": 60.0}))

    assert result.nutrients == {"1": 60.0}
    assert result.nutrients_removed == ["2"]


def test_new_keys_are_not_added_without_sync():
    """Без sync_fields новые ключи записи не добавляются."""
    result = VALUES_ONLY.reconcile(
        stored(nutrients={"1": 50.0}),
        record({"1": 50.0, "3": 10.0}, fields={"group": "A", "sub": "x"}),
    )

    assert not result.changed
    assert result.nutrients == {"1": 50.0}
    assert result.fields == {"group": "A"}


def test_sync_adds_new_keys():
    """С sync_fields набор ключей берётся из записи целиком."""
    result = VALUES_ONLY_SYNC.reconcile(
        stored(nutrients={"1": 50.0}),
        record({"1": 50.0, "3": 10.0}, fields={"group": "A", "sub": "x"}),
    )

    assert result.changed
    assert result.nutrients == {"1": 50.0, "3": 10.0}
    assert result.fields == {"group": "A", "sub": "x"}
    assert result.nutrients_added == ["3"]
    assert result.fields_added == ["sub"]


def test_missing_field_keeps_key_with_blank_value():
    """Пропавшее поле без sync_fields остаётся пустой строкой."""
    result = VALUES_ONLY.reconcile(
        stored(nutrients={"1": 50.0}, fields={"group": "A", "old": "y"}),
        record({"1": 50.0}, fields={"group": "B"}),
    )

    assert result.fields == {"group": "B", "old": MISSING_FIELD_VALUE}
    assert result.fields_removed == []


def test_sync_drops_missing_fields():
    result = VALUES_ONLY_SYNC.reconcile(
        stored(nutrients={"1": 50.0}, fields={"group": "A", "old": "y"}),
        record({"1": 50.0}, fields={"group": "A"}),
    )

    assert result.fields == {"group": "A"}
    assert result.fields_removed == ["old"]


def test_absent_reference_clears_values_and_keeps_codes():
    """Запись не найдена — nutrients и fields пустые, ссылка прежняя."""
    for policy in (VALUES_ONLY, VALUES_ONLY_SYNC, VALUES_AND_CODES):
        result = policy.reconcile(stored(), None)

        assert result.changed
        assert result.reference_lost
        assert result.nutrients == {}
        assert result.fields == {}
        assert (result.nutrient_table_id, result.nutrient_table_code) == ("NDNS", "A")


def test_absent_reference_on_empty_food_is_not_a_change():
    result = VALUES_AND_CODES.reconcile(stored(nutrients={}, fields={}), None)

    assert not result.changed


def test_food_without_reference_is_left_alone():
    """Строка без ссылки на запись (шаблон рецепта) не меняется ни в одном режиме."""
    for table_id, code in ((None, None), ("NDNS", None), (None, "A"), ("", "")):
        food = stored(nutrients={"1": 12.0}, fields={"group": "recipe"}, table_id=table_id, code=code)
        for policy in (VALUES_ONLY, VALUES_ONLY_SYNC, VALUES_AND_CODES, VALUES_AND_CODES_SYNC):
            for ref in (None, record({"1": 50.0}, code="B")):
                result = policy.reconcile(food, ref)

                assert not result.changed
                assert result.nutrients == {"1": 12.0}
                assert result.fields == {"group": "recipe"}
                assert (result.nutrient_table_id, result.nutrient_table_code) == (table_id, code)


def test_values_only_keeps_stored_codes():
    """values-only не меняет ссылку, даже если запись пришла с другим кодом."""
    result = VALUES_ONLY.reconcile(stored(nutrients={"1": 1.0}), record({"1": 50.0}, code="B"))

    assert (result.nutrient_table_id, result.nutrient_table_code) == ("NDNS", "A")
    assert not result.nutrient_code_changed


def test_values_and_codes_switches_record():
    """Продукт перепривязан с A (50) на B (200)."""
    result = VALUES_AND_CODES.reconcile(
        stored(nutrients={"1": 50.0}),
        record({"1": 200.0}, fields={"group": "B"}, code="B"),
    )

    assert result.changed
    assert result.nutrient_code_changed
    assert result.nutrient_table_code == "B"
    assert result.nutrients == {"1": 200.0}
    assert result.fields == {"group": "B"}


def test_code_switch_alone_is_a_change():
    """Смена ссылки при тех же значениях — тоже изменение."""
    result = VALUES_AND_CODES.reconcile(
        stored(nutrients={"1": 50.0}), record({"1": 50.0}, table_id="USDA", code="X")
    )

    assert result.changed
    assert result.nutrients == {"1": 50.0}
    assert (result.nutrient_table_id, result.nutrient_table_code) == ("USDA", "X")


def test_second_pass_is_idempotent():
    """Повторная сверка с той же записью ничего не меняет."""
    ref = record({"1": 33.3, "4": 7.1}, fields={"group": "C"})
    first = VALUES_ONLY_SYNC.reconcile(stored(serving=137.5, leftovers=12.25), ref)

    again = StoredFood(
        nutrient_table_id=first.nutrient_table_id,
        nutrient_table_code=first.nutrient_table_code,
        nutrients=first.nutrients,
        fields=first.fields,
        serving_weight=137.5,
        leftovers_weight=12.25,
    )
    second = VALUES_ONLY_SYNC.reconcile(again, ref)

    assert first.changed
    assert not second.changed
