"""Расчёт количества нутриентов по содержанию на 100 г.

Одна и та же формула используется и при сохранении сабмита, и при
пересчёте: только так повторный пересчёт без изменений в таблице
состава даёт бит-в-бит те же числа.
"""


def calculate_nutrient_amount(
    units_per_100g: float, serving_weight: float, leftovers_weight: float
) -> float:
    """Количество нутриента в съеденной порции.

    Args:
        units_per_100g: содержание на 100 г
        serving_weight: вес порции, г
        leftovers_weight: вес остатков, г
    """
    return units_per_100g * (serving_weight - leftovers_weight) / 100.0


def calculate_nutrients(
    rates: dict[str, float], serving_weight: float, leftovers_weight: float
) -> dict[str, float]:
    """Пересчитать весь словарь {nutrient_type_id: на 100 г} на порцию."""
    return {
        nutrient_type_id: calculate_nutrient_amount(rate, serving_weight, leftovers_weight)
        for nutrient_type_id, rate in rates.items()
    }
