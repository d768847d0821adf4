"""Сохранение продуктов сабмита с расчётом нутриентов на момент отправки."""
import logging
from sqlalchemy.orm import Session
from survey_recalc.models import Food, SurveySubmissionFood, SurveySubmissionMeal
from survey_recalc.services.nutrient_calc import calculate_nutrients
from survey_recalc.services.reference_resolver import load_current_mappings

logger = logging.getLogger(__name__)


def add_submission_food(
    db: Session,
    meal: SurveySubmissionMeal,
    food_code: str,
    locale: str,
    serving_weight: float,
    leftovers_weight: float = 0.0,
    index: int = 0,
) -> SurveySubmissionFood:
    """Записать съеденный продукт в приём пищи.

    Нутриенты и поля берутся из текущей привязки продукта к таблице
    состава — той же формулой, что и при пересчёте.

    Raises:
        LookupError: продукт не найден или не привязан к записи состава
    """
    record, reason = load_current_mappings(db, locale, [food_code])[food_code]
    if record is None:
        raise LookupError(f"{reason}: {food_code} ({locale})")

    food = db.query(Food).filter(Food.code == food_code, Food.locale_id == locale).one()

    submission_food = SurveySubmissionFood(
        meal_id=meal.id,
        index=index,
        code=food.code,
        english_name=food.english_name,
        local_name=food.name,
        locale=locale,
        nutrient_table_id=record.nutrient_table_id,
        nutrient_table_code=record.record_code,
        nutrients=calculate_nutrients(record.nutrients, serving_weight, leftovers_weight),
        fields=dict(record.fields),
        serving_weight=serving_weight,
        leftovers_weight=leftovers_weight,
    )
    db.add(submission_food)
    db.commit()
    db.refresh(submission_food)

    logger.info(f"Food {food_code} saved to meal #{meal.id}")
    return submission_food
