"""Фоновая задача пересчёта нутриентов в сабмитах опроса."""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from survey_recalc.config import config
from survey_recalc.models import (
    Survey,
    SurveySubmission,
    SurveySubmissionMeal,
    SurveySubmissionFood,
)
from survey_recalc.services.reconciler import RecalculationPolicy, StoredFood
from survey_recalc.services.recalc_stats import RecalculationStats
from survey_recalc.services.reference_resolver import RecalculationMode, get_resolver

logger = logging.getLogger(__name__)


class SurveyNotFoundError(LookupError):
    """Опрос из параметров задачи не найден."""


def _parse_flag(value) -> bool:
    """Булев флаг из параметров задачи: true/false, в том числе строкой."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"syncFields должен быть true или false: {value!r}")


@dataclass(frozen=True)
class RecalculationParams:
    """Параметры задачи: surveyId, mode, syncFields."""

    survey_id: int
    mode: RecalculationMode = RecalculationMode.VALUES_ONLY
    sync_fields: bool = False

    @classmethod
    def from_dict(cls, params: dict) -> "RecalculationParams":
        """Разобрать параметры из записи задачи.

        Raises:
            ValueError: нет surveyId, неизвестный mode или syncFields не булев
        """
        survey_id = params.get("surveyId")
        if survey_id is None or survey_id == "":
            raise ValueError("surveyId не указан")

        mode = params.get("mode") or RecalculationMode.VALUES_ONLY.value
        try:
            mode = RecalculationMode(mode)
        except ValueError:
            raise ValueError(f"Неизвестный режим пересчёта: {mode!r}") from None

        return cls(
            survey_id=int(survey_id),
            mode=mode,
            sync_fields=_parse_flag(params.get("syncFields", False)),
        )

    @property
    def policy(self) -> RecalculationPolicy:
        return RecalculationPolicy(mode=self.mode, sync_fields=self.sync_fields)


class SurveyNutrientsRecalculation:
    """Пересчёт nutrients/fields/ссылок на таблицу состава по всем продуктам опроса.

    Строки обрабатываются страницами по batch_size, каждая страница —
    отдельный коммит, после неё один вызов report_progress. Повторный
    запуск без изменений в базе продуктов ничего не обновляет.
    """

    name = "SurveyNutrientsRecalculation"

    def __init__(self, db: Session, batch_size: Optional[int] = None):
        self.db = db
        self.batch_size = batch_size or config.RECALC_BATCH_SIZE

    def run(self, job) -> RecalculationStats:
        """Запуск задачи.

        Args:
            job: хэндл задачи с params, report_progress() и update_message()
        """
        params = RecalculationParams.from_dict(job.params)
        logger.debug(f"Job {self.name} started: {params}")

        survey = self.db.get(Survey, params.survey_id)
        if survey is None:
            raise SurveyNotFoundError(f"Survey not found: {params.survey_id}")

        stats = self.recalculate(survey.id, params.policy, job.report_progress)

        summary = stats.summary()
        logger.info(f"Recalculation of survey {survey.slug} completed. {summary}")
        logger.debug(f"Recalculation details: {stats.to_dict()}")

        job.update_message(summary)
        return stats

    def _survey_foods(self, survey_id: int):
        return (
            self.db.query(SurveySubmissionFood)
            .join(SurveySubmissionMeal, SurveySubmissionFood.meal_id == SurveySubmissionMeal.id)
            .join(SurveySubmission, SurveySubmissionMeal.submission_id == SurveySubmission.id)
            .filter(SurveySubmission.survey_id == survey_id)
        )

    def count_foods(self, survey_id: int) -> int:
        return (
            self._survey_foods(survey_id)
            .with_entities(func.count(SurveySubmissionFood.id))
            .scalar()
        )

    def recalculate(self, survey_id: int, policy: RecalculationPolicy, report_progress) -> RecalculationStats:
        """Пройти по всем продуктам опроса страницами."""
        stats = RecalculationStats()

        if policy.is_noop:
            logger.info('Recalculation mode is "none", skipping.')
            return stats

        total = self.count_foods(survey_id)
        if total == 0:
            logger.info("No foods found for survey, completing successfully.")
            return stats

        resolver = get_resolver(policy.mode)
        last_id = 0

        while True:
            foods = (
                self._survey_foods(survey_id)
                .filter(SurveySubmissionFood.id > last_id)
                .order_by(SurveySubmissionFood.id)
                .limit(self.batch_size)
                .all()
            )
            if not foods:
                break

            resolver.prepare(self.db, foods)

            batch_updated = 0
            for food in foods:
                stored = StoredFood.from_model(food)
                # Без ссылки (шаблон рецепта) строка не пересчитывается
                record = resolver.resolve(food) if stored.has_reference else None
                result = policy.reconcile(stored, record)
                stats.add(result)

                if result.changed:
                    food.nutrients = result.nutrients
                    food.fields = result.fields
                    food.nutrient_table_id = result.nutrient_table_id
                    food.nutrient_table_code = result.nutrient_table_code
                    batch_updated += 1

            first_id, last_id = foods[0].id, foods[-1].id
            self.db.commit()

            logger.debug(
                f"Batch processed: #{first_id}..#{last_id}, {len(foods)} foods, {batch_updated} updated"
            )

            report_progress(min(stats.total / total, 1.0))

            if len(foods) < self.batch_size:
                break

        return stats
