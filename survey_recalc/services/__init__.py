"""Сервисы пересчёта нутриентов."""
from survey_recalc.services.nutrient_calc import calculate_nutrient_amount, calculate_nutrients
from survey_recalc.services.reference_resolver import (
    RecalculationMode,
    CompositionRecord,
    get_resolver,
)
from survey_recalc.services.reconciler import RecalculationPolicy, StoredFood, Reconciliation
from survey_recalc.services.recalc_stats import RecalculationStats
from survey_recalc.services.recalculation_job import (
    SurveyNutrientsRecalculation,
    RecalculationParams,
    SurveyNotFoundError,
)
from survey_recalc.services.job_service import create_job, run_job, run_pending_jobs
from survey_recalc.services.submission_service import add_submission_food

__all__ = [
    "calculate_nutrient_amount",
    "calculate_nutrients",
    "RecalculationMode",
    "CompositionRecord",
    "get_resolver",
    "RecalculationPolicy",
    "StoredFood",
    "Reconciliation",
    "RecalculationStats",
    "SurveyNutrientsRecalculation",
    "RecalculationParams",
    "SurveyNotFoundError",
    "create_job",
    "run_job",
    "run_pending_jobs",
    "add_submission_food",
]
