"""Модели базы данных."""
from survey_recalc.models.base import BaseModel, TimestampMixin
from survey_recalc.models.survey import (
    Survey,
    SurveySubmission,
    SurveySubmissionMeal,
    SurveySubmissionFood,
)
from survey_recalc.models.nutrient_table import (
    NutrientTable,
    NutrientTableRecord,
    NutrientTableRecordNutrient,
    NutrientTableRecordField,
)
from survey_recalc.models.food import Food, FoodNutrient
from survey_recalc.models.job import Job

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "Survey",
    "SurveySubmission",
    "SurveySubmissionMeal",
    "SurveySubmissionFood",
    "NutrientTable",
    "NutrientTableRecord",
    "NutrientTableRecordNutrient",
    "NutrientTableRecordField",
    "Food",
    "FoodNutrient",
    "Job",
]
