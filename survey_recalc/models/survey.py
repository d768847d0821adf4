"""Модели опроса и сохранённых ответов (recall-сабмитов)."""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from survey_recalc.models.base import BaseModel


class Survey(BaseModel):
    """Опрос, к которому относятся сабмиты."""

    __tablename__ = "surveys"

    slug = Column(String(128), unique=True, nullable=False, index=True)
    name = Column(String(512), nullable=False)

    submissions = relationship("SurveySubmission", back_populates="survey", lazy="dynamic")


class SurveySubmission(BaseModel):
    """Отправленный респондентом recall."""

    __tablename__ = "survey_submissions"

    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)
    user_id = Column(String(64))
    submission_time = Column(DateTime(timezone=True), server_default=func.now())

    survey = relationship("Survey", back_populates="submissions")
    meals = relationship("SurveySubmissionMeal", back_populates="submission")


class SurveySubmissionMeal(BaseModel):
    """Приём пищи внутри сабмита."""

    __tablename__ = "survey_submission_meals"

    submission_id = Column(Integer, ForeignKey("survey_submissions.id"), nullable=False, index=True)
    name = Column(String(64), nullable=False)
    hours = Column(Integer, default=0)
    minutes = Column(Integer, default=0)

    submission = relationship("SurveySubmission", back_populates="meals")
    foods = relationship("SurveySubmissionFood", back_populates="meal")


class SurveySubmissionFood(BaseModel):
    """Съеденный продукт в момент сабмита.

    Денормализованный снимок: nutrients/fields посчитаны по таблице
    состава на момент отправки и меняются только задачей пересчёта.
    """

    __tablename__ = "survey_submission_foods"

    meal_id = Column(Integer, ForeignKey("survey_submission_meals.id"), nullable=False, index=True)
    index = Column(Integer, default=0)

    # Идентичность продукта (пересчёт их не трогает)
    code = Column(String(64), nullable=False)
    english_name = Column(String(256), nullable=False)
    local_name = Column(String(256))
    locale = Column(String(64), nullable=False)

    # Ссылка на запись таблицы состава
    nutrient_table_id = Column(String(64))
    nutrient_table_code = Column(String(64))

    # {nutrient_type_id: количество}, {имя поля: значение}
    nutrients = Column(JSON, nullable=False, default=dict)
    fields = Column(JSON, nullable=False, default=dict)

    # Вес порции, г
    serving_weight = Column(Float, nullable=False, default=0.0)
    leftovers_weight = Column(Float, nullable=False, default=0.0)

    meal = relationship("SurveySubmissionMeal", back_populates="foods")

    @property
    def portion_weight(self) -> float:
        return self.serving_weight - self.leftovers_weight

    def __repr__(self):
        return f"<SurveySubmissionFood {self.code} {self.nutrient_table_id}:{self.nutrient_table_code}>"
