"""Общие фикстуры: in-memory БД, база продуктов и опрос."""
from types import SimpleNamespace
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import survey_recalc.models  # noqa: F401  регистрация моделей в metadata
from survey_recalc.database import Base
from survey_recalc.models import (
    Food,
    FoodNutrient,
    NutrientTable,
    NutrientTableRecord,
    NutrientTableRecordField,
    NutrientTableRecordNutrient,
    Survey,
    SurveySubmission,
    SurveySubmissionFood,
    SurveySubmissionMeal,
)

LOCALE = "en_GB"
FOOD_CODE = "FOOD1"
TABLE_ID = "NDNS"


class RecordingJob:
    """Хэндл задачи для тестов: запоминает прогресс и сообщение."""

    def __init__(self, params: dict):
        self.params = params
        self.progress = []
        self.message = None

    def report_progress(self, fraction: float) -> None:
        self.progress.append(fraction)

    def update_message(self, message: str) -> None:
        self.message = message


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def add_record(db, code: str, nutrients: dict, fields: dict, table_id: str = TABLE_ID) -> NutrientTableRecord:
    record = NutrientTableRecord(
        nutrient_table_id=table_id,
        nutrient_table_record_id=code,
        name=f"Record {code}",
        nutrients=[
            NutrientTableRecordNutrient(nutrient_type_id=k, units_per_100g=v)
            for k, v in nutrients.items()
        ],
        fields=[NutrientTableRecordField(name=k, value=v) for k, v in fields.items()],
    )
    db.add(record)
    db.commit()
    return record


@pytest.fixture
def food_db(db):
    """Таблица NDNS с записями A (50 на 100 г) и B (200), продукт привязан к A."""
    db.add(NutrientTable(id=TABLE_ID, description="Test nutrient table"))
    db.commit()

    record_a = add_record(db, "A", {"1": 50.0}, {"group": "A"})
    record_b = add_record(db, "B", {"1": 200.0}, {"group": "B"})

    food = Food(code=FOOD_CODE, locale_id=LOCALE, name="Test Food", english_name="Test Food")
    food.nutrient_mapping = FoodNutrient(nutrient_table_record_id=record_a.id)
    db.add(food)
    db.commit()

    return SimpleNamespace(food=food, record_a=record_a, record_b=record_b)


@pytest.fixture
def survey(db):
    survey = Survey(slug="demo", name="Demo survey")
    db.add(survey)
    db.commit()
    return survey


@pytest.fixture
def meal(db, survey):
    submission = SurveySubmission(survey_id=survey.id, user_id="user-1")
    db.add(submission)
    db.commit()

    meal = SurveySubmissionMeal(submission_id=submission.id, name="Breakfast", hours=8, minutes=0)
    db.add(meal)
    db.commit()
    return meal


@pytest.fixture
def make_food(db, meal):
    """Фабрика сохранённых продуктов (по умолчанию — как в сабмите со ссылкой на A)."""

    def _make(count: int = 1, **overrides) -> list[SurveySubmissionFood]:
        foods = []
        for index in range(count):
            values = dict(
                meal_id=meal.id,
                index=index,
                code=FOOD_CODE,
                english_name="Test Food",
                local_name="Test Food",
                locale=LOCALE,
                nutrient_table_id=TABLE_ID,
                nutrient_table_code="A",
                fields={"group": "A"},
                nutrients={"1": 100},
                serving_weight=100.0,
                leftovers_weight=0.0,
            )
            values.update(overrides)
            foods.append(SurveySubmissionFood(**values))
        db.add_all(foods)
        db.commit()
        return foods

    return _make


@pytest.fixture
def make_job():
    return RecordingJob
