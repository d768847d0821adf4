"""Хост фоновых задач: записи Job, хэндл для задачи и запуск."""
import logging
from datetime import datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from survey_recalc.models import Job
from survey_recalc.services.recalculation_job import SurveyNutrientsRecalculation

logger = logging.getLogger(__name__)

# Тип задачи → класс задачи
JOB_TYPES = {
    SurveyNutrientsRecalculation.name: SurveyNutrientsRecalculation,
}


class JobHandle:
    """То, что видит задача: параметры, прогресс и итоговое сообщение."""

    def __init__(self, db: Session, job: Job):
        self.db = db
        self.job = job

    @property
    def params(self) -> dict:
        return dict(self.job.params or {})

    def report_progress(self, fraction: float) -> None:
        self.job.progress = fraction
        self.db.commit()

    def update_message(self, message: str) -> None:
        self.job.message = message
        self.db.commit()


def create_job(db: Session, job_type: str, params: dict) -> Job:
    """Поставить задачу в очередь."""
    if job_type not in JOB_TYPES:
        raise ValueError(f"Неизвестный тип задачи: {job_type}")

    job = Job(type=job_type, params=params)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def run_job(db: Session, job_id: int) -> Job:
    """Выполнить задачу и отметить результат в её записи.

    Ошибка задачи записывается в Job и пробрасывается дальше как есть.
    """
    job = db.get(Job, job_id)
    if job is None:
        raise LookupError(f"Job record not found ({job_id})")

    job_type = job.type
    job_cls = JOB_TYPES.get(job.type)
    if job_cls is None:
        raise ValueError(f"Неизвестный тип задачи: {job.type}")

    job.started_at = datetime.now(timezone.utc)
    db.commit()

    logger.info(f"Job {job.type} #{job.id} started")
    try:
        job_cls(db).run(JobHandle(db, job))
    except Exception as e:
        logger.error(f"Job {job_type} #{job_id} failed: {e}")
        # Незакоммиченная страница откатывается, закоммиченные остаются
        try:
            db.rollback()
            job.successful = False
            job.message = str(e)
            job.completed_at = datetime.now(timezone.utc)
            db.commit()
        except SQLAlchemyError as store_error:
            # Хранилище недоступно: наружу уходит исходная ошибка задачи
            logger.error(f"Job #{job_id}: failed to record failure: {store_error}")
        raise e

    job.successful = True
    job.completed_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"Job {job.type} #{job.id} finished: {job.message}")
    return job


def get_pending_jobs(db: Session) -> list[Job]:
    """Задачи, которые ещё не запускались."""
    return db.query(Job).filter(Job.started_at.is_(None)).order_by(Job.id).all()


def run_pending_jobs(db: Session) -> int:
    """Выполнить все ожидающие задачи по очереди.

    Returns:
        Количество запущенных задач
    """
    job_ids = [job.id for job in get_pending_jobs(db)]
    for job_id in job_ids:
        try:
            run_job(db, job_id)
        except Exception:
            # Ошибка уже записана в Job, переходим к следующей
            logger.exception(f"Job #{job_id} failed")
    return len(job_ids)
