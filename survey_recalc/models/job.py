"""Модель фоновой задачи."""
from sqlalchemy import Column, String, Float, Boolean, DateTime, Text, JSON
from survey_recalc.models.base import BaseModel


class Job(BaseModel):
    """Запись о задаче: параметры, прогресс и итоговое сообщение."""

    __tablename__ = "jobs"

    type = Column(String(128), nullable=False, index=True)
    params = Column(JSON, nullable=False, default=dict)

    progress = Column(Float)
    message = Column(Text)
    # None — ещё не завершена
    successful = Column(Boolean)

    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<Job {self.type} #{self.id} progress={self.progress}>"
