"""Конфигурация воркера пересчёта из переменных окружения."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Config:
    """Настройки воркера."""

    DATABASE_URL: str
    # Размер страницы при пересчёте (записей за один коммит)
    RECALC_BATCH_SIZE: int
    # Пауза между опросами очереди задач, секунды
    WORKER_POLL_INTERVAL: float
    LOG_LEVEL: str

    @classmethod
    def from_env(cls) -> "Config":
        """Загрузка конфигурации из окружения."""
        return cls(
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///survey_recalc.db"),
            RECALC_BATCH_SIZE=int(os.getenv("RECALC_BATCH_SIZE", "100")),
            WORKER_POLL_INTERVAL=float(os.getenv("WORKER_POLL_INTERVAL", "5")),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Проверка обязательных настроек."""
        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL не установлен в .env")
        if self.RECALC_BATCH_SIZE <= 0:
            raise ValueError("RECALC_BATCH_SIZE должен быть больше нуля")
        if self.WORKER_POLL_INTERVAL <= 0:
            raise ValueError("WORKER_POLL_INTERVAL должен быть больше нуля")


# Глобальный экземпляр конфигурации
config = Config.from_env()
