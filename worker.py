"""Точка входа воркера фоновых задач."""
import logging
import time
from survey_recalc.config import config
from survey_recalc.database import init_db, get_db
from survey_recalc.services.job_service import run_pending_jobs

# Настройка логирования
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Запуск воркера."""
    # Проверка конфигурации
    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Ошибка конфигурации: {e}")
        return

    # Инициализация БД
    logger.info("Инициализация базы данных...")
    init_db()

    logger.info(f"Воркер запущен, опрос очереди каждые {config.WORKER_POLL_INTERVAL} с")
    while True:
        with get_db() as db:
            processed = run_pending_jobs(db)
        if processed:
            logger.info(f"Обработано задач: {processed}")
        time.sleep(config.WORKER_POLL_INTERVAL)


if __name__ == "__main__":
    main()
