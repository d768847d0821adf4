"""Счётчики пересчёта и итоговое сообщение для записи задачи."""
from dataclasses import dataclass, asdict
from survey_recalc.services.reconciler import Reconciliation


@dataclass
class RecalculationStats:
    """Счётчики одного запуска (передаются явно, не глобальные)."""

    total: int = 0
    updated: int = 0
    nutrient_codes_updated: int = 0
    nutrients_added: int = 0
    nutrients_removed: int = 0
    fields_added: int = 0
    fields_removed: int = 0
    references_lost: int = 0

    @property
    def skipped(self) -> int:
        return self.total - self.updated

    def add(self, result: Reconciliation) -> None:
        """Учесть результат сверки одной строки."""
        self.total += 1
        if not result.changed:
            return

        self.updated += 1
        self.nutrient_codes_updated += int(result.nutrient_code_changed)
        self.nutrients_added += len(result.nutrients_added)
        self.nutrients_removed += len(result.nutrients_removed)
        self.fields_added += len(result.fields_added)
        self.fields_removed += len(result.fields_removed)
        self.references_lost += int(result.reference_lost)

    def summary(self) -> str:
        return f"Total: {self.total}, Updated: {self.updated}, Skipped: {self.skipped}"

    def to_dict(self) -> dict:
        return {**asdict(self), "skipped": self.skipped}
