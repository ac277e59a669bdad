"""Counters for one enrichment batch."""
import time
import logging
from collections import defaultdict
from typing import Dict

from src.parse.models import EnrichedSale

logger = logging.getLogger(__name__)


class BatchMetrics:
    """Track per-order outcomes and per-section failures."""

    def __init__(self, total: int):
        self.total = total
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)
        self.section_errors: Dict[str, int] = defaultdict(int)
        self.score_total = 0

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    def record_sale(self, sale: EnrichedSale) -> None:
        self.increment("processed")
        self.increment("ok")
        if sale.sync_errors:
            self.increment("partial")
        for step in sale.failed_steps:
            self.section_errors[step] += 1
        self.score_total += sale.completeness_score

    def record_failure(self) -> None:
        self.increment("processed")
        self.increment("failed")

    def average_score(self) -> float:
        ok = self.counters.get("ok", 0)
        return self.score_total / ok if ok else 0.0

    def get_rate(self) -> float:
        """Orders per second so far."""
        elapsed = time.time() - self.start_time
        processed = self.counters.get("processed", 0)
        if elapsed > 0:
            return processed / elapsed
        return 0.0

    def report(self) -> None:
        """Log current metrics."""
        processed = self.counters.get("processed", 0)
        logger.info(
            f"Progress: {processed}/{self.total} | "
            f"Rate: {self.get_rate():.2f}/s | "
            f"OK: {self.counters.get('ok', 0)} | "
            f"Partial: {self.counters.get('partial', 0)} | "
            f"Failed: {self.counters.get('failed', 0)} | "
            f"Avg score: {self.average_score():.1f}"
        )
        if self.section_errors:
            logger.info(f"Section errors: {dict(self.section_errors)}")
