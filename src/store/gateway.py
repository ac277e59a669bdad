"""Persistence gateway contract shared by the Supabase and SQLite stores."""
from typing import Protocol

from src.parse.models import EnrichedSale


class SalesGateway(Protocol):
    async def upsert(self, records: list[EnrichedSale]) -> None:
        """Insert or fully replace each record by ``order_id``; no-op when empty."""
        ...


def dedupe_by_order_id(records: list[EnrichedSale]) -> list[EnrichedSale]:
    """Keep the last record per order_id, in first-seen order."""
    latest: dict[str, EnrichedSale] = {}
    for record in records:
        latest[record.order_id] = record
    return list(latest.values())
