"""Supabase writer: bulk upsert of enriched sales keyed by order_id."""
import asyncio
import logging
from typing import Optional

from supabase import Client, create_client
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import config
from src.errors import PersistenceError
from src.parse.models import EnrichedSale
from src.store.gateway import dedupe_by_order_id

logger = logging.getLogger(__name__)


class SupabaseWriter:
    """Writes enriched sales to the ``vendas_completas`` table."""

    def __init__(self, client: Optional[Client] = None, table: Optional[str] = None):
        if client is None:
            if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE:
                raise ValueError("Supabase configuration missing")
            client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE)
        self.client: Client = client
        self.table = table or config.SUPABASE_TABLE

    async def upsert(self, records: list[EnrichedSale]) -> None:
        """Upsert all records in one call (runs in thread pool since Supabase is sync)."""
        if not records:
            return

        data = [record.to_row() for record in dedupe_by_order_id(records)]

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._upsert_sync, data)
        except Exception as e:
            logger.error(f"Supabase upsert error: {e}")
            raise PersistenceError(f"upsert into {self.table} failed: {e}") from e
        logger.info(f"Upserted {len(data)} sales to Supabase table {self.table}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((Exception,)),
        reraise=True,
    )
    def _upsert_sync(self, data: list[dict]) -> None:
        """Synchronous upsert (called from thread pool)."""
        (
            self.client.table(self.table)
            .upsert(data, on_conflict="order_id")
            .execute()
        )
