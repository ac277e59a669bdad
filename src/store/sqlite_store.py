"""SQLite store for enriched sales (local runs and dry runs)."""
import logging
from pathlib import Path
from typing import Optional

import aiosqlite
import orjson

from src.config import LOCAL_DB
from src.errors import PersistenceError
from src.parse.models import EnrichedSale
from src.store.gateway import dedupe_by_order_id

logger = logging.getLogger(__name__)


class SQLiteSalesStore:
    """Same upsert contract as the Supabase writer, one JSON document per order."""

    def __init__(self, db_path: Path = LOCAL_DB):
        self.db_path = Path(db_path)
        self._initialized = False

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS vendas_completas (
                    order_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    completeness_score INTEGER NOT NULL,
                    last_sync TEXT
                )
                """
            )
            await db.commit()
        self._initialized = True
        logger.info(f"Local sales store initialized at {self.db_path}")

    async def upsert(self, records: list[EnrichedSale]) -> None:
        if not records:
            return
        if not self._initialized:
            await self.initialize()

        rows = [
            (
                record.order_id,
                orjson.dumps(record.to_row()).decode(),
                record.completeness_score,
                record.last_sync,
            )
            for record in dedupe_by_order_id(records)
        ]
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.executemany(
                    """
                    INSERT OR REPLACE INTO vendas_completas
                        (order_id, data, completeness_score, last_sync)
                    VALUES (?, ?, ?, ?)
                    """,
                    rows,
                )
                await db.commit()
        except aiosqlite.Error as e:
            logger.error(f"Local upsert error: {e}")
            raise PersistenceError(f"local upsert failed: {e}") from e
        logger.info(f"Upserted {len(rows)} sales to {self.db_path}")

    async def get(self, order_id: str) -> Optional[dict]:
        """Stored row for an order, or None."""
        if not self._initialized:
            await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT data FROM vendas_completas WHERE order_id = ?", (order_id,)
            )
            row = await cursor.fetchone()
        return orjson.loads(row[0]) if row else None

    async def count(self) -> int:
        if not self._initialized:
            await self.initialize()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM vendas_completas")
            row = await cursor.fetchone()
        return row[0]
