"""Batch runner: search a seller's orders, enrich each one, upsert the batch."""
import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from src.auth.credentials import (
    CredentialResolver,
    StaticCredentialResolver,
    SupabaseCredentialResolver,
)
from src.config import config
from src.enrich.coordinator import SECTIONS, Section, enrich_order
from src.errors import CredentialError, OrderSearchError, PersistenceError, SyncError
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.fetch.tracker import EndpointTracker
from src.jobs.metrics import BatchMetrics
from src.parse.models import BatchResult, EnrichedSale
from src.parse.payloads import OrderSearchPayload, id_str
from src.parse.redact import redact_string
from src.store.gateway import SalesGateway
from src.store.sqlite_store import SQLiteSalesStore
from src.store.supabase_writer import SupabaseWriter

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, EndpointTracker], MLClient]


def default_client_factory(access_token: str, tracker: EndpointTracker) -> MLClient:
    return MLClient(access_token, tracker=tracker)


def _check_iso_date(name: str, value: Optional[str]) -> None:
    if value is None:
        return
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"{name} must be an ISO-8601 date, got {value!r}") from None


class SalesSyncRunner:
    """Orchestrates one enrichment batch for one integration account."""

    def __init__(
        self,
        resolver: CredentialResolver,
        gateway: Optional[SalesGateway] = None,
        order_concurrency: Optional[int] = None,
        batch_timeout: Optional[float] = None,
        client_factory: ClientFactory = default_client_factory,
        sections: Sequence[Section] = SECTIONS,
    ):
        self.resolver = resolver
        self.gateway = gateway
        self.order_concurrency = (
            config.ORDER_CONCURRENCY if order_concurrency is None else order_concurrency
        )
        self.batch_timeout = config.BATCH_TIMEOUT if batch_timeout is None else batch_timeout
        self.client_factory = client_factory
        self.sections = sections

        if self.order_concurrency < 1:
            raise ValueError("order_concurrency must be >= 1")

    async def run_batch(
        self,
        account_ref: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> BatchResult:
        """Run one batch; fatal errors come back as ``success=False``."""
        started = time.monotonic()
        try:
            coro = self.run(account_ref, date_from, date_to, limit)
            if self.batch_timeout and self.batch_timeout > 0:
                return await asyncio.wait_for(coro, timeout=self.batch_timeout)
            return await coro
        except asyncio.TimeoutError:
            error = f"batch timed out after {self.batch_timeout}s"
        except (SyncError, ValueError) as e:
            error = redact_string(str(e))
        except Exception as e:
            logger.error(f"Unexpected batch error for account {account_ref}: {e}", exc_info=True)
            error = redact_string(f"{type(e).__name__}: {e}")

        logger.error(f"Batch failed for account {account_ref}: {error}")
        return BatchResult.failure(error, duration_ms=int((time.monotonic() - started) * 1000))

    async def run(
        self,
        account_ref: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> BatchResult:
        """Run one batch, raising on fatal errors."""
        started = time.monotonic()
        run_id = str(uuid.uuid4())
        limit = config.DEFAULT_LIMIT if limit is None else limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        _check_iso_date("date_from", date_from)
        _check_iso_date("date_to", date_to)

        logger.info(f"Run {run_id}: starting complete sales sync for account {account_ref}")

        try:
            credential = await self.resolver.resolve(account_ref)
        except CredentialError:
            raise
        except Exception as e:
            raise CredentialError(f"could not resolve credential: {e}") from e

        tracker = EndpointTracker()
        async with self.client_factory(credential.access_token, tracker) as client:
            orders = await self._search_orders(client, credential.seller_id, date_from, date_to, limit)
            logger.info(f"Run {run_id}: {len(orders)} orders found for seller {credential.seller_id}")
            records, failed_orders, metrics = await self._enrich_all(client, orders)

        if records:
            if self.gateway is None:
                logger.info(f"Run {run_id}: no store configured, skipping upsert")
            else:
                await self._persist(records)

        metrics.report()
        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"Run {run_id}: {len(records)} complete sales in {duration_ms}ms")

        return BatchResult(
            success=True,
            count=len(records),
            duration_ms=duration_ms,
            endpoints_accessed=tracker.snapshot(),
            records=records,
            failed_orders=failed_orders,
            section_errors=dict(metrics.section_errors),
        )

    async def _search_orders(
        self,
        client: MLClient,
        seller_id: str,
        date_from: Optional[str],
        date_to: Optional[str],
        limit: int,
    ) -> list[Any]:
        params = {"seller": seller_id, "sort": "date_desc", "limit": str(limit)}
        if date_from:
            params["order.date_created.from"] = date_from
        if date_to:
            params["order.date_created.to"] = date_to

        payload, error = await client.get(
            endpoints.ORDER_SEARCH, params=params, headers={"x-format-new": "true"}
        )
        if error is not None:
            raise OrderSearchError(f"Orders API error: {error}")
        try:
            search = OrderSearchPayload.model_validate(payload)
        except ValueError as e:
            raise OrderSearchError(f"Orders API returned an unexpected payload: {e}") from e
        return search.results

    async def _enrich_all(
        self, client: MLClient, orders: list[Any]
    ) -> tuple[list[EnrichedSale], list[str], BatchMetrics]:
        unique_orders = []
        skipped: list[str] = []
        seen = set()
        for position, order in enumerate(orders):
            if not isinstance(order, dict):
                logger.error(f"Search result #{position} is not an order object, skipping")
                skipped.append(f"#{position}")
                continue
            order_id = id_str(order.get("id"))
            if order_id is not None and order_id in seen:
                logger.warning(f"Order {order_id} appears twice in the search result, enriching once")
                continue
            if order_id is not None:
                seen.add(order_id)
            unique_orders.append((position, order_id, order))

        metrics = BatchMetrics(len(unique_orders) + len(skipped))
        for _ in skipped:
            metrics.record_failure()
        slots: list[Optional[EnrichedSale]] = [None] * len(unique_orders)
        failed_orders: list[str] = list(skipped)
        semaphore = asyncio.Semaphore(self.order_concurrency)

        async def process(index: int, position: int, order_id: Optional[str], order: dict) -> None:
            async with semaphore:
                try:
                    slots[index] = await enrich_order(order, client, self.sections)
                except Exception as e:
                    logger.error(f"Error enriching order {order_id}: {e}", exc_info=True)
                    failed_orders.append(order_id or f"#{position}")
                    metrics.record_failure()
                    return
                metrics.record_sale(slots[index])

        if self.order_concurrency == 1:
            for index, entry in enumerate(unique_orders):
                await process(index, *entry)
        else:
            await asyncio.gather(*(process(index, *entry) for index, entry in enumerate(unique_orders)))

        records = [sale for sale in slots if sale is not None]
        return records, failed_orders, metrics

    async def _persist(self, records: list[EnrichedSale]) -> None:
        try:
            await self.gateway.upsert(records)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"upsert failed: {e}") from e


def build_runner(
    dry_run: bool = False,
    local: bool = False,
    order_concurrency: Optional[int] = None,
) -> SalesSyncRunner:
    """Runner wired from configuration.

    Supabase credentials enable account lookup and the production store;
    without them the static token from the environment is used. ``local``
    writes to the SQLite store instead, ``dry_run`` writes nowhere.
    """
    has_supabase = bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_ROLE)
    if has_supabase and not config.ML_ACCESS_TOKEN:
        resolver = SupabaseCredentialResolver()
    else:
        resolver = StaticCredentialResolver()

    gateway: Optional[SalesGateway] = None
    if dry_run:
        gateway = None
    elif local or not has_supabase:
        gateway = SQLiteSalesStore()
    else:
        gateway = SupabaseWriter()

    return SalesSyncRunner(resolver, gateway=gateway, order_concurrency=order_concurrency)


async def run_batch(
    account_ref: str,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    limit: Optional[int] = None,
    runner: Optional[SalesSyncRunner] = None,
) -> BatchResult:
    """Enrich and persist one batch with a configuration-built runner."""
    runner = runner or build_runner()
    return await runner.run_batch(account_ref, date_from, date_to, limit)
