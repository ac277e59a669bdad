"""Shared plumbing for section enrichers.

A section enricher is an ``async def (order, client) -> dict`` decorated with
:func:`section`. The decorator turns it into a coroutine that never raises
and returns a :class:`SectionResult`: either the section's fields or one
error message, never both.
"""
import asyncio
import functools
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.errors import UpstreamError
from src.fetch.client import MLClient
from src.parse.payloads import OrderSummary

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


@dataclass(frozen=True)
class SectionResult:
    """Immutable outcome of one section enricher."""

    step: str
    fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SectionFailed(Exception):
    """Aborts a section; caught by :func:`section`."""


SectionFunc = Callable[[OrderSummary, MLClient], Awaitable[dict]]


def section(step: str, fields: tuple[str, ...]):
    """Wrap a section enricher: capture failures, enforce field ownership."""
    owned = frozenset(fields)

    def decorator(func: SectionFunc) -> Callable[[OrderSummary, MLClient], Awaitable[SectionResult]]:
        @functools.wraps(func)
        async def wrapper(order: OrderSummary, client: MLClient) -> SectionResult:
            try:
                values = await func(order, client) or {}
                unknown = set(values) - owned
                if unknown:
                    raise SectionFailed(f"section wrote fields it does not own: {sorted(unknown)}")
            except asyncio.CancelledError:
                raise
            except SectionFailed as e:
                logger.warning(f"[{step}] order {order.order_id}: {e}")
                return SectionResult(step=step, error=str(e))
            except Exception as e:
                logger.warning(f"[{step}] order {order.order_id}: unexpected {type(e).__name__}: {e}", exc_info=True)
                return SectionResult(step=step, error=f"{type(e).__name__}: {e}")
            return SectionResult(step=step, fields=MappingProxyType(dict(values)))

        wrapper.step = step
        wrapper.fields = owned
        return wrapper

    return decorator


async def fetch_payload(
    client: MLClient,
    endpoint: str,
    model: Type[P],
    path_params: Optional[dict] = None,
    params: Optional[dict] = None,
) -> tuple[P, Any]:
    """GET and validate one payload, returning ``(typed, raw)``.

    Raises :class:`SectionFailed` on an upstream error or a payload that does
    not match ``model``.
    """
    raw, error = await client.get(endpoint, path_params=path_params, params=params)
    if error is not None:
        raise SectionFailed(str(error))
    return validate_payload(endpoint, model, raw), raw


def validate_payload(endpoint: str, model: Type[P], raw: Any) -> P:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise SectionFailed(
            str(UpstreamError(endpoint, f"unexpected payload shape ({e.error_count()} errors)"))
        ) from e
