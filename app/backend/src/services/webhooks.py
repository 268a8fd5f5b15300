"""Best-effort webhook delivery."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from app.backend.src.services.metrics import webhook_deliveries_total

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    destination: str
    delivered: bool
    status_code: int | None = None
    error: str | None = None


def _build_client(timeout: float) -> httpx.Client:
    return httpx.Client(timeout=timeout)


def deliver(
    payload: Mapping[str, Any],
    destinations: Iterable[str],
    *,
    timeout: float = 5.0,
) -> list[DeliveryResult]:
    """POST ``payload`` to every destination, once each, in order.

    A failing destination is logged and reported in the result list; it never
    stops delivery to the remaining destinations and nothing is raised.
    """

    results: list[DeliveryResult] = []
    targets = list(destinations)
    if not targets:
        return results

    with _build_client(timeout) as client:
        for url in targets:
            try:
                response = client.post(url, json=dict(payload))
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                webhook_deliveries_total.labels(outcome="failed").inc()
                LOGGER.warning(
                    "webhook_delivery_failed",
                    destination=url,
                    status_code=exc.response.status_code,
                    invoice_id=payload.get("invoiceId"),
                )
                results.append(
                    DeliveryResult(url, False, exc.response.status_code, str(exc))
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                webhook_deliveries_total.labels(outcome="failed").inc()
                LOGGER.warning(
                    "webhook_delivery_failed",
                    destination=url,
                    error=str(exc),
                    invoice_id=payload.get("invoiceId"),
                )
                results.append(DeliveryResult(url, False, None, str(exc)))
            else:
                webhook_deliveries_total.labels(outcome="delivered").inc()
                LOGGER.info(
                    "webhook_delivered",
                    destination=url,
                    status_code=response.status_code,
                    invoice_id=payload.get("invoiceId"),
                )
                results.append(DeliveryResult(url, True, response.status_code))
    return results


__all__ = ["DeliveryResult", "deliver"]
