"""Celery application factory."""

from __future__ import annotations

import ssl
from typing import Any

import structlog
from celery import Celery, signals

from app.backend.src.core.config import get_settings

LOGGER = structlog.get_logger(__name__)

settings = get_settings()

NOTIFICATION_QUEUE = "notifications"


def _build_ssl_options() -> dict[str, Any]:
    """Return SSL options for ``rediss://`` broker and backend URLs."""

    return {"ssl_cert_reqs": ssl.CERT_REQUIRED}


celery = Celery(
    "purchase_invoice",
    broker=settings.broker_url,
    backend=settings.result_backend,
)

celery_conf: dict[str, object] = {
    "task_default_queue": NOTIFICATION_QUEUE,
    "task_routes": {
        "tasks.deliver_notification": {"queue": NOTIFICATION_QUEUE},
    },
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "task_ignore_result": True,
    "task_always_eager": settings.celery_task_always_eager,
    "task_eager_propagates": False,
    # Enqueueing happens on the request path; never block it for long.
    "task_publish_retry_policy": {
        "max_retries": 1,
        "interval_start": 0,
        "interval_step": 0.2,
        "interval_max": 0.5,
    },
    "worker_prefetch_multiplier": 1,
    "broker_transport_options": {
        "global_keyprefix": "purchase-invoice-broker:",
    },
    "broker_connection_retry_on_startup": True,
}

if settings.broker_url.startswith("rediss://"):
    celery_conf["broker_use_ssl"] = _build_ssl_options()

if settings.result_backend.startswith("rediss://"):
    celery_conf["redis_backend_use_ssl"] = _build_ssl_options()

celery.conf.update(**celery_conf)

LOGGER.info(
    "celery_bootstrap_ready",
    broker=settings.broker_url,
    eager=settings.celery_task_always_eager,
)

# Import task definitions so Celery registers them when the worker starts.
from . import notification_tasks  # noqa: F401,E402  # isort: skip


@signals.worker_ready.connect
def _log_worker_configuration(sender: Any | None = None, **_: Any) -> None:
    """Emit structured worker configuration details after startup."""

    app = sender.app if sender is not None else celery
    registered_tasks = sorted(
        task_name for task_name in app.tasks.keys() if task_name.startswith("tasks.")
    )
    LOGGER.info(
        "celery_worker_configuration",
        default_queue=app.conf.task_default_queue,
        registered_tasks=registered_tasks,
    )


@signals.task_failure.connect
def _log_task_failure(
    sender: Any | None = None,
    task_id: str | None = None,
    exception: BaseException | None = None,
    **_: Any,
) -> None:
    LOGGER.error(
        "celery_task_failure",
        task_id=task_id,
        task_name=getattr(sender, "name", None),
        error=str(exception) if exception else None,
    )


__all__ = ["celery", "NOTIFICATION_QUEUE"]
